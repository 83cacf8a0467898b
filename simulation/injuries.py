"""
Injury catalog for Touchline.

Injuries fall into four categories (muscular, joint/ligament, impact, severe)
picked with fixed odds; within a category each type has its own weight and
day range. The physio shortens the drawn duration.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class InjuryType:
    name: str
    min_days: int
    max_days: int
    weight: int


MUSCULAR_INJURIES: tuple[InjuryType, ...] = (
    InjuryType("Hamstring Strain (Grade 1)", 7, 21, 30),
    InjuryType("Hamstring Tear (Grade 2)", 28, 56, 10),
    InjuryType("Groin Strain (Grade 1)", 10, 25, 25),
    InjuryType("Groin Tear (Grade 2)", 30, 60, 8),
    InjuryType("Calf Strain (Grade 1)", 7, 18, 15),
    InjuryType("Calf Tear (Grade 2)", 25, 50, 5),
    InjuryType("Quadriceps Strain", 14, 28, 7),
)

JOINT_LIGAMENT_INJURIES: tuple[InjuryType, ...] = (
    InjuryType("Twisted Ankle", 7, 14, 40),
    InjuryType("Sprained Ankle", 21, 42, 25),
    InjuryType("Ankle Ligament Damage", 60, 90, 5),
    InjuryType("Sprained Knee", 14, 28, 20),
    InjuryType("Medial Collateral Ligament Injury", 40, 70, 10),
)

IMPACT_INJURIES: tuple[InjuryType, ...] = (
    InjuryType("Dead Leg", 2, 5, 50),
    InjuryType("Bruised Ribs", 14, 28, 30),
    InjuryType("Broken Toe", 25, 40, 20),
    InjuryType("Mild Concussion", 7, 14, 10),
)

SEVERE_INJURIES: tuple[InjuryType, ...] = (
    InjuryType("Anterior Cruciate Ligament Rupture", 180, 270, 30),
    InjuryType("Broken Leg", 120, 180, 25),
    InjuryType("Torn Meniscus", 60, 120, 20),
    InjuryType("Ruptured Achilles Tendon", 150, 240, 15),
    InjuryType("Broken Metatarsal", 50, 80, 10),
)

# (pool, probability); the last pool takes whatever is left.
INJURY_CATEGORIES: tuple[tuple[tuple[InjuryType, ...], float], ...] = (
    (MUSCULAR_INJURIES, 0.60),
    (JOINT_LIGAMENT_INJURIES, 0.25),
    (IMPACT_INJURIES, 0.10),
    (SEVERE_INJURIES, 0.05),
)

# A top physio (99) takes up to this share off the duration.
MAX_PHYSIO_REDUCTION = 0.30


def pick_injury_type(rng: random.Random) -> InjuryType:
    roll = rng.random()
    pool = INJURY_CATEGORIES[-1][0]
    for candidates, chance in INJURY_CATEGORIES:
        if roll < chance:
            pool = candidates
            break
        roll -= chance
    return rng.choices(pool, weights=[t.weight for t in pool], k=1)[0]


def draw_injury(
    rng: random.Random,
    start: date,
    physio_quality: int = 50,
) -> tuple[str, date]:
    """Pick an injury and its return date, shortened by *physio_quality* (0-99)."""
    injury = pick_injury_type(rng)
    days = rng.randint(injury.min_days, injury.max_days)
    reduction = MAX_PHYSIO_REDUCTION * max(0, min(99, physio_quality)) / 99.0
    days = max(1, round(days * (1.0 - reduction)))
    return injury.name, start + timedelta(days=days)
