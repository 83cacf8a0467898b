"""
Role-specific overall rating, familiarity and market value calculations.
Single source of truth: weighted sum of attributes per role category, scaled by how
familiar a player is with the role being played.
"""
from .constants import (
    ROLE_CATEGORIES,
    ROLE_FAMILIARITY,
    BASE_FAMILIARITY,
    ATTRIBUTES,
    GK,
    DEF,
    MID,
    FWD,
)

# Attribute weights per category; each row sums to 1.0.
CATEGORY_WEIGHTS: dict[str, dict[str, float]] = {
    GK: {
        "positioning": 0.35, "strength": 0.15, "teamwork": 0.10, "heading": 0.10,
        "pace": 0.10, "passing": 0.10, "aggression": 0.05, "work_rate": 0.05,
    },
    DEF: {
        "tackling": 0.25, "positioning": 0.20, "heading": 0.15, "strength": 0.12,
        "pace": 0.10, "passing": 0.08, "teamwork": 0.05, "aggression": 0.05,
    },
    MID: {
        "passing": 0.22, "creativity": 0.15, "work_rate": 0.12, "teamwork": 0.12,
        "dribbling": 0.10, "tackling": 0.10, "stamina": 0.10, "positioning": 0.09,
    },
    FWD: {
        "shooting": 0.28, "dribbling": 0.15, "pace": 0.14, "positioning": 0.12,
        "creativity": 0.10, "heading": 0.09, "strength": 0.06, "passing": 0.06,
    },
}


def role_category(role: str) -> str:
    """Category (GK/DEF/MID/FWD) of a role; unknown roles count as MID."""
    return ROLE_CATEGORIES.get(role, MID)


def role_familiarity(natural_role: str, role: str) -> int:
    """0-100: how comfortable a player with *natural_role* is playing *role*."""
    if natural_role == role:
        return 100
    return ROLE_FAMILIARITY.get(natural_role, {}).get(role, BASE_FAMILIARITY)


def compute_overall(attributes: dict, category: str) -> int:
    """Weighted sum of attributes for a role category. Returns 1-99."""
    weights = CATEGORY_WEIGHTS.get(category, CATEGORY_WEIGHTS[MID])
    total = 0.0
    for attr, w in weights.items():
        total += w * float(attributes.get(attr, 50))
    return min(99, max(1, round(total)))


def compute_overall_in_role(attributes: dict, natural_role: str, role: str) -> float:
    """Overall for the category of *role*, scaled by familiarity (60% floor)."""
    base = compute_overall(attributes, role_category(role))
    familiarity = role_familiarity(natural_role, role)
    return base * (0.6 + 0.4 * familiarity / 100.0)


def average_attribute(attributes: dict) -> float:
    values = [float(attributes.get(a, 50)) for a in ATTRIBUTES]
    return sum(values) / len(values)


def compute_market_value(attributes: dict, potential: int, age: int) -> int:
    """Transfer value: attribute quality plus potential, youth premium and veteran discount.
    Rounded to the nearest 1,000."""
    value = average_attribute(attributes) * 20000 + potential * 15000
    if age < 22:
        value *= 1.5
    if age > 32:
        value *= 0.5
    return max(0, round(value / 1000) * 1000)
