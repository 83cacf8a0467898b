"""
League structure and naming constants for Touchline.
Role taxonomy (28 roles in four categories), formations, training focus and squad rules.
"""
from typing import Dict

# Role categories
GK = "GK"
DEF = "DEF"
MID = "MID"
FWD = "FWD"
CATEGORIES: tuple[str, ...] = (GK, DEF, MID, FWD)

# Natural roles -> category. Attacking midfielders count as FWD for squad building.
ROLE_CATEGORIES: Dict[str, str] = {
    "Goalkeeper": GK, "Sweeper Keeper": GK,
    "Central Defender": DEF, "Ball-Playing Defender": DEF, "Libero": DEF,
    "Full-Back": DEF, "Wing-Back": DEF, "Inverted Wing-Back": DEF,
    "Defensive Midfielder": MID, "Central Midfielder": MID, "Ball Winning Midfielder": MID,
    "Box-To-Box Midfielder": MID, "Deep Lying Playmaker": MID, "Roaming Playmaker": MID,
    "Mezzala": MID, "Carrilero": MID, "Wide Midfielder": MID, "Wide Playmaker": MID,
    "Attacking Midfielder": FWD, "Advanced Playmaker": FWD, "Shadow Striker": FWD,
    "Trequartista": FWD, "False Nine": FWD,
    "Striker": FWD, "Advanced Forward": FWD, "Complete Forward": FWD,
    "Poacher": FWD, "Deep-Lying Forward": FWD,
}
ROLES: tuple[str, ...] = tuple(ROLE_CATEGORIES)

# Familiarity (0-100) of a natural role with other roles; anything unlisted is BASE_FAMILIARITY.
BASE_FAMILIARITY = 20
ROLE_FAMILIARITY: Dict[str, Dict[str, int]] = {
    "Goalkeeper": {"Sweeper Keeper": 85},
    "Sweeper Keeper": {"Goalkeeper": 85, "Libero": 50},
    "Central Defender": {"Ball-Playing Defender": 90, "Libero": 70, "Defensive Midfielder": 60, "Full-Back": 50},
    "Ball-Playing Defender": {"Central Defender": 90, "Libero": 75, "Defensive Midfielder": 65, "Deep Lying Playmaker": 50},
    "Libero": {"Central Defender": 80, "Defensive Midfielder": 70, "Sweeper Keeper": 60},
    "Full-Back": {"Wing-Back": 90, "Inverted Wing-Back": 80, "Wide Midfielder": 65, "Central Defender": 50},
    "Wing-Back": {"Full-Back": 90, "Wide Midfielder": 80, "Inverted Wing-Back": 70},
    "Inverted Wing-Back": {"Full-Back": 85, "Defensive Midfielder": 70, "Central Midfielder": 60, "Wing-Back": 70},
    "Defensive Midfielder": {
        "Deep Lying Playmaker": 85, "Ball Winning Midfielder": 85, "Central Midfielder": 80, "Central Defender": 70,
    },
    "Central Midfielder": {
        "Box-To-Box Midfielder": 90, "Mezzala": 85, "Carrilero": 85, "Roaming Playmaker": 85,
        "Defensive Midfielder": 80, "Attacking Midfielder": 80,
    },
    "Ball Winning Midfielder": {"Defensive Midfielder": 90, "Central Midfielder": 85, "Carrilero": 75},
    "Box-To-Box Midfielder": {"Central Midfielder": 90, "Roaming Playmaker": 80, "Mezzala": 75, "Carrilero": 70},
    "Deep Lying Playmaker": {
        "Defensive Midfielder": 90, "Central Midfielder": 80, "Roaming Playmaker": 70, "Advanced Playmaker": 60,
    },
    "Roaming Playmaker": {
        "Central Midfielder": 85, "Mezzala": 80, "Advanced Playmaker": 80, "Box-To-Box Midfielder": 75,
    },
    "Mezzala": {"Central Midfielder": 85, "Attacking Midfielder": 80, "Roaming Playmaker": 80, "Wide Midfielder": 65},
    "Carrilero": {"Central Midfielder": 85, "Ball Winning Midfielder": 80, "Box-To-Box Midfielder": 75},
    "Wide Midfielder": {"Wide Playmaker": 85, "Wing-Back": 75, "Full-Back": 65, "Attacking Midfielder": 60},
    "Wide Playmaker": {"Wide Midfielder": 85, "Advanced Playmaker": 75, "Attacking Midfielder": 70},
    "Attacking Midfielder": {
        "Advanced Playmaker": 90, "Shadow Striker": 85, "Trequartista": 80, "Central Midfielder": 80,
        "False Nine": 75, "Mezzala": 70,
    },
    "Advanced Playmaker": {
        "Attacking Midfielder": 90, "Trequartista": 85, "Deep Lying Playmaker": 70, "Wide Playmaker": 70,
        "Roaming Playmaker": 70,
    },
    "Shadow Striker": {"Attacking Midfielder": 85, "Advanced Forward": 80, "Poacher": 75, "Striker": 70},
    "Trequartista": {"Advanced Playmaker": 85, "False Nine": 80, "Deep-Lying Forward": 75, "Attacking Midfielder": 80},
    "False Nine": {"Deep-Lying Forward": 85, "Trequartista": 80, "Attacking Midfielder": 75, "Striker": 70},
    "Striker": {"Advanced Forward": 90, "Complete Forward": 90, "Poacher": 85, "Deep-Lying Forward": 85},
    "Advanced Forward": {"Striker": 90, "Poacher": 85, "Shadow Striker": 75},
    "Complete Forward": {"Striker": 90, "Deep-Lying Forward": 85, "Advanced Forward": 80},
    "Poacher": {"Striker": 85, "Advanced Forward": 85, "Shadow Striker": 70},
    "Deep-Lying Forward": {"Striker": 85, "False Nine": 85, "Complete Forward": 80, "Trequartista": 70},
}

# Player attributes (1-99)
ATTRIBUTES: tuple[str, ...] = (
    "passing", "dribbling", "shooting", "tackling", "heading", "crossing",
    "aggression", "creativity", "positioning", "teamwork", "work_rate",
    "pace", "stamina", "strength", "natural_fitness",
)
PHYSICAL_ATTRIBUTES: tuple[str, ...] = ("pace", "stamina", "strength")
ATTRIBUTE_MIN = 1
ATTRIBUTE_MAX = 99

# Formation presets: (role, x, y) per slot, x/y in 0-100 pitch coordinates (GK at y=95).
FORMATIONS: Dict[str, list[tuple[str, int, int]]] = {
    "4-4-2": [
        ("Goalkeeper", 50, 95),
        ("Full-Back", 18, 72), ("Central Defender", 38, 78), ("Central Defender", 62, 78), ("Full-Back", 82, 72),
        ("Wide Midfielder", 18, 50), ("Central Midfielder", 40, 55), ("Box-To-Box Midfielder", 60, 55),
        ("Wide Midfielder", 82, 50),
        ("Deep-Lying Forward", 40, 25), ("Advanced Forward", 60, 25),
    ],
    "4-3-3": [
        ("Goalkeeper", 50, 95),
        ("Full-Back", 18, 72), ("Central Defender", 38, 78), ("Central Defender", 62, 78), ("Full-Back", 82, 72),
        ("Defensive Midfielder", 50, 65), ("Central Midfielder", 35, 48), ("Mezzala", 65, 48),
        ("Wide Playmaker", 20, 25), ("False Nine", 50, 18), ("Advanced Forward", 80, 25),
    ],
    "4-2-3-1": [
        ("Goalkeeper", 50, 95),
        ("Wing-Back", 18, 72), ("Ball-Playing Defender", 38, 78), ("Ball-Playing Defender", 62, 78),
        ("Wing-Back", 82, 72),
        ("Deep Lying Playmaker", 38, 60), ("Ball Winning Midfielder", 62, 60),
        ("Wide Midfielder", 20, 38), ("Attacking Midfielder", 50, 35), ("Wide Midfielder", 80, 38),
        ("Complete Forward", 50, 15),
    ],
    "3-5-2": [
        ("Sweeper Keeper", 50, 95),
        ("Central Defender", 30, 80), ("Libero", 50, 82), ("Central Defender", 70, 80),
        ("Wing-Back", 15, 55), ("Central Midfielder", 38, 60), ("Central Midfielder", 62, 60), ("Wing-Back", 85, 55),
        ("Attacking Midfielder", 50, 40),
        ("Poacher", 40, 20), ("Deep-Lying Forward", 60, 20),
    ],
}
DEFAULT_FORMATION = "4-4-2"
LINEUP_SIZE = 11
BENCH_SIZE = 7
MAX_SUBSTITUTIONS = 3

MENTALITIES: tuple[str, ...] = ("Defensive", "Balanced", "Offensive")
DEFAULT_MENTALITY = "Balanced"

# Squad building: minimum players per category in a generated squad, and the
# minimum a club must keep to field the default formation.
SQUAD_CATEGORY_MINIMUMS: Dict[str, int] = {GK: 2, DEF: 6, MID: 6, FWD: 4}
LINEUP_CATEGORY_MINIMUMS: Dict[str, int] = {GK: 1, DEF: 4, MID: 4, FWD: 2}

# Team training focus: (attribute, rate). Rate 1.0 primary, 0.4-0.8 secondary.
TRAINING_FOCUS_DEFAULT = "Balanced"
TRAINING_FOCUS_ATTRIBUTES: Dict[str, list[tuple[str, float]]] = {
    "Balanced": [(attr, 0.4) for attr in ATTRIBUTES if attr != "natural_fitness"],
    "Attacking": [
        ("shooting", 1.0), ("dribbling", 1.0), ("crossing", 0.8), ("creativity", 0.8), ("passing", 0.6),
    ],
    "Defending": [
        ("tackling", 1.0), ("positioning", 1.0), ("heading", 0.8), ("strength", 0.6), ("aggression", 0.4),
    ],
    "Tactical": [
        ("teamwork", 1.0), ("positioning", 0.8), ("creativity", 0.6), ("work_rate", 0.8), ("passing", 0.6),
    ],
    "Physical": [("pace", 1.0), ("stamina", 1.0), ("strength", 1.0), ("work_rate", 0.4)],
    "Set Pieces": [("crossing", 1.0), ("heading", 1.0), ("shooting", 0.6), ("passing", 0.4)],
}
TRAINING_FOCUSES: tuple[str, ...] = tuple(TRAINING_FOCUS_ATTRIBUTES)

# Staff roles and their attributes (0-99)
STAFF_ROLES: Dict[str, tuple[str, ...]] = {
    "assistant": ("tactical_knowledge", "judging_player_ability", "man_management"),
    "physio": ("physiotherapy", "injury_prevention"),
    "scout": ("judging_player_ability", "judging_player_potential", "adaptability"),
}

# Condition ranges
CONDITION_MIN = 0
CONDITION_MAX = 100

# Season calendar: first round one week after the start date, one round per week.
FIRST_ROUND_OFFSET_DAYS = 7
DAYS_BETWEEN_ROUNDS = 7

# Prize money per division level for the champion; lower places get a linear share.
PRIZE_MONEY_BY_LEVEL: Dict[int, int] = {1: 5_000_000, 2: 2_000_000, 3: 1_000_000}
PRIZE_MONEY_DEFAULT = 500_000

# Awards
YOUNG_PLAYER_MAX_AGE = 21
AWARD_MIN_APPEARANCES_SHARE = 0.5  # of rounds played

# Names
FIRST_NAMES: tuple[str, ...] = (
    "John", "Paul", "Mike", "Leo", "Chris", "David", "Alex", "Ben", "Sam", "Tom", "Dan", "Matt",
    "Luca", "Mateo", "Jonas", "Pedro", "Yuri", "Kofi", "Andre", "Hugo", "Nico", "Oscar", "Ruben", "Emil",
)
LAST_NAMES: tuple[str, ...] = (
    "Smith", "Jones", "Williams", "Brown", "Davis", "Miller", "Wilson", "Moore", "Taylor", "Martin",
    "Silva", "Costa", "Müller", "Rossi", "Dubois", "Novak", "Larsen", "Mensah", "Okafor", "Herrera",
)
STAFF_FIRST_NAMES: tuple[str, ...] = ("Peter", "Richard", "Gary", "Steve", "Mark", "Alan", "Neil", "Brian")
STAFF_LAST_NAMES: tuple[str, ...] = ("Taylor", "Wright", "Thompson", "Roberts", "Walker", "Harris", "Clarke", "King")
COUNTRIES: tuple[str, ...] = ("England", "Spain", "Germany", "Italy", "France", "Brazil", "Argentina", "Portugal")
CITIES: tuple[str, ...] = (
    "Northwood", "Southglen", "Easton", "Westfield", "Oakhaven", "Riverdale", "Mountview", "Portsmith",
    "Fairview", "Lakeside", "Bridgewater", "Silverstone", "Ashford", "Kingsbridge", "Marlow", "Redcliffe",
    "Stonebury", "Thornhill", "Whitby", "Yarmouth",
)
CLUB_SUFFIXES: tuple[str, ...] = ("United", "Rovers", "City", "Wanderers", "Athletic", "FC", "Albion", "Town")
DIVISION_NAMES: tuple[str, ...] = ("Premier Division", "Championship", "League One", "League Two")
