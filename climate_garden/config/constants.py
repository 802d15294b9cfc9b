"""Baseline lookup tables for the garden simulation.

Centralizes every scenario-keyed and category-keyed constant used by the
weather sampler, parameter generator, required-investment calculator and
calendar generator. Tables keyed by a scenario enum must cover every member;
``climate_garden/tests/test_scenario_tables.py`` checks exhaustiveness.
"""

from typing import Dict, Tuple

from .scenarios import CropCategory, SummerScenario, WinterScenario

# --- Weather sampling baselines ---

BASE_STRESS_DAYS: Dict[SummerScenario, float] = {
    SummerScenario.MILD: 5,
    SummerScenario.NORMAL: 15,
    SummerScenario.EXTREME: 35,
    SummerScenario.CATASTROPHIC: 60,
}
"""Expected heat-stress days per year at heat intensity 3."""

BASE_FREEZE_EVENTS: Dict[WinterScenario, float] = {
    WinterScenario.TRADITIONAL: 20,
    WinterScenario.MILD: 8,
    WinterScenario.WARM: 3,
    WinterScenario.NONE: 0,
}
"""Expected freeze events per year at winter severity 3."""

REFERENCE_INTENSITY: float = 3.0
"""Heat intensity / winter severity at which the baselines apply unscaled."""

RAINFALL_CV: float = 0.2
"""Coefficient of variation of annual rainfall."""

MIN_ANNUAL_RAINFALL: float = 10.0
"""Floor applied to sampled annual rainfall (inches)."""

# --- Harvest value parameters ---

SUMMER_SEVERITY: Dict[SummerScenario, float] = {
    SummerScenario.MILD: 1.2,
    SummerScenario.NORMAL: 1.0,
    SummerScenario.EXTREME: 0.7,
    SummerScenario.CATASTROPHIC: 0.4,
}

WINTER_SEVERITY: Dict[WinterScenario, float] = {
    WinterScenario.TRADITIONAL: 0.9,
    WinterScenario.MILD: 1.0,
    WinterScenario.WARM: 1.1,
    WinterScenario.NONE: 1.2,
}

CATEGORY_YIELD_MULTIPLIERS: Dict[CropCategory, float] = {
    CropCategory.HEAT_SPECIALISTS: 4,
    CropCategory.COOL_SEASON: 3,
    CropCategory.PERENNIALS: 6,
}
"""Yield units per allocation percentage point for a 100 sq ft garden."""

CATEGORY_MARKET_PRICES: Dict[CropCategory, float] = {
    CropCategory.HEAT_SPECIALISTS: 1.2,
    CropCategory.COOL_SEASON: 0.8,
    CropCategory.PERENNIALS: 2.5,
}
"""Dollar value per yield unit."""

CATEGORY_YIELD_CV: Dict[CropCategory, float] = {
    CropCategory.HEAT_SPECIALISTS: 0.4,
    CropCategory.COOL_SEASON: 0.4,
    CropCategory.PERENNIALS: 0.3,
}

HARVEST_CV: float = 0.3
INVESTMENT_CV: float = 0.1

DEFAULT_SAFE_MEAN: float = 100.0
"""Substituted for a non-finite distribution mean."""

DEFAULT_SAFE_STD: float = 10.0
"""Substituted for a non-finite or negative standard deviation."""

REFERENCE_GARDEN_SIZE: float = 100.0
"""Garden area (sq ft) at which costs and yields apply unscaled."""

# --- Required investment ---

BASE_COSTS: Dict[str, float] = {
    "seeds": 80,
    "soil": 45,
    "fertilizer": 35,
    "protection": 25,
    "infrastructure": 15,
    "tools": 10,
    "containers": 12,
    "irrigation": 8,
}
"""Base cost per spending category for a 100 sq ft garden."""

SUMMER_COST_FACTORS: Dict[SummerScenario, Dict[str, float]] = {
    SummerScenario.MILD: {"heat": 0.9, "protection": 0.8, "irrigation": 0.7},
    SummerScenario.NORMAL: {"heat": 1.0, "protection": 1.0, "irrigation": 1.0},
    SummerScenario.EXTREME: {"heat": 1.4, "protection": 1.6, "irrigation": 1.8},
    SummerScenario.CATASTROPHIC: {"heat": 1.8, "protection": 2.2, "irrigation": 2.5},
}
"""Summer multipliers; ``heat`` scales fertilizer."""

WINTER_PROTECTION_FACTORS: Dict[WinterScenario, float] = {
    WinterScenario.TRADITIONAL: 1.3,
    WinterScenario.MILD: 1.0,
    WinterScenario.WARM: 1.0,
    WinterScenario.NONE: 1.0,
}
"""Frost-protection multiplier; combined with the summer factor via ``max``."""

PORTFOLIO_COST_FACTORS: Dict[CropCategory, Dict[str, float]] = {
    CropCategory.HEAT_SPECIALISTS: {"protection": 1.3, "irrigation": 1.4},
    CropCategory.COOL_SEASON: {"protection": 0.9, "soil": 1.1},
    CropCategory.PERENNIALS: {"infrastructure": 1.2, "tools": 1.1},
}
"""Full-allocation multipliers, scaled by the category's allocation fraction."""

# (category, importance, description) in funding priority order
CATEGORY_PRIORITIES: Tuple[Tuple[str, str, str], ...] = (
    ("seeds", "critical", "Essential for any harvest"),
    ("soil", "critical", "Foundation of plant health"),
    ("protection", "high", "Weather and pest protection"),
    ("fertilizer", "high", "Sustained plant nutrition"),
    ("irrigation", "medium", "Water delivery systems"),
    ("infrastructure", "medium", "Support structures"),
    ("containers", "low", "Additional growing space"),
    ("tools", "low", "Garden maintenance equipment"),
)

SUFFICIENCY_ABUNDANT: float = 1.2
SUFFICIENCY_ADEQUATE: float = 1.0
SUFFICIENCY_MARGINAL: float = 0.8
SUFFICIENCY_REDUCE: float = 0.6

# --- Calendar generation ---

CONSENSUS_WINDOW_DAYS: int = 14
"""Dates within this many days of the consensus count toward agreement."""

CRITICAL_EVENT_MIN_FREQUENCY: float = 0.2
"""Critical events recurring in fewer scenarios than this are dropped."""

PLANTING_WINDOW: Tuple[int, int] = (7, 14)
"""Days before / after the optimal planting date."""

HARVEST_OFFSETS: Tuple[int, int] = (14, 30)
"""Days from first harvest to peak and to last harvest."""
