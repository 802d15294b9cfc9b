"""Compare a planned investment with the required investment.

Classification by ``ratio = actual / required.total``:

=============  ==============  ===========
ratio          status          level
=============  ==============  ===========
>= 1.2         abundant        excellent
>= 1.0         adequate        good
>= 0.8         marginal        caution
< 0.8          insufficient    warning
=============  ==============  ===========

The boundaries are inclusive on the lower side and compared exactly.
"""

from dataclasses import dataclass, field
import logging
import math
from typing import List, Optional, Tuple

from .config.constants import (
    CATEGORY_PRIORITIES,
    SUFFICIENCY_ABUNDANT,
    SUFFICIENCY_ADEQUATE,
    SUFFICIENCY_MARGINAL,
    SUFFICIENCY_REDUCE,
)
from .required_investment import RequiredInvestment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CriticalCategory:
    """A spending category that needs attention under a tight budget."""

    category: str
    importance: str
    description: str
    action: str
    required: Optional[float]


@dataclass(frozen=True)
class InvestmentSufficiency:
    """Sufficiency snapshot of a planned investment.

    Attributes:
        ratio: Planned over required investment (``inf`` when nothing is
            required).
        gap: Shortfall in dollars, 0 when fully funded.
        surplus: Excess in dollars, 0 when under-funded.
        status: ``abundant``, ``adequate``, ``marginal`` or ``insufficient``.
        level: ``excellent``, ``good``, ``caution`` or ``warning``.
        recommendations: Guidance for the status.
        critical_categories: Categories to prioritize or trim.
    """

    ratio: float
    gap: float
    surplus: float
    status: str
    level: str
    recommendations: List[str] = field(default_factory=list)
    critical_categories: List[CriticalCategory] = field(default_factory=list)


def sufficiency_ratio(actual: float, required: RequiredInvestment) -> float:
    """Planned over required investment; ``inf`` when nothing is required."""
    if required.total <= 0:
        logger.debug("Required investment total is %s, treating ratio as infinite", required.total)
        return math.inf
    return actual / required.total


def classify_ratio(ratio: float) -> Tuple[str, str]:
    """Map a sufficiency ratio to ``(status, level)``."""
    if ratio >= SUFFICIENCY_ABUNDANT:
        return "abundant", "excellent"
    if ratio >= SUFFICIENCY_ADEQUATE:
        return "adequate", "good"
    if ratio >= SUFFICIENCY_MARGINAL:
        return "marginal", "caution"
    return "insufficient", "warning"


def _recommendations(status: str, gap: float) -> List[str]:
    shortfall = math.ceil(gap)
    if status == "abundant":
        return [
            "Investment exceeds requirements - consider premium varieties",
            "Opportunity for infrastructure upgrades",
            "Buffer available for unexpected costs",
        ]
    if status == "adequate":
        return [
            "Investment meets requirements",
            "Consider small buffer for contingencies",
            "Well-positioned for planned portfolio",
        ]
    if status == "marginal":
        return [
            f"Consider increasing investment by ${shortfall}",
            "Focus on essential categories (seeds, soil, protection)",
            "Risk of reduced yields or crop failures",
        ]
    return [
        f"Investment shortfall of ${shortfall} may cause significant issues",
        "Prioritize seeds and soil amendments",
        "Consider reducing portfolio complexity",
        "Risk of poor garden performance",
    ]


def identify_critical_categories(
    actual: float, required: RequiredInvestment
) -> List[CriticalCategory]:
    """Flag spending categories to prioritize or reduce.

    Below a ratio of 0.8 the critical and high importance categories (seeds,
    soil, protection, fertilizer) are flagged ``"prioritize funding"``; below
    0.6 the low importance ones (containers, tools) are additionally flagged
    ``"consider reducing"``. Order follows funding priority.
    """
    ratio = sufficiency_ratio(actual, required)
    flagged: List[CriticalCategory] = []
    if ratio >= SUFFICIENCY_ADEQUATE:
        return flagged

    for category, importance, description in CATEGORY_PRIORITIES:
        if ratio < SUFFICIENCY_REDUCE and importance == "low":
            action = "consider reducing"
        elif ratio < SUFFICIENCY_MARGINAL and importance in ("critical", "high"):
            action = "prioritize funding"
        else:
            continue
        flagged.append(
            CriticalCategory(
                category=category,
                importance=importance,
                description=description,
                action=action,
                required=required.breakdown.get(category),
            )
        )
    return flagged


def calculate_investment_sufficiency(
    actual: float, required: RequiredInvestment
) -> InvestmentSufficiency:
    """Classify a planned investment against the required investment.

    Args:
        actual: Planned (mean) investment in dollars.
        required: Output of
            :func:`~climate_garden.required_investment.calculate_required_investment`.

    Returns:
        Ratio, gap/surplus, status, level, guidance and critical categories.
    """
    ratio = sufficiency_ratio(actual, required)
    status, level = classify_ratio(ratio)
    gap = required.total - actual

    return InvestmentSufficiency(
        ratio=ratio,
        gap=max(0.0, gap),
        surplus=max(0.0, -gap),
        status=status,
        level=level,
        recommendations=_recommendations(status, max(0.0, gap)),
        critical_categories=identify_critical_categories(actual, required),
    )
