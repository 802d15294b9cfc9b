"""Read-only crop reference data.

The calendar generator walks every crop of every allocated category. Crop
agronomic constants are curated elsewhere; this module only defines the
lookup shape and ships a small representative default table so the engine
runs stand-alone.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .config.scenarios import CropCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropReference:
    """Agronomic constants of one crop.

    Attributes:
        key: Stable identifier, unique within a category.
        name: Display name.
        yield_multiplier: Relative yield per unit of allocated area.
        market_price: Dollar value per yield unit.
        planting_season: Free-text planting hint, e.g.
            ``"2 weeks after last frost"`` or ``"early spring"``.
        days_to_maturity: Days from planting to first harvest.
        heat_accelerated: Whether heat stress speeds maturity instead of
            slowing it.
    """

    key: str
    name: str
    yield_multiplier: float
    market_price: float
    planting_season: str
    days_to_maturity: int
    heat_accelerated: bool = False

    def __post_init__(self):
        if self.days_to_maturity <= 0:
            raise ValueError(
                f"days_to_maturity must be positive for crop '{self.key}', "
                f"got {self.days_to_maturity}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CropReference":
        """Build a crop from a plain mapping (e.g. parsed YAML)."""
        return cls(
            key=str(data["key"]),
            name=str(data.get("name", data["key"])),
            yield_multiplier=float(data.get("yield_multiplier", 1.0)),
            market_price=float(data.get("market_price", 1.0)),
            planting_season=str(data.get("planting_season", "spring")),
            days_to_maturity=int(data["days_to_maturity"]),
            heat_accelerated=bool(data.get("heat_accelerated", False)),
        )


_DEFAULT_CROPS: Dict[CropCategory, Tuple[CropReference, ...]] = {
    CropCategory.HEAT_SPECIALISTS: (
        CropReference("okra", "Okra", 1.2, 3.0, "2 weeks after last frost", 55, True),
        CropReference("hot_peppers", "Hot Peppers", 1.0, 4.0, "2 weeks after last frost", 75, True),
        CropReference("amaranth", "Amaranth", 0.9, 2.5, "late spring", 50, True),
        CropReference("sweet_potato", "Sweet Potato", 1.5, 1.5, "3 weeks after last frost", 100),
    ),
    CropCategory.COOL_SEASON: (
        CropReference("kale", "Kale", 1.1, 3.0, "4 weeks before last frost", 55),
        CropReference("lettuce", "Lettuce", 0.8, 2.5, "early spring", 45),
        CropReference("spinach", "Spinach", 0.7, 3.5, "6 weeks before last frost", 40),
        CropReference("carrots", "Carrots", 1.0, 1.8, "3 weeks before last frost", 70),
        CropReference("fall_broccoli", "Fall Broccoli", 0.9, 2.8, "late summer", 70),
    ),
    CropCategory.PERENNIALS: (
        CropReference("rosemary", "Rosemary", 0.6, 8.0, "spring", 90),
        CropReference("thyme", "Thyme", 0.5, 8.0, "spring", 85),
        CropReference("oregano", "Oregano", 0.6, 7.0, "2 weeks after last frost", 80),
    ),
    CropCategory.EXPERIMENTAL: (
        CropReference("ground_cherry", "Ground Cherry", 0.5, 5.0, "early summer", 70, True),
    ),
}


class CropCatalog(Mapping[str, Tuple[CropReference, ...]]):
    """Category key to crop list lookup table.

    Behaves as a read-only mapping keyed by the category string value
    (``"heat_specialists"``, ...). Unknown categories map to an empty tuple
    through :meth:`crops_for`.

    Examples:
        Default table::

            catalog = CropCatalog.default()
            [c.name for c in catalog.crops_for("perennials")]

        Caller-supplied data::

            catalog = CropCatalog.from_dict({
                "cool_season": [
                    {"key": "peas", "days_to_maturity": 60,
                     "planting_season": "6 weeks before last frost"},
                ],
            })
    """

    def __init__(self, crops: Mapping[str, Iterable[CropReference]]):
        self._crops: Dict[str, Tuple[CropReference, ...]] = {}
        for category, refs in crops.items():
            key = category.value if isinstance(category, CropCategory) else str(category)
            self._crops[key] = tuple(refs)

    @classmethod
    def default(cls) -> "CropCatalog":
        """Representative crop table shipped with the package."""
        return cls(_DEFAULT_CROPS)

    @classmethod
    def from_dict(cls, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> "CropCatalog":
        """Load a catalog from plain category-to-list-of-mappings data."""
        return cls(
            {
                category: tuple(CropReference.from_dict(item) for item in items)
                for category, items in data.items()
            }
        )

    def crops_for(self, category: str) -> Tuple[CropReference, ...]:
        """Crops of a category; empty for unknown categories."""
        key = category.value if isinstance(category, CropCategory) else str(category)
        crops = self._crops.get(key)
        if crops is None:
            logger.debug("No crops catalogued for category '%s'", key)
            return ()
        return crops

    def __getitem__(self, key: str) -> Tuple[CropReference, ...]:
        return self._crops[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._crops)

    def __len__(self) -> int:
        return len(self._crops)

    def __repr__(self) -> str:
        counts = ", ".join(f"{k}={len(v)}" for k, v in self._crops.items())
        return f"CropCatalog({counts})"


def resolve_catalog(catalog: Optional[CropCatalog]) -> CropCatalog:
    """Return ``catalog`` or the default table when None."""
    return catalog if catalog is not None else CropCatalog.default()
