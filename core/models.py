# core/models.py

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

DAY_CHIPS: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

MIN_CHAIR_SETS = 1
MAX_CHAIR_SETS = 10
DEFAULT_CHAIR_SETS = 2


def check_day(day: str) -> str:
    """Return `day` unchanged if it is one of the seven day chips."""
    if day not in DAY_CHIPS:
        raise ValueError(f"Unknown day chip {day!r} (expected one of {', '.join(DAY_CHIPS)}).")
    return day


@dataclass(frozen=True)
class GeoPoint:
    lon: float
    lat: float

    def as_pair(self) -> List[float]:
        return [self.lon, self.lat]


@dataclass(frozen=True)
class AddOnCatalog:
    """Whole-dollar USD unit prices for every add-on."""

    chair_set: int = 300      # per set, per week
    supply_box: int = 375     # flat, per week
    bonfire: int = 500        # flat base price
    photo_session: int = 300  # flat
    chair_set_daily: int = 55  # display only

    def __post_init__(self):
        for name in ("chair_set", "supply_box", "bonfire", "photo_session", "chair_set_daily"):
            price = getattr(self, name)
            if isinstance(price, bool) or not isinstance(price, int) or price < 0:
                raise ValueError(f"Price {name}={price!r} must be a non-negative whole number of dollars.")


@dataclass(frozen=True)
class PropertyConfig:
    name: str = "Bella Vita — 30A Escapes"
    address: str = "40 Seapointe Lane, Santa Rosa Beach, FL 32459"
    dates_label: str = "Sept 12 – Sept 19"
    included_chair_sets: int = 1
    location: GeoPoint = GeoPoint(-86.08973612883624, 30.306565864475555)
    beach_access: GeoPoint = GeoPoint(-86.08809461689333, 30.304064928205506)
    beach_access_label: str = "Walton Dunes Beach Access"
    # sign-off used in guest emails and the page footer
    brand: str = "30A Escapes × Coastal Beach Company"
    # day picked by the generic "Include" buttons
    default_bonfire_day: str = "Fri"
    default_photo_day: str = "Thu"

    def __post_init__(self):
        n = self.included_chair_sets
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ValueError(f"included_chair_sets={n!r} must be a non-negative integer.")
        check_day(self.default_bonfire_day)
        check_day(self.default_photo_day)


@dataclass
class SelectionState:
    chair_set_count: int = DEFAULT_CHAIR_SETS
    supply_box_included: bool = False
    bonfire_day: Optional[str] = None
    photo_day: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    kind: str                        # "chair_sets", "supply_box", "bonfire", "photo_session"
    label: str
    quantity: Union[int, bool, str, None]
    amount: int
    note: str = ""


@dataclass(frozen=True)
class Itinerary:
    paid_chair_sets: int
    line_items: List[LineItem] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(item.amount for item in self.line_items)

    def line(self, kind: str) -> LineItem:
        for item in self.line_items:
            if item.kind == kind:
                return item
        raise KeyError(kind)

    def as_dict(self) -> dict:
        return {
            "paid_chair_sets": self.paid_chair_sets,
            "line_items": [
                {
                    "kind": i.kind,
                    "label": i.label,
                    "quantity": i.quantity,
                    "amount": i.amount,
                    "note": i.note,
                }
                for i in self.line_items
            ],
            "total": self.total,
        }


@dataclass(frozen=True)
class ProximityResult:
    distance_miles: float
    formatted_label: str
