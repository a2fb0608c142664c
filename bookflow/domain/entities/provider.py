from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AvailabilityWindows:
    today: bool = False
    tomorrow: bool = False
    this_week: bool = False
    next_week: bool = False


@dataclass(frozen=True)
class NextAvailableSlot:
    date: str  # YYYY-MM-DD
    time: str  # HH:MM


@dataclass(frozen=True)
class ServiceProvider:
    id: str
    name: str
    business_name: str
    category: str
    rating: float
    starting_price: float
    distance: str  # e.g. "0.3 miles"
    review_count: int = 0
    description: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    next_available_slot: NextAvailableSlot | None = None
    availability_windows: AvailabilityWindows = field(default_factory=AvailabilityWindows)
    is_favorite: bool = False
