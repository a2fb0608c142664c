from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PRICE_RANGE: tuple[float, float] = (0, 500)

SORT_OPTIONS: tuple[str, ...] = (
    "best-match",
    "availability",
    "price-asc",
    "price-desc",
    "rating",
    "distance",
    "newest",
)

# Window keys accepted by the availability filter
AVAILABILITY_WINDOWS: tuple[str, ...] = ("today", "tomorrow", "week", "next-week")

CATEGORIES: tuple[str, ...] = (
    "Hair & Beauty",
    "Healthcare",
    "Fitness & Wellness",
    "Home Services",
    "Automotive",
    "Professional Services",
    "Pet Care",
    "Education",
)


@dataclass(frozen=True)
class SearchFilters:
    categories: tuple[str, ...] = ()
    location: str = ""
    price_range: tuple[float, float] = DEFAULT_PRICE_RANGE
    availability: tuple[str, ...] = ()
    sort_by: str = "best-match"


@dataclass(frozen=True)
class SearchStats:
    total_results: int
    has_active_filters: bool
    active_filter_count: int
    query: str


@dataclass(frozen=True)
class CategorySuggestion:
    category: str
    count: int


@dataclass(frozen=True)
class PriceRangeSuggestion:
    min: float
    max: float
    average: int
