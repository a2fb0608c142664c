from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Iterable

from bookflow.application.ports.favorites_store import FavoritesStorePort
from bookflow.application.ports.provider_source import ProviderSourcePort
from bookflow.application.utils.validators import parse_distance, parse_slot_datetime
from bookflow.domain.entities.provider import ServiceProvider
from bookflow.domain.entities.search_filters import (
    DEFAULT_PRICE_RANGE,
    CategorySuggestion,
    PriceRangeSuggestion,
    SearchFilters,
    SearchStats,
)

_WINDOW_FLAGS: dict[str, Callable[[ServiceProvider], bool]] = {
    "today": lambda p: p.availability_windows.today,
    "tomorrow": lambda p: p.availability_windows.tomorrow,
    "week": lambda p: p.availability_windows.this_week,
    "next-week": lambda p: p.availability_windows.next_week,
}


def apply_favorites(providers: Iterable[ServiceProvider], favorites: set[str]) -> list[ServiceProvider]:
    return [replace(p, is_favorite=p.id in favorites) for p in providers]


def is_default_price_range(price_range: tuple[float, float]) -> bool:
    return tuple(price_range) == DEFAULT_PRICE_RANGE


def filter_providers(
    providers: Iterable[ServiceProvider],
    query: str,
    filters: SearchFilters,
) -> list[ServiceProvider]:
    """
    Run the filter stages (text, category, location, price, availability) and
    the sort stage. Pure: the input sequence is not modified.
    """
    result = list(providers)

    needle = (query or "").strip().lower()
    if needle:
        result = [p for p in result if _matches_query(p, needle)]

    if filters.categories:
        wanted = set(filters.categories)
        result = [p for p in result if p.category in wanted]

    location = (filters.location or "").strip().lower()
    if location:
        result = [p for p in result if _matches_location(p, location)]

    if not is_default_price_range(filters.price_range):
        min_price, max_price = filters.price_range
        result = [p for p in result if min_price <= p.starting_price <= max_price]

    if filters.availability:
        result = [p for p in result if _matches_availability(p, filters.availability)]

    return sort_providers(result, filters.sort_by)


def search_providers(
    providers: Iterable[ServiceProvider],
    query: str,
    filters: SearchFilters,
    favorites: set[str],
) -> list[ServiceProvider]:
    return filter_providers(apply_favorites(providers, favorites), query, filters)


def sort_providers(providers: list[ServiceProvider], sort_by: str) -> list[ServiceProvider]:
    # sorted() is stable, ties keep input order
    if sort_by == "price-asc":
        return sorted(providers, key=lambda p: p.starting_price)
    if sort_by == "price-desc":
        return sorted(providers, key=lambda p: -p.starting_price)
    if sort_by == "rating":
        return sorted(providers, key=lambda p: -p.rating)
    if sort_by == "distance":
        return sorted(providers, key=lambda p: parse_distance(p.distance))
    if sort_by == "availability":
        return sorted(providers, key=_next_slot_key)
    # "best-match", "newest" and unknown values keep pipeline order
    return list(providers)


def active_filter_names(query: str, filters: SearchFilters) -> list[str]:
    """Names of the active predicates. Stats derive both count and flag from this."""
    active: list[str] = []
    if (query or "").strip():
        active.append("query")
    if filters.categories:
        active.append("categories")
    if (filters.location or "").strip():
        active.append("location")
    if not is_default_price_range(filters.price_range):
        active.append("price_range")
    if filters.availability:
        active.append("availability")
    return active


def calculate_search_stats(
    results: list[ServiceProvider],
    query: str,
    filters: SearchFilters,
) -> SearchStats:
    active = active_filter_names(query, filters)
    return SearchStats(
        total_results=len(results),
        has_active_filters=len(active) > 0,
        active_filter_count=len(active),
        query=query,
    )


def get_category_suggestions(providers: Iterable[ServiceProvider]) -> list[CategorySuggestion]:
    counts: dict[str, int] = {}
    for provider in providers:
        counts[provider.category] = counts.get(provider.category, 0) + 1
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return [CategorySuggestion(category=category, count=count) for category, count in ordered]


def get_price_range_suggestions(providers: Iterable[ServiceProvider]) -> PriceRangeSuggestion | None:
    prices = [p.starting_price for p in providers]
    if not prices:
        return None
    return PriceRangeSuggestion(
        min=min(prices),
        max=max(prices),
        average=round(sum(prices) / len(prices)),
    )


def _matches_query(provider: ServiceProvider, needle: str) -> bool:
    fields = (provider.name, provider.business_name, provider.category, provider.description)
    return any(needle in (value or "").lower() for value in fields)


def _matches_location(provider: ServiceProvider, location: str) -> bool:
    fields = (provider.city, provider.state, provider.zip_code, provider.address)
    return any(location in (value or "").lower() for value in fields)


def _matches_availability(provider: ServiceProvider, windows: Iterable[str]) -> bool:
    for window in windows:
        check = _WINDOW_FLAGS.get(window)
        if check is None or check(provider):
            return True
    return False


def _next_slot_key(provider: ServiceProvider) -> tuple[int, datetime]:
    slot = provider.next_available_slot
    parsed = parse_slot_datetime(slot.date, slot.time) if slot else None
    if parsed is None:
        return (1, datetime.max)
    return (0, parsed)


@dataclass(frozen=True)
class SearchResult:
    providers: list[ServiceProvider]
    stats: SearchStats
    category_suggestions: list[CategorySuggestion]
    price_range: PriceRangeSuggestion | None


class ProviderSearchUseCase:
    """Favorites overlay, filter and sort over the provider source."""

    def __init__(self, source: ProviderSourcePort, favorites: FavoritesStorePort) -> None:
        self._source = source
        self._favorites = favorites
        self._logger = logging.getLogger(__name__)

    async def search(self, owner_id: str, query: str, filters: SearchFilters) -> SearchResult:
        providers = await self._source.list_providers()
        results = search_providers(providers, query, filters, self._favorites.get_favorites(owner_id))
        stats = calculate_search_stats(results, query, filters)
        self._logger.info(
            "Provider search",
            extra={"query": query, "sort_by": filters.sort_by, "results": stats.total_results},
        )
        return SearchResult(
            providers=results,
            stats=stats,
            category_suggestions=get_category_suggestions(results),
            price_range=get_price_range_suggestions(results),
        )

    async def get_provider(self, owner_id: str, provider_id: str) -> ServiceProvider | None:
        provider = await self._source.get_provider(provider_id)
        if provider is None:
            return None
        return replace(provider, is_favorite=self._favorites.is_favorite(owner_id, provider_id))

    def toggle_favorite(self, owner_id: str, provider_id: str) -> bool:
        return self._favorites.toggle(owner_id, provider_id)
