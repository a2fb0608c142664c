from __future__ import annotations

from collections.abc import Mapping

from bookflow.domain.entities.search_filters import DEFAULT_PRICE_RANGE, SearchFilters


def encode_search_params(query: str, filters: SearchFilters) -> dict[str, str]:
    """Only non-default values are written, so a default search encodes to {}."""
    params: dict[str, str] = {}
    if query.strip():
        params["query"] = query
    if filters.location.strip():
        params["location"] = filters.location
    if filters.categories:
        params["categories"] = ",".join(filters.categories)
    if tuple(filters.price_range) != DEFAULT_PRICE_RANGE:
        params["priceMin"] = _format_price(filters.price_range[0])
        params["priceMax"] = _format_price(filters.price_range[1])
    if filters.availability:
        params["availability"] = ",".join(filters.availability)
    if filters.sort_by != "best-match":
        params["sortBy"] = filters.sort_by
    return params


def decode_search_params(params: Mapping[str, str]) -> tuple[str, SearchFilters]:
    filters = SearchFilters(
        categories=_split(params.get("categories")),
        location=params.get("location") or "",
        price_range=(
            _parse_price(params.get("priceMin"), DEFAULT_PRICE_RANGE[0]),
            _parse_price(params.get("priceMax"), DEFAULT_PRICE_RANGE[1]),
        ),
        availability=_split(params.get("availability")),
        sort_by=params.get("sortBy") or "best-match",
    )
    return params.get("query") or "", filters


def _split(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part for part in value.split(",") if part)


def _parse_price(value: str | None, default: float) -> float:
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return default


def _format_price(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
