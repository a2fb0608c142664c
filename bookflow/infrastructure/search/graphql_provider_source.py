from __future__ import annotations

import logging
from typing import Any

import httpx

from bookflow.application.exceptions import NetworkError
from bookflow.application.ports.provider_source import ProviderSourcePort
from bookflow.core.config import settings
from bookflow.domain.entities.provider import AvailabilityWindows, NextAvailableSlot, ServiceProvider

SEARCH_PROVIDERS_QUERY = """
query SearchProviders($input: SearchProvidersInput!) {
  searchProviders(input: $input) {
    items {
      id
      name
      businessName
      category
      rating
      totalReviews
      startingPrice
      distance
      description
      address
      city
      state
      zipCode
      nextAvailableSlot { date time }
      availabilityWindows { today tomorrow thisWeek nextWeek }
    }
    pagination { total page per_page total_pages has_next_page }
  }
}
"""


class GraphQLProviderSource(ProviderSourcePort):
    """Pulls every page of `searchProviders`; filtering stays client-side."""

    def __init__(
        self,
        endpoint: str | None = None,
        access_token: str | None = None,
        page_size: int = 50,
        max_pages: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint or settings.GRAPHQL_ENDPOINT
        self._access_token = access_token or settings.API_ACCESS_TOKEN
        self._page_size = page_size
        self._max_pages = max_pages
        self._client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport)
        self._logger = logging.getLogger(__name__)

    async def list_providers(self) -> list[ServiceProvider]:
        providers: list[ServiceProvider] = []
        page = 1
        while page <= self._max_pages:
            data = await self._query(page)
            result = data.get("searchProviders") or {}
            for item in result.get("items") or []:
                providers.append(_parse_provider(item))
            pagination = result.get("pagination") or {}
            if not pagination.get("has_next_page"):
                break
            page += 1
        return providers

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _query(self, page: int) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        payload = {
            "query": SEARCH_PROVIDERS_QUERY,
            "variables": {"input": {"page": page, "limit": self._page_size}},
        }

        try:
            response = await self._client.post(self._endpoint, json=payload, headers=headers)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            self._logger.error("Provider search failed", extra={"status": e.response.status_code})
            raise NetworkError("Provider search failed", code=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error("Provider search failed", extra={"error": str(e)})
            raise NetworkError(f"Provider search failed: {e}") from e

        errors = body.get("errors")
        if errors:
            message = errors[0].get("message") or "GraphQL error"
            self._logger.error("Provider search returned errors", extra={"error": message})
            raise NetworkError(message)
        return body.get("data") or {}


def _parse_provider(item: dict[str, Any]) -> ServiceProvider:
    slot = item.get("nextAvailableSlot")
    windows = item.get("availabilityWindows") or {}
    return ServiceProvider(
        id=str(item["id"]),
        name=item.get("name") or "",
        business_name=item.get("businessName") or "",
        category=item.get("category") or "",
        rating=float(item.get("rating") or 0),
        starting_price=float(item.get("startingPrice") or 0),
        distance=str(item.get("distance") or ""),
        review_count=int(item.get("totalReviews") or 0),
        description=item.get("description") or "",
        address=item.get("address") or "",
        city=item.get("city") or "",
        state=item.get("state") or "",
        zip_code=item.get("zipCode") or "",
        next_available_slot=NextAvailableSlot(date=slot["date"], time=slot["time"]) if slot else None,
        availability_windows=AvailabilityWindows(
            today=bool(windows.get("today")),
            tomorrow=bool(windows.get("tomorrow")),
            this_week=bool(windows.get("thisWeek")),
            next_week=bool(windows.get("nextWeek")),
        ),
    )
