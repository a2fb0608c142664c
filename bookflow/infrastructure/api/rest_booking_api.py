from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from bookflow.application.exceptions import NetworkError, NotFoundError
from bookflow.application.ports.booking_api import BookingApiPort
from bookflow.core.config import settings
from bookflow.domain.entities.booking import Booking, CreateBookingRequest, ServicePage
from bookflow.domain.entities.booking_draft import AddOnService, Service, TimeSlot


class RestBookingApi(BookingApiPort):
    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._access_token = access_token or settings.API_ACCESS_TOKEN
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    async def create_booking(self, request: CreateBookingRequest) -> Booking:
        payload: dict[str, Any] = {
            "service_id": request.service_id,
            "time_slot_id": request.time_slot_id,
        }
        if request.notes:
            payload["notes"] = request.notes

        data = await self._request("POST", "/api/bookings", json=payload)
        booking = _parsed(_parse_booking, data)
        self._logger.info("Booking created", extra={"booking_id": booking.id})
        return booking

    async def get_services(self, page: int = 1, per_page: int = 20) -> ServicePage:
        data = await self._request("GET", "/api/services", params={"page": page, "per_page": per_page})
        return _parsed(_parse_service_page, data, page, per_page)

    async def get_service_time_slots(self, service_id: str) -> list[TimeSlot]:
        data = await self._request("GET", f"/api/services/{service_id}/time-slots")
        slots: list[TimeSlot] = []
        for item in data or []:
            try:
                slots.append(_parse_time_slot(item))
            except (KeyError, TypeError, ValueError):
                self._logger.warning("Skipping malformed time slot", extra={"service_id": service_id})
                continue
        return slots

    async def get_booking(self, booking_id: str) -> Booking:
        data = await self._request("GET", f"/api/bookings/{booking_id}")
        return _parsed(_parse_booking, data)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Booking API unreachable", extra={"url": url, "error": str(e)})
            raise NetworkError(f"Booking API request failed: {e}") from e

        if response.status_code >= 400:
            message, code = _error_details(response)
            self._logger.error(
                "Booking API error",
                extra={"url": url, "status": response.status_code, "error": message},
            )
            if response.status_code == 404:
                raise NotFoundError(message)
            raise NetworkError(message, code=code)

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError("Booking API returned invalid JSON", code=response.status_code) from e


def _parsed(parser, *args: Any) -> Any:
    try:
        return parser(*args)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise NetworkError("Booking API returned an invalid payload") from e


def _error_details(response: httpx.Response) -> tuple[str, int]:
    try:
        body = response.json()
        error = body.get("error") or {}
        message = error.get("message") or body.get("message")
        code = error.get("code") or response.status_code
    except (ValueError, AttributeError):
        message = None
        code = response.status_code
    return message or f"Booking API returned {response.status_code}", int(code)


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _parse_service(data: dict[str, Any]) -> Service:
    add_ons = tuple(
        AddOnService(
            id=str(item["id"]),
            name=item["name"],
            price=float(item.get("price", 0)),
            duration=int(item.get("duration", 0)),
            description=item.get("description") or "",
        )
        for item in data.get("add_ons") or []
    )
    return Service(
        id=str(data["id"]),
        name=data["name"],
        price=float(data.get("price", 0)),
        duration=int(data.get("duration", 0)),
        business_id=data.get("business_id"),
        description=data.get("description"),
        provider_name=data.get("provider_name"),
        provider_rating=data.get("provider_rating"),
        add_ons=add_ons,
    )


def _parse_service_page(data: dict[str, Any], page: int, per_page: int) -> ServicePage:
    items = [_parse_service(item) for item in data.get("items", [])]
    return ServicePage(
        items=items,
        total=int(data.get("total", len(items))),
        page=int(data.get("page", page)),
        per_page=int(data.get("per_page", per_page)),
        total_pages=int(data.get("total_pages", 1)),
    )


def _parse_time_slot(data: dict[str, Any]) -> TimeSlot:
    return TimeSlot(
        id=str(data["id"]),
        start_time=_parse_datetime(data["start_time"]),
        end_time=_parse_datetime(data["end_time"]),
        service_id=data.get("service_id"),
        business_id=data.get("business_id"),
        is_available=bool(data.get("is_available", True)),
    )


def _parse_booking(data: dict[str, Any]) -> Booking:
    # Some deployments wrap the payload as {"data": {...}}
    if "data" in data and isinstance(data["data"], dict):
        data = data["data"]
    return Booking(
        id=str(data["id"]),
        service_id=str(data["service_id"]),
        time_slot_id=str(data["time_slot_id"]),
        status=data.get("status", "Pending"),
        user_id=data.get("user_id"),
        business_id=data.get("business_id"),
        service_name=data.get("service_name"),
        start_time=_parse_datetime(data["start_time"]) if data.get("start_time") else None,
        end_time=_parse_datetime(data["end_time"]) if data.get("end_time") else None,
        notes=data.get("notes"),
    )
