from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from bookflow.application.exceptions import NotFoundError
from bookflow.application.ports.booking_api import BookingApiPort
from bookflow.application.ports.session_store import BookingSessionStorePort
from bookflow.application.use_cases.booking_flow import BookingFlow, available_slots_for_date
from bookflow.domain.entities.booking_draft import Service, TimeSlot
from bookflow.domain.entities.booking_update import ServiceSelected


class BookingSessionUseCase:
    """Starts wizard sessions and loads the catalog data each step needs."""

    def __init__(
        self,
        booking_api: BookingApiPort,
        sessions: BookingSessionStorePort,
        flow_factory: Callable[[], BookingFlow],
    ) -> None:
        self._api = booking_api
        self._sessions = sessions
        self._flow_factory = flow_factory
        self._logger = logging.getLogger(__name__)

    async def start(self, service_id: str | None = None) -> tuple[str, BookingFlow]:
        """
        Open a new session. A pre-selected service is applied to the draft
        but the service step is not completed automatically.
        """
        flow = self._flow_factory()
        if service_id:
            service = await self.find_service(service_id)
            flow.update(ServiceSelected(service=service))
        session_id = self._sessions.create(flow)
        self._logger.info("Booking session started", extra={"session_id": session_id, "service_id": service_id})
        return session_id, flow

    def get(self, session_id: str) -> BookingFlow:
        return self._sessions.get(session_id)

    def abandon(self, session_id: str) -> None:
        self._sessions.get(session_id)
        self._sessions.delete(session_id)
        self._logger.info("Booking session abandoned", extra={"session_id": session_id})

    async def list_services(self, page: int = 1, per_page: int = 20) -> list[Service]:
        result = await self._api.get_services(page=page, per_page=per_page)
        return result.items

    async def find_service(self, service_id: str) -> Service:
        page = 1
        while True:
            result = await self._api.get_services(page=page, per_page=50)
            for service in result.items:
                if service.id == service_id:
                    return service
            if page >= result.total_pages or not result.items:
                raise NotFoundError(f"Service '{service_id}' not found")
            page += 1

    async def time_slots(self, service_id: str, day: date | None = None) -> list[TimeSlot]:
        slots = await self._api.get_service_time_slots(service_id)
        slots = [slot for slot in slots if slot.is_available]
        if day is not None:
            return available_slots_for_date(slots, day)
        return slots
