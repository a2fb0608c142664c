from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta

from bookflow.application.exceptions import NetworkError, NotFoundError
from bookflow.application.ports.booking_api import BookingApiPort
from bookflow.domain.entities.booking import Booking, CreateBookingRequest, ServicePage
from bookflow.domain.entities.booking_draft import AddOnService, Service, TimeSlot

DEFAULT_SERVICES: tuple[Service, ...] = (
    Service(
        id="svc-haircut",
        name="Haircut & Style",
        price=45,
        duration=60,
        business_id="biz-elite-hair",
        provider_name="Elite Hair Studio",
        provider_rating=4.9,
        add_ons=(
            AddOnService(id="addon-deep-conditioning", name="Deep Conditioning", price=15, duration=15),
            AddOnService(id="addon-scalp-massage", name="Scalp Massage", price=10, duration=10),
        ),
    ),
    Service(
        id="svc-massage",
        name="Therapeutic Massage",
        price=85,
        duration=60,
        business_id="biz-zen-massage",
        provider_name="Zen Massage Therapy",
        provider_rating=4.9,
        add_ons=(AddOnService(id="addon-hot-stones", name="Hot Stones", price=20, duration=15),),
    ),
    Service(
        id="svc-checkup",
        name="General Checkup",
        price=120,
        duration=30,
        business_id="biz-downtown-medical",
        provider_name="Downtown Medical Center",
        provider_rating=4.8,
    ),
)


class MockBookingApi(BookingApiPort):
    def __init__(
        self,
        services: tuple[Service, ...] | list[Service] | None = None,
        start_day: date | None = None,
        fail_with: NetworkError | None = None,
    ) -> None:
        self._services = list(services if services is not None else DEFAULT_SERVICES)
        self._start_day = start_day or date.today()
        self._bookings: dict[str, Booking] = {}
        self._slots: dict[str, list[TimeSlot]] = {}
        self.fail_with = fail_with
        self.requests: list[CreateBookingRequest] = []
        self._logger = logging.getLogger(__name__)

    async def create_booking(self, request: CreateBookingRequest) -> Booking:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        service = self._service(request.service_id)
        slot = next((s for s in self._time_slots(service) if s.id == request.time_slot_id), None)
        if slot is None:
            raise NotFoundError(f"Time slot '{request.time_slot_id}' not found")

        booking_id = f"mock_booking_{len(self._bookings) + 1}"
        booking = Booking(
            id=booking_id,
            service_id=service.id,
            time_slot_id=slot.id,
            status="Confirmed",
            business_id=service.business_id,
            service_name=service.name,
            start_time=slot.start_time,
            end_time=slot.end_time,
            notes=request.notes,
        )
        self._bookings[booking_id] = booking
        self._logger.info("Mock booking created", extra={"booking_id": booking_id, "service_id": service.id})
        return booking

    async def get_services(self, page: int = 1, per_page: int = 20) -> ServicePage:
        start = (page - 1) * per_page
        return ServicePage(
            items=self._services[start : start + per_page],
            total=len(self._services),
            page=page,
            per_page=per_page,
            total_pages=max(1, math.ceil(len(self._services) / per_page)),
        )

    async def get_service_time_slots(self, service_id: str) -> list[TimeSlot]:
        return list(self._time_slots(self._service(service_id)))

    async def get_booking(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking '{booking_id}' not found")
        return booking

    def _service(self, service_id: str) -> Service:
        for service in self._services:
            if service.id == service_id:
                return service
        raise NotFoundError(f"Service '{service_id}' not found")

    def _time_slots(self, service: Service) -> list[TimeSlot]:
        if service.id not in self._slots:
            slots: list[TimeSlot] = []
            for day_offset in range(3):
                day = self._start_day + timedelta(days=day_offset)
                current = datetime.combine(day, datetime.min.time().replace(hour=9))
                end_of_day = datetime.combine(day, datetime.min.time().replace(hour=17))
                while current + timedelta(minutes=service.duration) <= end_of_day:
                    slots.append(
                        TimeSlot(
                            id=f"{service.id}-{current:%Y%m%d%H%M}",
                            start_time=current,
                            end_time=current + timedelta(minutes=service.duration),
                            service_id=service.id,
                            business_id=service.business_id,
                        )
                    )
                    current += timedelta(minutes=60)
            self._slots[service.id] = slots
        return self._slots[service.id]
