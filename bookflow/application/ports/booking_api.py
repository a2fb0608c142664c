from __future__ import annotations

from abc import ABC, abstractmethod

from bookflow.domain.entities.booking import Booking, CreateBookingRequest, ServicePage
from bookflow.domain.entities.booking_draft import TimeSlot


class BookingApiPort(ABC):
    @abstractmethod
    async def create_booking(self, request: CreateBookingRequest) -> Booking:
        """Create a booking. Raises NetworkError on failure."""
        raise NotImplementedError

    @abstractmethod
    async def get_services(self, page: int = 1, per_page: int = 20) -> ServicePage:
        """List bookable services, one page at a time."""
        raise NotImplementedError

    @abstractmethod
    async def get_service_time_slots(self, service_id: str) -> list[TimeSlot]:
        """Get time slots for a service. Raises NotFoundError for unknown ids."""
        raise NotImplementedError

    @abstractmethod
    async def get_booking(self, booking_id: str) -> Booking:
        """Get a booking by id. Raises NotFoundError for unknown ids."""
        raise NotImplementedError
