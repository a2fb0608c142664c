from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bookflow.domain.entities.booking_draft import Service


@dataclass(frozen=True)
class CreateBookingRequest:
    service_id: str
    time_slot_id: str
    notes: str | None = None


@dataclass(frozen=True)
class Booking:
    id: str
    service_id: str
    time_slot_id: str
    status: str = "Pending"  # "Pending", "Confirmed", "Cancelled", "Completed"
    user_id: str | None = None
    business_id: str | None = None
    service_name: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ServicePage:
    items: list[Service]
    total: int
    page: int
    per_page: int
    total_pages: int
