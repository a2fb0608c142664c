from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from bookflow.domain.entities.booking_draft import AddOnService, Service, StaffMember, TimeSlot


@dataclass(frozen=True)
class ServiceSelected:
    step = "service"
    service: Service


@dataclass(frozen=True)
class DateTimeSelected:
    step = "datetime"
    date: date
    time_slot: TimeSlot | None = None


@dataclass(frozen=True)
class StaffSelected:
    step = "staff"
    staff_member: StaffMember


@dataclass(frozen=True)
class AddOnToggled:
    step = "addons"
    add_on: AddOnService


@dataclass(frozen=True)
class AddOnsReplaced:
    step = "addons"
    add_ons: tuple[AddOnService, ...]


@dataclass(frozen=True)
class SpecialRequestsChanged:
    step = "requests"
    text: str


@dataclass(frozen=True)
class CommonRequestAdded:
    step = "requests"
    text: str


@dataclass(frozen=True)
class CustomerInfoChanged:
    """Only the fields that are not None are applied."""

    step = "info"
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    emergency_contact: str | None = None
    accessibility_needs: str | None = None


@dataclass(frozen=True)
class PaymentChanged:
    """promo_code="" removes an applied code; None leaves it untouched."""

    step = "payment"
    payment_method: str | None = None
    promo_code: str | None = None


BookingUpdate = (
    ServiceSelected
    | DateTimeSelected
    | StaffSelected
    | AddOnToggled
    | AddOnsReplaced
    | SpecialRequestsChanged
    | CommonRequestAdded
    | CustomerInfoChanged
    | PaymentChanged
)
