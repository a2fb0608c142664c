from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class AddOnService:
    id: str
    name: str
    price: float
    duration: int = 0
    description: str = ""


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    price: float
    duration: int  # minutes
    business_id: str | None = None
    description: str | None = None
    provider_name: str | None = None
    provider_rating: float | None = None
    add_ons: tuple[AddOnService, ...] = ()


@dataclass(frozen=True)
class TimeSlot:
    id: str
    start_time: datetime
    end_time: datetime
    service_id: str | None = None
    business_id: str | None = None
    is_available: bool = True


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    specialties: tuple[str, ...] = ()
    rating: float | None = None
    reviews_count: int = 0


ANY_AVAILABLE_STAFF = StaffMember(id="no-preference", name="Any available staff")


@dataclass(frozen=True)
class CustomerInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    emergency_contact: str | None = None
    accessibility_needs: str | None = None


@dataclass(frozen=True)
class BookingDraft:
    # service step
    service: Service | None = None
    # datetime step
    date: date | None = None
    time_slot: TimeSlot | None = None
    # staff step; None means not chosen yet
    staff_member: StaffMember | None = None
    # addons step, insertion ordered, unique by id
    selected_add_ons: tuple[AddOnService, ...] = ()
    # requests step
    special_requests: str = ""
    # info step
    customer_info: CustomerInfo = field(default_factory=CustomerInfo)
    # payment step
    payment_method: str = ""
    promo_code: str | None = None
    # derived
    subtotal: float = 0.0
    discount: float = 0.0
    total: float = 0.0
