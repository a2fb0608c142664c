from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BookingStep:
    id: str  # "service", "datetime", "staff", "addons", "requests", "info", "payment"
    title: str
    description: str
    completed: bool = False
    current: bool = False


BOOKING_STEPS: tuple[BookingStep, ...] = (
    BookingStep(id="service", title="Service Selection", description="Choose your service", current=True),
    BookingStep(id="datetime", title="Date & Time", description="Pick your appointment"),
    BookingStep(id="staff", title="Staff Selection", description="Choose your provider"),
    BookingStep(id="addons", title="Add-on Services", description="Enhance your service"),
    BookingStep(id="requests", title="Special Requests", description="Any special needs"),
    BookingStep(id="info", title="Your Information", description="Contact details"),
    BookingStep(id="payment", title="Payment & Review", description="Complete your booking"),
)

STEP_IDS: tuple[str, ...] = tuple(step.id for step in BOOKING_STEPS)
