from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable
from urllib.parse import urlencode

from bookflow.application.exceptions import (
    BookingFlowError,
    NotFoundError,
    SubmissionInProgressError,
    ValidationError,
)
from bookflow.application.ports.auth import AuthPort
from bookflow.application.ports.booking_api import BookingApiPort
from bookflow.application.utils.validators import is_valid_email, is_valid_phone
from bookflow.domain.entities.booking import Booking, CreateBookingRequest
from bookflow.domain.entities.booking_draft import AddOnService, BookingDraft, CustomerInfo, TimeSlot
from bookflow.domain.entities.booking_step import BOOKING_STEPS, BookingStep
from bookflow.domain.entities.booking_update import (
    AddOnsReplaced,
    AddOnToggled,
    BookingUpdate,
    CommonRequestAdded,
    CustomerInfoChanged,
    DateTimeSelected,
    PaymentChanged,
    ServiceSelected,
    SpecialRequestsChanged,
    StaffSelected,
)

DiscountPolicy = Callable[[float, str | None], float]

COMMON_REQUESTS: dict[str, str] = {
    "allergies": "I have allergies or sensitivities",
    "first-time": "This is my first time",
    "consultation": "I'd like a consultation first",
    "quiet": "I prefer a quiet environment",
    "photos": "I don't want photos taken",
    "running-late": "I might be running late",
}


def flat_rate_discount(rate: float) -> DiscountPolicy:
    """Any applied promo code takes `rate` off the subtotal."""

    def policy(subtotal: float, promo_code: str | None) -> float:
        if not promo_code:
            return 0.0
        return round(subtotal * rate, 2)

    return policy


def available_slots_for_date(slots: list[TimeSlot], day: date) -> list[TimeSlot]:
    return [slot for slot in slots if slot.start_time.date() == day]


@dataclass(frozen=True)
class SubmitResult:
    action: str  # "booked" or "login_required"
    booking: Booking | None = None
    redirect_url: str | None = None


class BookingFlow:
    """
    Booking wizard state machine.

    Owns one draft and the step catalog. Forward moves go one step at a time
    and only after the current step validates; backward moves may jump to any
    step up to the current one and keep both data and completed flags.
    """

    def __init__(
        self,
        booking_api: BookingApiPort,
        special_requests_limit: int = 500,
        discount_policy: DiscountPolicy | None = None,
        login_path: str = "/login",
    ) -> None:
        self._api = booking_api
        self._special_requests_limit = special_requests_limit
        self._discount_policy = discount_policy or flat_rate_discount(0.1)
        self._login_path = login_path
        self._logger = logging.getLogger(__name__)
        self._submitting = False
        self._reset()

    def _reset(self) -> None:
        self._draft = BookingDraft()
        self._completed = [False] * len(BOOKING_STEPS)
        self._current_index = 0

    @property
    def draft(self) -> BookingDraft:
        return self._draft

    @property
    def steps(self) -> list[BookingStep]:
        return [
            replace(step, completed=self._completed[index], current=index == self._current_index)
            for index, step in enumerate(BOOKING_STEPS)
        ]

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_step(self) -> BookingStep:
        return self.steps[self._current_index]

    @property
    def is_first_step(self) -> bool:
        return self._current_index == 0

    @property
    def is_last_step(self) -> bool:
        return self._current_index == len(BOOKING_STEPS) - 1

    @property
    def progress(self) -> float:
        return (self._current_index + 1) / len(BOOKING_STEPS) * 100

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def update(self, update: BookingUpdate) -> BookingDraft:
        """Apply one step's change to the draft and recompute totals."""
        self._ensure_idle()
        draft = self._draft

        if isinstance(update, ServiceSelected):
            draft = replace(draft, service=update.service)
        elif isinstance(update, DateTimeSelected):
            draft = replace(draft, date=update.date, time_slot=update.time_slot)
        elif isinstance(update, StaffSelected):
            draft = replace(draft, staff_member=update.staff_member)
        elif isinstance(update, AddOnToggled):
            draft = replace(draft, selected_add_ons=_toggle_add_on(draft.selected_add_ons, update.add_on))
        elif isinstance(update, AddOnsReplaced):
            draft = replace(draft, selected_add_ons=_unique_add_ons(update.add_ons))
        elif isinstance(update, SpecialRequestsChanged):
            draft = replace(draft, special_requests=self._checked_requests(update.text))
        elif isinstance(update, CommonRequestAdded):
            current = draft.special_requests
            text = f"{current}\n• {update.text}" if current else f"• {update.text}"
            draft = replace(draft, special_requests=self._checked_requests(text))
        elif isinstance(update, CustomerInfoChanged):
            draft = replace(draft, customer_info=_merge_customer_info(draft.customer_info, update))
        elif isinstance(update, PaymentChanged):
            if update.payment_method is not None:
                draft = replace(draft, payment_method=update.payment_method)
            if update.promo_code is not None:
                draft = replace(draft, promo_code=update.promo_code.strip() or None)
        else:
            raise TypeError(f"Unsupported booking update: {type(update).__name__}")

        self._draft = self._with_totals(draft)
        return self._draft

    def can_advance(self) -> bool:
        try:
            self._validate_step(BOOKING_STEPS[self._current_index].id)
        except ValidationError:
            return False
        return True

    def advance(self) -> BookingStep:
        """
        Complete the current step and move to the next one. On the last step
        the step is marked completed and `current` stays put.
        """
        self._ensure_idle()
        step_id = BOOKING_STEPS[self._current_index].id
        self._validate_step(step_id)

        self._completed[self._current_index] = True
        if not self.is_last_step:
            self._current_index += 1
        self._logger.info(
            "Booking step completed",
            extra={"step": step_id, "next_step": BOOKING_STEPS[self._current_index].id},
        )
        return self.current_step

    def retreat(self, step_id: str) -> BookingStep:
        self._ensure_idle()
        target = _step_index(step_id)
        if target > self._current_index:
            raise ValidationError(
                f"Cannot jump ahead to step '{step_id}'",
                step=step_id,
            )
        self._current_index = target
        return self.current_step

    def discard(self) -> None:
        self._ensure_idle()
        self._reset()

    async def submit(self, auth: AuthPort) -> SubmitResult:
        """
        Send the draft to the booking API.

        Unauthenticated users get a login redirect carrying the selection and
        nothing is sent. On success the draft is discarded; on failure it is
        kept as-is and the error propagates.
        """
        if self._submitting:
            raise SubmissionInProgressError("A booking submission is already in progress")

        payment_index = _step_index("payment")
        for index in range(payment_index):
            if not self._completed[index]:
                step = BOOKING_STEPS[index]
                raise ValidationError(f"Step '{step.title}' is not completed", step=step.id)
        # completed steps can still be edited, so their data is checked again
        for step in BOOKING_STEPS[: payment_index + 1]:
            self._validate_step(step.id)

        draft = self._draft
        if not auth.is_authenticated:
            return SubmitResult(action="login_required", redirect_url=self.build_login_redirect())

        self._completed[payment_index] = True
        request = CreateBookingRequest(
            service_id=draft.service.id,
            time_slot_id=draft.time_slot.id,
            notes=draft.special_requests or None,
        )

        self._submitting = True
        try:
            booking = await self._api.create_booking(request)
        except BookingFlowError as e:
            self._logger.error(
                "Booking submission failed",
                extra={"service_id": request.service_id, "error": str(e)},
            )
            raise
        finally:
            self._submitting = False

        self._logger.info(
            "Booking submitted",
            extra={"booking_id": booking.id, "service_id": request.service_id},
        )
        self._reset()
        return SubmitResult(action="booked", booking=booking)

    def build_login_redirect(self) -> str:
        draft = self._draft
        info = draft.customer_info
        params = {
            "booking": "true",
            "service_id": draft.service.id if draft.service else "",
            "time_slot_id": draft.time_slot.id if draft.time_slot else "",
            "date": draft.date.isoformat() if draft.date else "",
            "name": info.name,
            "email": info.email,
            "phone": info.phone,
            "notes": draft.special_requests,
        }
        return f"{self._login_path}?{urlencode(params)}"

    def _validate_step(self, step_id: str) -> None:
        draft = self._draft
        if step_id == "service":
            if draft.service is None:
                raise ValidationError("Please select a service", step=step_id, field="service")
        elif step_id == "datetime":
            if draft.date is None:
                raise ValidationError("Please select a date", step=step_id, field="date")
            if draft.time_slot is None:
                raise ValidationError("Please select a time slot", step=step_id, field="time_slot")
            if draft.time_slot.start_time.date() != draft.date:
                raise ValidationError(
                    "Selected time slot is not on the selected date",
                    step=step_id,
                    field="time_slot",
                )
        elif step_id == "info":
            info = draft.customer_info
            if not info.name.strip():
                raise ValidationError("Name is required", step=step_id, field="name")
            if not is_valid_email(info.email):
                raise ValidationError("Please enter a valid email address", step=step_id, field="email")
            if not is_valid_phone(info.phone):
                raise ValidationError("Please enter a valid phone number", step=step_id, field="phone")
        elif step_id == "payment":
            if not draft.payment_method:
                raise ValidationError("Please select a payment method", step=step_id, field="payment_method")
        # staff, addons and requests are optional

    def _checked_requests(self, text: str) -> str:
        if len(text) > self._special_requests_limit:
            raise ValidationError(
                f"Special requests are limited to {self._special_requests_limit} characters",
                step="requests",
                field="special_requests",
            )
        return text

    def _with_totals(self, draft: BookingDraft) -> BookingDraft:
        subtotal = (draft.service.price if draft.service else 0) + sum(a.price for a in draft.selected_add_ons)
        discount = self._discount_policy(subtotal, draft.promo_code)
        return replace(draft, subtotal=subtotal, discount=discount, total=subtotal - discount)

    def _ensure_idle(self) -> None:
        if self._submitting:
            raise SubmissionInProgressError("A booking submission is already in progress")


def _step_index(step_id: str) -> int:
    for index, step in enumerate(BOOKING_STEPS):
        if step.id == step_id:
            return index
    raise NotFoundError(f"Unknown booking step '{step_id}'")


def _toggle_add_on(selected: tuple[AddOnService, ...], add_on: AddOnService) -> tuple[AddOnService, ...]:
    if any(existing.id == add_on.id for existing in selected):
        return tuple(existing for existing in selected if existing.id != add_on.id)
    return selected + (add_on,)


def _unique_add_ons(add_ons: tuple[AddOnService, ...]) -> tuple[AddOnService, ...]:
    seen: set[str] = set()
    result: list[AddOnService] = []
    for add_on in add_ons:
        if add_on.id in seen:
            continue
        seen.add(add_on.id)
        result.append(add_on)
    return tuple(result)


def _merge_customer_info(info: CustomerInfo, update: CustomerInfoChanged) -> CustomerInfo:
    changes = {
        name: getattr(update, name)
        for name in ("name", "email", "phone", "emergency_contact", "accessibility_needs")
        if getattr(update, name) is not None
    }
    return replace(info, **changes)
