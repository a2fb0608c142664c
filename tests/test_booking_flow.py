"""
Tests for the booking wizard state machine.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from bookflow.application.exceptions import NetworkError, SubmissionInProgressError, ValidationError
from bookflow.application.use_cases.booking_flow import BookingFlow, available_slots_for_date
from bookflow.domain.entities.booking_draft import ANY_AVAILABLE_STAFF, AddOnService, Service, TimeSlot
from bookflow.domain.entities.booking_update import (
    AddOnsReplaced,
    AddOnToggled,
    CommonRequestAdded,
    CustomerInfoChanged,
    DateTimeSelected,
    PaymentChanged,
    ServiceSelected,
    SpecialRequestsChanged,
    StaffSelected,
)
from bookflow.domain.entities.user import User
from bookflow.infrastructure.api.mock_booking_api import MockBookingApi
from bookflow.infrastructure.auth.session_auth import SessionAuth

DAY = date(2026, 3, 10)
WASH = AddOnService(id="addon-wash", name="Wash", price=10, duration=10)
STYLE = AddOnService(id="addon-style", name="Style", price=15, duration=15)
SERVICE = Service(id="svc-cut", name="Cut", price=40, duration=60, add_ons=(WASH, STYLE))
SIGNED_IN = SessionAuth(User(id="user-1", name="Jane Doe", email="jane@example.com"))


def _api() -> MockBookingApi:
    return MockBookingApi(services=[SERVICE], start_day=DAY)


def _first_slot(api: MockBookingApi) -> TimeSlot:
    return asyncio.run(api.get_service_time_slots(SERVICE.id))[0]


def _walk_to_payment(flow: BookingFlow, slot: TimeSlot) -> None:
    flow.update(ServiceSelected(service=SERVICE))
    flow.advance()
    flow.update(DateTimeSelected(date=slot.start_time.date(), time_slot=slot))
    flow.advance()
    flow.advance()  # staff
    flow.advance()  # addons
    flow.advance()  # requests
    flow.update(CustomerInfoChanged(name="Jane Doe", email="jane@example.com", phone="(555) 123-4567"))
    flow.advance()
    flow.update(PaymentChanged(payment_method="pay-at-location"))


def test_starts_on_service_step():
    flow = BookingFlow(_api())
    steps = flow.steps

    assert flow.current_step.id == "service"
    assert [s.id for s in steps] == ["service", "datetime", "staff", "addons", "requests", "info", "payment"]
    assert sum(1 for s in steps if s.current) == 1
    assert not any(s.completed for s in steps)
    assert flow.is_first_step


def test_subtotal_tracks_service_and_add_ons():
    """Subtotal is always service price plus the selected add-on prices."""
    flow = BookingFlow(_api())

    draft = flow.update(ServiceSelected(service=SERVICE))
    assert draft.subtotal == 40
    assert draft.total == 40

    draft = flow.update(AddOnToggled(add_on=WASH))
    draft = flow.update(AddOnToggled(add_on=STYLE))
    assert draft.subtotal == 65

    draft = flow.update(AddOnToggled(add_on=WASH))
    assert [a.id for a in draft.selected_add_ons] == ["addon-style"]
    assert draft.subtotal == 55

    cheaper = Service(id="svc-trim", name="Trim", price=20, duration=30)
    draft = flow.update(ServiceSelected(service=cheaper))
    assert draft.subtotal == 35


def test_add_ons_are_unique_by_id():
    flow = BookingFlow(_api())
    draft = flow.update(AddOnsReplaced(add_ons=(STYLE, WASH, STYLE)))

    assert [a.id for a in draft.selected_add_ons] == ["addon-style", "addon-wash"]
    assert draft.subtotal == 25


def test_promo_code_discount_and_removal():
    flow = BookingFlow(_api())
    flow.update(ServiceSelected(service=SERVICE))

    draft = flow.update(PaymentChanged(promo_code="SAVE10"))
    assert draft.discount == 4.0
    assert draft.total == 36.0

    draft = flow.update(PaymentChanged(promo_code=""))
    assert draft.promo_code is None
    assert draft.discount == 0
    assert draft.total == 40


def test_updates_only_touch_their_own_step():
    flow = BookingFlow(_api())
    flow.update(ServiceSelected(service=SERVICE))
    flow.update(CustomerInfoChanged(name="Jane", email="jane@example.com"))

    draft = flow.update(CustomerInfoChanged(phone="5551234567"))
    assert draft.service == SERVICE
    assert draft.customer_info.name == "Jane"
    assert draft.customer_info.email == "jane@example.com"
    assert draft.customer_info.phone == "5551234567"


def test_advance_blocked_without_service():
    flow = BookingFlow(_api())

    with pytest.raises(ValidationError) as exc:
        flow.advance()

    assert exc.value.step == "service"
    assert exc.value.field == "service"
    assert flow.current_step.id == "service"
    assert not flow.can_advance()


def test_advance_moves_to_next_step_in_order():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)

    flow.update(ServiceSelected(service=SERVICE))
    assert flow.advance().id == "datetime"
    assert flow.steps[0].completed

    flow.update(DateTimeSelected(date=slot.start_time.date(), time_slot=slot))
    assert flow.advance().id == "staff"
    assert flow.advance().id == "addons"


def test_datetime_requires_slot_on_selected_date():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    flow.update(ServiceSelected(service=SERVICE))
    flow.advance()

    flow.update(DateTimeSelected(date=slot.start_time.date()))
    with pytest.raises(ValidationError) as exc:
        flow.advance()
    assert exc.value.field == "time_slot"

    flow.update(DateTimeSelected(date=slot.start_time.date() + timedelta(days=1), time_slot=slot))
    with pytest.raises(ValidationError):
        flow.advance()
    assert flow.current_step.id == "datetime"


def test_staff_step_accepts_any_available():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    flow.update(ServiceSelected(service=SERVICE))
    flow.advance()
    flow.update(DateTimeSelected(date=slot.start_time.date(), time_slot=slot))
    flow.advance()

    draft = flow.update(StaffSelected(staff_member=ANY_AVAILABLE_STAFF))
    assert draft.staff_member.id == "no-preference"
    assert flow.advance().id == "addons"


@pytest.mark.parametrize(
    "name,email,phone,field",
    [
        ("", "jane@example.com", "5551234567", "name"),
        ("Jane", "not-an-email", "5551234567", "email"),
        ("Jane", "jane@example.com", "12345", "phone"),
    ],
)
def test_info_step_validation(name, email, phone, field):
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    flow.retreat("info")

    flow.update(CustomerInfoChanged(name=name, email=email, phone=phone))
    with pytest.raises(ValidationError) as exc:
        flow.advance()
    assert exc.value.field == field
    assert flow.current_step.id == "info"


def test_retreat_keeps_completed_flags_and_data():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    completed_before = [s.completed for s in flow.steps]

    step = flow.retreat("datetime")

    assert step.id == "datetime"
    assert [s.completed for s in flow.steps] == completed_before
    assert flow.draft.customer_info.name == "Jane Doe"
    assert flow.draft.time_slot == slot


def test_retreat_cannot_jump_ahead():
    flow = BookingFlow(_api())
    flow.update(ServiceSelected(service=SERVICE))
    flow.advance()

    with pytest.raises(ValidationError):
        flow.retreat("info")
    assert flow.current_step.id == "datetime"


def test_advance_on_last_step_is_terminal():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)

    assert flow.is_last_step
    assert flow.advance().id == "payment"
    assert flow.current_step.id == "payment"
    assert all(s.completed for s in flow.steps)
    assert flow.progress == 100


def test_special_requests_limit_rejects_overflow():
    flow = BookingFlow(_api(), special_requests_limit=500)
    flow.update(SpecialRequestsChanged(text="a" * 500))

    with pytest.raises(ValidationError):
        flow.update(SpecialRequestsChanged(text="a" * 501))
    assert len(flow.draft.special_requests) == 500

    with pytest.raises(ValidationError):
        flow.update(CommonRequestAdded(text="This is my first time"))
    assert flow.draft.special_requests == "a" * 500


def test_common_requests_append_duplicates():
    flow = BookingFlow(_api())
    flow.update(CommonRequestAdded(text="This is my first time"))
    draft = flow.update(CommonRequestAdded(text="This is my first time"))

    assert draft.special_requests == "• This is my first time\n• This is my first time"


def test_submit_requires_completed_steps():
    flow = BookingFlow(_api())
    flow.update(ServiceSelected(service=SERVICE))

    with pytest.raises(ValidationError):
        asyncio.run(flow.submit(SIGNED_IN))


def test_submit_unauthenticated_returns_login_redirect():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    flow.update(CommonRequestAdded(text="I prefer a quiet environment"))

    result = asyncio.run(flow.submit(SessionAuth()))

    assert result.action == "login_required"
    assert api.requests == []
    url = urlparse(result.redirect_url)
    params = parse_qs(url.query)
    assert url.path == "/login"
    assert params["booking"] == ["true"]
    assert params["service_id"] == [SERVICE.id]
    assert params["time_slot_id"] == [slot.id]
    assert params["date"] == [slot.start_time.date().isoformat()]
    assert params["email"] == ["jane@example.com"]
    assert flow.draft.service == SERVICE


def test_submit_success_discards_draft():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    flow.update(SpecialRequestsChanged(text="Window seat please"))

    result = asyncio.run(flow.submit(SIGNED_IN))

    assert result.action == "booked"
    assert result.booking.service_id == SERVICE.id
    assert result.booking.time_slot_id == slot.id
    assert api.requests[0].notes == "Window seat please"
    assert flow.draft.service is None
    assert flow.current_step.id == "service"


def test_submit_failure_keeps_draft():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    draft_before = flow.draft
    api.fail_with = NetworkError("Service unavailable", code=503)

    with pytest.raises(NetworkError):
        asyncio.run(flow.submit(SIGNED_IN))

    assert flow.draft == draft_before
    assert not flow.is_submitting

    api.fail_with = None
    assert asyncio.run(flow.submit(SIGNED_IN)).action == "booked"


class _SlowBookingApi(MockBookingApi):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.release = asyncio.Event()

    async def create_booking(self, request):
        await self.release.wait()
        return await super().create_booking(request)


def test_second_submission_rejected_while_in_flight():
    async def scenario():
        api = _SlowBookingApi(services=[SERVICE], start_day=DAY)
        slot = (await api.get_service_time_slots(SERVICE.id))[0]
        flow = BookingFlow(api)
        _walk_to_payment(flow, slot)

        first = asyncio.create_task(flow.submit(SIGNED_IN))
        await asyncio.sleep(0)
        assert flow.is_submitting

        with pytest.raises(SubmissionInProgressError):
            await flow.submit(SIGNED_IN)
        with pytest.raises(SubmissionInProgressError):
            flow.advance()

        api.release.set()
        result = await first
        return api, result

    api, result = asyncio.run(scenario())
    assert result.action == "booked"
    assert len(api.requests) == 1


def test_available_slots_for_date():
    slots = [
        TimeSlot(id="a", start_time=datetime(2026, 3, 10, 9), end_time=datetime(2026, 3, 10, 10)),
        TimeSlot(id="b", start_time=datetime(2026, 3, 11, 9), end_time=datetime(2026, 3, 11, 10)),
    ]

    assert [s.id for s in available_slots_for_date(slots, date(2026, 3, 11))] == ["b"]


def test_submit_rechecks_cleared_time_slot():
    """A completed datetime step whose slot was cleared afterwards blocks submission."""
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    flow.update(DateTimeSelected(date=slot.start_time.date()))

    with pytest.raises(ValidationError) as exc:
        asyncio.run(flow.submit(SIGNED_IN))

    assert exc.value.step == "datetime"
    assert exc.value.field == "time_slot"
    assert api.requests == []


def test_submit_rechecks_blanked_customer_info():
    api = _api()
    slot = _first_slot(api)
    flow = BookingFlow(api)
    _walk_to_payment(flow, slot)
    flow.update(CustomerInfoChanged(name="", email="", phone=""))

    with pytest.raises(ValidationError) as exc:
        asyncio.run(flow.submit(SIGNED_IN))
    with pytest.raises(ValidationError):
        asyncio.run(flow.submit(SessionAuth()))

    assert exc.value.step == "info"
    assert api.requests == []


def test_retreat_rejected_while_submitting():
    async def scenario():
        api = _SlowBookingApi(services=[SERVICE], start_day=DAY)
        slot = (await api.get_service_time_slots(SERVICE.id))[0]
        flow = BookingFlow(api)
        _walk_to_payment(flow, slot)

        pending = asyncio.create_task(flow.submit(SIGNED_IN))
        await asyncio.sleep(0)
        with pytest.raises(SubmissionInProgressError):
            flow.retreat("service")
        current = flow.current_step.id

        api.release.set()
        await pending
        return current

    assert asyncio.run(scenario()) == "payment"
