#!/usr/bin/env python3
"""
Interactive local booking harness (no HTTP).

Usage:
  python3 scripts/book_local.py

What it does:
- Opens one wizard session through the same BookingSessionUseCase the API uses
- Lets you pick a service, slot, add-ons and contact details step by step
- Prints the draft totals after every change and submits as a signed-in local user
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bookflow.application.exceptions import BookingFlowError
from bookflow.application.use_cases.booking_flow import COMMON_REQUESTS, BookingFlow
from bookflow.domain.entities.booking_draft import ANY_AVAILABLE_STAFF
from bookflow.domain.entities.booking_update import (
    AddOnToggled,
    CommonRequestAdded,
    CustomerInfoChanged,
    DateTimeSelected,
    PaymentChanged,
    ServiceSelected,
    StaffSelected,
)
from bookflow.domain.entities.user import User
from bookflow.infrastructure.auth.session_auth import SessionAuth
from bookflow.wiring.dependencies import get_booking_session_use_case

LOCAL_USER = User(id="local_user_1", name="Local User", email="local@example.com")


def _ask(prompt: str) -> str:
    try:
        return input(f"{prompt} ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nBye!")
        raise SystemExit(0)


def _choose(prompt: str, options: list[str]) -> int | None:
    for index, label in enumerate(options, 1):
        print(f"  {index}. {label}")
    answer = _ask(prompt)
    if not answer:
        return None
    if not answer.isdigit() or not 1 <= int(answer) <= len(options):
        print("  (invalid choice)")
        return None
    return int(answer) - 1


def _print_draft(flow: BookingFlow) -> None:
    draft = flow.draft
    print("-" * 60)
    print(f"step: {flow.current_step.title} ({flow.progress:.0f}%)")
    print(f"service: {draft.service.name if draft.service else '-'}")
    print(f"slot: {draft.time_slot.start_time:%Y-%m-%d %H:%M}" if draft.time_slot else "slot: -")
    print(f"add-ons: {', '.join(a.name for a in draft.selected_add_ons) or '-'}")
    print(f"subtotal: ${draft.subtotal:.2f}  discount: ${draft.discount:.2f}  total: ${draft.total:.2f}")
    print("-" * 60)


async def _run_step(flow: BookingFlow, uc) -> None:
    step = flow.current_step.id
    draft = flow.draft

    if step == "service":
        services = await uc.list_services()
        choice = _choose("Service #:", [f"{s.name} (${s.price:.0f}, {s.duration} min)" for s in services])
        if choice is not None:
            flow.update(ServiceSelected(service=services[choice]))
    elif step == "datetime":
        slots = (await uc.time_slots(draft.service.id))[:12]
        choice = _choose("Slot #:", [f"{s.start_time:%a %Y-%m-%d %H:%M}" for s in slots])
        if choice is not None:
            slot = slots[choice]
            flow.update(DateTimeSelected(date=slot.start_time.date(), time_slot=slot))
    elif step == "staff":
        flow.update(StaffSelected(staff_member=ANY_AVAILABLE_STAFF))
    elif step == "addons":
        add_ons = list(draft.service.add_ons)
        if add_ons:
            choice = _choose("Toggle add-on # (Enter to continue):", [f"{a.name} (+${a.price:.0f})" for a in add_ons])
            if choice is not None:
                flow.update(AddOnToggled(add_on=add_ons[choice]))
                return
    elif step == "requests":
        keys = list(COMMON_REQUESTS)
        choice = _choose("Add request # (Enter to continue):", [COMMON_REQUESTS[k] for k in keys])
        if choice is not None:
            flow.update(CommonRequestAdded(text=COMMON_REQUESTS[keys[choice]]))
            return
    elif step == "info":
        flow.update(
            CustomerInfoChanged(
                name=_ask("Name:") or None,
                email=_ask("Email:") or None,
                phone=_ask("Phone:") or None,
            )
        )
    elif step == "payment":
        flow.update(PaymentChanged(payment_method="pay-at-location", promo_code=_ask("Promo code (optional):")))
        result = await flow.submit(SessionAuth(LOCAL_USER))
        print(f"\nBooked: {result.booking.id} ({result.booking.status})")
        raise SystemExit(0)

    flow.advance()


async def main() -> None:
    uc = get_booking_session_use_case()
    session_id, flow = await uc.start()
    print("\nLocal Booking Harness")
    print(f"session_id: {session_id}")

    while True:
        _print_draft(flow)
        try:
            await _run_step(flow, uc)
        except BookingFlowError as e:
            print(f"ERROR: {e}")


if __name__ == "__main__":
    asyncio.run(main())
