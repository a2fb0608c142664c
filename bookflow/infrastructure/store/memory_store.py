from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

from bookflow.application.exceptions import NotFoundError
from bookflow.application.ports.favorites_store import FavoritesStorePort
from bookflow.application.ports.session_store import BookingSessionStorePort

if TYPE_CHECKING:
    from bookflow.application.use_cases.booking_flow import BookingFlow


class MemoryFavoritesStore(FavoritesStorePort):
    def __init__(self, defaults: Iterable[str] = ()) -> None:
        self._defaults = frozenset(defaults)
        self._favorites: dict[str, set[str]] = {}

    def get_favorites(self, owner_id: str) -> set[str]:
        return set(self._favorites.get(owner_id, self._defaults))

    def toggle(self, owner_id: str, provider_id: str) -> bool:
        favorites = self._favorites.setdefault(owner_id, set(self._defaults))
        if provider_id in favorites:
            favorites.discard(provider_id)
            return False
        favorites.add(provider_id)
        return True


class MemoryBookingSessionStore(BookingSessionStorePort):
    def __init__(self, max_sessions: int = 1000) -> None:
        self._sessions: dict[str, "BookingFlow"] = {}
        self._max_sessions = max_sessions

    def create(self, flow: "BookingFlow") -> str:
        if len(self._sessions) >= self._max_sessions:
            # oldest first; dicts keep insertion order
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = flow
        return session_id

    def get(self, session_id: str) -> "BookingFlow":
        flow = self._sessions.get(session_id)
        if flow is None:
            raise NotFoundError(f"Booking session '{session_id}' not found")
        return flow

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
