from __future__ import annotations

import logging

from bookflow.application.ports.auth import AuthPort
from bookflow.domain.entities.user import User

DEV_USER = User(
    id="dev-admin",
    name="Dev Admin",
    email="admin@dev.local",
    business_id="dev-business",
)


class SessionAuth(AuthPort):
    """Auth state for one request; the caller resolves the user from its token."""

    def __init__(self, user: User | None = None) -> None:
        self._user = user

    @property
    def current_user(self) -> User | None:
        return self._user


class DevBypassAuth(AuthPort):
    """Always signed in as DEV_USER. Only wired when AUTH_BYPASS_ENABLED is set."""

    def __init__(self, user: User = DEV_USER) -> None:
        self._user = user
        logging.getLogger(__name__).warning("Auth bypass active, requests run as %s", user.id)

    @property
    def current_user(self) -> User | None:
        return self._user
