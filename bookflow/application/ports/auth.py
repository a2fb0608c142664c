from __future__ import annotations

from abc import ABC, abstractmethod

from bookflow.domain.entities.user import User


class AuthPort(ABC):
    @property
    @abstractmethod
    def current_user(self) -> User | None:
        """Signed-in user, or None."""
        raise NotImplementedError

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None
