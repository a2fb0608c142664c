from __future__ import annotations

from abc import ABC, abstractmethod

from bookflow.domain.entities.provider import ServiceProvider


class ProviderSourcePort(ABC):
    @abstractmethod
    async def list_providers(self) -> list[ServiceProvider]:
        """Get the raw provider collection the search pipeline runs over."""
        raise NotImplementedError

    async def get_provider(self, provider_id: str) -> ServiceProvider | None:
        for provider in await self.list_providers():
            if provider.id == provider_id:
                return provider
        return None
