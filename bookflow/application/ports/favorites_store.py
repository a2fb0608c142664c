from abc import ABC, abstractmethod


class FavoritesStorePort(ABC):
    @abstractmethod
    def get_favorites(self, owner_id: str) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    def toggle(self, owner_id: str, provider_id: str) -> bool:
        """Flip favorite status. Returns the new status."""
        raise NotImplementedError

    def is_favorite(self, owner_id: str, provider_id: str) -> bool:
        return provider_id in self.get_favorites(owner_id)
