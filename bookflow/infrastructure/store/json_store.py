from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from bookflow.application.ports.favorites_store import FavoritesStorePort


class JsonFavoritesStore(FavoritesStorePort):
    """One JSON file per owner under data_dir, written atomically."""

    def __init__(self, data_dir: str = "./data/favorites", defaults: Iterable[str] = ()) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._defaults = sorted(set(defaults))
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, owner_id: str) -> threading.Lock:
        with self._lock_lock:
            if owner_id not in self._locks:
                self._locks[owner_id] = threading.Lock()
            return self._locks[owner_id]

    def _get_file_path(self, owner_id: str) -> Path:
        safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", owner_id)
        # sanitized names alone can collide
        digest = hashlib.sha1(owner_id.encode("utf-8")).hexdigest()[:8]
        return self._data_dir / f"{safe_id}-{digest}.json"

    def _load(self, owner_id: str) -> dict[str, Any]:
        file_path = self._get_file_path(owner_id)
        if not file_path.exists():
            return {"owner_id": owner_id, "favorites": list(self._defaults), "version": 1}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data.get("favorites"), list):
                data["favorites"] = list(self._defaults)
            return data
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning("Favorites file unreadable, using defaults", extra={"owner_id": owner_id, "error": str(e)})
            return {"owner_id": owner_id, "favorites": list(self._defaults), "version": 1}

    def _save(self, owner_id: str, data: dict[str, Any]) -> None:
        file_path = self._get_file_path(owner_id)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def get_favorites(self, owner_id: str) -> set[str]:
        with self._get_lock(owner_id):
            return set(self._load(owner_id)["favorites"])

    def toggle(self, owner_id: str, provider_id: str) -> bool:
        with self._get_lock(owner_id):
            data = self._load(owner_id)
            favorites = set(data["favorites"])
            if provider_id in favorites:
                favorites.discard(provider_id)
                is_favorite = False
            else:
                favorites.add(provider_id)
                is_favorite = True
            data["favorites"] = sorted(favorites)
            self._save(owner_id, data)
            return is_favorite
