"""Durable cache for non-sensitive session data.

Holds the last known user profile (used to restore a session after a
successful cookie refresh) and the remember-me identity. Tokens are never
written here.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .types import SavedIdentity, UserProfile

_USER_KEY = "user"
_SAVED_KEY = "savedCredentials"
_REMEMBER_KEY = "rememberMe"


class ProfileCache:
    """Key/value cache backed by a JSON file, or by memory when no path is set.

    Every mutation rewrites the file atomically (temp file, fsync, rename,
    mode 0600). Unreadable or corrupt files are treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None):
        if path is not None and not isinstance(path, str | os.PathLike):
            raise TypeError("path must be str, os.PathLike or None")
        self.path = str(path) if path is not None else None
        self._lock = threading.Lock()
        self._data: dict[str, Any] = self._load()

    # ----------------------------- profile ----------------------------- #
    def get_user(self) -> UserProfile | None:
        with self._lock:
            raw = self._data.get(_USER_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return UserProfile.model_validate(raw)
        except ValidationError as e:
            logging.warning(f"⚠️ Cached profile unreadable, ignoring: {type(e).__name__}")
            return None

    def set_user(self, user: UserProfile) -> None:
        self._update({_USER_KEY: user.to_dict()})

    def clear_user(self) -> None:
        self._update({}, remove=(_USER_KEY,))

    # ---------------------------- remember me --------------------------- #
    def get_saved_identity(self) -> SavedIdentity | None:
        with self._lock:
            remember = bool(self._data.get(_REMEMBER_KEY))
            raw = self._data.get(_SAVED_KEY)
        if not remember or not isinstance(raw, dict):
            return None
        try:
            return SavedIdentity.model_validate(raw)
        except ValidationError:
            return None

    def set_saved_identity(self, identity: SavedIdentity) -> None:
        self._update(
            {_SAVED_KEY: identity.model_dump(by_alias=True), _REMEMBER_KEY: True}
        )

    def clear_saved_identity(self) -> None:
        self._update({}, remove=(_SAVED_KEY, _REMEMBER_KEY))

    # ------------------------------ storage ------------------------------ #
    def _update(self, values: dict[str, Any], remove: tuple[str, ...] = ()) -> None:
        with self._lock:
            before = dict(self._data)
            self._data.update(values)
            for key in remove:
                self._data.pop(key, None)
            if self._data == before:
                return
            snapshot = dict(self._data)
        self._persist(snapshot)

    def _load(self) -> dict[str, Any]:
        if not self.path:
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logging.warning(f"⚠️ Profile cache load failed path={self.path} error={type(e).__name__}")
            return {}
        return data if isinstance(data, dict) else {}

    def _persist(self, data: dict[str, Any]) -> None:
        if not self.path:
            return
        cache_path = Path(self.path)
        temp_path: str | None = None
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=cache_path.parent,
                prefix=f".{cache_path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                temp_path = tmp.name
                json.dump(data, tmp, indent=2, default=str)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, cache_path)
            logging.debug(f"💾 Profile cache saved keys={sorted(data)}")
        except (OSError, ValueError, TypeError) as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
            logging.error(f"💥 Profile cache save failed: {type(e).__name__}")
            raise
