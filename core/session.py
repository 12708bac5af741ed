# core/session.py

"""
Dashboard identity store.

A Session is bound to one session key (the caller's bearer token) and a
SessionStorage backend. Storage is injected, never global to the session,
so tests can hand in their own.

Records expire after SESSION_TTL_SECONDS; an expired record reads as
"no identity" and is dropped.
"""

import hashlib
import json
import os
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Optional

from core.config import settings
from core.logging_config import logger
from models.identity import Identity


def session_key_for(token: str) -> str:
    """Bearer tokens are never stored as-is."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _is_expired(record: dict, now: datetime) -> bool:
    try:
        return now >= datetime.fromisoformat(record["expires_at"])
    except (KeyError, TypeError, ValueError):
        return True


class MemorySessionStorage:
    """
    In-memory session records, keyed by hashed session key.
    Thread-safe for concurrent access. Expired records are purged on
    every write.
    """

    def __init__(self):
        self._records: dict[str, dict] = {}
        self._lock = Lock()

    def read(self, key: str) -> Optional[dict]:
        with self._lock:
            record = self._records.get(key)
            return dict(record) if record else None

    def write(self, key: str, record: dict):
        with self._lock:
            self._records[key] = dict(record)
            self._drop_expired()
            self._persist()

    def delete(self, key: str):
        with self._lock:
            if self._records.pop(key, None) is not None:
                self._persist()

    def cleanup_expired(self) -> int:
        """Remove every expired or malformed record. Returns how many went."""
        with self._lock:
            removed = self._drop_expired()
            if removed:
                self._persist()
            return removed

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def _drop_expired(self) -> int:
        now = _now()
        expired_keys = [
            key for key, record in self._records.items()
            if _is_expired(record, now)
        ]
        for key in expired_keys:
            del self._records[key]
        return len(expired_keys)

    def _persist(self):
        """Memory storage keeps nothing on disk."""


class FileSessionStorage(MemorySessionStorage):
    """
    Session records mirrored to a JSON file so a restart does not log
    every admin out. The whole file is rewritten on each change.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._records = {k: v for k, v in data.items() if isinstance(v, dict)}

    def _persist(self):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(self._records, fh)
        os.replace(tmp_path, self.path)


class Session:
    """
    The identity store for one dashboard session.

    login() replaces the identity unconditionally, logout() clears it and is
    safe to call repeatedly, current_identity() returns the identity or None.
    """

    def __init__(self, storage: MemorySessionStorage, key: str, ttl_seconds: Optional[int] = None):
        self.storage = storage
        self.key = key
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.SESSION_TTL_SECONDS

    @classmethod
    def for_token(cls, storage: MemorySessionStorage, token: str, ttl_seconds: Optional[int] = None) -> "Session":
        return cls(storage, session_key_for(token), ttl_seconds)

    def login(self, identity: Identity):
        expires_at = _now() + timedelta(seconds=self.ttl_seconds)
        self.storage.write(self.key, {
            "identity": identity.model_dump(),
            "expires_at": expires_at.isoformat(),
        })

    # An explicit permission re-fetch swaps the identity the same way
    refresh = login

    def logout(self):
        self.storage.delete(self.key)

    def current_identity(self) -> Optional[Identity]:
        record = self.storage.read(self.key)
        if not record:
            return None

        try:
            expires_at = datetime.fromisoformat(record["expires_at"])
            identity = Identity(**record["identity"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping malformed session record")
            self.storage.delete(self.key)
            return None

        if _now() >= expires_at:
            self.storage.delete(self.key)
            return None

        return identity


# ============================================================
# Storage dependency
# ============================================================
_storage: Optional[MemorySessionStorage] = None
_storage_lock = Lock()


def get_session_storage() -> MemorySessionStorage:
    """
    FastAPI dependency returning the process-wide session storage.
    Override via app.dependency_overrides in tests.
    """
    global _storage
    with _storage_lock:
        if _storage is None:
            if settings.SESSION_STORE_PATH:
                _storage = FileSessionStorage(settings.SESSION_STORE_PATH)
            else:
                _storage = MemorySessionStorage()
        return _storage
