import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Union

from ..logging_config import get_logger

log = get_logger("credentials")


class SecretStore(Protocol):
    def get(self, identifier: str) -> Optional[str]: ...

    def set(self, value: str, identifier: str) -> None: ...

    def delete(self, identifier: str) -> None: ...


@dataclass(frozen=True)
class Secret:
    value: str = field(repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.value.strip()


@dataclass(frozen=True)
class NotFound:
    identifier: str


class MemorySecretStore:
    """Process-local key store used by tests and demo profiles."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, identifier: str) -> Optional[str]:
        with self._lock:
            return self._values.get(identifier)

    def set(self, value: str, identifier: str) -> None:
        with self._lock:
            self._values[identifier] = str(value)

    def delete(self, identifier: str) -> None:
        with self._lock:
            self._values.pop(identifier, None)

    def delete_all(self) -> None:
        with self._lock:
            self._values.clear()


class FileSecretStore:
    """API keys in an owner-only JSON file, cached after first read."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, str]] = None

    def _load_locked(self) -> Dict[str, str]:
        if self._cache is not None:
            return self._cache
        data: Dict[str, str] = {}
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except (OSError, ValueError) as e:
                log.error("Key store read failed: %s", e)
                raw = {}
            if isinstance(raw, dict):
                data = {str(k): str(v) for k, v in raw.items() if isinstance(v, str)}
        self._cache = data
        return data

    def _save_locked(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + f".tmp-{uuid.uuid4().hex[:8]}"
        try:
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get(self, identifier: str) -> Optional[str]:
        with self._lock:
            return self._load_locked().get(identifier)

    def set(self, value: str, identifier: str) -> None:
        with self._lock:
            data = dict(self._load_locked())
            data[identifier] = str(value)
            self._save_locked(data)
            self._cache = data
        log.info("Saved API key for account '%s'", identifier)

    def delete(self, identifier: str) -> None:
        with self._lock:
            data = dict(self._load_locked())
            if data.pop(identifier, None) is None:
                log.warning("Key store delete: no item to delete for account '%s'", identifier)
                return
            self._save_locked(data)
            self._cache = data
        log.info("Deleted API key for account '%s'", identifier)

    def delete_all(self) -> None:
        with self._lock:
            self._save_locked({})
            self._cache = {}
        log.info("Cleared all stored API keys")


class CredentialResolver:
    """Look up the API key belonging to a server profile."""

    def __init__(self, store: SecretStore) -> None:
        self.store = store

    def resolve(self, profile) -> Union[Secret, NotFound]:
        identifier = str(getattr(profile, "secret_key_identifier", "") or "")
        if not identifier:
            return NotFound(identifier)
        value = self.store.get(identifier)
        if value is None:
            log.warning("No API key found for account '%s'", identifier)
            return NotFound(identifier)
        return Secret(value)


def is_missing(result: Union[Secret, NotFound]) -> bool:
    """Absent and blank keys are both treated as missing by screens."""
    return isinstance(result, NotFound) or result.is_empty
