"""Server profiles (instances): validation, SQLite persistence and activation."""

import os
import re
import sqlite3
import uuid as uuid_mod
from contextlib import closing
from typing import Any, List, Optional

from pydantic import BaseModel

from . import config
from .logging_config import get_logger

log = get_logger("profiles")

_DOMAIN_RE = re.compile(
    r"^(?=.{1,253}$)(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}$",
    re.IGNORECASE,
)

HTTPS_REQUIRED_MESSAGE = (
    "For security reasons TRMM Manager only supports HTTPS instances. "
    "Update the URL to use https:// before saving."
)


class ProfileError(Exception):
    """A profile form failed validation."""

    def __init__(self, message: str, title: str = "", field: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.title = title
        self.field = field


def strip_scheme(value: str) -> str:
    text = str(value or "").strip()
    lower = text.lower()
    for prefix in ("https://", "http://"):
        if lower.startswith(prefix):
            return text[len(prefix):]
    return text


def is_demo_entry(value: str) -> bool:
    return strip_scheme(value).lower() == config.DEMO_BASE_URL


def is_valid_domain_name(value: str) -> bool:
    host = strip_scheme(value)
    return bool(host) and _DOMAIN_RE.match(host) is not None


def normalize_base_url(raw: str) -> str:
    """Force https, drop the trailing slash, map demo entries to the sentinel."""
    text = str(raw or "").strip()
    if is_demo_entry(text):
        return config.DEMO_BASE_URL
    lower = text.lower()
    if lower.startswith("http://"):
        text = "https://" + text[len("http://"):]
    elif not lower.startswith("https://"):
        text = "https://" + text
    return text.rstrip("/")


def _host_of(url: str) -> str:
    rest = strip_scheme(url)
    for sep in ("/", "?", "#"):
        rest = rest.split(sep, 1)[0]
    if "@" in rest:
        rest = rest.rsplit("@", 1)[1]
    return rest.split(":", 1)[0]


class ServerProfile(BaseModel):
    uuid: str
    display_name: str = "Default"
    base_url: str
    secret_key_identifier: str = ""

    @classmethod
    def create(cls, display_name: str, base_url: str) -> "ServerProfile":
        generated = str(uuid_mod.uuid4()).upper()
        return cls(
            uuid=generated,
            display_name=display_name,
            base_url=base_url,
            secret_key_identifier=f"apiKey_{generated}",
        )

    @classmethod
    def from_row(cls, row: Any) -> "ServerProfile":
        if isinstance(row, sqlite3.Row):
            data = dict(row)
        elif isinstance(row, dict):
            data = row
        else:
            raise TypeError(f"Expected sqlite3.Row or dict, got {type(row)}")
        return cls(**data)

    @property
    def is_demo(self) -> bool:
        return self.base_url == config.DEMO_BASE_URL

    def ensure_identifier(self) -> "ServerProfile":
        if self.secret_key_identifier:
            return self
        return self.model_copy(update={"secret_key_identifier": f"apiKey_{self.uuid}"})


class ProfileStore:
    """SQLite-backed CRUD over server profiles."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or config.PROFILE_DB_FILE

    def _connect(self) -> sqlite3.Connection:
        if self.db_path != ":memory:":
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS profiles (
                uuid TEXT PRIMARY KEY,
                display_name TEXT NOT NULL,
                base_url TEXT NOT NULL,
                secret_key_identifier TEXT NOT NULL,
                position INTEGER NOT NULL DEFAULT 0
            )
            """
        )
        return conn

    def list(self) -> List[ServerProfile]:
        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT uuid, display_name, base_url, secret_key_identifier FROM profiles ORDER BY position, rowid"
            ).fetchall()
        return [ServerProfile.from_row(r).ensure_identifier() for r in rows]

    def get(self, profile_uuid: str) -> Optional[ServerProfile]:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT uuid, display_name, base_url, secret_key_identifier FROM profiles WHERE uuid = ?",
                (profile_uuid,),
            ).fetchone()
        return ServerProfile.from_row(row).ensure_identifier() if row else None

    def save(self, profile: ServerProfile) -> None:
        with closing(self._connect()) as conn, conn:
            position = conn.execute("SELECT COALESCE(MAX(position), -1) + 1 FROM profiles").fetchone()[0]
            conn.execute(
                """
                INSERT INTO profiles (uuid, display_name, base_url, secret_key_identifier, position)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(uuid) DO UPDATE SET
                    display_name = excluded.display_name,
                    base_url = excluded.base_url,
                    secret_key_identifier = excluded.secret_key_identifier
                """,
                (profile.uuid, profile.display_name, profile.base_url, profile.secret_key_identifier, position),
            )

    def delete(self, profile_uuid: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM profiles WHERE uuid = ?", (profile_uuid,))


class ProfileManager:
    """Add, edit, delete and activate profiles; keeps API keys in step."""

    def __init__(self, store: ProfileStore, secrets, preferences) -> None:
        self.store = store
        self.secrets = secrets
        self.preferences = preferences

    def profiles(self) -> List[ServerProfile]:
        return self.store.list()

    def active(self) -> Optional[ServerProfile]:
        wanted = str(self.preferences.get("active_profile_uuid") or "")
        profiles = self.store.list()
        for profile in profiles:
            if profile.uuid == wanted:
                return profile
        return profiles[0] if profiles else None

    def set_active(self, profile: Optional[ServerProfile]) -> None:
        self.preferences.set("active_profile_uuid", profile.uuid if profile else "")
        if profile:
            log.info("Active instance set to %s", profile.display_name)

    @staticmethod
    def _validate(name: str, url: str, key: str, *, reject_http: bool) -> tuple[str, str, str]:
        name = str(name or "").strip()
        url = str(url or "").strip()
        key = str(key or "").strip()
        if not name:
            raise ProfileError("Provide a display name.", field="name")
        if not url:
            raise ProfileError("Provide the base URL.", field="url")
        if reject_http and "http://" in url.lower():
            raise ProfileError(HTTPS_REQUIRED_MESSAGE, title="Secure Connection Required")
        if not key:
            raise ProfileError("Provide the API key.", field="key")
        normalized = normalize_base_url(url)
        if not is_demo_entry(url) and not is_valid_domain_name(_host_of(normalized)):
            raise ProfileError("Enter a valid domain such as api.example.com.", title="Invalid Domain", field="url")
        return name, normalized, key

    def add(self, name: str, url: str, api_key: str) -> ServerProfile:
        name, normalized, key = self._validate(name, url, api_key, reject_http=True)
        profile = ServerProfile.create(name, normalized)
        self.store.save(profile)
        self.secrets.set(key, profile.secret_key_identifier)
        self.set_active(profile)
        log.info("Created new instance %s", name)
        return profile

    def edit(self, profile: ServerProfile, name: str, url: str, api_key: str) -> ServerProfile:
        name, normalized, key = self._validate(name, url, api_key, reject_http=False)
        updated = profile.ensure_identifier().model_copy(update={"display_name": name, "base_url": normalized})
        self.store.save(updated)
        self.secrets.set(key, updated.secret_key_identifier)
        log.info("Updated instance %s", name)
        return updated

    def delete(self, profile: ServerProfile) -> Optional[ServerProfile]:
        """Remove a profile and its key; returns the profile that is active afterwards."""
        resolved = profile.ensure_identifier()
        was_active = self.active()
        self.secrets.delete(resolved.secret_key_identifier)
        self.store.delete(resolved.uuid)
        log.info("Deleted settings instance %s", resolved.display_name)

        remaining = self.store.list()
        if not remaining:
            self.set_active(None)
            return None
        if was_active is not None and was_active.uuid == resolved.uuid:
            self.set_active(remaining[0])
            return remaining[0]
        return self.active()

    def api_key_for(self, profile: ServerProfile) -> str:
        return str(self.secrets.get(profile.ensure_identifier().secret_key_identifier) or "")
