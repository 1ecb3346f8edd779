"""Configuration helpers for the CouchDB client."""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "http://127.0.0.1:5984"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_PROFILE = "local"


@dataclass(slots=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        base_url = os.getenv("COUCHDB_URL", DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL
        timeout_ms = _parse_positive_int(os.getenv("COUCHDB_TIMEOUT_MS"))
        timeout_seconds = (timeout_ms / 1000.0) if timeout_ms else DEFAULT_TIMEOUT_SECONDS

        headers = _string_headers(_parse_json_object(os.getenv("COUCHDB_HEADERS_JSON")))
        authorization = basic_authorization(os.getenv("COUCHDB_USER"), os.getenv("COUCHDB_PASSWORD"))
        if authorization:
            headers["Authorization"] = authorization

        return cls(base_url=base_url, timeout_seconds=timeout_seconds, headers=headers)

    @classmethod
    def from_profile(
        cls,
        profile: str | None = None,
        *,
        config_path: str | Path | None = None,
    ) -> "ClientConfig":
        payload = load_profile_config(config_path=config_path)
        profiles = payload.get("profiles")
        current_profile = payload.get("currentProfile")

        selected_name = _trim_or_default(profile or current_profile, DEFAULT_PROFILE)
        profile_entry: dict[str, Any] = {}
        if isinstance(profiles, dict) and isinstance(profiles.get(selected_name), dict):
            profile_entry = dict(profiles[selected_name])
        elif isinstance(profiles, dict) and isinstance(profiles.get(DEFAULT_PROFILE), dict):
            profile_entry = dict(profiles[DEFAULT_PROFILE])

        base_url = _trim_or_default(profile_entry.get("baseUrl"), DEFAULT_BASE_URL)
        timeout_ms = _parse_positive_int(profile_entry.get("timeoutMs"))
        timeout_seconds = (timeout_ms / 1000.0) if timeout_ms else DEFAULT_TIMEOUT_SECONDS

        headers = _string_headers(profile_entry.get("headers"))
        auth = profile_entry.get("auth")
        if isinstance(auth, dict):
            authorization = basic_authorization(auth.get("username"), auth.get("password"))
            if authorization:
                headers["Authorization"] = authorization

        return cls(base_url=base_url, timeout_seconds=timeout_seconds, headers=headers)


def basic_authorization(username: Any, password: Any) -> str | None:
    """``Authorization`` header value for CouchDB basic auth, or ``None``."""
    user = _trim_or_none(username)
    if user is None:
        return None
    secret = password if isinstance(password, str) else ""
    token = base64.b64encode(f"{user}:{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def default_config_path() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    root = Path(xdg) if xdg else Path.home() / ".config"
    return root / "couch-client" / "config.json"


def load_profile_config(*, config_path: str | Path | None = None) -> dict[str, Any]:
    path = Path(config_path) if config_path else default_config_path()
    if not path.exists():
        return {"currentProfile": DEFAULT_PROFILE, "profiles": {}}

    try:
        with path.open("r", encoding="utf-8") as handle:
            parsed = json.load(handle)
    except (OSError, json.JSONDecodeError):
        return {"currentProfile": DEFAULT_PROFILE, "profiles": {}}

    if not isinstance(parsed, dict):
        return {"currentProfile": DEFAULT_PROFILE, "profiles": {}}
    return parsed


def _parse_json_object(value: str | None) -> dict[str, Any]:
    if not value or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _string_headers(raw: Any) -> dict[str, str]:
    headers: dict[str, str] = {}
    if isinstance(raw, dict):
        for key, value in raw.items():
            if isinstance(key, str) and isinstance(value, str) and key.strip() and value.strip():
                headers[key] = value
    return headers


def _trim_or_none(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed if trimmed else None


def _trim_or_default(value: Any, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    trimmed = value.strip()
    return trimmed if trimmed else fallback


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None
