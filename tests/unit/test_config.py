from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from couch_client.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, ClientConfig, basic_authorization


def _basic(user: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{user}:{password}".encode()).decode()


def test_from_profile_loads_profile_shape(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "currentProfile": "staging",
                "profiles": {
                    "staging": {
                        "baseUrl": "https://couch.staging.example:6984",
                        "timeoutMs": 45000,
                        "headers": {"x-request-source": "tests", "x-blank": " "},
                        "auth": {"username": "admin", "password": "s3cret"},
                    }
                },
            }
        ),
        encoding="utf-8",
    )

    cfg = ClientConfig.from_profile(config_path=config_path)
    assert cfg.base_url == "https://couch.staging.example:6984"
    assert cfg.timeout_seconds == 45.0
    assert cfg.headers == {"x-request-source": "tests", "Authorization": _basic("admin", "s3cret")}


def test_from_profile_falls_back_to_local(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"profiles": {"local": {"baseUrl": "http://localhost:5985"}}}),
        encoding="utf-8",
    )

    cfg = ClientConfig.from_profile("missing", config_path=config_path)
    assert cfg.base_url == "http://localhost:5985"
    assert cfg.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


@pytest.mark.parametrize("content", ["not json", "[]"])
def test_from_profile_ignores_malformed_file(tmp_path: Path, content: str) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(content, encoding="utf-8")

    cfg = ClientConfig.from_profile(config_path=config_path)
    assert cfg.base_url == DEFAULT_BASE_URL
    assert cfg.headers == {}


def test_from_profile_uses_xdg_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    config_dir = tmp_path / "couch-client"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(
        json.dumps({"currentProfile": "local", "profiles": {"local": {"baseUrl": "http://xdg:5984"}}}),
        encoding="utf-8",
    )

    assert ClientConfig.from_profile().base_url == "http://xdg:5984"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COUCHDB_URL", " http://db.internal:5984 ")
    monkeypatch.setenv("COUCHDB_TIMEOUT_MS", "2500")
    monkeypatch.setenv("COUCHDB_USER", "reader")
    monkeypatch.setenv("COUCHDB_PASSWORD", "pw")
    monkeypatch.setenv("COUCHDB_HEADERS_JSON", '{"x-tenant": "blue", "x-count": 3}')

    cfg = ClientConfig.from_env()
    assert cfg.base_url == "http://db.internal:5984"
    assert cfg.timeout_seconds == 2.5
    assert cfg.headers == {"x-tenant": "blue", "Authorization": _basic("reader", "pw")}


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("COUCHDB_URL", "COUCHDB_TIMEOUT_MS", "COUCHDB_USER", "COUCHDB_PASSWORD", "COUCHDB_HEADERS_JSON"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("COUCHDB_TIMEOUT_MS", "-5")

    cfg = ClientConfig.from_env()
    assert cfg == ClientConfig()


def test_basic_authorization_requires_username() -> None:
    assert basic_authorization(None, "pw") is None
    assert basic_authorization("  ", "pw") is None
    assert basic_authorization("admin", None) == _basic("admin", "")
