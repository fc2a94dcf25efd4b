"""Shared fixtures: an isolated home directory and an in-memory secret store client."""
import json
import threading
from pathlib import Path

import pytest

from goldfinch.secrets.domains import preferences


class FakeSecretClient:
    """Stands in for GCPSecretClient; payloads given as dicts are JSON-encoded."""

    def __init__(self, payloads=None, errors=None, identifiers=None, list_error=None, delays=None):
        self.project_id = "test-project"
        self.payloads = payloads or {}
        self.errors = errors or {}
        self.identifiers = list(self.payloads) if identifiers is None else identifiers
        self.list_error = list_error
        self.delays = delays or {}
        self.calls = []
        self.timeouts = []
        self._lock = threading.Lock()

    def get_payload(self, identifier, timeout=None):
        with self._lock:
            self.calls.append(identifier)
            self.timeouts.append(timeout)
        hook = self.delays.get(identifier)
        if hook is not None:
            hook()
        if identifier in self.errors:
            raise self.errors[identifier]
        payload = self.payloads[identifier]
        if isinstance(payload, (dict, list, int, float)) and not isinstance(payload, bool):
            return json.dumps(payload)
        return payload

    def list_identifiers(self):
        for identifier in self.identifiers:
            yield identifier
        if self.list_error is not None:
            raise self.list_error


@pytest.fixture
def fake_client():
    """Factory for FakeSecretClient instances."""
    return FakeSecretClient


@pytest.fixture
def sample_payloads():
    return {
        "my-app-config": {"api_key": "abc123", "db_password": "secret123"},
        "my-app-urls": {
            "prod_db_url": "https://prod.example.com",
            "staging_db_url": "https://staging.example.com",
        },
    }


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "goldfinch"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home
