from __future__ import annotations

import threading
from typing import Any

import pytest
import requests

from padel_client.config import AppSettings
from padel_client.session import SessionManager
from padel_client.storage import StorageError


class FakeStore:
    def __init__(self, items: dict[str, str] | None = None):
        self.items = dict(items or {})
        self.fail_reads = False
        self.fail_writes = False
        self.fail_removes = False

    def get_item(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError(f"read failed for {key}")
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"write failed for {key}")
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_removes:
            raise StorageError(f"remove failed for {key}")
        self.items.pop(key, None)


class FakeProfileApi:
    """Returns queued results in order; exceptions in the queue are raised."""

    def __init__(self, *results: Any):
        self.results = list(results)
        self.calls: list[str] = []
        self.gate: threading.Event | None = None
        self.started = threading.Event()

    def fetch_me(self, token: str) -> dict[str, Any]:
        self.calls.append(token)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if not self.results:
            raise requests.ConnectionError("no response queued")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def full_profile(user_id: int = 5, username: str = "ana", email: str = "a@a.com", **extra: Any) -> dict[str, Any]:
    payload = {
        "id": user_id,
        "username": username,
        "email": email,
        "category": {"id": 2, "name": "Cuarta"},
        "player_stat": {"totalMatches": 4, "wins": 3, "losses": 1, "currentRank": 7},
        "teams": [{"id": 10, "name": "Los Pumas", "currentRank": 3}],
        "role": {"id": 1, "name": "Authenticated"},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        api_url="http://backend.test",
        api_prefix="/api",
        timeout_seconds=5,
        storage_dir=str(tmp_path / "storage"),
        secure_storage=False,
        log_level="DEBUG",
    )


@pytest.fixture
def secure_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def data_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def profile_api() -> FakeProfileApi:
    return FakeProfileApi()


@pytest.fixture
def session(profile_api, secure_store, data_store) -> SessionManager:
    return SessionManager(profile_api=profile_api, secure_store=secure_store, data_store=data_store)


@pytest.fixture
def make_profile():
    return full_profile
