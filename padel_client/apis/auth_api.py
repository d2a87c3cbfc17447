from __future__ import annotations

from typing import Any

from padel_client.config import AppSettings
from padel_client.http import HttpClient


class AuthApi:
    login_path = "/auth/local"
    register_path = "/auth/local/register"

    def __init__(self, settings: AppSettings, http_client: HttpClient):
        self._settings = settings
        self._http_client = http_client

    def login(self, identifier: str, password: str) -> dict[str, Any]:
        return self._http_client.post_json(
            None,
            self.login_path,
            {"identifier": identifier.strip(), "password": password},
        )

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        return self._http_client.post_json(
            None,
            self.register_path,
            {"username": username.strip(), "email": email.strip(), "password": password},
        )
