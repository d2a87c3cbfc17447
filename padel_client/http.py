from __future__ import annotations

from typing import Any

import requests

from padel_client.config import AppSettings

AUTHORIZATION_FAILURE_CODES = (401, 403)


class ApiHttpError(RuntimeError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def is_authorization_failure(self) -> bool:
        return self.status_code in AUTHORIZATION_FAILURE_CODES


class HttpClient:
    """Thin JSON wrapper over a shared ``requests.Session``.

    Strapi reports failures as ``{"error": {"message": ...}}`` and occasionally
    does so with a 2xx status, so every response body is checked for that
    envelope before it is handed back.
    """

    def __init__(self, settings: AppSettings, session: requests.Session | None = None):
        self._settings = settings
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

    def get_json(
        self,
        token: str | None,
        path: str,
        params: dict[str, Any] | list[tuple[str, str]] | None = None,
    ) -> dict[str, Any]:
        response = self._session.get(
            self._url(path),
            headers=self._auth_headers(token),
            params=params,
            timeout=self._settings.timeout_seconds,
        )
        return self._parse_response(response)

    def post_json(self, token: str | None, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = self._session.post(
            self._url(path),
            headers=self._auth_headers(token),
            json=payload,
            timeout=self._settings.timeout_seconds,
        )
        return self._parse_response(response)

    def put_json(self, token: str | None, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        response = self._session.put(
            self._url(path),
            headers=self._auth_headers(token),
            json=payload,
            timeout=self._settings.timeout_seconds,
        )
        return self._parse_response(response)

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url}{path}"

    @staticmethod
    def _auth_headers(token: str | None) -> dict[str, str]:
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _parse_response(response: requests.Response) -> dict[str, Any]:
        if not response.ok:
            message = HttpClient._error_message(response)
            raise ApiHttpError(
                status_code=response.status_code,
                message=f"HTTP {response.status_code}: {message}",
            )

        if not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as error:
            raise ApiHttpError(
                status_code=response.status_code,
                message=f"Malformed JSON in HTTP {response.status_code} response: {response.text[:200]}",
            ) from error

        if isinstance(payload, dict) and payload.get("error"):
            raise ApiHttpError(
                status_code=response.status_code,
                message=_envelope_message(payload) or "Server reported an error",
            )

        if isinstance(payload, list):
            return {"data": payload}
        if not isinstance(payload, dict):
            raise ApiHttpError(
                status_code=response.status_code,
                message=f"Unexpected JSON payload type: {type(payload).__name__}",
            )
        return payload

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:500]
        if isinstance(payload, dict):
            return _envelope_message(payload) or response.text[:500]
        return response.text[:500]


def _envelope_message(payload: dict[str, Any]) -> str:
    error = payload.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "").strip()
    if isinstance(error, str):
        return error.strip()

    message = payload.get("message")
    if isinstance(message, str):
        return message.strip()
    return ""
