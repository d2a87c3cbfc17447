from __future__ import annotations

from typing import Any

from padel_client.config import AppSettings
from padel_client.http import HttpClient

ME_POPULATE_PARAMS: list[tuple[str, str]] = [
    ("populate[profilePicture]", "*"),
    ("populate[category]", "*"),
    ("populate[player_stat]", "*"),
    ("populate[teams][populate][team_stats]", "*"),
    ("populate[teams][populate][category]", "*"),
    ("populate[teams][populate][users_permissions_users][fields][0]", "id"),
    ("populate[role]", "*"),
    ("populate[membership_plan]", "*"),
]


class ProfileApi:
    me_path = "/users/me"

    def __init__(self, settings: AppSettings, http_client: HttpClient):
        self._settings = settings
        self._http_client = http_client

    def fetch_me(self, token: str) -> dict[str, Any]:
        return self._http_client.get_json(token, self.me_path, params=ME_POPULATE_PARAMS)
