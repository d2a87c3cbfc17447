from __future__ import annotations

from typing import Any

from padel_client.config import AppSettings
from padel_client.http import HttpClient
from padel_client.models import Match

_TEAM_FIELDS = "id,documentId,name,isActive,currentRank"


def _match_detail_params(document_id: str) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = [("filters[documentId][$eq]", document_id)]
    for team in ("team_1", "team_2"):
        params.extend(
            [
                (f"populate[{team}][populate][users_permissions_users][fields][0]", "id"),
                (f"populate[{team}][populate][users_permissions_users][fields][1]", "username"),
                (f"populate[{team}][fields]", _TEAM_FIELDS),
            ]
        )
    params.extend(
        [
            ("populate[category][fields][0]", "name"),
            ("populate[winner][fields][0]", "name"),
            ("populate[loser][fields][0]", "name"),
            ("populate[sets]", "*"),
        ]
    )
    return params


class MatchesApi:
    matches_path = "/matches"

    def __init__(self, settings: AppSettings, http_client: HttpClient):
        self._settings = settings
        self._http_client = http_client

    def list_matches(self, token: str) -> list[Match]:
        response = self._http_client.get_json(token, self.matches_path, params={"populate": "*"})
        return [Match.from_api(item) for item in response.get("data") or [] if isinstance(item, dict)]

    def get_match(self, token: str, document_id: str) -> Match | None:
        document_id = document_id.strip()
        if not document_id:
            raise ValueError("Match document id is required")

        response = self._http_client.get_json(
            token,
            self.matches_path,
            params=_match_detail_params(document_id),
        )
        items = [item for item in response.get("data") or [] if isinstance(item, dict)]
        if not items:
            return None
        return Match.from_api(items[0])

    def update_match(self, token: str, match_id: int | str, data: dict[str, Any]) -> dict[str, Any]:
        return self._http_client.put_json(token, f"{self.matches_path}/{match_id}", {"data": data})
