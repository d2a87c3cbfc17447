from __future__ import annotations

import json

import pytest
import requests

from padel_client.apis import AuthApi, MatchesApi, ProfileApi
from padel_client.http import ApiHttpError, HttpClient


def make_response(status_code: int, body=None, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if text is not None:
        response._content = text.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    response.encoding = "utf-8"
    return response


class FakeSession:
    def __init__(self, *responses: requests.Response):
        self.headers: dict[str, str] = {}
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict]] = []

    def _respond(self, method: str, url: str, **kwargs) -> requests.Response:
        self.calls.append((method, url, kwargs))
        return self.responses.pop(0)

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)

    def put(self, url, **kwargs):
        return self._respond("PUT", url, **kwargs)


def test_get_sends_bearer_token_and_timeout(settings):
    session = FakeSession(make_response(200, {"id": 1}))
    client = HttpClient(settings, session=session)

    assert client.get_json("abc", "/users/me") == {"id": 1}

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://backend.test/api/users/me")
    assert kwargs["headers"] == {"Authorization": "Bearer abc"}
    assert kwargs["timeout"] == 5
    assert session.headers["Accept"] == "application/json"


def test_post_without_token_sends_no_authorization(settings):
    session = FakeSession(make_response(200, {"jwt": "t", "user": {"id": 1}}))
    client = HttpClient(settings, session=session)

    client.post_json(None, "/auth/local", {"identifier": "a", "password": "b"})

    assert session.calls[0][2]["headers"] == {}
    assert session.calls[0][2]["json"] == {"identifier": "a", "password": "b"}


@pytest.mark.parametrize("status_code", [401, 403])
def test_authorization_failures_are_flagged(settings, status_code):
    client = HttpClient(settings, session=FakeSession(make_response(status_code, {"error": {"message": "Forbidden"}})))

    with pytest.raises(ApiHttpError) as excinfo:
        client.get_json("abc", "/users/me")

    assert excinfo.value.status_code == status_code
    assert excinfo.value.is_authorization_failure
    assert "Forbidden" in str(excinfo.value)


def test_server_error_uses_envelope_message(settings):
    client = HttpClient(settings, session=FakeSession(make_response(500, {"error": {"message": "down"}})))

    with pytest.raises(ApiHttpError) as excinfo:
        client.get_json("abc", "/users/me")

    assert excinfo.value.status_code == 500
    assert not excinfo.value.is_authorization_failure
    assert str(excinfo.value) == "HTTP 500: down"


def test_error_envelope_inside_success_response_raises(settings):
    body = {"data": None, "error": {"status": 400, "message": "Invalid identifier or password"}}
    client = HttpClient(settings, session=FakeSession(make_response(200, body)))

    with pytest.raises(ApiHttpError) as excinfo:
        client.post_json(None, "/auth/local", {})

    assert excinfo.value.status_code == 200
    assert excinfo.value.message == "Invalid identifier or password"


def test_malformed_json_on_success_raises(settings):
    client = HttpClient(settings, session=FakeSession(make_response(200, text="<html>tunnel page</html>")))

    with pytest.raises(ApiHttpError) as excinfo:
        client.get_json("abc", "/users/me")

    assert excinfo.value.status_code == 200
    assert not excinfo.value.is_authorization_failure


def test_empty_body_is_empty_dict(settings):
    client = HttpClient(settings, session=FakeSession(make_response(204)))

    assert client.put_json("abc", "/matches/3", {"data": {}}) == {}


def test_profile_api_requests_populated_relations(settings):
    session = FakeSession(make_response(200, {"id": 1}))
    api = ProfileApi(settings, HttpClient(settings, session=session))

    api.fetch_me("abc")

    params = dict(session.calls[0][2]["params"])
    assert params["populate[player_stat]"] == "*"
    assert params["populate[teams][populate][team_stats]"] == "*"
    assert params["populate[membership_plan]"] == "*"


def test_auth_api_login_strips_identifier(settings):
    session = FakeSession(make_response(200, {"jwt": "t", "user": {"id": 1}}))
    api = AuthApi(settings, HttpClient(settings, session=session))

    assert api.login("  ana@a.com ", "secret")["jwt"] == "t"
    assert session.calls[0][1] == "http://backend.test/api/auth/local"
    assert session.calls[0][2]["json"] == {"identifier": "ana@a.com", "password": "secret"}


def test_matches_api_get_match_filters_by_document_id(settings):
    body = {
        "data": [
            {
                "id": 3,
                "documentId": "doc-3",
                "estado": "Pending",
                "team_1": {"id": 10, "name": "Los Pumas", "users_permissions_users": [{"id": 5}]},
                "team_2": {"id": 11, "name": "Rivales", "users_permissions_users": [{"id": 8}]},
            }
        ],
        "meta": {},
    }
    session = FakeSession(make_response(200, body))
    api = MatchesApi(settings, HttpClient(settings, session=session))

    match = api.get_match("abc", "doc-3")

    params = session.calls[0][2]["params"]
    assert ("filters[documentId][$eq]", "doc-3") in params
    assert match.id == 3
    assert match.team_number_for(5) == 1


def test_matches_api_get_match_returns_none_when_missing(settings):
    api = MatchesApi(settings, HttpClient(settings, session=FakeSession(make_response(200, {"data": []}))))

    assert api.get_match("abc", "doc-x") is None


def test_matches_api_update_wraps_data(settings):
    session = FakeSession(make_response(200, {"data": {"id": 3}}))
    api = MatchesApi(settings, HttpClient(settings, session=session))

    api.update_match("abc", "doc-3", {"complex": "Club Norte"})

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "http://backend.test/api/matches/doc-3")
    assert kwargs["json"] == {"data": {"complex": "Club Norte"}}
