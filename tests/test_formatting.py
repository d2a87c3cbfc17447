from __future__ import annotations

from padel_client.dashboard import build_dashboard
from padel_client.formatting import format_dashboard, format_match, format_profile, format_session_status
from padel_client.models import Match, SessionState, UserProfile


def test_session_status_by_phase(make_profile):
    basic = UserProfile.basic_from_login({"id": 5, "username": "ana"})
    full = UserProfile.from_api(make_profile(name="Ana Paz"), is_full=True)

    assert format_session_status(SessionState()) == "Loading session..."
    assert format_session_status(SessionState(is_loading=False)) == "Not signed in"
    assert format_session_status(SessionState(token="t", is_loading=False)) == "Signed in (profile unavailable)"
    assert format_session_status(SessionState(user=basic, token="t", is_loading=False)).endswith("(loading profile...)")
    assert format_session_status(SessionState(user=full, token="t", is_loading=False)) == "Signed in as Ana Paz"


def test_profile_text(make_profile):
    text = format_profile(UserProfile.from_api(make_profile(), is_full=True))

    assert "Category: Cuarta" in text
    assert "Win rate: 75%" in text
    assert "Los Pumas (rank #3)" in text
    assert "Full profile not loaded yet." in format_profile(UserProfile.basic_from_login({"id": 1, "username": "x"}))
    assert format_profile(None) == "No profile loaded."


def test_dashboard_and_match_text(make_profile):
    user = UserProfile.from_api(make_profile(), is_full=True)
    match = Match.from_api(
        {
            "id": 3,
            "documentId": "doc-3",
            "estado": "Pending",
            "team_1": {"id": 10, "name": "Los Pumas"},
            "team_2": {"id": 11, "name": "Rivales"},
        }
    )

    text = format_dashboard(build_dashboard([match], user))

    assert "Los Pumas vs Rivales  [To be confirmed]" in text
    assert "No past matches." in text
    assert "You are not playing in this match." in format_match(match, None)
    assert "You play for team 1." in format_match(match, 1)
