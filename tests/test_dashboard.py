from __future__ import annotations

from padel_client.dashboard import MatchOutcome, build_dashboard
from padel_client.models import Match, MatchStatus, UserProfile


def _match(match_id, status, team_1=10, team_2=11, **fields):
    payload = {
        "id": match_id,
        "documentId": f"doc-{match_id}",
        "estado": status,
        "team_1": {"id": team_1, "name": f"Team {team_1}"} if team_1 else None,
        "team_2": {"id": team_2, "name": f"Team {team_2}"} if team_2 else None,
    }
    payload.update(fields)
    return Match.from_api(payload)


def _user(make_profile):
    return UserProfile.from_api(make_profile(), is_full=True)


def test_only_matches_with_the_users_teams_are_kept(make_profile):
    matches = [
        _match(1, "Pending"),
        _match(2, "Pending", team_1=20, team_2=21),
        _match(3, "Played", team_1=30, team_2=10, winner={"id": 10}),
    ]

    dashboard = build_dashboard(matches, _user(make_profile))

    assert [item.match.id for item in dashboard.upcoming] == [1]
    assert [item.match.id for item in dashboard.past] == [3]


def test_matches_without_document_id_or_status_are_skipped(make_profile):
    matches = [
        _match(1, "Pending", documentId=None),
        _match(2, "Unknown"),
        _match(3, "Scheduled"),
    ]

    dashboard = build_dashboard(matches, _user(make_profile))

    assert [item.match.id for item in dashboard.upcoming] == [3]
    assert dashboard.past == []


def test_upcoming_sorted_ascending_and_confirmation_requires_both_teams(make_profile):
    matches = [
        _match(1, "Scheduled", scheduledDate="2026-11-10T20:00:00.000Z", confirmationTeam1=True, confirmationTeam2=True),
        _match(2, "Pending", scheduledDate="2026-11-02T18:00:00.000Z", confirmationTeam1=True),
        _match(3, "Pending"),
    ]

    dashboard = build_dashboard(matches, _user(make_profile))

    assert [item.match.id for item in dashboard.upcoming] == [3, 2, 1]
    assert [item.is_confirmed for item in dashboard.upcoming] == [False, False, True]


def test_legacy_confirmation_fields_are_honoured(make_profile):
    match = _match(1, "Pending", team_1_confirmed=True, team_2_confirmed=True)

    dashboard = build_dashboard([match], _user(make_profile))

    assert dashboard.upcoming[0].is_confirmed


def test_past_sorted_descending_with_outcomes(make_profile):
    sets = [{"team1Score": 6, "team2Score": 4}, {"team1Score": 6, "team2Score": 3}]
    matches = [
        _match(1, "Played", playedDate="2026-09-01T20:00:00Z", winner={"id": 10}, sets=sets),
        _match(2, "Played", playedDate="2026-09-20T20:00:00Z", winner={"id": 11}, sets=sets),
        _match(3, "Played", scheduledDate="2026-09-10T20:00:00Z"),
        _match(4, "Canceled", scheduledDate="2026-08-01T20:00:00Z"),
        _match(5, "Disputed", playedDate="2026-07-01T20:00:00Z"),
    ]

    dashboard = build_dashboard(matches, _user(make_profile))

    assert [item.match.id for item in dashboard.past] == [2, 3, 1, 4, 5]
    outcomes = {item.match.id: item.outcome for item in dashboard.past}
    assert outcomes == {
        1: MatchOutcome.WON,
        2: MatchOutcome.LOST,
        3: MatchOutcome.PENDING_RESULT,
        4: MatchOutcome.CANCELED,
        5: MatchOutcome.DISPUTED,
    }
    texts = {item.match.id: item.result_text for item in dashboard.past}
    assert texts[1] == "Won 6-4, 6-3"
    assert texts[2] == "Lost 6-4, 6-3"
    assert texts[3] == "Result pending"
    assert texts[4] == "Match canceled"


def test_basic_profile_without_teams_gives_empty_dashboard():
    user = UserProfile.basic_from_login({"id": 5, "username": "ana"})

    dashboard = build_dashboard([_match(1, "Pending")], user)

    assert dashboard.upcoming == [] and dashboard.past == []


def test_match_status_parse():
    assert MatchStatus.parse("Played") is MatchStatus.PLAYED
    assert MatchStatus.parse("played") is None
    assert MatchStatus.parse(None) is None
