from __future__ import annotations

from datetime import datetime

from padel_client.dashboard import Dashboard
from padel_client.models import Match, SessionPhase, SessionState, UserProfile


def format_session_status(state: SessionState) -> str:
    if state.is_loading:
        return "Loading session..."
    if not state.token:
        return "Not signed in"
    if state.user is None:
        return "Signed in (profile unavailable)"

    label = state.user.name or state.user.username
    if state.phase is SessionPhase.AUTHENTICATED_BASIC:
        return f"Signed in as {label} (loading profile...)"
    return f"Signed in as {label}"


def format_profile(user: UserProfile | None) -> str:
    if user is None:
        return "No profile loaded."

    lines = [
        f"Username: {user.username}",
        f"Email: {user.email or '-'}",
    ]
    if user.name:
        lines.append(f"Name: {user.name}")
    if not user.is_full:
        lines.append("")
        lines.append("Full profile not loaded yet.")
        return "\n".join(lines)

    lines.append(f"Category: {user.category_name or 'Unassigned'}")
    if user.membership_status:
        lines.append(f"Membership: {user.membership_status}")

    stats = user.stats
    lines.append("")
    lines.append(
        f"Matches: {stats.total_matches}  Wins: {stats.wins}  Losses: {stats.losses}"
        f"  Win rate: {stats.win_rate:.0%}"
    )
    if stats.current_rank is not None:
        lines.append(f"Rank: #{stats.current_rank}")
    lines.append(f"Category points: {stats.category_points}  Promotion points: {stats.promotion_points}")

    teams = user.teams
    lines.append("")
    lines.append("Teams:" if teams else "Teams: none")
    for team in teams:
        rank = f" (rank #{team.current_rank})" if team.current_rank is not None else ""
        lines.append(f"  - {team.name}{rank}")
    return "\n".join(lines)


def format_dashboard(dashboard: Dashboard) -> str:
    lines = ["Upcoming matches"]
    if not dashboard.upcoming:
        lines.append("  No upcoming matches.")
    for item in dashboard.upcoming:
        status = "Confirmed" if item.is_confirmed else "To be confirmed"
        lines.append(f"  {_teams_line(item.match)}  [{status}]")
        lines.append(f"    {_format_date(item.match.scheduled_date, 'Date TBC')} at {item.match.complex or 'Complex TBC'}")
        lines.append(f"    id: {item.match.document_id}")

    lines.append("")
    lines.append("Past matches")
    if not dashboard.past:
        lines.append("  No past matches.")
    for item in dashboard.past:
        played = item.match.played_date or item.match.scheduled_date
        lines.append(f"  {_teams_line(item.match)}  {item.result_text}")
        lines.append(f"    {_format_date(played, 'Date TBC')}")
    return "\n".join(lines)


def format_match(match: Match, team_number: int | None) -> str:
    lines = [
        _teams_line(match),
        f"Status: {match.status.value if match.status else 'Unknown'}",
        f"Date: {_format_date(match.scheduled_date, 'TBC')}",
        f"Complex: {match.complex or 'TBC'}",
    ]
    if match.sets:
        lines.append(f"Sets: {match.score_text}")
    if team_number is None:
        lines.append("You are not playing in this match.")
    else:
        lines.append(f"You play for team {team_number}.")
    return "\n".join(lines)


def _teams_line(match: Match) -> str:
    team_1 = match.team_1.name if match.team_1 else "Team 1 (TBC)"
    team_2 = match.team_2.name if match.team_2 else "Team 2 (TBC)"
    return f"{team_1} vs {team_2}"


def _format_date(value: datetime | None, fallback: str) -> str:
    if value is None:
        return fallback
    return value.astimezone().strftime("%d %b %Y %H:%M")
