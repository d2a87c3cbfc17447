from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Iterable

from padel_client.models import Match, MatchStatus, UserProfile

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class MatchOutcome(str, Enum):
    WON = "won"
    LOST = "lost"
    PENDING_RESULT = "pending_result"
    CANCELED = "canceled"
    DISPUTED = "disputed"


@dataclass(frozen=True)
class UpcomingMatch:
    match: Match

    @property
    def is_confirmed(self) -> bool:
        return self.match.team1_confirmed and self.match.team2_confirmed

    @property
    def sort_key(self) -> datetime:
        return self.match.scheduled_date or _EPOCH


@dataclass(frozen=True)
class PastMatch:
    match: Match
    outcome: MatchOutcome

    @property
    def result_text(self) -> str:
        scores = self.match.score_text
        if self.outcome is MatchOutcome.WON:
            return f"Won {scores}".strip()
        if self.outcome is MatchOutcome.LOST:
            return f"Lost {scores}".strip()
        if self.outcome is MatchOutcome.PENDING_RESULT:
            return f"Result pending {scores}".strip()
        if self.outcome is MatchOutcome.CANCELED:
            return "Match canceled"
        return "Result disputed"

    @property
    def sort_key(self) -> datetime:
        return self.match.played_date or self.match.scheduled_date or _EPOCH


@dataclass
class Dashboard:
    upcoming: list[UpcomingMatch] = field(default_factory=list)
    past: list[PastMatch] = field(default_factory=list)


def build_dashboard(matches: Iterable[Match], user: UserProfile) -> Dashboard:
    team_ids = user.team_ids
    if not team_ids:
        logger.info("User %s has no teams, dashboard will be empty", user.username)

    dashboard = Dashboard()
    for match in matches:
        if not match.document_id or match.status is None:
            logger.warning("Skipping match %s without documentId or status", match.id)
            continue
        if not _is_participant(match, team_ids):
            continue

        if match.status.is_upcoming:
            dashboard.upcoming.append(UpcomingMatch(match))
        else:
            dashboard.past.append(PastMatch(match, _outcome(match, team_ids)))

    dashboard.upcoming.sort(key=lambda item: item.sort_key)
    dashboard.past.sort(key=lambda item: item.sort_key, reverse=True)
    return dashboard


def _is_participant(match: Match, team_ids: set[int]) -> bool:
    return any(team is not None and team.id in team_ids for team in (match.team_1, match.team_2))


def _outcome(match: Match, team_ids: set[int]) -> MatchOutcome:
    if match.status is MatchStatus.CANCELED:
        return MatchOutcome.CANCELED
    if match.status is MatchStatus.DISPUTED:
        return MatchOutcome.DISPUTED
    if match.winner_id is None:
        return MatchOutcome.PENDING_RESULT
    if match.winner_id in team_ids:
        return MatchOutcome.WON
    return MatchOutcome.LOST
