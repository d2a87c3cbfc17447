from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Identity fields copied from the login/registration response.
BASIC_PROFILE_FIELDS = (
    "id",
    "username",
    "email",
    "confirmed",
    "blocked",
    "createdAt",
    "updatedAt",
    "name",
)

# Relations requested by the profile endpoint. Only a full profile carries them.
PROFILE_RELATIONS = (
    "profilePicture",
    "category",
    "player_stat",
    "teams",
    "role",
    "membership_plan",
)


class SessionPhase(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_BASIC = "authenticated_basic"
    AUTHENTICATED_FULL = "authenticated_full"


class MatchStatus(str, Enum):
    PENDING = "Pending"
    SCHEDULED = "Scheduled"
    PLAYED = "Played"
    CANCELED = "Canceled"
    DISPUTED = "Disputed"

    @classmethod
    def parse(cls, value: Any) -> "MatchStatus | None":
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_upcoming(self) -> bool:
        return self in (MatchStatus.PENDING, MatchStatus.SCHEDULED)


@dataclass(frozen=True)
class PlayerStats:
    total_matches: int = 0
    wins: int = 0
    losses: int = 0
    current_rank: int | None = None
    category_points: int = 0
    promotion_points: int = 0

    @property
    def win_rate(self) -> float:
        if not self.total_matches:
            return 0.0
        return self.wins / self.total_matches

    @staticmethod
    def from_api(payload: dict[str, Any] | None) -> "PlayerStats":
        if not payload:
            return PlayerStats()
        return PlayerStats(
            total_matches=int(payload.get("totalMatches") or 0),
            wins=int(payload.get("wins") or 0),
            losses=int(payload.get("losses") or 0),
            current_rank=payload.get("currentRank"),
            category_points=int(payload.get("categoryPoints") or 0),
            promotion_points=int(payload.get("promotionPoints") or 0),
        )


@dataclass(frozen=True)
class Team:
    id: int
    name: str
    document_id: str | None = None
    current_rank: int | None = None
    member_ids: tuple[int, ...] = ()

    def has_member(self, user_id: int) -> bool:
        return user_id in self.member_ids

    @staticmethod
    def from_api(payload: dict[str, Any] | None, fallback_name: str = "") -> "Team | None":
        if not payload or payload.get("id") is None:
            return None
        members = payload.get("users_permissions_users") or []
        member_ids = tuple(
            int(member["id"]) for member in members if isinstance(member, dict) and member.get("id") is not None
        )
        return Team(
            id=int(payload["id"]),
            name=str(payload.get("name") or fallback_name),
            document_id=payload.get("documentId"),
            current_rank=payload.get("currentRank"),
            member_ids=member_ids,
        )


@dataclass(frozen=True)
class UserProfile:
    id: int
    username: str
    email: str | None = None
    name: str | None = None
    is_full: bool = False
    data: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @staticmethod
    def from_api(payload: dict[str, Any], is_full: bool) -> "UserProfile":
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise ValueError("User payload has no id")
        return UserProfile(
            id=int(payload["id"]),
            username=str(payload.get("username") or ""),
            email=payload.get("email"),
            name=payload.get("name"),
            is_full=is_full,
            data=dict(payload),
        )

    @staticmethod
    def basic_from_login(login_user: dict[str, Any]) -> "UserProfile":
        if not isinstance(login_user, dict):
            raise ValueError("Login response has no user object")
        projection = {key: login_user[key] for key in BASIC_PROFILE_FIELDS if key in login_user}
        return UserProfile.from_api(projection, is_full=False)

    @staticmethod
    def from_storage(payload: dict[str, Any]) -> "UserProfile":
        is_full = any(key in payload for key in PROFILE_RELATIONS)
        return UserProfile.from_api(payload, is_full=is_full)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)

    @property
    def teams(self) -> list[Team]:
        teams = []
        for raw_team in self.data.get("teams") or []:
            team = Team.from_api(raw_team)
            if team is not None:
                teams.append(team)
        return teams

    @property
    def team_ids(self) -> set[int]:
        return {team.id for team in self.teams}

    @property
    def category_name(self) -> str | None:
        category = self.data.get("category")
        if isinstance(category, dict):
            return category.get("name")
        return None

    @property
    def stats(self) -> PlayerStats:
        return PlayerStats.from_api(self.data.get("player_stat"))

    @property
    def membership_status(self) -> str | None:
        return self.data.get("membership_status")


@dataclass(frozen=True)
class SessionState:
    user: UserProfile | None = None
    token: str | None = None
    is_loading: bool = True

    @property
    def phase(self) -> SessionPhase:
        if not self.token:
            return SessionPhase.UNAUTHENTICATED
        if self.user is not None and self.user.is_full:
            return SessionPhase.AUTHENTICATED_FULL
        return SessionPhase.AUTHENTICATED_BASIC

    @property
    def is_signed_in(self) -> bool:
        return self.phase is not SessionPhase.UNAUTHENTICATED


@dataclass(frozen=True)
class SetScore:
    team1_score: int
    team2_score: int
    set_number: int | None = None

    def as_text(self) -> str:
        return f"{self.team1_score}-{self.team2_score}"


@dataclass(frozen=True)
class Match:
    id: int
    document_id: str | None
    status: MatchStatus | None
    scheduled_date: datetime | None = None
    played_date: datetime | None = None
    complex: str | None = None
    category_name: str | None = None
    team_1: Team | None = None
    team_2: Team | None = None
    sets: tuple[SetScore, ...] = ()
    winner_id: int | None = None
    team1_confirmed: bool = False
    team2_confirmed: bool = False

    @property
    def score_text(self) -> str:
        return ", ".join(score.as_text() for score in self.sets)

    def team_number_for(self, user_id: int) -> int | None:
        if self.team_1 is not None and self.team_1.has_member(user_id):
            return 1
        if self.team_2 is not None and self.team_2.has_member(user_id):
            return 2
        return None

    @staticmethod
    def from_api(payload: dict[str, Any]) -> "Match":
        sets = tuple(
            SetScore(
                team1_score=int(raw_set.get("team1Score") or 0),
                team2_score=int(raw_set.get("team2Score") or 0),
                set_number=raw_set.get("setNumber"),
            )
            for raw_set in payload.get("sets") or []
            if isinstance(raw_set, dict)
        )
        category = payload.get("category")
        winner = payload.get("winner")
        team1_confirmed = payload.get("confirmationTeam1")
        if team1_confirmed is None:
            team1_confirmed = payload.get("team_1_confirmed")
        team2_confirmed = payload.get("confirmationTeam2")
        if team2_confirmed is None:
            team2_confirmed = payload.get("team_2_confirmed")

        return Match(
            id=int(payload["id"]),
            document_id=payload.get("documentId") or None,
            status=MatchStatus.parse(payload.get("estado")),
            scheduled_date=parse_datetime(payload.get("scheduledDate")),
            played_date=parse_datetime(payload.get("playedDate")),
            complex=payload.get("complex") or None,
            category_name=category.get("name") if isinstance(category, dict) else None,
            team_1=Team.from_api(payload.get("team_1"), fallback_name="Team 1"),
            team_2=Team.from_api(payload.get("team_2"), fallback_name="Team 2"),
            sets=sets,
            winner_id=winner.get("id") if isinstance(winner, dict) else None,
            team1_confirmed=bool(team1_confirmed),
            team2_confirmed=bool(team2_confirmed),
        )


def parse_datetime(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
