from __future__ import annotations

from datetime import date, datetime, time, timezone
import re
from typing import Any, Sequence

from padel_client.models import SetScore

MIN_PASSWORD_LENGTH = 6
MAX_SETS = 3

_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


class ValidationError(ValueError):
    pass


def validate_registration(
    username: str,
    email: str,
    password: str,
    confirm_password: str,
    terms_accepted: bool,
) -> None:
    if not username.strip() or not email.strip() or not password:
        raise ValidationError("Username, email and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if not _EMAIL_PATTERN.search(email):
        raise ValidationError("Enter a valid email address")
    if not terms_accepted:
        raise ValidationError("You must accept the terms and conditions")


def parse_set_scores(raw_sets: Sequence[tuple[str, str]]) -> list[SetScore]:
    """Turn up to three ``(team1, team2)`` text pairs into set scores.

    A set left completely blank was not played and is skipped. A set with only
    one side filled in, or with a non-numeric score, is rejected.
    """
    if len(raw_sets) > MAX_SETS:
        raise ValidationError(f"A match has at most {MAX_SETS} sets")

    scores: list[SetScore] = []
    for set_number, (raw_team1, raw_team2) in enumerate(raw_sets, start=1):
        team1_text = (raw_team1 or "").strip()
        team2_text = (raw_team2 or "").strip()
        if not team1_text and not team2_text:
            continue
        if not team1_text or not team2_text:
            raise ValidationError(f"Fill in both scores for set {set_number} or leave it empty")
        try:
            team1_score = int(team1_text)
            team2_score = int(team2_text)
        except ValueError as error:
            raise ValidationError(f"Scores for set {set_number} must be whole numbers") from error
        if team1_score < 0 or team2_score < 0:
            raise ValidationError(f"Scores for set {set_number} cannot be negative")
        scores.append(SetScore(team1_score, team2_score, set_number))

    if not scores:
        raise ValidationError("Enter at least the result of the first set")
    return scores


def build_result_payload(sets: Sequence[SetScore], team_number: int | None, confirmed: bool) -> dict[str, Any]:
    if team_number not in (1, 2):
        raise ValidationError("Your team could not be identified in this match")
    if not sets:
        raise ValidationError("Enter at least the result of the first set")
    if not confirmed:
        raise ValidationError("Confirm that the result entered is correct")

    result_text = ", ".join(score.as_text() for score in sets)
    return {
        "sets": [
            {
                "team1Score": score.team1_score,
                "team2Score": score.team2_score,
                "setNumber": score.set_number if score.set_number is not None else index,
            }
            for index, score in enumerate(sets, start=1)
        ],
        f"resultTeam{team_number}Confirmed": result_text,
        f"confirmationTeam{team_number}": True,
    }


def build_schedule_payload(match_day: date, start_time: str, complex_name: str) -> dict[str, Any]:
    complex_name = complex_name.strip()
    if not complex_name:
        raise ValidationError("Select or enter the name of the complex")

    try:
        hour_text, minute_text = start_time.strip().split(":", 1)
        slot = time(int(hour_text), int(minute_text))
    except ValueError as error:
        raise ValidationError(f"Invalid time {start_time!r}, expected HH:MM") from error

    local_start = datetime.combine(match_day, slot).astimezone()
    scheduled = local_start.astimezone(timezone.utc)
    return {
        "scheduledDate": scheduled.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "complex": complex_name,
    }
