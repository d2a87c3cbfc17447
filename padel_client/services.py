from __future__ import annotations

from datetime import date
import logging
from typing import Sequence

from padel_client.apis import AuthApi, MatchesApi
from padel_client.dashboard import Dashboard, build_dashboard
from padel_client.models import Match, SessionState, UserProfile
from padel_client.session import SessionManager
from padel_client.validation import (
    ValidationError,
    build_result_payload,
    build_schedule_payload,
    parse_set_scores,
    validate_registration,
)

logger = logging.getLogger(__name__)


class NotSignedInError(RuntimeError):
    pass


class PadelService:
    def __init__(
        self,
        session: SessionManager,
        auth_api: AuthApi,
        matches_api: MatchesApi,
    ):
        self._session = session
        self._auth_api = auth_api
        self._matches_api = matches_api

    @property
    def session(self) -> SessionManager:
        return self._session

    def login(self, identifier: str, password: str) -> SessionState:
        if not identifier.strip() or not password:
            raise ValidationError("Enter your email or username and your password")

        response = self._auth_api.login(identifier, password)
        self._session.sign_in(response.get("user"), response.get("jwt"))
        return self._session.state

    def register(
        self,
        username: str,
        email: str,
        password: str,
        confirm_password: str,
        terms_accepted: bool,
    ) -> SessionState:
        """Create an account.

        Strapi signs the new user in straight away unless email confirmation is
        enabled, in which case the returned state is still signed out.
        """
        validate_registration(username, email, password, confirm_password, terms_accepted)

        response = self._auth_api.register(username, email, password)
        if response.get("jwt") and response.get("user"):
            self._session.sign_in(response["user"], response["jwt"])
        else:
            logger.info("Account %s created, waiting for confirmation", username)
        return self._session.state

    def sign_out(self) -> None:
        self._session.sign_out()

    def refresh_profile(self) -> UserProfile | None:
        return self._session.refresh_profile()

    def dashboard(self) -> Dashboard:
        token, user = self._require_session()
        if not user.is_full:
            user = self._session.refresh_profile(token) or user
        return build_dashboard(self._matches_api.list_matches(token), user)

    def match_for_user(self, document_id: str) -> tuple[Match, int | None]:
        token, user = self._require_session()
        match = self._matches_api.get_match(token, document_id)
        if match is None:
            raise LookupError(f"Match {document_id!r} not found")
        return match, match.team_number_for(user.id)

    def record_result(
        self,
        document_id: str,
        raw_sets: Sequence[tuple[str, str]],
        confirmed: bool,
    ) -> str:
        sets = parse_set_scores(raw_sets)
        match, team_number = self.match_for_user(document_id)
        data = build_result_payload(sets, team_number, confirmed)

        token, _ = self._require_session()
        self._matches_api.update_match(token, match.id, data)
        result_text = data[f"resultTeam{team_number}Confirmed"]
        logger.info("Result %s submitted for match %s by team %s", result_text, match.id, team_number)
        return result_text

    def propose_schedule(
        self,
        document_id: str,
        match_day: date,
        start_time: str,
        complex_name: str,
    ) -> tuple[Match, int | None]:
        data = build_schedule_payload(match_day, start_time, complex_name)
        token, user = self._require_session()

        self._matches_api.update_match(token, document_id, data)
        logger.info("Proposed %s at %s for match %s", data["scheduledDate"], data["complex"], document_id)

        match = self._matches_api.get_match(token, document_id)
        if match is None:
            raise LookupError(f"Match {document_id!r} not found")
        return match, match.team_number_for(user.id)

    def _require_session(self) -> tuple[str, UserProfile]:
        state = self._session.state
        if not state.token or state.user is None:
            raise NotSignedInError("Sign in to continue")
        return state.token, state.user
