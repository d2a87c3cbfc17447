from __future__ import annotations

from dataclasses import replace
import json
import logging
import threading
from typing import Any, Callable

import requests

from padel_client.apis import ProfileApi
from padel_client.http import ApiHttpError
from padel_client.models import SessionState, UserProfile
from padel_client.storage import TOKEN_KEY, USER_DATA_KEY, KeyValueStore, StorageError

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionState], None]


class SessionError(RuntimeError):
    pass


class SessionManager:
    """Single source of truth for who is signed in.

    The credential lives in the secure store and the last known profile in the
    general store. State is exposed as an immutable :class:`SessionState`
    snapshot; listeners are called with every new snapshot, on whichever
    thread produced it.

    Every profile refresh is tagged with the credential it was issued for. Its
    result is only applied while that credential is still the active one, so a
    late response cannot bring a session back after sign-out. Changes to the
    stored credential or profile happen under one persistence lock together
    with the snapshot swap, so storage and state always name the same user.
    """

    def __init__(
        self,
        profile_api: ProfileApi,
        secure_store: KeyValueStore,
        data_store: KeyValueStore,
    ):
        self._profile_api = profile_api
        self._secure_store = secure_store
        self._data_store = data_store
        self._state = SessionState()
        self._version = 0
        self._state_lock = threading.Lock()
        # held across storage writes, never across network calls
        self._persist_lock = threading.RLock()
        self._dispatch_lock = threading.Lock()
        self._dispatching = False
        self._delivered_version = 0
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def bootstrap(self) -> threading.Thread | None:
        """Restore the stored session.

        Returns the background refresh thread when a cached profile was shown
        optimistically, otherwise ``None``.
        """
        try:
            token = self._secure_store.get_item(TOKEN_KEY)
            raw_user = self._data_store.get_item(USER_DATA_KEY)
            cached_user = _decode_profile(raw_user) if raw_user else None
        except (StorageError, ValueError) as error:
            logger.error("Failed to load stored session, signing out: %s", error)
            self.sign_out()
            return None

        if not token:
            logger.info("No stored credential found")
            self._publish(SessionState(is_loading=False))
            return None

        if cached_user is not None:
            logger.info("Restored cached profile for %s", cached_user.username)
            self._publish(SessionState(user=cached_user, token=token, is_loading=False))
            worker = threading.Thread(
                target=self._background_refresh,
                args=(token,),
                name="profile-refresh",
                daemon=True,
            )
            worker.start()
            return worker

        logger.info("Credential found without cached profile, fetching from server")
        self._publish(SessionState(token=token, is_loading=True))
        try:
            self.refresh_profile(token)
        finally:
            self._update(is_loading=False)
        return None

    def sign_in(self, login_user: dict[str, Any], token: str) -> None:
        failure: Exception | None = None
        with self._persist_lock:
            try:
                if not token:
                    raise SessionError("Login response did not include a credential")
                try:
                    basic_user = UserProfile.basic_from_login(login_user)
                except ValueError as error:
                    raise SessionError(f"Login response did not include a valid user: {error}") from error

                self._secure_store.set_item(TOKEN_KEY, token)
                self._data_store.set_item(USER_DATA_KEY, _encode_profile(basic_user))
            except (SessionError, StorageError) as error:
                failure = error
            else:
                with self._state_lock:
                    self._commit(SessionState(user=basic_user, token=token, is_loading=False))

        if failure is not None:
            logger.error("Sign in failed, clearing session: %s", failure)
            self.sign_out()
            raise failure

        self._notify()
        logger.info("Signed in as %s (basic profile stored)", basic_user.username)

        self.refresh_profile(token)

    def refresh_profile(self, token: str | None = None) -> UserProfile | None:
        credential = token or self._state.token
        if not credential:
            logger.debug("Profile refresh skipped, no credential")
            return None

        try:
            payload = self._profile_api.fetch_me(credential)
            profile = UserProfile.from_api(payload, is_full=True)
        except ApiHttpError as error:
            if error.is_authorization_failure:
                self._handle_rejected_credential(credential, error)
            else:
                logger.error("Profile refresh failed: %s", error)
            return None
        except requests.RequestException as error:
            logger.error("Profile refresh failed, network error: %s", error)
            return None
        except ValueError as error:
            logger.error("Profile refresh returned an unusable payload: %s", error)
            return None

        with self._persist_lock:
            if not self._is_active(credential):
                logger.info("Discarding profile refresh for a credential that is no longer active")
                return None

            try:
                self._data_store.set_item(USER_DATA_KEY, _encode_profile(profile))
            except StorageError as error:
                logger.error("Could not persist refreshed profile: %s", error)
                return None

            # the store may call back into this session on the same thread
            if not self._is_active(credential):
                logger.info("Session changed while storing the refreshed profile, discarding it")
                self._restore_stored_profile()
                return None

            with self._state_lock:
                self._commit(replace(self._state, user=profile))
        self._notify()

        logger.info("Full profile refreshed for %s", profile.username)
        return profile

    def sign_out(self) -> None:
        with self._persist_lock:
            had_credential = self._clear_session()
        if had_credential:
            logger.info("Signed out")
        self._notify()

    def _clear_session(self) -> bool:
        """Swap in the signed-out state and wipe storage.

        The caller holds the persistence lock. Returns whether a credential
        was active.
        """
        cleared = SessionState(is_loading=False)
        with self._state_lock:
            previous = self._state
            if previous != cleared:
                self._commit(cleared)

        for store, key in ((self._secure_store, TOKEN_KEY), (self._data_store, USER_DATA_KEY)):
            try:
                store.remove_item(key)
            except StorageError as error:
                logger.error("Could not clear %s during sign out: %s", key, error)
        return bool(previous.token)

    def _restore_stored_profile(self) -> None:
        user = self._state.user
        try:
            if user is None:
                self._data_store.remove_item(USER_DATA_KEY)
            else:
                self._data_store.set_item(USER_DATA_KEY, _encode_profile(user))
        except StorageError as error:
            logger.error("Could not restore the stored profile: %s", error)

    def _handle_rejected_credential(self, credential: str, error: ApiHttpError) -> None:
        with self._persist_lock:
            active = self._state.token
            if active and active != credential:
                logger.info("Ignoring HTTP %s for a credential that is no longer active", error.status_code)
                return
            logger.warning("Credential rejected by server (HTTP %s), signing out", error.status_code)
            self._clear_session()
        self._notify()

    def _background_refresh(self, token: str) -> None:
        try:
            self.refresh_profile(token)
        except Exception:
            logger.exception("Background profile refresh failed")

    def _is_active(self, credential: str) -> bool:
        return self._state.token == credential

    def _commit(self, state: SessionState) -> None:
        # caller holds _state_lock
        self._state = state
        self._version += 1

    def _publish(self, state: SessionState) -> None:
        with self._persist_lock:
            with self._state_lock:
                self._commit(state)
        self._notify()

    def _update(self, **changes: Any) -> None:
        with self._state_lock:
            self._commit(replace(self._state, **changes))
        self._notify()

    def _notify(self) -> None:
        """Deliver the newest snapshot to every listener.

        Only one thread delivers at a time. A thread that commits while another
        is delivering leaves the new snapshot to that thread, which always
        finishes on the latest version, so listeners never end on a stale state.
        """
        with self._dispatch_lock:
            if self._dispatching:
                return
            self._dispatching = True

        try:
            while True:
                with self._dispatch_lock:
                    with self._state_lock:
                        snapshot, version = self._state, self._version
                    if version == self._delivered_version:
                        self._dispatching = False
                        return
                    self._delivered_version = version

                for listener in list(self._listeners):
                    if self._version != version:
                        break
                    try:
                        listener(snapshot)
                    except Exception:
                        logger.exception("Session listener %r failed", listener)
        except BaseException:
            with self._dispatch_lock:
                self._dispatching = False
            raise


def _encode_profile(profile: UserProfile) -> str:
    return json.dumps(profile.to_dict())


def _decode_profile(raw_user: str) -> UserProfile:
    payload = json.loads(raw_user)
    if not isinstance(payload, dict):
        raise ValueError("Stored user data is not an object")
    return UserProfile.from_storage(payload)
