from __future__ import annotations

import logging
import os
import re
import sys

from msal_extensions import FilePersistence, FilePersistenceWithDataProtection
from msal_extensions.persistence import PersistenceNotFound

from padel_client.config import AppSettings

logger = logging.getLogger(__name__)

TOKEN_KEY = "jwtToken"
USER_DATA_KEY = "userData"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(RuntimeError):
    pass


class KeyValueStore:
    """String key/value storage, one persistence file per key.

    With ``secure=True`` values are written through Windows data protection
    when the platform offers it and as plain files otherwise.
    """

    def __init__(self, directory: str, secure: bool = False):
        self._directory = directory
        self._secure = secure
        self._persistences: dict[str, FilePersistence] = {}

    def get_item(self, key: str) -> str | None:
        persistence = self._persistence_for(key)
        try:
            return persistence.load()
        except PersistenceNotFound:
            return None
        except Exception as error:
            raise StorageError(f"Could not read {key!r} from storage: {error}") from error

    def set_item(self, key: str, value: str) -> None:
        persistence = self._persistence_for(key)
        try:
            persistence.save(value)
        except Exception as error:
            raise StorageError(f"Could not write {key!r} to storage: {error}") from error

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as error:
            raise StorageError(f"Could not remove {key!r} from storage: {error}") from error

    def _path_for(self, key: str) -> str:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        suffix = ".bin" if self._secure else ".json"
        return os.path.join(self._directory, key + suffix)

    def _persistence_for(self, key: str) -> FilePersistence:
        persistence = self._persistences.get(key)
        if persistence is None:
            persistence = self._build_persistence(self._path_for(key))
            self._persistences[key] = persistence
        return persistence

    def _build_persistence(self, path: str) -> FilePersistence:
        directory = os.path.dirname(path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
        except OSError as error:
            raise StorageError(f"Could not create storage directory {directory!r}: {error}") from error

        if not self._secure or not sys.platform.startswith("win"):
            return FilePersistence(path)
        try:
            return FilePersistenceWithDataProtection(path)
        except Exception:
            logger.debug("Data protection unavailable, storing %s unencrypted", os.path.basename(path))
            return FilePersistence(path)


def build_stores(settings: AppSettings) -> tuple[KeyValueStore, KeyValueStore]:
    secure_store = KeyValueStore(settings.secure_storage_dir, secure=settings.secure_storage)
    data_store = KeyValueStore(settings.data_storage_dir)
    return secure_store, data_store
