from __future__ import annotations

import pytest

from padel_client.storage import TOKEN_KEY, USER_DATA_KEY, KeyValueStore, StorageError, build_stores


def test_missing_key_reads_as_none(tmp_path):
    store = KeyValueStore(str(tmp_path / "data"))

    assert store.get_item(USER_DATA_KEY) is None


def test_set_get_and_remove(tmp_path):
    store = KeyValueStore(str(tmp_path / "data"))

    store.set_item(USER_DATA_KEY, '{"id": 1}')
    assert store.get_item(USER_DATA_KEY) == '{"id": 1}'

    store.remove_item(USER_DATA_KEY)
    assert store.get_item(USER_DATA_KEY) is None


def test_remove_missing_key_is_noop(tmp_path):
    KeyValueStore(str(tmp_path / "data")).remove_item(TOKEN_KEY)


def test_values_survive_a_new_store_instance(tmp_path):
    KeyValueStore(str(tmp_path / "secure"), secure=True).set_item(TOKEN_KEY, "abc")

    assert KeyValueStore(str(tmp_path / "secure"), secure=True).get_item(TOKEN_KEY) == "abc"


def test_rejects_keys_that_are_not_plain_names(tmp_path):
    store = KeyValueStore(str(tmp_path / "data"))

    with pytest.raises(StorageError):
        store.set_item("../escape", "x")


def test_unwritable_directory_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    store = KeyValueStore(str(blocker / "data"))

    with pytest.raises(StorageError):
        store.set_item(USER_DATA_KEY, "{}")


def test_build_stores_separates_secure_and_general_data(settings):
    secure_store, data_store = build_stores(settings)

    secure_store.set_item(TOKEN_KEY, "abc")

    assert data_store.get_item(TOKEN_KEY) is None
    assert secure_store.get_item(TOKEN_KEY) == "abc"
