# Tests for integrations/token_store.py
# Created: 2026-10-12

import json
import stat
import threading

import pytest

from socialauth.integrations.errors import (
    CorruptCredentialError,
    NoCredentialError,
    PersistenceError,
)
from socialauth.integrations.token_store import (
    CredentialStore,
    TwitchCredential,
    TwitterCredential,
)


def _twitch_credential(**overrides) -> TwitchCredential:
    data = {
        "access_token": "access123",
        "refresh_token": "refresh456",
        "expires_in": 14400,
        "scope": ["user:read:email", "channel:manage:broadcast"],
        "token_type": "bearer",
    }
    data.update(overrides)
    return TwitchCredential(**data)


@pytest.fixture
def store(tmp_path):
    return CredentialStore("twitch", TwitchCredential, tmp_path)


# ---------------------------------------------------------------------------
# load / round trip
# ---------------------------------------------------------------------------


class TestLoad:
    def test_missing_file_is_not_connected(self, store):
        assert store.load() is None
        assert store.get() is None
        assert store.is_connected() is False

    async def test_round_trip(self, store, tmp_path):
        original = _twitch_credential()
        await store.replace(original)

        reloaded = CredentialStore("twitch", TwitchCredential, tmp_path)
        assert reloaded.load() == original
        assert reloaded.get() == original

    async def test_round_trip_twitter(self, tmp_path):
        store = CredentialStore("twitter", TwitterCredential, tmp_path)
        original = TwitterCredential("tok", "secret", user_id="42", screen_name="operator")
        await store.replace(original)

        reloaded = CredentialStore("twitter", TwitterCredential, tmp_path)
        assert reloaded.load() == original

    def test_file_name_is_provider_named(self, store, tmp_path):
        assert store.path == tmp_path / "twitch_auth.json"

    def test_corrupt_json_is_fatal(self, store):
        store.path.write_text("{not json")
        with pytest.raises(CorruptCredentialError, match="twitch_auth.json"):
            store.load()

    def test_missing_required_field_is_fatal(self, store):
        store.path.write_text(json.dumps({"refresh_token": "r"}))
        with pytest.raises(CorruptCredentialError, match="access_token"):
            store.load()

    def test_non_object_is_fatal(self, store):
        store.path.write_text(json.dumps(["access_token"]))
        with pytest.raises(CorruptCredentialError):
            store.load()

    def test_wrong_field_types_are_fatal(self, store):
        store.path.write_text(json.dumps({"access_token": 12345, "expires_in": "soon", "scope": "x"}))
        with pytest.raises(CorruptCredentialError, match="access_token"):
            store.load()
        assert store.get() is None

    def test_wrong_field_types_are_fatal_twitter(self, tmp_path):
        store = CredentialStore("twitter", TwitterCredential, tmp_path)
        store.path.write_text(json.dumps({"oauth_token": ["a"], "oauth_token_secret": {"b": 1}}))
        with pytest.raises(CorruptCredentialError, match="oauth_token"):
            store.load()

    def test_unknown_keys_ignored(self, store):
        store.path.write_text(json.dumps({"access_token": "a", "id_token": "ignored"}))
        credential = store.load()
        assert credential.access_token == "a"
        assert credential.scope == []

    def test_corrupt_is_a_persistence_error(self):
        assert issubclass(CorruptCredentialError, PersistenceError)


# ---------------------------------------------------------------------------
# replace
# ---------------------------------------------------------------------------


class TestReplace:
    async def test_replace_persists_and_swaps(self, store):
        credential = _twitch_credential()
        await store.replace(credential)

        assert store.get() is credential
        assert json.loads(store.path.read_text())["access_token"] == "access123"
        assert store.is_connected() is True

    async def test_replace_is_wholesale(self, store):
        first = _twitch_credential()
        second = _twitch_credential(access_token="other", refresh_token=None)
        await store.replace(first)
        await store.replace(second)

        assert store.get() == second
        assert json.loads(store.path.read_text())["refresh_token"] is None

    async def test_write_runs_off_the_event_loop(self, store, monkeypatch):
        threads = []
        original_write = store._write

        def _recording_write(credential):
            threads.append(threading.get_ident())
            original_write(credential)

        monkeypatch.setattr(store, "_write", _recording_write)
        await store.replace(_twitch_credential())

        assert threads and threads[0] != threading.get_ident()
        assert store.path.exists()

    async def test_equal_credential_is_noop(self, store, monkeypatch):
        writes = []
        original_write = store._write

        def _counting_write(credential):
            writes.append(credential)
            original_write(credential)

        monkeypatch.setattr(store, "_write", _counting_write)

        await store.replace(_twitch_credential())
        await store.replace(_twitch_credential())
        assert len(writes) == 1

    async def test_file_permissions(self, store):
        await store.replace(_twitch_credential())
        mode = store.path.stat().st_mode
        # Owner read+write only
        assert mode & stat.S_IRUSR
        assert mode & stat.S_IWUSR
        assert not (mode & stat.S_IRGRP)
        assert not (mode & stat.S_IROTH)

    async def test_write_failure_is_reported_and_kept_in_memory(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        store = CredentialStore("twitch", TwitchCredential, blocker)
        credential = _twitch_credential()

        with pytest.raises(PersistenceError, match="not saved"):
            await store.replace(credential)
        assert store.get() is credential

    def test_frozen(self):
        credential = _twitch_credential()
        with pytest.raises(AttributeError):
            credential.access_token = "changed"


# ---------------------------------------------------------------------------
# raw access
# ---------------------------------------------------------------------------


class TestReadRaw:
    async def test_read_raw(self, store):
        await store.replace(_twitch_credential())
        assert json.loads(store.read_raw())["access_token"] == "access123"

    def test_read_raw_missing(self, store):
        with pytest.raises(NoCredentialError, match="no twitch auth info available"):
            store.read_raw()
