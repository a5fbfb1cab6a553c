"""Unit tests for identity.py module."""

import dataclasses
from pathlib import Path

import pytest

from release_signer.identity import (
    DEBUG_IDENTITY,
    REDACTED,
    DebugIdentity,
    ReleaseIdentity,
    android_user_home,
)


class TestReleaseIdentity:
    """Tests for ReleaseIdentity."""

    @pytest.fixture
    def identity(self, tmp_path):
        return ReleaseIdentity(
            key_alias="relkey",
            key_password="pw1",
            store_file=tmp_path / "my.jks",
            store_password="pw2",
        )

    def test_variant(self, identity):
        assert identity.variant == "release"

    def test_complete_identity_has_no_missing_fields(self, identity):
        assert identity.missing_fields() == []

    def test_all_fields_absent(self):
        identity = ReleaseIdentity(None, None, None, None)

        assert identity.missing_fields() == [
            "keyAlias",
            "keyPassword",
            "storeFile",
            "storePassword",
        ]

    def test_empty_strings_count_as_missing(self, tmp_path):
        identity = ReleaseIdentity("", "pw1", tmp_path / "my.jks", "")

        assert identity.missing_fields() == ["keyAlias", "storePassword"]

    def test_keystore_path(self, identity, tmp_path):
        assert identity.keystore_path() == tmp_path / "my.jks"

    def test_to_dict_redacts_passwords(self, identity, tmp_path):
        data = identity.to_dict()

        assert data == {
            "variant": "release",
            "key_alias": "relkey",
            "key_password": REDACTED,
            "store_file": str(tmp_path / "my.jks"),
            "store_password": REDACTED,
        }

    def test_to_dict_show_secrets(self, identity):
        data = identity.to_dict(redact=False)

        assert data["key_password"] == "pw1"
        assert data["store_password"] == "pw2"

    def test_to_dict_absent_fields_stay_none(self):
        data = ReleaseIdentity(None, None, None, None).to_dict()

        assert data["key_password"] is None
        assert data["store_file"] is None

    def test_frozen(self, identity):
        with pytest.raises(dataclasses.FrozenInstanceError):
            identity.key_alias = "other"

    def test_equality(self, identity, tmp_path):
        same = ReleaseIdentity("relkey", "pw1", tmp_path / "my.jks", "pw2")

        assert identity == same
        assert hash(identity) == hash(same)


class TestDebugIdentity:
    """Tests for DebugIdentity."""

    def test_defaults(self):
        assert DEBUG_IDENTITY.key_alias == "androiddebugkey"
        assert DEBUG_IDENTITY.key_password == "android"
        assert DEBUG_IDENTITY.store_password == "android"
        assert DEBUG_IDENTITY.variant == "debug"

    def test_constant_equals_new_instance(self):
        assert DEBUG_IDENTITY == DebugIdentity()

    def test_never_missing_fields(self):
        assert DEBUG_IDENTITY.missing_fields() == []

    def test_keystore_path_uses_android_user_home(self, android_user_home):
        assert DEBUG_IDENTITY.keystore_path() == android_user_home / "debug.keystore"

    def test_keystore_path_defaults_to_home(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ANDROID_USER_HOME", raising=False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert DEBUG_IDENTITY.keystore_path() == tmp_path / ".android" / "debug.keystore"

    def test_absolute_store_file(self, tmp_path):
        identity = DebugIdentity(store_file=tmp_path / "custom.keystore")

        assert identity.keystore_path() == tmp_path / "custom.keystore"

    def test_to_dict(self, android_user_home):
        data = DEBUG_IDENTITY.to_dict()

        assert data["variant"] == "debug"
        assert data["key_alias"] == "androiddebugkey"
        assert data["key_password"] == REDACTED
        assert data["store_file"] == str(android_user_home / "debug.keystore")


def test_android_user_home_override(monkeypatch, tmp_path):
    monkeypatch.setenv("ANDROID_USER_HOME", str(tmp_path))

    assert android_user_home() == tmp_path
