"""Unit tests for resolver.py module."""

import pytest

from release_signer.identity import DEBUG_IDENTITY, ReleaseIdentity
from release_signer.properties import CredentialsFile
from release_signer.resolver import (
    MissingCredentialsFileError,
    SigningResolution,
    SigningResolver,
    resolve_signing_identity,
)


class TestResolveSigningIdentity:
    """Tests for resolve_signing_identity."""

    def test_full_credentials(self, project_root):
        credentials = CredentialsFile.from_mapping(
            {
                "keyAlias": "relkey",
                "keyPassword": "pw1",
                "storeFile": "my.jks",
                "storePassword": "pw2",
            }
        )

        resolution = resolve_signing_identity(credentials, project_root)

        assert resolution.variant == "release"
        assert resolution.fell_back is False
        assert resolution.warnings == ()
        assert resolution.identity == ReleaseIdentity(
            key_alias="relkey",
            key_password="pw1",
            store_file=project_root / "my.jks",
            store_password="pw2",
        )

    def test_fields_match_parsed_file(self, full_credentials, project_root):
        credentials = CredentialsFile.load(full_credentials)

        identity = resolve_signing_identity(credentials, project_root).identity

        assert identity.key_alias == credentials.key_alias
        assert identity.key_password == credentials.key_password
        assert identity.store_file == project_root / credentials.store_file
        assert identity.store_password == credentials.store_password

    def test_absent_file_falls_back_to_debug(self, project_root):
        resolution = resolve_signing_identity(None, project_root)

        assert resolution.identity is DEBUG_IDENTITY
        assert resolution.variant == "debug"
        assert resolution.fell_back is True
        assert len(resolution.warnings) == 1
        assert "falls back to debug signing" in resolution.warnings[0]

    def test_absent_file_strict_policy_raises(self, project_root):
        with pytest.raises(MissingCredentialsFileError, match="must not be signed"):
            resolve_signing_identity(None, project_root, on_missing="error")

    def test_strict_policy_with_credentials(self, project_root):
        credentials = CredentialsFile.from_mapping({"keyAlias": "relkey"})

        resolution = resolve_signing_identity(credentials, project_root, on_missing="error")

        assert resolution.variant == "release"

    def test_unknown_policy(self, project_root):
        with pytest.raises(ValueError, match="on_missing"):
            resolve_signing_identity(None, project_root, on_missing="ignore")

    def test_empty_file_selects_release_with_absent_fields(self, project_root):
        resolution = resolve_signing_identity(CredentialsFile.from_mapping({}), project_root)

        assert resolution.variant == "release"
        assert resolution.fell_back is False
        assert resolution.identity == ReleaseIdentity(None, None, None, None)

    def test_partial_file_is_not_validated(self, project_root):
        credentials = CredentialsFile.from_mapping({"keyAlias": "relkey", "storeFile": "my.jks"})

        identity = resolve_signing_identity(credentials, project_root).identity

        assert identity.key_alias == "relkey"
        assert identity.key_password is None
        assert identity.store_password is None
        assert identity.missing_fields() == ["keyPassword", "storePassword"]

    def test_absolute_store_file_kept(self, project_root, tmp_path):
        store = tmp_path / "elsewhere" / "upload.jks"
        credentials = CredentialsFile.from_mapping({"storeFile": str(store)})

        identity = resolve_signing_identity(credentials, project_root).identity

        assert identity.store_file == store

    def test_project_root_as_string(self, project_root):
        credentials = CredentialsFile.from_mapping({"storeFile": "my.jks"})

        identity = resolve_signing_identity(credentials, str(project_root)).identity

        assert identity.store_file == project_root / "my.jks"

    def test_debug_build_type_ignores_credentials(self, project_root):
        credentials = CredentialsFile.from_mapping({"keyAlias": "relkey"})

        resolution = resolve_signing_identity(credentials, project_root, build_type="debug")

        assert resolution.identity is DEBUG_IDENTITY
        assert resolution.fell_back is False

    def test_debug_build_type_never_raises(self, project_root):
        resolution = resolve_signing_identity(
            None, project_root, build_type="debug", on_missing="error"
        )

        assert resolution.identity is DEBUG_IDENTITY

    def test_idempotent(self, project_root):
        credentials = CredentialsFile.from_mapping(
            {"keyAlias": "relkey", "keyPassword": "pw1", "storeFile": "my.jks", "storePassword": "pw2"}
        )

        first = resolve_signing_identity(credentials, project_root)
        second = resolve_signing_identity(credentials, project_root)

        assert first == second
        assert first.identity == second.identity

    def test_resolution_is_frozen(self, project_root):
        resolution = resolve_signing_identity(None, project_root)

        with pytest.raises(AttributeError):
            resolution.fell_back = False


class TestSigningResolver:
    """Tests for SigningResolver."""

    def test_reads_credentials_from_project_root(self, full_credentials, project_root):
        resolver = SigningResolver(project_root)

        resolution = resolver.resolve()

        assert resolution.identity.key_alias == "relkey"
        assert resolution.identity.store_file == project_root / "my.jks"

    def test_custom_credentials_file_name(self, write_credentials, project_root):
        write_credentials("keyAlias=ci\n", name="ci.properties")

        resolver = SigningResolver(project_root, credentials_file="ci.properties")

        assert resolver.resolve().identity.key_alias == "ci"

    def test_absent_file(self, project_root):
        resolver = SigningResolver(project_root)

        resolution = resolver.resolve()

        assert resolver.credentials is None
        assert resolution.identity is DEBUG_IDENTITY
        assert resolution.fell_back is True

    def test_absent_file_strict(self, project_root):
        resolver = SigningResolver(project_root, on_missing="error")

        with pytest.raises(MissingCredentialsFileError):
            resolver.resolve()

    def test_reads_file_once(self, full_credentials, project_root, mocker):
        load = mocker.patch(
            "release_signer.resolver.load_credentials",
            return_value=CredentialsFile.from_mapping({"keyAlias": "relkey"}),
        )
        resolver = SigningResolver(project_root)

        resolver.resolve("release")
        resolver.resolve("release")
        resolver.resolve("debug")

        load.assert_called_once_with(full_credentials)

    def test_absent_file_checked_once(self, project_root, mocker):
        load = mocker.patch("release_signer.resolver.load_credentials", return_value=None)
        resolver = SigningResolver(project_root)

        resolver.resolve()
        resolver.resolve()

        assert load.call_count == 1

    def test_repeated_resolution_identical(self, full_credentials, project_root):
        resolver = SigningResolver(project_root)

        assert resolver.resolve() is resolver.resolve()

    def test_injected_credentials_skip_filesystem(self, project_root, mocker):
        load = mocker.patch("release_signer.resolver.load_credentials")
        credentials = CredentialsFile.from_mapping({"keyAlias": "injected"})

        resolver = SigningResolver(project_root, credentials=credentials)

        assert resolver.resolve().identity.key_alias == "injected"
        load.assert_not_called()

    def test_resolution_type(self, project_root):
        assert isinstance(SigningResolver(project_root).resolve(), SigningResolution)
