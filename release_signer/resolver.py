"""Signing identity resolution for release and debug build types."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .identity import DEBUG_IDENTITY, ReleaseIdentity, SigningIdentity
from .properties import CredentialsFile, DEFAULT_CREDENTIALS_FILE, load_credentials

RELEASE = "release"
DEBUG = "debug"

ON_MISSING_DEBUG = "debug"
ON_MISSING_ERROR = "error"
ON_MISSING_CHOICES = (ON_MISSING_DEBUG, ON_MISSING_ERROR)


class MissingCredentialsFileError(RuntimeError):
    """Release build requested strict signing but no credentials file exists."""
    pass


@dataclass(frozen=True)
class SigningResolution:
    """Outcome of resolving the signing identity for one build type."""

    build_type: str
    identity: SigningIdentity
    fell_back: bool = False
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def variant(self) -> str:
        return self.identity.variant


def _resolve_store_file(value: Optional[str], project_root: Path) -> Optional[Path]:
    if value is None:
        return None
    # Absolute paths are kept as they are; relative ones hang off the project root
    return project_root / value


def resolve_signing_identity(
    credentials: Optional[CredentialsFile],
    project_root,
    build_type: str = RELEASE,
    on_missing: str = ON_MISSING_DEBUG,
) -> SigningResolution:
    """
    Select the signing identity for a build type.

    This is a pure function of its arguments: the credentials file is
    loaded by the caller and passed in, or None when it does not exist.

    Args:
        credentials: Parsed credentials file, or None if absent
        project_root: Directory that relative storeFile values resolve against
        build_type: "release" or "debug"
        on_missing: What a release build does without credentials,
            "debug" (fall back to the debug identity) or "error"

    Returns:
        SigningResolution with the selected identity

    Raises:
        MissingCredentialsFileError: If on_missing is "error" and a release
            build has no credentials file
        ValueError: If on_missing is not a known policy
    """
    if on_missing not in ON_MISSING_CHOICES:
        raise ValueError(
            f"on_missing must be one of {', '.join(ON_MISSING_CHOICES)}, got {on_missing!r}"
        )

    if build_type != RELEASE:
        return SigningResolution(build_type=build_type, identity=DEBUG_IDENTITY)

    if credentials is not None:
        identity = ReleaseIdentity(
            key_alias=credentials.key_alias,
            key_password=credentials.key_password,
            store_file=_resolve_store_file(credentials.store_file, Path(project_root)),
            store_password=credentials.store_password,
        )
        return SigningResolution(build_type=build_type, identity=identity)

    if on_missing == ON_MISSING_ERROR:
        raise MissingCredentialsFileError(
            "No credentials file found; release builds must not be signed "
            "with the debug key"
        )

    return SigningResolution(
        build_type=build_type,
        identity=DEBUG_IDENTITY,
        fell_back=True,
        warnings=(
            "No credentials file found; release build falls back to debug signing",
        ),
    )


class SigningResolver:
    """Resolves signing identities for one project.

    The credentials file is checked and read at most once, on first use,
    and the result is reused for every build type afterwards.
    """

    def __init__(
        self,
        project_root,
        credentials_file: str = DEFAULT_CREDENTIALS_FILE,
        on_missing: str = ON_MISSING_DEBUG,
        credentials: Optional[CredentialsFile] = None,
    ):
        """
        Initialize resolver.

        Args:
            project_root: Project directory holding the credentials file
            credentials_file: Credentials file name, relative to project_root
            on_missing: Release policy when the file is absent
            credentials: Pre-loaded credentials; skips reading the file
        """
        self.project_root = Path(project_root)
        self.credentials_path = self.project_root / credentials_file
        self.on_missing = on_missing
        self._credentials = credentials
        self._loaded = credentials is not None
        self._resolutions = {}

    @property
    def credentials(self) -> Optional[CredentialsFile]:
        if not self._loaded:
            self._credentials = load_credentials(self.credentials_path)
            self._loaded = True
        return self._credentials

    def resolve(self, build_type: str = RELEASE) -> SigningResolution:
        """Resolve (once) and return the signing identity for a build type."""
        if build_type not in self._resolutions:
            self._resolutions[build_type] = resolve_signing_identity(
                self.credentials,
                self.project_root,
                build_type=build_type,
                on_missing=self.on_missing,
            )
        return self._resolutions[build_type]
