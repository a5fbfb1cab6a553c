"""Base signing backend interface."""

import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from ..identity import SigningIdentity

STORE_PASSWORD_ENV = "RELEASE_SIGNER_STORE_PASSWORD"
KEY_PASSWORD_ENV = "RELEASE_SIGNER_KEY_PASSWORD"


class SigningError(RuntimeError):
    """Signing an artifact failed."""
    pass


class MissingCredentialError(SigningError):
    """The signing identity lacks one or more credentials."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing signing credentials: {', '.join(self.missing)}")


class KeystoreError(SigningError):
    """The keystore is missing or unusable."""
    pass


@dataclass
class SignedArtifact:
    """Result of signing an artifact."""

    format: str  # apksigner, jarsigner
    path: str  # signed output
    identity: SigningIdentity
    metadata: Dict[str, Any] = field(default_factory=dict)


def check_credentials(identity: SigningIdentity) -> Path:
    """
    Check that an identity is complete enough to sign with.

    Args:
        identity: Identity selected for the build

    Returns:
        Path to the keystore file

    Raises:
        MissingCredentialError: If alias, passwords or store file are absent
        KeystoreError: If the keystore file does not exist
    """
    missing = identity.missing_fields()
    if missing:
        raise MissingCredentialError(missing)

    keystore = identity.keystore_path()
    if not keystore.is_file():
        raise KeystoreError(f"Keystore not found: {keystore}")

    return keystore


class SigningBackend(ABC):
    """Abstract base class for signing backends."""

    default_executable = ""
    suffixes: Tuple[str, ...] = ()

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize backend with configuration."""
        self.config = config or {}
        self.executable = self.config.get("path", self.default_executable)

    def handles(self, artifact_path: str) -> bool:
        """Check whether this backend signs artifacts of this type."""
        return Path(artifact_path).suffix.lower() in self.suffixes

    def is_available(self) -> bool:
        """Check whether the signing tool can be found."""
        return shutil.which(self.executable) is not None

    def _password_env(self, identity: SigningIdentity) -> Dict[str, str]:
        env = dict(os.environ)
        env[STORE_PASSWORD_ENV] = identity.store_password
        env[KEY_PASSWORD_ENV] = identity.key_password
        return env

    def _run(
        self, cmd: List[str], env: Optional[Dict[str, str]] = None, check: bool = True
    ) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError:
            raise SigningError(f"{self.get_format()} not found: {self.executable}")

        if check and result.returncode != 0:
            raise SigningError(
                f"{self.get_format()} failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result

    @abstractmethod
    def sign(
        self, artifact_path: str, identity: SigningIdentity, output_path: str
    ) -> SignedArtifact:
        """
        Sign artifact with given identity.

        Args:
            artifact_path: Unsigned artifact
            identity: Identity to sign with
            output_path: Where to write the signed artifact

        Returns:
            SignedArtifact describing the output

        Raises:
            MissingCredentialError: If the identity is incomplete
            SigningError: If the signing tool fails
        """
        pass

    @abstractmethod
    def verify(self, artifact_path: str) -> bool:
        """
        Verify the signature of a signed artifact.

        Args:
            artifact_path: Signed artifact

        Returns:
            True if signature is valid, False otherwise
        """
        pass

    @abstractmethod
    def get_format(self) -> str:
        """
        Get signing tool identifier.

        Returns:
            Format name (e.g., "apksigner", "jarsigner")
        """
        pass

    def get_verification_command(self, artifact_path: str) -> str:
        """
        Get shell command for verifying the signed artifact.

        Args:
            artifact_path: Path to signed artifact

        Returns:
            Shell command string for verification
        """
        return f"# No verification command for {self.get_format()}"
