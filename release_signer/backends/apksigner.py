"""APK signing with the SDK's apksigner."""

from typing import Dict, Any, Optional

from .base import (
    KEY_PASSWORD_ENV,
    STORE_PASSWORD_ENV,
    SignedArtifact,
    SigningBackend,
    check_credentials,
)
from ..identity import SigningIdentity


class ApksignerBackend(SigningBackend):
    """Signs .apk files with apksigner (v1-v3 signature schemes)."""

    default_executable = "apksigner"
    suffixes = (".apk",)

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize apksigner backend."""
        super().__init__(config)
        self.min_sdk_version = self.config.get("min_sdk_version")

    def sign(
        self, artifact_path: str, identity: SigningIdentity, output_path: str
    ) -> SignedArtifact:
        """
        Sign an APK.

        Args:
            artifact_path: Unsigned (aligned) APK
            identity: Identity to sign with
            output_path: Signed APK path

        Returns:
            SignedArtifact for the signed APK
        """
        keystore = check_credentials(identity)

        cmd = [
            self.executable,
            "sign",
            "--ks",
            str(keystore),
            "--ks-key-alias",
            identity.key_alias,
            "--ks-pass",
            f"env:{STORE_PASSWORD_ENV}",
            "--key-pass",
            f"env:{KEY_PASSWORD_ENV}",
        ]
        if self.min_sdk_version is not None:
            cmd.extend(["--min-sdk-version", str(self.min_sdk_version)])
        cmd.extend(["--out", output_path, artifact_path])

        self._run(cmd, env=self._password_env(identity))

        return SignedArtifact(
            format=self.get_format(),
            path=output_path,
            identity=identity,
            metadata={
                "keystore": str(keystore),
                "key_alias": identity.key_alias,
                "verification_command": self.get_verification_command(output_path),
            },
        )

    def verify(self, artifact_path: str) -> bool:
        """Verify APK signatures with apksigner verify."""
        result = self._run(
            [self.executable, "verify", "--print-certs", artifact_path], check=False
        )
        if result.returncode != 0:
            print("apksigner verification failed:")
            print(f"  Stdout: {result.stdout}")
            print(f"  Stderr: {result.stderr}")
        return result.returncode == 0

    def get_format(self) -> str:
        """Get format identifier."""
        return "apksigner"

    def get_verification_command(self, artifact_path: str) -> str:
        """Get verification command."""
        return f"apksigner verify --print-certs {artifact_path}"
