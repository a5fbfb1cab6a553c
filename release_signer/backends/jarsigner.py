"""App bundle signing with the JDK's jarsigner."""

from .base import (
    KEY_PASSWORD_ENV,
    STORE_PASSWORD_ENV,
    SignedArtifact,
    SigningBackend,
    check_credentials,
)
from ..identity import SigningIdentity


class JarsignerBackend(SigningBackend):
    """Signs .aab bundles with jarsigner; Play only accepts v1-style bundle signatures."""

    default_executable = "jarsigner"
    suffixes = (".aab",)

    def sign(
        self, artifact_path: str, identity: SigningIdentity, output_path: str
    ) -> SignedArtifact:
        """
        Sign an app bundle.

        Args:
            artifact_path: Unsigned bundle
            identity: Identity to sign with
            output_path: Signed bundle path

        Returns:
            SignedArtifact for the signed bundle
        """
        keystore = check_credentials(identity)

        cmd = [
            self.executable,
            "-keystore",
            str(keystore),
            "-storepass:env",
            STORE_PASSWORD_ENV,
            "-keypass:env",
            KEY_PASSWORD_ENV,
            "-sigalg",
            self.config.get("sigalg", "SHA256withRSA"),
            "-digestalg",
            self.config.get("digestalg", "SHA-256"),
            "-signedjar",
            output_path,
            artifact_path,
            identity.key_alias,
        ]

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
        """Verify bundle signature with jarsigner -verify."""
        result = self._run([self.executable, "-verify", artifact_path], check=False)
        # jarsigner exits 0 for unsigned jars too
        return result.returncode == 0 and "jar verified" in result.stdout

    def get_format(self) -> str:
        """Get format identifier."""
        return "jarsigner"

    def get_verification_command(self, artifact_path: str) -> str:
        """Get verification command."""
        return f"jarsigner -verify {artifact_path}"
