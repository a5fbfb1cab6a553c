"""Signing orchestrator for build artifacts."""

from pathlib import Path
from typing import List, Optional

from .backends.base import KeystoreError, SigningBackend, SigningError, check_credentials
from .build import BuildType
from .config import ProjectConfig
from .keystore import inspect_keystore
from .report import SigningReport


def signed_output_path(artifact_path: str) -> str:
    """app-release-unsigned.apk -> app-release.apk, other.aab -> other-signed.aab"""
    path = Path(artifact_path)
    stem = path.stem
    if stem.endswith("-unsigned"):
        stem = stem[: -len("-unsigned")]
    else:
        stem = f"{stem}-signed"
    return str(path.with_name(f"{stem}{path.suffix}"))


class SigningOrchestrator:
    """Signs build artifacts with the backend matching their type."""

    def __init__(self, backends: List[SigningBackend], inspect: bool = True):
        """
        Initialize orchestrator with backends.

        Args:
            backends: List of signing backend instances
            inspect: Inspect PKCS#12 keystores before signing to record the
                certificate fingerprint
        """
        self.backends = backends
        self.inspect = inspect

    def get_backend(self, artifact_path: str) -> SigningBackend:
        """
        Find the backend for an artifact.

        Raises:
            SigningError: If no backend handles the artifact type
        """
        for backend in self.backends:
            if backend.handles(artifact_path):
                return backend
        raise SigningError(
            f"No signing backend for {Path(artifact_path).name} "
            f"(supported: {', '.join(b.get_format() for b in self.backends)})"
        )

    def sign_artifact(
        self,
        artifact_path: str,
        build_type: BuildType,
        output_path: Optional[str] = None,
        generate_report: bool = True,
    ) -> SigningReport:
        """
        Sign an artifact with the identity of its build type.

        Args:
            artifact_path: Path to the unsigned artifact
            build_type: Build type whose signing identity is used
            output_path: Signed artifact path (default: derived from artifact_path)
            generate_report: Write <signed artifact>.signing.json

        Returns:
            SigningReport for the signed artifact

        Raises:
            MissingCredentialError: If the identity lacks credentials
            KeystoreError: If the keystore is missing
            SigningError: If the signing tool fails
        """
        backend = self.get_backend(artifact_path)
        identity = build_type.signing

        if build_type.resolution.fell_back:
            print(f"⚠️  {build_type.name} build is signed with the debug key")

        keystore = check_credentials(identity)

        fingerprint = None
        if self.inspect:
            try:
                info = inspect_keystore(keystore, identity.store_password, identity.key_alias)
                fingerprint = info.sha256_fingerprint
                print(f"Signing key: {info.alias} ({fingerprint})")
            except KeystoreError as e:
                # JKS keystores cannot be read here; the signing tool still can
                print(f"⚠️  Keystore not inspected: {e}")

        if output_path is None:
            output_path = signed_output_path(artifact_path)

        try:
            signed = backend.sign(artifact_path, identity, output_path)
            print(f"✅ Signed with {backend.get_format()}: {output_path}")
        except SigningError as e:
            print(f"❌ Failed to sign with {backend.get_format()}: {e}")
            raise

        if fingerprint:
            signed.metadata["certificate_sha256"] = fingerprint

        report = SigningReport(
            output_path, build_type.name, signed, fell_back=build_type.resolution.fell_back
        )

        if generate_report:
            report_path = report.save()
            print(f"✅ Signing report saved: {report_path}")

        return report

    def verify_artifact(self, artifact_path: str) -> bool:
        """Verify a signed artifact with its backend."""
        backend = self.get_backend(artifact_path)
        if backend.verify(artifact_path):
            print(f"✅ {backend.get_format()} signature valid")
            return True
        print(f"❌ {backend.get_format()} signature invalid")
        return False

    @classmethod
    def from_config(cls, config: ProjectConfig) -> "SigningOrchestrator":
        """
        Create orchestrator from configuration.

        Args:
            config: Project configuration

        Returns:
            SigningOrchestrator with apksigner and jarsigner backends
        """
        from .backends.apksigner import ApksignerBackend
        from .backends.jarsigner import JarsignerBackend

        apksigner_config = dict(config.get_backend_config("apksigner"))
        min_sdk = config.get_framework_values()["min_sdk"]
        if min_sdk is not None:
            apksigner_config.setdefault("min_sdk_version", min_sdk)

        return cls(
            [
                ApksignerBackend(apksigner_config),
                JarsignerBackend(config.get_backend_config("jarsigner")),
            ]
        )
