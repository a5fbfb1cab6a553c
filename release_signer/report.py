"""Signing report generation."""

import json
import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

from .backends.base import SignedArtifact

REPORT_VERSION = "1.0"
REPORT_SUFFIX = ".signing.json"


class SigningReport:
    """Record of how a build artifact was signed."""

    def __init__(
        self,
        artifact_path: str,
        build_type: str,
        signed: SignedArtifact,
        fell_back: bool = False,
    ):
        """
        Initialize signing report.

        Args:
            artifact_path: Path to the signed artifact
            build_type: Build type the artifact belongs to
            signed: Result returned by the signing backend
            fell_back: Whether a release build was signed with the debug key
        """
        self.artifact_path = artifact_path
        self.build_type = build_type
        self.signed = signed
        self.fell_back = fell_back
        self.timestamp = datetime.now(timezone.utc)

    def _compute_artifact_hashes(self) -> Dict[str, str]:
        """Compute SHA256 and SHA512 hashes of artifact."""
        sha256 = hashlib.sha256()
        sha512 = hashlib.sha512()
        with open(self.artifact_path, "rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                sha256.update(chunk)
                sha512.update(chunk)

        return {
            "sha256": sha256.hexdigest(),
            "sha512": sha512.hexdigest(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert signing report to dictionary."""
        hashes = self._compute_artifact_hashes()

        report = {
            "report_version": REPORT_VERSION,
            "timestamp": self.timestamp.isoformat(),
            "build_type": self.build_type,
            "artifact": {
                "path": self.artifact_path,
                "sha256": hashes["sha256"],
                "sha512": hashes["sha512"],
                "size": Path(self.artifact_path).stat().st_size,
            },
            "identity": self.signed.identity.to_dict(redact=True),
            "tool": self.signed.format,
            "signing_fell_back": self.fell_back,
        }

        if "verification_command" in self.signed.metadata:
            report["verification_command"] = self.signed.metadata["verification_command"]

        if "certificate_sha256" in self.signed.metadata:
            report["certificate_sha256"] = self.signed.metadata["certificate_sha256"]

        return report

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, output_path: Optional[str] = None) -> str:
        """
        Save signing report to file.

        Args:
            output_path: Path to save report (default: artifact_path + .signing.json)

        Returns:
            Path to saved file
        """
        if output_path is None:
            output_path = f"{self.artifact_path}{REPORT_SUFFIX}"

        with open(output_path, "w") as f:
            f.write(self.to_json())

        return output_path


def load_report(report_path: str) -> Dict[str, Any]:
    """Load a saved signing report."""
    with open(report_path, "r") as f:
        return json.load(f)
