"""Keystore inspection for signing-time credential checks."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import pkcs12

from .backends.base import KeystoreError


@dataclass(frozen=True)
class KeystoreInfo:
    """Details of the signing key found in a keystore."""

    path: Path
    alias: str
    subject: str
    not_valid_after: datetime
    sha256_fingerprint: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "alias": self.alias,
            "subject": self.subject,
            "not_valid_after": self.not_valid_after.isoformat(),
            "sha256_fingerprint": self.sha256_fingerprint,
        }


def certificate_fingerprint(certificate: x509.Certificate) -> str:
    """Colon-separated upper-case SHA-256 fingerprint, as keytool prints it."""
    digest = certificate.fingerprint(hashes.SHA256())
    return ":".join(f"{b:02X}" for b in digest)


def _not_valid_after(certificate: x509.Certificate) -> datetime:
    # not_valid_after_utc appeared in cryptography 42
    if hasattr(certificate, "not_valid_after_utc"):
        return certificate.not_valid_after_utc
    return certificate.not_valid_after


def inspect_keystore(
    path, store_password: Optional[str], key_alias: Optional[str]
) -> KeystoreInfo:
    """
    Open a PKCS#12 keystore and check that it holds the expected key.

    Args:
        path: Path to the keystore file
        store_password: Keystore password
        key_alias: Alias of the signing key

    Returns:
        KeystoreInfo for the key entry

    Raises:
        KeystoreError: If the keystore is missing, cannot be opened with the
            password, is not PKCS#12, or the alias does not match
    """
    path = Path(path)
    if not path.is_file():
        raise KeystoreError(f"Keystore not found: {path}")

    data = path.read_bytes()
    password = store_password.encode("utf-8") if store_password else None

    try:
        loaded = pkcs12.load_pkcs12(data, password)
    except ValueError:
        raise KeystoreError(
            f"Could not open keystore {path}: wrong password or not a PKCS#12 "
            "keystore (convert JKS keystores with keytool -importkeystore)"
        )

    if loaded.key is None or loaded.cert is None:
        raise KeystoreError(f"Keystore {path} does not contain a private key entry")

    entry_alias = (loaded.cert.friendly_name or b"").decode("utf-8", "replace")
    # keytool stores aliases lower-cased
    if key_alias and entry_alias and entry_alias.lower() != key_alias.lower():
        raise KeystoreError(
            f"Alias {key_alias!r} not found in keystore {path} (found {entry_alias!r})"
        )

    certificate = loaded.cert.certificate
    return KeystoreInfo(
        path=path,
        alias=entry_alias or (key_alias or ""),
        subject=certificate.subject.rfc4514_string(),
        not_valid_after=_not_valid_after(certificate),
        sha256_fingerprint=certificate_fingerprint(certificate),
    )
