"""Signing backend plugins."""

from .base import (
    KeystoreError,
    MissingCredentialError,
    SignedArtifact,
    SigningBackend,
    SigningError,
    check_credentials,
)
from .apksigner import ApksignerBackend
from .jarsigner import JarsignerBackend

__all__ = [
    "SigningBackend",
    "SignedArtifact",
    "SigningError",
    "MissingCredentialError",
    "KeystoreError",
    "check_credentials",
    "ApksignerBackend",
    "JarsignerBackend",
]
