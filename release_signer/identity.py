"""Signing identity models for Android builds."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from .properties import KEY_ALIAS, KEY_PASSWORD, STORE_FILE, STORE_PASSWORD

REDACTED = "********"


def _redact(value: Optional[str], redact: bool) -> Optional[str]:
    if value is None or not redact:
        return value
    return REDACTED


def android_user_home() -> Path:
    """Directory holding the SDK's per-user files (debug keystore, avd, ...)."""
    override = os.getenv("ANDROID_USER_HOME")
    if override:
        return Path(override)
    return Path.home() / ".android"


@dataclass(frozen=True)
class ReleaseIdentity:
    """Identity built from the credentials file."""

    key_alias: Optional[str]
    key_password: Optional[str]
    store_file: Optional[Path]
    store_password: Optional[str]

    variant = "release"

    def keystore_path(self) -> Optional[Path]:
        return self.store_file

    def missing_fields(self) -> List[str]:
        """
        Get credential keys that are absent or empty.

        Returns:
            List of credential key names (keyAlias, keyPassword, ...)
        """
        missing = []
        if not self.key_alias:
            missing.append(KEY_ALIAS)
        if not self.key_password:
            missing.append(KEY_PASSWORD)
        if self.store_file is None:
            missing.append(STORE_FILE)
        if not self.store_password:
            missing.append(STORE_PASSWORD)
        return missing

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert to dictionary for reports and CLI output."""
        return {
            "variant": self.variant,
            "key_alias": self.key_alias,
            "key_password": _redact(self.key_password, redact),
            "store_file": str(self.store_file) if self.store_file else None,
            "store_password": _redact(self.store_password, redact),
        }


@dataclass(frozen=True)
class DebugIdentity:
    """The SDK's built-in debug signing identity."""

    key_alias: str = "androiddebugkey"
    key_password: str = "android"
    store_file: Path = Path("debug.keystore")
    store_password: str = "android"

    variant = "debug"

    def keystore_path(self) -> Path:
        """Debug keystore location, relative to the Android user home."""
        if self.store_file.is_absolute():
            return self.store_file
        return android_user_home() / self.store_file

    def missing_fields(self) -> List[str]:
        return []

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert to dictionary for reports and CLI output."""
        return {
            "variant": self.variant,
            "key_alias": self.key_alias,
            "key_password": _redact(self.key_password, redact),
            "store_file": str(self.keystore_path()),
            "store_password": _redact(self.store_password, redact),
        }


DEBUG_IDENTITY = DebugIdentity()

SigningIdentity = Union[ReleaseIdentity, DebugIdentity]
