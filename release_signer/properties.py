"""Credentials file loading (Java .properties format)."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional


KEY_ALIAS = "keyAlias"
KEY_PASSWORD = "keyPassword"
STORE_FILE = "storeFile"
STORE_PASSWORD = "storePassword"

CREDENTIAL_KEYS = (KEY_ALIAS, KEY_PASSWORD, STORE_FILE, STORE_PASSWORD)

DEFAULT_CREDENTIALS_FILE = "key.properties"

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_WHITESPACE = " \t\f"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class PropertiesError(ValueError):
    """Malformed properties content."""
    pass


def _ends_with_continuation(line: str) -> bool:
    """A line continues when it ends with an odd number of backslashes."""
    count = 0
    for char in reversed(line):
        if char != "\\":
            break
        count += 1
    return count % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    """Join continued physical lines and drop comments and blank lines."""
    pending: Optional[List[str]] = None

    lines = _LINE_BREAK.split(text)
    if lines and not lines[-1]:
        lines.pop()

    for raw in lines:
        if pending is None:
            line = raw.lstrip(_WHITESPACE)
            if not line or line[0] in "#!":
                continue
            pending = []
        else:
            # Leading whitespace of a continuation line is not part of the value
            line = raw.lstrip(_WHITESPACE)

        if _ends_with_continuation(line):
            pending.append(line[:-1])
            continue

        pending.append(line)
        yield "".join(pending)
        pending = None

    if pending is not None:
        yield "".join(pending)


def _unescape(text: str) -> str:
    """Decode backslash escapes the way java.util.Properties does."""
    out = []
    i = 0
    while i < len(text):
        char = text[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue

        i += 1
        if i >= len(text):
            break

        char = text[i]
        if char == "u":
            digits = text[i + 1:i + 5]
            if len(digits) != 4:
                raise PropertiesError("Malformed \\uxxxx encoding")
            try:
                out.append(chr(int(digits, 16)))
            except ValueError:
                raise PropertiesError("Malformed \\uxxxx encoding")
            i += 5
        else:
            out.append(_ESCAPES.get(char, char))
            i += 1

    return "".join(out)


def _split_entry(line: str):
    """Split a logical line into raw (still escaped) key and value."""
    key_end = len(line)
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char in "=:" or char in _WHITESPACE:
            key_end = i
            break
        i += 1

    key = line[:key_end]
    rest = line[key_end:].lstrip(_WHITESPACE)
    # At most one separator character is consumed
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)

    return key, rest


def parse_properties(text: str) -> Dict[str, str]:
    """
    Parse properties content into a dictionary.

    Args:
        text: Properties file content

    Returns:
        Mapping of keys to values; later duplicate keys win

    Raises:
        PropertiesError: If an escape sequence is malformed
    """
    properties: Dict[str, str] = {}
    for line in _logical_lines(text):
        raw_key, raw_value = _split_entry(line)
        properties[_unescape(raw_key)] = _unescape(raw_value)
    return properties


@dataclass(frozen=True)
class CredentialsFile:
    """Signing secrets read from a key.properties file."""

    path: Optional[Path]
    properties: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, path) -> "CredentialsFile":
        """
        Read and parse a credentials file.

        The file is decoded as ISO-8859-1, matching what Gradle scripts
        get from java.util.Properties.load(InputStream).

        Args:
            path: Path to the properties file

        Returns:
            CredentialsFile with the parsed properties

        Raises:
            FileNotFoundError: If the file does not exist
            PropertiesError: If the content is malformed
        """
        path = Path(path)
        with open(path, "r", encoding="iso-8859-1", newline="") as f:
            text = f.read()
        return cls(path=path, properties=parse_properties(text))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "CredentialsFile":
        """Build an in-memory credentials file, e.g. from CI secrets."""
        return cls(path=None, properties=dict(mapping))

    @property
    def key_alias(self) -> Optional[str]:
        return self.properties.get(KEY_ALIAS)

    @property
    def key_password(self) -> Optional[str]:
        return self.properties.get(KEY_PASSWORD)

    @property
    def store_file(self) -> Optional[str]:
        return self.properties.get(STORE_FILE)

    @property
    def store_password(self) -> Optional[str]:
        return self.properties.get(STORE_PASSWORD)

    def missing_keys(self) -> List[str]:
        """Credential keys that are not present at all."""
        return [key for key in CREDENTIAL_KEYS if key not in self.properties]


def load_credentials(path) -> Optional[CredentialsFile]:
    """
    Load the credentials file if it exists.

    Absence is not an error: None is returned and the file is never opened.
    Anything else at the path is read, so a directory or unreadable file
    raises instead of counting as absent.

    Args:
        path: Path to the credentials file

    Returns:
        CredentialsFile, or None if nothing exists at the path

    Raises:
        OSError: If the path exists but cannot be read as a file
        PropertiesError: If the content is malformed
    """
    path = Path(path)
    if not path.exists():
        return None
    return CredentialsFile.load(path)
