"""Shared pytest fixtures for all tests."""

import os
import textwrap
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end flows")


@pytest.fixture
def project_root(tmp_path):
    """Android project directory (the one holding key.properties)."""
    root = tmp_path / "android"
    root.mkdir()
    return root


@pytest.fixture
def write_credentials(project_root):
    """Write a key.properties file into the project root."""

    def _write(content, name="key.properties"):
        path = project_root / name
        path.write_text(textwrap.dedent(content), encoding="iso-8859-1")
        return path

    return _write


@pytest.fixture
def full_credentials(write_credentials):
    """key.properties with all four signing fields."""
    return write_credentials(
        """\
        keyAlias=relkey
        keyPassword=pw1
        storeFile=my.jks
        storePassword=pw2
        """
    )


@pytest.fixture
def make_keystore():
    """Create a PKCS#12 keystore holding one self-signed key entry."""

    def _make(path, alias="relkey", password="pw2", common_name="Release Key"):
        key = ec.generate_private_key(ec.SECP256R1())
        name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
        now = datetime.now(timezone.utc)
        certificate = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(days=1))
            .not_valid_after(now + timedelta(days=3650))
            .sign(key, hashes.SHA256())
        )
        data = pkcs12.serialize_key_and_certificates(
            alias.encode(),
            key,
            certificate,
            None,
            serialization.BestAvailableEncryption(password.encode()),
        )
        path.write_bytes(data)
        return certificate

    return _make


@pytest.fixture
def android_user_home(tmp_path, monkeypatch):
    """Point the debug keystore lookup at a temporary directory."""
    home = tmp_path / "android-user-home"
    home.mkdir()
    monkeypatch.setenv("ANDROID_USER_HOME", str(home))
    return home


@pytest.fixture
def completed_process():
    """Build a fake subprocess.CompletedProcess."""

    def _make(returncode=0, stdout="", stderr=""):
        result = Mock()
        result.returncode = returncode
        result.stdout = stdout
        result.stderr = stderr
        return result

    return _make


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables before each test."""
    for name in list(os.environ):
        if name.startswith("RELEASE_SIGNER_"):
            monkeypatch.delenv(name, raising=False)

    original_env = dict(os.environ)

    yield

    os.environ.clear()
    os.environ.update(original_env)
