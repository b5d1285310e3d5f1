"""Shared fixtures: a throwaway asset tree and a self-signed certificate."""

import datetime
import ipaddress
import sys
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

sys.path.insert(0, str(Path(__file__).parent))

from core.config import ServerConfig  # noqa: E402

INDEX_HTML = "<!DOCTYPE html><html><body><h1>Minesweeper</h1></body></html>"
GAME_JS = "const SIZE = 10;\n"
SECRET = "top secret contents"

SERVER_ENV_VARS = ("USE_HTTPS", "CERT_PATH", "KEY_PATH", "STATIC_DIR", "LOG_LEVEL", "LOG_DIR")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in SERVER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def static_root(tmp_path) -> Path:
    """Asset tree with a secret file placed next to (not inside) it."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML)
    (root / "game.js").write_text(GAME_JS)
    (root / "styles.css").write_text("body { margin: 0; }\n")
    nested = root / "help"
    nested.mkdir()
    (nested / "index.html").write_text("<p>How to play</p>")
    (tmp_path / "secret.txt").write_text(SECRET)
    return root


@pytest.fixture
def http_config(static_root) -> ServerConfig:
    return ServerConfig(use_https=False, host="127.0.0.1", port=3000, static_dir=static_root)


@pytest.fixture
def tls_files(tmp_path):
    """Write a self-signed certificate for localhost/127.0.0.1 and its key."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(
            x509.SubjectAlternativeName(
                [x509.DNSName("localhost"), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]
            ),
            critical=False,
        )
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=True,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(key.public_key()), critical=False
        )
        .sign(key, hashes.SHA256())
    )

    cert_path = tmp_path / "cert.pem"
    key_path = tmp_path / "key.pem"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
    )
    return str(cert_path), str(key_path)
