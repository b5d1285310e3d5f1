import ssl
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent.parent.parent / "frontend"

HTTP_HOST = "127.0.0.1"
HTTP_PORT = 3000
HTTPS_HOST = "0.0.0.0"
HTTPS_PORT = 443


class Settings(BaseSettings):
    # Transport
    USE_HTTPS: Optional[str] = None
    CERT_PATH: Optional[str] = None
    KEY_PATH: Optional[str] = None

    # Static assets
    STATIC_DIR: str = str(DEFAULT_STATIC_DIR)

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env")


class ServerStartupError(Exception):
    """Raised for failures that prevent the server from ever accepting a connection."""


class ConfigurationError(ServerStartupError):
    """Missing or unusable TLS material."""


@dataclass(frozen=True)
class ServerConfig:
    use_https: bool
    host: str
    port: int
    static_dir: Path
    cert_path: Optional[str] = None
    key_path: Optional[str] = None

    @property
    def bind_address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"


def https_requested(value: Optional[str]) -> bool:
    """Only the literal string "true" (any case) turns HTTPS on."""
    return value is not None and value.strip().lower() == "true"


def _require_file(name: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ConfigurationError(f"{name} must be set when USE_HTTPS=true")
    path = Path(value)
    if not path.is_file():
        raise ConfigurationError(f"{name} does not point to a file: {value}")
    return value


def load_tls_material(cert_path: str, key_path: str) -> ssl.SSLContext:
    """
    Load a PEM certificate chain and private key into a server-side context.

    Raises:
        ConfigurationError: if either file cannot be read or parsed, or the
            key does not match the certificate. An encrypted key is
            rejected rather than prompting for a passphrase.
    """
    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    try:
        context.load_cert_chain(cert_path, key_path, password=lambda: b"")
    except (ssl.SSLError, OSError) as e:
        raise ConfigurationError(
            f"Failed to load TLS certificates (cert={cert_path}, key={key_path}): {e}"
        ) from e
    return context


def resolve_config(settings: Settings) -> ServerConfig:
    """
    Turn raw settings into the immutable configuration used at startup.

    In HTTPS mode both TLS files are validated here, so a bad certificate is
    reported before any socket is opened.
    """
    static_dir = Path(settings.STATIC_DIR).resolve()

    if not https_requested(settings.USE_HTTPS):
        return ServerConfig(
            use_https=False,
            host=HTTP_HOST,
            port=HTTP_PORT,
            static_dir=static_dir,
        )

    cert_path = _require_file("CERT_PATH", settings.CERT_PATH)
    key_path = _require_file("KEY_PATH", settings.KEY_PATH)
    load_tls_material(cert_path, key_path)

    return ServerConfig(
        use_https=True,
        host=HTTPS_HOST,
        port=HTTPS_PORT,
        static_dir=static_dir,
        cert_path=cert_path,
        key_path=key_path,
    )
