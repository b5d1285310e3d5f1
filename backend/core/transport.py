"""
Transport selection for the static server.

A ServerConfig is turned into exactly one transport variant, which decides
how uvicorn terminates connections. The listening socket is bound here so
that bind failures surface as BindError instead of uvicorn exiting on its own.
"""

import socket
from dataclasses import dataclass
from typing import Any, Dict, Union

from core.config import ServerConfig, ServerStartupError


class BindError(ServerStartupError):
    """The configured address could not be bound."""


@dataclass(frozen=True)
class PlainTransport:
    pass


@dataclass(frozen=True)
class TlsTransport:
    cert_path: str
    key_path: str


Transport = Union[PlainTransport, TlsTransport]


def select_transport(config: ServerConfig) -> Transport:
    if config.use_https:
        return TlsTransport(cert_path=config.cert_path, key_path=config.key_path)
    return PlainTransport()


def uvicorn_options(transport: Transport) -> Dict[str, Any]:
    """Keyword arguments for uvicorn.Config that implement the transport."""
    if isinstance(transport, TlsTransport):
        return {"ssl_certfile": transport.cert_path, "ssl_keyfile": transport.key_path}
    return {}


def bind_listener(config: ServerConfig) -> socket.socket:
    """
    Bind a TCP socket on the configured address.

    uvicorn calls listen() on it when serving starts.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((config.host, config.port))
    except OSError as e:
        sock.close()
        raise BindError(f"Could not bind {config.bind_address}: {e.strerror or e}") from e
    sock.set_inheritable(True)
    return sock
