#!/usr/bin/env python3
"""
Minesweeper Server Runner

Resolves the environment into a server configuration, binds the listening
socket for the selected transport, and serves the static game with uvicorn.
"""

import sys
from pathlib import Path

# Add the current directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

import uvicorn  # noqa: E402
from loguru import logger  # noqa: E402
from pydantic import ValidationError  # noqa: E402

from core.config import ServerConfig, ServerStartupError, Settings, resolve_config  # noqa: E402
from core.transport import Transport, bind_listener, select_transport, uvicorn_options  # noqa: E402
from main import configure_logging, create_app  # noqa: E402

# In-flight responses get this long to finish after SIGINT/SIGTERM
SHUTDOWN_TIMEOUT_SECONDS = 5


def build_server(config: ServerConfig, transport: Transport, log_level: str = "INFO") -> uvicorn.Server:
    uvicorn_config = uvicorn.Config(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=log_level.lower(),
        access_log=True,
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT_SECONDS,
        **uvicorn_options(transport),
    )
    return uvicorn.Server(uvicorn_config)


def main() -> int:
    """Main entry point for the application."""
    try:
        settings = Settings()
        configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
        config = resolve_config(settings)
        transport = select_transport(config)
        sock = bind_listener(config)
    except (ServerStartupError, ValidationError, ValueError) as e:
        logger.error(f"Server failed to start: {e}")
        return 1

    logger.info(f"{config.scheme.upper()} server running on {config.scheme}://{config.bind_address}")

    server = build_server(config, transport, settings.LOG_LEVEL)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()

    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
