"""
Entry point for the verification server.
"""

import logging

import uvicorn

from clearlic.common.config import Config

from .core import VerificationServer


def start_server(config: Config | None = None) -> None:
    """Start the verification server."""
    if config is None:
        config = Config()
    logging.basicConfig(level=config.LOG_LEVEL)
    server = VerificationServer(config=config)
    server.logger.info(
        "Verification server on http://%s:%s", server.server_host, server.server_port
    )
    uvicorn.run(server.app, host=server.server_host, port=server.server_port)
