"""
Entry point for the offload host.
"""

from __future__ import annotations

import logging

import uvicorn

from easye2ee.common.config import Config
from easye2ee.worker.app import create_app
from easye2ee.worker.service import KeyGenService


def start_server(config: Config | None = None) -> None:
    """Start the offload host under uvicorn."""
    if config is None:
        config = Config()
    logging.basicConfig(level=config.LOG_LEVEL)
    app = create_app(KeyGenService(config=config))
    uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT)
