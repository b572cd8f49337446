"""
FastAPI host for the key-generation offload protocol.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from easye2ee.common.exceptions import E2EEError
from easye2ee.common.models import KeyGenRequest, KeyGenResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from easye2ee.worker.service import KeyGenService


class WorkerRoutes:
    """Handles FastAPI routes for the offload host."""

    def __init__(self, service: KeyGenService):
        self.service = service

    def setup_routes(self, app: FastAPI) -> None:
        """Setup API routes on the FastAPI app."""
        app.get("/health")(self.health)
        app.post("/worker")(self.worker)

    async def health(self) -> dict[str, Any]:
        """Handle /health endpoint."""
        return {
            "status": "ok" if self.service.running else "stopped",
            "timestamp": int(time.time()),
        }

    async def worker(self, req: KeyGenRequest) -> Any:
        """Handle /worker endpoint: one generateKeys request, one response.

        Failures keep the offload response shape and answer with HTTP 400.
        """
        try:
            result = await self.service.generate_keys_async(req.password, req.bits)
        except E2EEError as e:
            error = getattr(e, "reason", str(e))
            return JSONResponse(
                status_code=400,
                content=KeyGenResponse(success=False, error=error).to_wire(),
            )
        return result.to_response().to_wire()


def create_app(service: KeyGenService) -> FastAPI:
    """Build the app; the service is started and stopped with the app."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        service.start()
        try:
            yield
        finally:
            service.stop()

    app = FastAPI(title="easye2ee key generation", lifespan=lifespan)
    WorkerRoutes(service).setup_routes(app)
    return app
