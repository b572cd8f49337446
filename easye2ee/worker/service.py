"""
Application service that runs key generation off the interactive context.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import (
    CancelledError,
    Executor,
    Future,
    ProcessPoolExecutor,
)
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Any

from easye2ee.common.config import Config, check_key_bits
from easye2ee.common.exceptions import KeyGenerationError
from easye2ee.common.models import KeyGenRequest
from easye2ee.worker.protocol import (
    GENERATE_KEYS,
    KeyGenResult,
    handle_request,
    parse_response,
)

CANCELLED = "cancelled"


class KeyGenState(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class KeyGenJob:
    """Handle on a single key-generation request."""

    def __init__(self, future: Future | None = None):
        self.future = future
        self._abandoned = False

    def abandon(self) -> None:
        """Drop interest in the result; the job reports Failed from now on."""
        self._abandoned = True
        if self.future is not None:
            self.future.cancel()

    def done(self) -> bool:
        return self.future is None or self._abandoned or self.future.done()

    def _response(self) -> dict[str, Any] | None:
        if self.future is None or not self.future.done() or self.future.cancelled():
            return None
        if self.future.exception() is not None:
            return None
        return self.future.result()

    @property
    def state(self) -> KeyGenState:
        if self.future is None:
            return KeyGenState.IDLE
        if self._abandoned or self.future.cancelled():
            return KeyGenState.FAILED
        if self.future.done():
            response = self._response()
            if response is not None and response.get("success"):
                return KeyGenState.SUCCEEDED
            return KeyGenState.FAILED
        if self.future.running():
            return KeyGenState.RUNNING
        return KeyGenState.REQUESTED

    @property
    def error(self) -> str | None:
        """Failure reason once the job has failed, else None."""
        if self.state is not KeyGenState.FAILED:
            return None
        try:
            self.result(timeout=0)
        except KeyGenerationError as err:
            return err.reason
        return None

    def result(self, timeout: float | None = None) -> KeyGenResult:
        """Wait for the outcome; failures raise KeyGenerationError."""
        if self.future is None:
            msg = "no key generation request submitted"
            raise KeyGenerationError(msg)
        if self._abandoned:
            raise KeyGenerationError(CANCELLED)
        try:
            response = self.future.result(timeout)
        except CancelledError as err:
            raise KeyGenerationError(CANCELLED) from err
        except (TimeoutError, FutureTimeoutError):
            raise
        except Exception as err:
            msg = f"{type(err).__name__}: {err}"
            raise KeyGenerationError(msg) from err
        if self._abandoned:
            raise KeyGenerationError(CANCELLED)
        return parse_response(response)


class KeyGenService:
    """Owns the background executor used for key generation.

    The service is an explicit handle with a start/stop lifecycle; callers
    create one per session and pass it where needed.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        max_workers: int | None = None,
        bits: int | None = None,
        iterations: int | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.max_workers = max_workers or self.config.KEYGEN_WORKERS
        self.bits = check_key_bits(bits or self.config.KEY_BITS)
        self.iterations = iterations or self.config.PBKDF2_ITERATIONS
        self._executor = executor
        self._owns_executor = executor is None
        self._running = False
        self._current: KeyGenJob | None = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current_job(self) -> KeyGenJob | None:
        return self._current

    def start(self) -> None:
        """Start the executor if this service owns it."""
        if self._running:
            return
        if self._executor is None:
            self._executor = ProcessPoolExecutor(max_workers=self.max_workers)
        self._running = True
        self.logger.info("Key generation service started")

    def stop(self, wait: bool = False) -> None:  # noqa: FBT001, FBT002
        """Abandon in-flight work and release an owned executor."""
        with self._lock:
            if self._current is not None and not self._current.done():
                self._current.abandon()
                self.logger.warning("Abandoned in-flight key generation")
            if self._owns_executor and self._executor is not None:
                self._executor.shutdown(wait=wait, cancel_futures=True)
                self._executor = None
            self._running = False
        self.logger.info("Key generation service stopped")

    def __enter__(self) -> KeyGenService:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def submit(self, password: str, bits: int | None = None) -> KeyGenJob:
        """Queue one request; a second request while one is in flight fails."""
        if not password:
            msg = "password must not be empty"
            raise KeyGenerationError(msg)
        bits = bits or self.bits
        try:
            check_key_bits(bits)
        except ValueError as err:
            raise KeyGenerationError(str(err)) from err
        with self._lock:
            if not self._running or self._executor is None:
                msg = "key generation service is not running"
                raise KeyGenerationError(msg)
            if self._current is not None and not self._current.done():
                msg = "a key generation request is already in flight"
                raise KeyGenerationError(msg)

            request = KeyGenRequest(
                action=GENERATE_KEYS, password=password, bits=bits
            ).to_wire()
            future = self._executor.submit(handle_request, request, self.iterations)
            self._current = KeyGenJob(future)
            self.logger.info("Key generation requested (%d bits)", bits)
            return self._current

    def generate_keys(
        self, password: str, bits: int | None = None, timeout: float | None = None
    ) -> KeyGenResult:
        """Submit and block until the result is available."""
        return self.submit(password, bits).result(timeout)

    async def generate_keys_async(
        self, password: str, bits: int | None = None
    ) -> KeyGenResult:
        """Submit and await the result without blocking the event loop."""
        job = self.submit(password, bits)
        await asyncio.wait([asyncio.wrap_future(job.future)])
        return job.result(timeout=0)
