"""
Async client for the failpoint HTTP endpoint of the target database.

PUT  http://{status_address}/fail/{name}  body=directive  -> enable
DELETE http://{status_address}/fail/{name}                -> disable

The directive is forwarded verbatim. A leading "N*" (e.g. '1*return("x")')
is interpreted by the target, never here.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from logging import Logger

import httpx

from corrupttest.errors import FaultInjectionError
from corrupttest.logging import get_logger
from corrupttest.runtime.run_context import RunMetrics

# Bodies the target returns when a failpoint is already off
ALREADY_DISABLED_MARKERS = ("failpoint is disabled", "failpoint does not exist")


class FailpointController:
    """
    Toggles failpoints on one target process and tracks control-call latency.

    Enabling a failpoint is global to the target, so concurrent workers must
    hold exclusive(name) around their enable -> exercise -> disable window.
    """

    def __init__(
        self,
        status_address: str,
        metrics: RunMetrics,
        logger: Logger | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            status_address: host:port of the target's status server
            metrics: Run counters that receive control-call latency
            logger: Logger instance
            timeout: Per-call timeout in seconds (None waits forever)
            client: Pre-built HTTP client (tests)
        """
        self._status_address = status_address
        self._metrics = metrics
        self._logger = logger or get_logger(__name__)
        self._timeout = timeout
        self._client = client
        self._locks: dict[str, asyncio.Lock] = {}

    def url(self, name: str) -> str:
        return f"http://{self._status_address}/fail/{name}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, name: str, content: str | None = None) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.request(method, self.url(name), content=content)
        except httpx.RequestError as e:
            self._logger.error("Failpoint %s %s failed: %s", method, name, e)
            raise FaultInjectionError(f"failpoint {method} {name} failed: {e}") from e

    async def enable(self, name: str, value: str) -> None:
        """
        Enable failpoint `name` with directive `value`.

        Raises:
            FaultInjectionError: transport failure or non-2xx response
        """
        start_time = time.perf_counter()
        response = await self._send("PUT", name, content=value)
        if not response.is_success:
            self._logger.error(
                "Failed to enable failpoint: status=%d text=%s",
                response.status_code,
                response.text,
            )
            raise FaultInjectionError(
                f"failed to enable failpoint {name}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        self._metrics.add_failpoint_call(time.perf_counter() - start_time)
        self._logger.debug("Enabled failpoint %s=%s", name, value)

    async def disable(self, name: str) -> None:
        """
        Disable failpoint `name`. Disabling an inactive failpoint is not an error.

        Raises:
            FaultInjectionError: transport failure or non-2xx response
        """
        start_time = time.perf_counter()
        response = await self._send("DELETE", name)
        if not response.is_success and not _already_disabled(response):
            self._logger.error(
                "Failed to disable failpoint: status=%d text=%s",
                response.status_code,
                response.text,
            )
            raise FaultInjectionError(
                f"failed to disable failpoint {name}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        self._metrics.add_failpoint_call(time.perf_counter() - start_time)
        self._logger.debug("Disabled failpoint %s", name)

    def lock(self, name: str) -> asyncio.Lock:
        """The lock serializing use of failpoint `name`."""
        if name not in self._locks:
            self._locks[name] = asyncio.Lock()
        return self._locks[name]

    @asynccontextmanager
    async def exclusive(self, name: str) -> AsyncIterator[None]:
        """Hold failpoint `name` for one enable -> exercise -> disable window."""
        async with self.lock(name):
            yield


def _already_disabled(response: httpx.Response) -> bool:
    text = response.text.lower()
    return any(marker in text for marker in ALREADY_DISABLED_MARKERS)
