"""
chains/providers.py - JSON-RPC transport.

Provides RPC access to a single node endpoint with:
- Endpoint validation on dial
- Per-call deadline covering connect, send and the whole response
- Connection pooling (one shared httpx client)
- Latency tracking

No retries and no failover: a failed call is surfaced to the caller,
which owns retry policy.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from core.constants import JSONRPC_VERSION
from core.exceptions import RPCConnectionError, RPCError, RPCTimeoutError
from core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


class RPCProvider:
    """
    JSON-RPC 2.0 client bound to one endpoint.

    The underlying httpx client is safe for concurrent calls. close() is
    idempotent; calls started after close() fail with RPCError.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 25,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._request_id = 0
        self._client: httpx.AsyncClient | None = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            limits=httpx.Limits(max_connections=10),
            transport=transport,
        )
        self.stats = RPCStats(url=url)

    @classmethod
    def dial(
        cls,
        url: str,
        timeout_seconds: float = 25,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RPCProvider":
        """
        Validate the endpoint and open a client for it.

        Raises:
            RPCConnectionError: If the URL cannot be used as an RPC endpoint
        """
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise RPCConnectionError(
                f"Invalid RPC endpoint: {e}",
                details={"url": url},
            ) from e

        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise RPCConnectionError(
                f"Unsupported RPC endpoint {url!r}, expected http(s)://host[:port]",
                details={"url": url},
            )

        return cls(url, timeout_seconds=timeout_seconds, transport=transport)

    @property
    def closed(self) -> bool:
        return self._client is None

    async def close(self) -> None:
        """Close the HTTP client."""
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _fail(self, error: str) -> None:
        self.stats.failed_requests += 1
        self.stats.last_error = error

    async def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make one RPC call.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPCResponse with result and metadata

        Raises:
            RPCTimeoutError: If the call exceeds the timeout
            RPCError: On transport failure or a JSON-RPC error object
        """
        client = self._client
        if client is None:
            raise RPCError("RPC client is closed", details={"method": method})

        self.stats.total_requests += 1
        payload = {
            "jsonrpc": JSONRPC_VERSION,
            "method": method,
            "params": params or [],
            "id": self._next_request_id(),
        }

        start_ms = int(time.time() * 1000)

        try:
            resp = await asyncio.wait_for(
                client.post(self.url, json=payload),
                self.timeout_seconds,
            )
            resp.raise_for_status()
            body = resp.json()
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            latency_ms = int(time.time() * 1000) - start_ms
            self._fail(f"Timeout after {latency_ms}ms")
            logger.debug(
                "RPC timeout",
                extra={"context": {"method": method, "latency_ms": latency_ms}},
            )
            raise RPCTimeoutError(
                f"RPC call {method} timed out after {self.timeout_seconds}s",
                details={"url": self.url, "method": method},
            ) from e
        except httpx.HTTPError as e:
            self._fail(str(e))
            logger.debug(
                "RPC transport error",
                extra={"context": {"method": method, "error": str(e)}},
            )
            raise RPCError(
                f"RPC call {method} failed: {e}",
                details={"url": self.url, "method": method},
            ) from e
        except ValueError as e:
            self._fail(f"Invalid JSON: {e}")
            raise RPCError(
                f"RPC call {method} returned invalid JSON",
                details={"url": self.url, "method": method},
            ) from e

        latency_ms = int(time.time() * 1000) - start_ms

        if not isinstance(body, dict):
            self._fail("Response is not a JSON-RPC object")
            raise RPCError(
                f"RPC call {method} returned a non-object response",
                details={"url": self.url, "method": method},
            )

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = error.get("message", str(error))
                details = {
                    "url": self.url,
                    "method": method,
                    "rpc_code": error.get("code"),
                    "rpc_data": error.get("data"),
                }
            else:
                message = str(error)
                details = {"url": self.url, "method": method}
            self._fail(message)
            logger.debug(
                "RPC error",
                extra={"context": {"method": method, "error": message}},
            )
            raise RPCError(f"RPC error: {message}", details=details)

        self.stats.successful_requests += 1
        self.stats.total_latency_ms += latency_ms
        self.stats.last_success_ts = int(time.time() * 1000)

        return RPCResponse(
            result=body.get("result"),
            latency_ms=latency_ms,
            endpoint_used=self.url,
        )

    def get_stats_summary(self) -> dict:
        """Get statistics summary for the endpoint."""
        s = self.stats
        return {
            "url": s.url,
            "total_requests": s.total_requests,
            "success_rate": round(s.success_rate, 3),
            "avg_latency_ms": s.avg_latency_ms,
            "last_error": s.last_error,
        }
