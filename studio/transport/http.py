"""
HTTP Transport

Performs a single request/response exchange against the studio API.

GUARANTEES:
===========
1. One call = one exchange; no retries, no redirects replayed silently
2. Non-2xx status always raises HttpError(status, message)
3. JSON responses are decoded; anything else yields an empty dict
4. Cookies persist on the client, so every call is credentialed
"""

from __future__ import annotations
from typing import Any, Optional
import logging
import time

import httpx

from ..config import TransportConfig
from ..contracts.errors import DecodeError, HttpError, NetworkError
from ..observability import ObservabilityEngine, RequestOutcome


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class Transport:
    """
    Async JSON transport over ``httpx.AsyncClient``.

    The client is created lazily unless one is injected (tests inject a
    client built on ``httpx.MockTransport`` or ``httpx.ASGITransport``).
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        observability: Optional[ObservabilityEngine] = None
    ):
        self._config = config or TransportConfig()
        self._client = client
        self._owns_client = client is None
        self._observability = observability or ObservabilityEngine()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout_seconds,
                headers={'User-Agent': self._config.user_agent}
            )
        return self._client

    async def send(self, method: str, target: str, body: Any = None) -> Any:
        """
        Perform one exchange.

        ``body`` is sent as JSON when it is not None (an empty dict is
        still a body). Returns the decoded JSON, or ``{}`` when the
        response does not declare JSON.
        """
        method = method.upper()
        kwargs = {}
        if body is not None:
            kwargs['json'] = body
        if self._client is not None and not self._owns_client:
            kwargs['headers'] = {'User-Agent': self._config.user_agent}

        started = time.perf_counter()
        try:
            response = await self.client.request(method, target, **kwargs)
        except httpx.TransportError as e:
            self._record(method, target, RequestOutcome.NETWORK_ERROR, started, detail=str(e))
            logger.warning("%s %s failed: %s", method, target, e)
            raise NetworkError(f"{method} {target} failed: {e}", target=target) from e

        if not response.is_success:
            message = response.text or response.reason_phrase
            self._record(method, target, RequestOutcome.HTTP_ERROR, started,
                         status=response.status_code, detail=message)
            logger.warning("%s %s -> %s", method, target, response.status_code)
            raise HttpError(response.status_code, message)

        content_type = response.headers.get('content-type', '')
        if JSON_CONTENT_TYPE not in content_type:
            self._record(method, target, RequestOutcome.SUCCESS, started, status=response.status_code)
            logger.debug("%s %s -> %s (non-JSON body ignored)", method, target, response.status_code)
            return {}

        try:
            payload = response.json()
        except ValueError as e:
            self._record(method, target, RequestOutcome.DECODE_ERROR, started,
                         status=response.status_code, detail=str(e))
            raise DecodeError(
                f"{method} {target} declared JSON but body did not parse: {e}",
                content_type=content_type
            ) from e

        self._record(method, target, RequestOutcome.SUCCESS, started, status=response.status_code)
        logger.debug("%s %s -> %s", method, target, response.status_code)
        return payload

    async def aclose(self):
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _record(
        self,
        method: str,
        target: str,
        outcome: RequestOutcome,
        started: float,
        status: Optional[int] = None,
        detail: str = ""
    ):
        duration_ms = (time.perf_counter() - started) * 1000
        self._observability.record_request(
            method=method,
            target=target,
            outcome=outcome,
            duration_ms=duration_ms,
            status=status,
            detail=detail
        )
