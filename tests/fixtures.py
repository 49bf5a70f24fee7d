"""
Test Fixtures

Helpers for stubbing the studio API with httpx.MockTransport.
No test touches the network.
"""

from typing import Callable, List

import httpx


BASE_URL = "http://studio.test"


class RecordingHandler:
    """MockTransport handler that records requests and delegates to ``respond``."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self._respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def targets(self) -> List[str]:
        """Path plus query string of every request, in order."""
        return [r.url.raw_path.decode("ascii") for r in self.requests]


def json_response(payload, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=payload)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
