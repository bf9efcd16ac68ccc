"""Shared test fixtures for the watson_client test suite.

WHY: Every binding test does the same thing: build a service against a
fake Watson server, call one method, and inspect the request that went
out. Centralizing the fake server here keeps the tests down to their
assertions.

HOW: RecordingTransport is an httpx.MockTransport handler that records
each request and replays a canned response registered per (method, path).
Services are built with that transport, so no network is ever touched.
The `call` fixture runs one service method inside `async with` via
asyncio.run().

RULES:
- Unregistered routes answer 200 with an empty JSON object
- Paths are matched decoded (request.url.path)
- Each test gets its own transport (no shared state between tests)
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from watson_client.conversation import ConversationV1
from watson_client.discovery import DiscoveryV1
from watson_client.speech_to_text import SpeechToTextV1

SERVICE_URL = "http://ibm.com"
USERNAME = "batman"
PASSWORD = "bruce-wayne"


class RecordingTransport:
    """Fake Watson server: records requests, replays canned responses."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Tuple[int, Dict[str, Any]]] = {}

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if json is not None:
            kwargs: Dict[str, Any] = {"json": json, "headers": headers}
        else:
            kwargs = {"content": content or b"", "headers": headers}
        self._routes[(method, path)] = (status_code, kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(200, json={})
        status_code, kwargs = route
        return httpx.Response(status_code, **kwargs)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def server() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def call():
    """Run one async service method inside the service's context manager."""

    def _call(service, method_name: str, *args, **kwargs):
        async def _run():
            async with service:
                return await getattr(service, method_name)(*args, **kwargs)

        return asyncio.run(_run())

    return _call


@pytest.fixture
def speech_to_text(server) -> SpeechToTextV1:
    return SpeechToTextV1(
        username=USERNAME,
        password=PASSWORD,
        url=SERVICE_URL,
        transport=server.transport(),
    )


@pytest.fixture
def conversation(server) -> ConversationV1:
    return ConversationV1(
        username=USERNAME,
        password=PASSWORD,
        url=SERVICE_URL,
        version_date=ConversationV1.VERSION_DATE_2017_02_03,
        transport=server.transport(),
    )


@pytest.fixture
def discovery(server) -> DiscoveryV1:
    return DiscoveryV1(
        username=USERNAME,
        password=PASSWORD,
        url=SERVICE_URL,
        version_date=DiscoveryV1.VERSION_DATE_2016_12_15,
        transport=server.transport(),
    )
