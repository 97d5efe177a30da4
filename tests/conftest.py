from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
import pytest


class HttpMock:
    """Registers canned responses per URL and records every request."""

    def __init__(self) -> None:
        self._routes: Dict[str, Tuple[int, str, Optional[Exception]]] = {}
        self.calls: List[str] = []

    def get(self, url: str, *, text: str = "", status_code: int = 200, exc: Optional[Exception] = None) -> None:
        self._routes[url] = (status_code, text, exc)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self._handle))

    def run(self, call: Callable[[httpx.AsyncClient], Awaitable]):
        async def scenario():
            async with self.client() as client:
                return await call(client)

        return asyncio.run(scenario())

    def _handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if url not in self._routes:
            return httpx.Response(404, text="not mocked")
        status_code, text, exc = self._routes[url]
        if exc is not None:
            raise exc
        return httpx.Response(status_code, text=text)


@pytest.fixture()
def http() -> HttpMock:
    return HttpMock()

