"""Pytest configuration and fixtures for Calamari backend tests."""

import os
import time
from typing import Any, Dict, List, Tuple, Union

import httpx
import pytest

# Must be set before the application modules are imported
os.environ.setdefault("CALAMARI_AUDIT_LOG_ENABLED", "false")

from calamari_backend.calamari.backend import CalamariBackend  # noqa: E402
from calamari_backend.calamari.catalog import ClusterCatalog  # noqa: E402
from calamari_backend.calamari.transport import HttpTransport  # noqa: E402

CLUSTER_ID = "00000000-0000-0000-0000-0000000000aa"
MON = "mon-1"

Reply = Union[Tuple[int, Any], Exception, httpx.Response]


class FakeCalamari:
    """In-process Calamari API served through httpx.MockTransport.

    Replies are queued per (method, path). Once only one reply is left for
    a key it is repeated for every further call.
    """

    def __init__(self) -> None:
        self.replies: Dict[Tuple[str, str], List[Reply]] = {}
        self.requests: List[httpx.Request] = []
        self.times: List[float] = []

    def on(self, method: str, path: str, *replies: Reply) -> None:
        self.replies.setdefault((method, path), []).extend(replies)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def call_times(self, method: str, path: str) -> List[float]:
        return [
            t for r, t in zip(self.requests, self.times)
            if r.method == method and r.url.path == path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.times.append(time.monotonic())

        queue = self.replies.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found"})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply

        status, body = reply
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)


class BrokenStream(httpx.AsyncByteStream):
    """Response body that fails part way through reading."""

    async def __aiter__(self):
        raise httpx.ReadError("Connection reset by peer")
        yield b""  # pragma: no cover


def api_path(pattern: str, version: int = 2) -> str:
    """Path on the Calamari API for a bound route pattern."""
    return f"/api/v{version}/{pattern}"


def submitted(request_id: str) -> Tuple[int, Dict[str, Any]]:
    return 200, {"id": request_id, "state": "submitted", "error": False, "error_message": ""}


def complete(request_id: str, error_message: str = "") -> Tuple[int, Dict[str, Any]]:
    return 200, {
        "id": request_id,
        "state": "complete",
        "error": bool(error_message),
        "error_message": error_message,
    }


@pytest.fixture
def fake_calamari() -> FakeCalamari:
    """Fake Calamari API."""
    return FakeCalamari()


@pytest.fixture
def transport(fake_calamari: FakeCalamari) -> HttpTransport:
    """Transport wired to the fake Calamari API."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_calamari.handler))
    return HttpTransport(client=client)


@pytest.fixture
def catalog(tmp_path) -> ClusterCatalog:
    """Cluster catalog holding cluster 'c1'."""
    catalog = ClusterCatalog(tmp_path / "clusters.db")
    catalog.init_db()
    catalog.add_cluster("c1", CLUSTER_ID)
    return catalog


@pytest.fixture
def backend(catalog: ClusterCatalog, transport: HttpTransport) -> CalamariBackend:
    """Backend that polls without delay."""
    return CalamariBackend(catalog=catalog, transport=transport, poll_interval=0)
