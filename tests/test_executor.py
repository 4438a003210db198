"""Tests for route execution and status classification."""

import httpx
import pytest

from calamari_backend.calamari.errors import (
    DecodeError,
    EncodeError,
    RemoteError,
    TransportError,
    UnknownRouteError,
)
from calamari_backend.calamari.executor import RequestExecutor
from calamari_backend.calamari.routes import RouteTable
from calamari_backend.calamari.transport import HttpTransport

from conftest import CLUSTER_ID, MON, BrokenStream, FakeCalamari, api_path

POOLS = api_path(f"cluster/{CLUSTER_ID}/pool")


@pytest.fixture
def executor(transport: HttpTransport) -> RequestExecutor:
    return RequestExecutor(RouteTable(), transport)


class TestRequestExecutor:
    """Tests for RequestExecutor.execute."""

    @pytest.mark.asyncio
    async def test_get_ok(self, executor: RequestExecutor, fake_calamari: FakeCalamari) -> None:
        """Test a GET answered with 200 is returned with its body."""
        fake_calamari.on("GET", POOLS, (200, [{"id": 1, "name": "rbd"}]))

        response = await executor.execute("GetPools", MON, {"cluster-fsid": CLUSTER_ID})

        assert response.route == "GetPools"
        assert response.status_code == 200
        assert response.json() == [{"id": 1, "name": "rbd"}]

    @pytest.mark.asyncio
    async def test_get_rejects_accepted(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari
    ) -> None:
        """Test 202 is not a success for a GET."""
        fake_calamari.on("GET", POOLS, (202, {"request_id": "r"}))

        with pytest.raises(RemoteError) as exc_info:
            await executor.execute("GetPools", MON, {"cluster-fsid": CLUSTER_ID})

        assert exc_info.value.status == 202

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [200, 202])
    async def test_post_ok(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari, status: int
    ) -> None:
        """Test 200 and 202 are both successes for a POST."""
        fake_calamari.on("POST", POOLS, (status, {"request_id": "r-1"}))

        response = await executor.execute(
            "CreatePool", MON, {"cluster-fsid": CLUSTER_ID}, {"name": "p1", "size": 3}
        )

        assert response.status_code == status
        assert fake_calamari.calls("POST", POOLS)[0].content == b'{"name": "p1", "size": 3}'

    @pytest.mark.asyncio
    async def test_ok_statuses_override(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari
    ) -> None:
        path = api_path(f"cluster/{CLUSTER_ID}/cli")
        fake_calamari.on("POST", path, (202, {"request_id": "r"}))

        with pytest.raises(RemoteError):
            await executor.execute(
                "ExecCmd", MON, {"cluster-fsid": CLUSTER_ID}, {"command": ["status"]},
                ok_statuses=(200,),
            )

    @pytest.mark.asyncio
    async def test_remote_error_keeps_body(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari
    ) -> None:
        """Test unexpected statuses carry the status and raw body."""
        fake_calamari.on("POST", POOLS, (500, b"internal failure"))

        with pytest.raises(RemoteError) as exc_info:
            await executor.execute("CreatePool", MON, {"cluster-fsid": CLUSTER_ID}, {})

        assert exc_info.value.status == 500
        assert exc_info.value.body == "internal failure"
        assert exc_info.value.details["route"] == "CreatePool"

    @pytest.mark.asyncio
    async def test_encode_error(self, executor: RequestExecutor, fake_calamari: FakeCalamari) -> None:
        """Test an unserialisable body fails before anything is sent."""
        with pytest.raises(EncodeError):
            await executor.execute(
                "CreatePool", MON, {"cluster-fsid": CLUSTER_ID}, {"name": object()}
            )

        assert fake_calamari.requests == []

    @pytest.mark.asyncio
    async def test_transport_error(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari
    ) -> None:
        fake_calamari.on("GET", POOLS, httpx.ConnectTimeout("timed out"))

        with pytest.raises(TransportError):
            await executor.execute("GetPools", MON, {"cluster-fsid": CLUSTER_ID})

    @pytest.mark.asyncio
    async def test_body_read_failure(
        self, executor: RequestExecutor, fake_calamari: FakeCalamari
    ) -> None:
        """Test a body that cannot be read raises DecodeError."""
        fake_calamari.on("GET", POOLS, httpx.Response(200, stream=BrokenStream()))

        with pytest.raises(DecodeError) as exc_info:
            await executor.execute("GetPools", MON, {"cluster-fsid": CLUSTER_ID})

        assert exc_info.value.details["route"] == "GetPools"

    @pytest.mark.asyncio
    async def test_invalid_json(self, executor: RequestExecutor, fake_calamari: FakeCalamari) -> None:
        fake_calamari.on("GET", POOLS, (200, b"<html>not json</html>"))

        response = await executor.execute("GetPools", MON, {"cluster-fsid": CLUSTER_ID})

        with pytest.raises(DecodeError):
            response.json()

    @pytest.mark.asyncio
    async def test_unknown_route(self, executor: RequestExecutor, fake_calamari: FakeCalamari) -> None:
        with pytest.raises(UnknownRouteError):
            await executor.execute("CreateVolume", MON)

        assert fake_calamari.requests == []
