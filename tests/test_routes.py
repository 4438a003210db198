"""Tests for the Calamari route catalog."""

import dataclasses
from concurrent.futures import ThreadPoolExecutor

import pytest

from calamari_backend.calamari.errors import (
    ProgrammerError,
    UnboundPlaceholderError,
    UnknownRouteError,
)
from calamari_backend.calamari.routes import DEFAULT_ROUTES, Route, RouteTable

EXPECTED_ROUTES = {
    "CreatePool": ("POST", 2, "cluster/{cluster-fsid}/pool"),
    "GetPools": ("GET", 2, "cluster/{cluster-fsid}/pool"),
    "UpdatePool": ("PATCH", 2, "cluster/{cluster-fsid}/pool/{pool-id}"),
    "RemovePool": ("DELETE", 2, "cluster/{cluster-fsid}/pool/{pool-id}"),
    "GetOSDs": ("GET", 2, "cluster/{cluster-fsid}/osd"),
    "GetOSD": ("GET", 2, "cluster/{cluster-fsid}/osd/{osd-id}"),
    "UpdateOSD": ("PATCH", 2, "cluster/{cluster-fsid}/osd/{osd-id}"),
    "ExecCmd": ("POST", 2, "cluster/{cluster-fsid}/cli"),
    "GetPGCount": ("GET", 1, "cluster/{cluster-fsid}/health_counters"),
    "PGStatistics": ("GET", 2, "cluster/{cluster-fsid}/sync_object/pg_summary"),
    "GetRequestStatus": ("GET", 2, "request/{request-fsid}"),
}


class TestRouteTable:
    """Tests for RouteTable lookups."""

    def test_default_catalog(self) -> None:
        """Test the default table holds exactly the Calamari routes."""
        table = RouteTable()

        assert len(table) == len(EXPECTED_ROUTES)
        for route in table:
            assert (route.method, route.version, route.pattern) == EXPECTED_ROUTES[route.name]

    def test_contains(self) -> None:
        table = RouteTable()
        assert "CreatePool" in table
        assert "CreateVolume" not in table

    def test_unknown_route(self) -> None:
        """Test looking up an unknown route raises a programmer error."""
        table = RouteTable()

        with pytest.raises(UnknownRouteError) as exc_info:
            table.get("CreateVolume")

        assert isinstance(exc_info.value, ProgrammerError)
        assert exc_info.value.details["route"] == "CreateVolume"

    def test_later_duplicate_wins(self) -> None:
        table = RouteTable(DEFAULT_ROUTES + (Route("GetPools", "GET", 3, "pools"),))
        assert table.get("GetPools").version == 3

    def test_bind_leaves_catalog_untouched(self) -> None:
        """Test binding returns a new route and keeps the catalog pattern."""
        table = RouteTable()

        bound = table.bind("UpdatePool", {"cluster-fsid": "abc", "pool-id": 7})

        assert bound.pattern == "cluster/abc/pool/7"
        assert table.get("UpdatePool").pattern == "cluster/{cluster-fsid}/pool/{pool-id}"

    def test_concurrent_bindings_are_independent(self) -> None:
        """Test parallel bindings of one route never see each other's values."""
        table = RouteTable()

        def bind(pool_id: int) -> str:
            return table.bind("RemovePool", {"cluster-fsid": "c", "pool-id": pool_id}).pattern

        with ThreadPoolExecutor(max_workers=8) as pool:
            patterns = list(pool.map(bind, range(100)))

        assert patterns == [f"cluster/c/pool/{i}" for i in range(100)]
        assert table.get("RemovePool").pattern == "cluster/{cluster-fsid}/pool/{pool-id}"


class TestRouteBind:
    """Tests for Route.bind."""

    def test_every_route_binds_completely(self) -> None:
        """Test supplying every placeholder leaves no braces in any route."""
        for route in DEFAULT_ROUTES:
            bound = route.bind({name: "x" for name in route.placeholders})

            assert "{" not in bound.pattern
            assert "}" not in bound.pattern
            assert bound.method == route.method
            assert bound.version == route.version

    def test_placeholders(self) -> None:
        route = RouteTable().get("GetOSD")
        assert route.placeholders == ("cluster-fsid", "osd-id")

    def test_missing_placeholder(self) -> None:
        """Test a placeholder left unbound is an error."""
        route = RouteTable().get("UpdatePool")

        with pytest.raises(UnboundPlaceholderError) as exc_info:
            route.bind({"cluster-fsid": "abc"})

        assert exc_info.value.details["placeholder"] == "{pool-id}"
        assert exc_info.value.details["route"] == "UpdatePool"

    def test_unknown_placeholder(self) -> None:
        """Test supplying a placeholder the pattern lacks is an error."""
        route = RouteTable().get("GetPools")

        with pytest.raises(UnboundPlaceholderError) as exc_info:
            route.bind({"cluster-fsid": "abc", "pool-id": 1})

        assert exc_info.value.details["placeholder"] == "{pool-id}"

    def test_values_inserted_verbatim(self) -> None:
        route = RouteTable().get("GetRequestStatus")
        assert route.bind({"request-fsid": "a b/c"}).pattern == "request/a b/c"

    def test_route_is_immutable(self) -> None:
        route = RouteTable().get("GetPools")

        with pytest.raises(dataclasses.FrozenInstanceError):
            route.pattern = "cluster/abc/pool"  # type: ignore[misc]

    def test_mutating(self) -> None:
        table = RouteTable()
        assert not table.get("GetPools").mutating
        assert table.get("CreatePool").mutating
        assert table.get("UpdateOSD").mutating
        assert table.get("RemovePool").mutating
