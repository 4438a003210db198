"""Calamari storage backend.

Cluster-management operations are translated into Calamari REST calls
against a monitor host. Mutating calls are accepted asynchronously by
Calamari and only report success once the resulting request completes.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Tuple, Union
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from calamari_backend.calamari.catalog import ClusterCatalog
from calamari_backend.calamari.errors import (
    CalamariError,
    CommandFailed,
    OSDNotFound,
    SchemaError,
)
from calamari_backend.calamari.executor import RequestExecutor, RouteResponse
from calamari_backend.calamari.poller import DEFAULT_POLL_INTERVAL, JobPoller
from calamari_backend.calamari.routes import RouteTable
from calamari_backend.calamari.transport import HttpTransport
from calamari_backend.models.cluster import CommandResponse, PGHealthCounters
from calamari_backend.models.osd import OSD
from calamari_backend.models.pool import Pool

logger = logging.getLogger(__name__)

ClusterId = Union[UUID, str]

# ASCII whitespace only; quoted arguments are not recognised.
_COMMAND_TOKEN = re.compile(r"[^ \t\n\r\x0b\x0c]+")


@contextmanager
def _operation(name: str, **identifiers: Any) -> Iterator[Dict[str, Any]]:
    """Tag adapter errors raised inside the block with the operation context.

    The yielded dict can be extended with identifiers learned mid-operation.
    """
    context = dict(identifiers)
    try:
        yield context
    except CalamariError as e:
        e.details.setdefault("operation", name)
        for key, value in context.items():
            if value is not None:
                e.details.setdefault(key, str(value))
        logger.error(f"{name} failed: {e.message}", extra={"details": e.details})
        raise


def _error_list(e: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]


def _validate(data: Any, target: Any, what: str, route: str) -> Any:
    try:
        return TypeAdapter(target).validate_python(data)
    except ValidationError as e:
        raise SchemaError(
            message=f"Unexpected {what} payload: {e.error_count()} validation error(s)",
            details={"route": route, "errors": _error_list(e)},
        ) from e


def _decode(response: RouteResponse, target: Any, what: str) -> Any:
    return _validate(response.json(), target, what, response.route)


def split_command(cmd: str) -> List[str]:
    """Split a command line on ASCII whitespace."""
    return _COMMAND_TOKEN.findall(cmd)


class CalamariBackend:
    """Storage backend that drives a cluster through the Calamari REST API."""

    def __init__(
        self,
        catalog: ClusterCatalog,
        transport: Union[HttpTransport, None] = None,
        routes: Union[RouteTable, None] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: Union[float, None] = None,
    ) -> None:
        """Initialize CalamariBackend.

        Args:
            catalog: Cluster catalog used to resolve cluster names
            transport: HTTP transport; a default one is created if omitted
            routes: Route catalog; the default Calamari routes if omitted
            poll_interval: Seconds between request status queries
            poll_timeout: Default deadline for mutating calls, None for none
        """
        self.catalog = catalog
        self.transport = transport or HttpTransport()
        self.routes = routes or RouteTable()
        self.executor = RequestExecutor(self.routes, self.transport)
        self.poller = JobPoller(self.executor, interval=poll_interval, timeout=poll_timeout)

    @classmethod
    def from_settings(cls, settings: Any) -> "CalamariBackend":
        """Build a backend from application settings."""
        return cls(
            catalog=ClusterCatalog(settings.catalog_db_path),
            transport=HttpTransport(
                port=settings.calamari_api_port,
                prefix=settings.calamari_api_prefix,
                timeout=settings.request_timeout,
            ),
            poll_interval=settings.job_poll_interval,
            poll_timeout=settings.job_poll_timeout,
        )

    async def close(self) -> None:
        await self.transport.close()

    async def _submit(
        self,
        route_name: str,
        mon: str,
        substitutions: Mapping[str, Any],
        body: Any = None,
        timeout: Union[float, None] = None,
    ) -> bool:
        response = await self.executor.execute(route_name, mon, substitutions, body)
        return await self.poller.wait(mon, response, timeout=timeout)

    # Pools

    async def create_pool(
        self,
        name: str,
        mon: str,
        cluster_name: str,
        pg_num: int,
        replicas: int,
        quota_max_objects: int = 0,
        quota_max_bytes: int = 0,
        timeout: Union[float, None] = None,
    ) -> bool:
        """Create a pool and wait for Calamari to finish creating it.

        Args:
            name: Pool name
            mon: Monitor host
            cluster_name: Cluster name, resolved through the catalog
            pg_num: Placement group count, also used as pgp_num
            replicas: Replica count
            quota_max_objects: Object quota, 0 for none
            quota_max_bytes: Byte quota, 0 for none
            timeout: Deadline for the request to complete

        Returns:
            True once the pool exists

        Raises:
            ClusterNotFound: If the cluster name is unknown
            JobFailed: If Calamari reports the creation failed
        """
        with _operation("create_pool", cluster_name=cluster_name, pool_name=name) as context:
            cluster_id = await self.catalog.resolve(cluster_name)
            context["cluster_id"] = cluster_id
            pool = {
                "name": name,
                "size": replicas,
                "quota_max_objects": quota_max_objects,
                "quota_max_bytes": quota_max_bytes,
                "pg_num": int(pg_num),
                "pgp_num": int(pg_num),
            }
            return await self._submit(
                "CreatePool", mon, {"cluster-fsid": cluster_id}, pool, timeout
            )

    async def update_pool(
        self,
        mon: str,
        cluster_id: ClusterId,
        pool_id: int,
        params: Mapping[str, Any],
        timeout: Union[float, None] = None,
    ) -> bool:
        """Apply ``params`` verbatim to a pool and wait for completion."""
        with _operation("update_pool", cluster_id=cluster_id, pool_id=pool_id):
            return await self._submit(
                "UpdatePool",
                mon,
                {"cluster-fsid": cluster_id, "pool-id": int(pool_id)},
                dict(params),
                timeout,
            )

    async def remove_pool(
        self,
        mon: str,
        cluster_id: ClusterId,
        cluster_name: str,
        pool_name: str,
        pool_id: int,
        timeout: Union[float, None] = None,
    ) -> bool:
        """Delete a pool and wait for completion."""
        with _operation(
            "remove_pool",
            cluster_id=cluster_id,
            cluster_name=cluster_name,
            pool_name=pool_name,
            pool_id=pool_id,
        ):
            return await self._submit(
                "RemovePool",
                mon,
                {"cluster-fsid": cluster_id, "pool-id": int(pool_id)},
                timeout=timeout,
            )

    async def get_pools(self, mon: str, cluster_id: ClusterId) -> List[Pool]:
        with _operation("get_pools", cluster_id=cluster_id):
            response = await self.executor.execute("GetPools", mon, {"cluster-fsid": cluster_id})
            return _decode(response, List[Pool], "pool list")

    # OSDs

    async def get_osds(self, mon: str, cluster_id: ClusterId) -> List[OSD]:
        with _operation("get_osds", cluster_id=cluster_id):
            response = await self.executor.execute("GetOSDs", mon, {"cluster-fsid": cluster_id})
            return _decode(response, List[OSD], "OSD list")

    async def get_osd(self, mon: str, cluster_id: ClusterId, osd_id: Union[int, str]) -> OSD:
        """Fetch one OSD.

        Raises:
            OSDNotFound: If Calamari returns an empty list
        """
        with _operation("get_osd", cluster_id=cluster_id, osd_id=osd_id):
            response = await self.executor.execute(
                "GetOSD", mon, {"cluster-fsid": cluster_id, "osd-id": osd_id}
            )
            data = response.json()
            if isinstance(data, dict):
                data = [data]
            osds = _validate(data, List[OSD], "OSD", response.route)
            if not osds:
                raise OSDNotFound(str(osd_id))
            return osds[0]

    async def update_osd(
        self,
        mon: str,
        cluster_id: ClusterId,
        osd_id: Union[int, str],
        params: Mapping[str, Any],
        timeout: Union[float, None] = None,
    ) -> bool:
        """Apply ``params`` verbatim to an OSD and wait for completion."""
        with _operation("update_osd", cluster_id=cluster_id, osd_id=osd_id):
            return await self._submit(
                "UpdateOSD",
                mon,
                {"cluster-fsid": cluster_id, "osd-id": osd_id},
                dict(params),
                timeout,
            )

    # Placement groups

    async def get_pg_count(self, mon: str, cluster_id: ClusterId) -> Dict[str, int]:
        """Count placement groups per health severity.

        Returns:
            ``{"critical": n, "warn": n, "ok": n}``

        Raises:
            SchemaError: If the ``pg`` section or any severity is missing
        """
        with _operation("get_pg_count", cluster_id=cluster_id):
            response = await self.executor.execute(
                "GetPGCount", mon, {"cluster-fsid": cluster_id}
            )
            summary = response.json()
            if not isinstance(summary, dict) or not isinstance(summary.get("pg"), dict):
                raise SchemaError(
                    f"Failed to fetch number of pgs for the cluster {cluster_id}",
                    details={"route": response.route},
                )
            try:
                counters = PGHealthCounters.model_validate(summary["pg"])
            except ValidationError as e:
                raise SchemaError(
                    f"Failed to fetch pg counts by severity for the cluster {cluster_id}",
                    details={"route": response.route, "errors": _error_list(e)},
                ) from e
            return counters.counts()

    async def get_pg_summary(self, mon: str, cluster_id: ClusterId) -> Dict[str, Any]:
        """Return the placement-group summary exactly as Calamari reports it."""
        with _operation("get_pg_summary", cluster_id=cluster_id):
            response = await self.executor.execute(
                "PGStatistics", mon, {"cluster-fsid": cluster_id}
            )
            return _decode(response, Dict[str, Any], "PG summary")

    # Commands

    async def exec_cmd(self, mon: str, cluster_id: ClusterId, cmd: str) -> Tuple[bool, str]:
        """Run a raw ceph command through Calamari.

        The command is split on whitespace, so an argument cannot itself
        contain spaces.

        Returns:
            ``(True, stdout)``

        Raises:
            ValueError: If the command is empty
            RemoteError: If Calamari does not answer 200
            CommandFailed: If the command exits non-zero
        """
        tokens = split_command(cmd)
        if not tokens:
            raise ValueError("command must not be empty")

        with _operation("exec_cmd", cluster_id=cluster_id, command=cmd):
            response = await self.executor.execute(
                "ExecCmd",
                mon,
                {"cluster-fsid": cluster_id},
                {"command": tokens},
                ok_statuses=(200,),
            )
            result: CommandResponse = _decode(response, CommandResponse, "command response")
            if result.status != 0:
                raise CommandFailed(result.error, result.status)
            return True, result.out

    # Operations Calamari handles outside this backend

    async def create_cluster(self, cluster_name: str, fsid: ClusterId, mons: List[Any]) -> bool:
        return True

    async def add_mon(self, cluster_name: str, mons: List[Any]) -> bool:
        return True

    async def start_mon(self, nodes: List[str]) -> bool:
        return True

    async def add_osd(self, cluster_name: str, osd: Any) -> Dict[str, List[str]]:
        return {}

    async def list_pool_names(self, mon: str, cluster_name: str) -> List[str]:
        return []

    async def get_cluster_status(self, mon: str, cluster_id: ClusterId, cluster_name: str) -> str:
        return ""

    async def get_cluster_stats(self, mon: str, cluster_name: str) -> Dict[str, Any]:
        return {}

    async def get_osd_details(self, mon: str, cluster_name: str) -> List[Dict[str, Any]]:
        return []

    async def get_object_count(self, mon: str, cluster_name: str) -> Dict[str, int]:
        return {}
