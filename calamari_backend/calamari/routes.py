"""Calamari REST route catalog.

Routes are immutable. Binding placeholders returns a new ``Route`` and never
touches the catalog entry, so one ``RouteTable`` can be shared by any number
of concurrent requests.
"""

import dataclasses
import re
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Tuple, Union

from calamari_backend.calamari.errors import UnboundPlaceholderError, UnknownRouteError

API_PORT = 8002
API_PREFIX = "api"

METHODS = ("GET", "POST", "PATCH", "DELETE")

_PLACEHOLDER = re.compile(r"\{[^{}]+\}")


@dataclasses.dataclass(frozen=True)
class Route:
    """A named endpoint template."""

    name: str
    method: str
    version: int
    pattern: str

    @property
    def placeholders(self) -> Tuple[str, ...]:
        """Placeholder names still present in the pattern, without braces."""
        return tuple(m.group(0)[1:-1] for m in _PLACEHOLDER.finditer(self.pattern))

    @property
    def mutating(self) -> bool:
        return self.method != "GET"

    def bind(self, substitutions: Union[Mapping[str, Any], None] = None) -> "Route":
        """Substitute placeholders and return the bound route.

        Each supplied placeholder is replaced once. Values are inserted
        verbatim, without percent-encoding.

        Args:
            substitutions: Placeholder name (without braces) to value

        Returns:
            A new Route whose pattern has no placeholders left

        Raises:
            UnboundPlaceholderError: If a supplied placeholder is not in the
                pattern, or a placeholder is left over after binding
        """
        pattern = self.pattern
        for key, value in (substitutions or {}).items():
            token = "{" + key + "}"
            if token not in pattern:
                raise UnboundPlaceholderError(self.name, pattern, token)
            pattern = pattern.replace(token, str(value), 1)

        leftover = _PLACEHOLDER.search(pattern)
        if leftover:
            raise UnboundPlaceholderError(self.name, pattern, leftover.group(0))

        return dataclasses.replace(self, pattern=pattern)


DEFAULT_ROUTES: Tuple[Route, ...] = (
    Route("CreatePool", "POST", 2, "cluster/{cluster-fsid}/pool"),
    Route("GetPools", "GET", 2, "cluster/{cluster-fsid}/pool"),
    Route("UpdatePool", "PATCH", 2, "cluster/{cluster-fsid}/pool/{pool-id}"),
    Route("RemovePool", "DELETE", 2, "cluster/{cluster-fsid}/pool/{pool-id}"),
    Route("GetOSDs", "GET", 2, "cluster/{cluster-fsid}/osd"),
    Route("GetOSD", "GET", 2, "cluster/{cluster-fsid}/osd/{osd-id}"),
    Route("UpdateOSD", "PATCH", 2, "cluster/{cluster-fsid}/osd/{osd-id}"),
    Route("ExecCmd", "POST", 2, "cluster/{cluster-fsid}/cli"),
    Route("GetPGCount", "GET", 1, "cluster/{cluster-fsid}/health_counters"),
    Route("PGStatistics", "GET", 2, "cluster/{cluster-fsid}/sync_object/pg_summary"),
    Route("GetRequestStatus", "GET", 2, "request/{request-fsid}"),
)


class RouteTable:
    """Read-only lookup of routes by name."""

    def __init__(self, routes: Iterable[Route] = DEFAULT_ROUTES) -> None:
        """Initialize RouteTable.

        Args:
            routes: Routes to register; later entries win on duplicate names
        """
        self._routes: Mapping[str, Route] = MappingProxyType({r.name: r for r in routes})

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __iter__(self):
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)

    def get(self, name: str) -> Route:
        """Look up a route.

        Raises:
            UnknownRouteError: If no route has that name
        """
        try:
            return self._routes[name]
        except KeyError:
            raise UnknownRouteError(name) from None

    def bind(self, name: str, substitutions: Union[Mapping[str, Any], None] = None) -> Route:
        """Look up a route and bind its placeholders."""
        return self.get(name).bind(substitutions)
