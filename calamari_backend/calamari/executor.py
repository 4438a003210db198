"""Route-level request execution."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Collection, Mapping, Union

import httpx

from calamari_backend.calamari.errors import DecodeError, EncodeError, RemoteError
from calamari_backend.calamari.routes import RouteTable
from calamari_backend.calamari.transport import HttpTransport

logger = logging.getLogger(__name__)

READ_OK_STATUSES = (200,)
WRITE_OK_STATUSES = (200, 202)


@dataclass(frozen=True)
class RouteResponse:
    """A fully read response to a route request."""

    route: str
    status_code: int
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            DecodeError: If the body is not valid JSON
        """
        try:
            return json.loads(self.content)
        except ValueError as e:
            raise DecodeError(
                message=f"Error parsing response data: {e}",
                details={"route": self.route, "body": self.text},
            ) from e


class RequestExecutor:
    """Binds a route, sends it and classifies the response status."""

    def __init__(self, routes: RouteTable, transport: HttpTransport) -> None:
        self.routes = routes
        self.transport = transport

    async def execute(
        self,
        route_name: str,
        mon: str,
        substitutions: Union[Mapping[str, Any], None] = None,
        body: Any = None,
        ok_statuses: Union[Collection[int], None] = None,
    ) -> RouteResponse:
        """Execute a named route against a monitor.

        Args:
            route_name: Route catalog name (e.g. ``CreatePool``)
            mon: Monitor host
            substitutions: Placeholder values for the route pattern
            body: JSON-serialisable request body, or None for no body
            ok_statuses: Accepted HTTP statuses; defaults to 200 for GET and
                200/202 for mutating methods

        Returns:
            The read response

        Raises:
            EncodeError: If the body cannot be serialised
            TransportError: On network failure
            DecodeError: If the response body cannot be read
            RemoteError: On any other HTTP status
            ProgrammerError: On an unknown route or bad binding
        """
        route = self.routes.bind(route_name, substitutions)

        payload = b""
        if body is not None:
            try:
                payload = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise EncodeError(
                    message=f"Error forming request body: {e}",
                    details={"route": route_name},
                ) from e

        response = await self.transport.send(route, mon, payload)
        try:
            content = await response.aread()
        except httpx.HTTPError as e:
            raise DecodeError(
                message=f"Error reading response data: {e}",
                details={"route": route_name, "status": response.status_code},
            ) from e
        finally:
            await response.aclose()

        if ok_statuses is None:
            ok_statuses = WRITE_OK_STATUSES if route.mutating else READ_OK_STATUSES

        result = RouteResponse(route=route_name, status_code=response.status_code, content=content)
        if result.status_code not in ok_statuses:
            logger.error(f"{route_name} returned HTTP {result.status_code}: {result.text}")
            raise RemoteError(result.status_code, result.text, details={"route": route_name})

        logger.debug(f"{route_name} returned HTTP {result.status_code}")
        return result
