"""HTTP transport for the Calamari REST API.

Every request goes to ``http://<mon>:<port>/<prefix>/v<version>/<pattern>``.
Responses are returned unread (streamed); the caller owns reading the body
and closing the response.
"""

import logging
from typing import Any, Union

import httpx

from calamari_backend.calamari.errors import TransportError, UnsupportedMethodError
from calamari_backend.calamari.routes import API_PORT, API_PREFIX, Route

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class HttpTransport:
    """Issues method-specific HTTP calls against a monitor host."""

    def __init__(
        self,
        port: int = API_PORT,
        prefix: str = API_PREFIX,
        timeout: float = 30.0,
        client: Union[httpx.AsyncClient, None] = None,
    ) -> None:
        """Initialize HttpTransport.

        Args:
            port: Calamari API port on the monitor
            prefix: URL prefix in front of the version segment
            timeout: Per-request timeout in seconds
            client: Pre-built client to use instead of creating one lazily
        """
        self.port = port
        self.prefix = prefix.strip("/")
        self.timeout = timeout
        self.client = client

    def build_url(self, mon: str, route: Route) -> str:
        """Build the full URL for a bound route."""
        return f"http://{mon}:{self.port}/{self.prefix}/v{route.version}/{route.pattern}"

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": JSON_CONTENT_TYPE},
            )
        return self.client

    async def _request(
        self,
        method: str,
        url: str,
        content_type: Union[str, None] = None,
        body: Union[bytes, None] = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        headers = {"Content-Type": content_type} if content_type else None
        request = client.build_request(method, url, content=body, headers=headers)

        logger.info(f"{method} {url}")
        try:
            return await client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(
                message=f"Error issuing {method} {url}: {e}",
                details={"method": method, "url": url, "error_type": type(e).__name__},
            ) from e

    async def get(self, url: str) -> httpx.Response:
        return await self._request("GET", url)

    async def post(self, url: str, content_type: str, body: bytes) -> httpx.Response:
        return await self._request("POST", url, content_type, body)

    async def patch(self, url: str, content_type: str, body: bytes) -> httpx.Response:
        return await self._request("PATCH", url, content_type, body)

    async def delete(self, url: str, content_type: str, body: bytes) -> httpx.Response:
        return await self._request("DELETE", url, content_type, body)

    async def send(
        self,
        route: Route,
        mon: str,
        body: bytes = b"",
        content_type: str = JSON_CONTENT_TYPE,
    ) -> httpx.Response:
        """Issue the HTTP call a bound route describes.

        Args:
            route: Bound route
            mon: Monitor host serving the API
            body: Request body; ignored for GET
            content_type: Content type of the body

        Returns:
            Streamed response; the caller must read and close it

        Raises:
            TransportError: On any network failure
            UnsupportedMethodError: If the route's method is not supported
        """
        url = self.build_url(mon, route)
        if route.method == "GET":
            return await self.get(url)
        if route.method == "POST":
            return await self.post(url, content_type, body)
        if route.method == "PATCH":
            return await self.patch(url, content_type, body)
        if route.method == "DELETE":
            return await self.delete(url, content_type, body)
        raise UnsupportedMethodError(route.method)

    async def close(self) -> None:
        """Close the HTTP client and release pooled connections."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            logger.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
