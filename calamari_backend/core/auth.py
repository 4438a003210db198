"""API-key authentication and per-resource permissions."""

from typing import Annotated, Callable, Coroutine, FrozenSet, List, Union

from fastapi import Depends, Header

from .config import get_settings
from .exceptions import InvalidAPIKeyError, PermissionDeniedError

RESOURCES = ("pool", "osd", "cluster")
ACTIONS = ("read", "write")


class AuthContext:
    """Caller identity and the permissions granted to its API key.

    Permissions are ``<resource>:<action>`` strings such as ``pool:write``.
    ``<resource>:*`` grants every action on one resource and ``*`` grants
    everything.
    """

    def __init__(self, user: str, permissions: List[str]) -> None:
        self.user = user
        self.permissions: FrozenSet[str] = frozenset(permissions)

    def can(self, resource: str, action: str) -> bool:
        return bool({"*", f"{resource}:*", f"{resource}:{action}"} & self.permissions)

    def require_permission(self, resource: str, action: str) -> None:
        """Raise unless the caller may perform ``action`` on ``resource``.

        Raises:
            PermissionDeniedError: If the permission is not granted
        """
        if not self.can(resource, action):
            raise PermissionDeniedError(f"{resource}:{action}")


async def verify_api_key(
    x_api_key: Annotated[Union[str, None], Header()] = None,
) -> AuthContext:
    """Resolve the X-API-Key header to an AuthContext.

    Raises:
        InvalidAPIKeyError: If the key is missing or not configured
    """
    settings = get_settings()

    if not x_api_key:
        raise InvalidAPIKeyError("API key not provided in X-API-Key header")

    key_info = settings.api_keys.get(x_api_key)
    if not key_info:
        raise InvalidAPIKeyError("Invalid API key")

    return AuthContext(user=key_info["name"], permissions=key_info["permissions"])


def require(resource: str, action: str) -> Callable[..., Coroutine[None, None, AuthContext]]:
    """Build a dependency that requires ``<resource>:<action>``."""
    if resource not in RESOURCES or action not in ACTIONS:
        raise ValueError(f"Unknown permission {resource}:{action}")

    async def dependency(
        auth: Annotated[AuthContext, Depends(verify_api_key)],
    ) -> AuthContext:
        auth.require_permission(resource, action)
        return auth

    return dependency


require_pool_read = require("pool", "read")
require_pool_write = require("pool", "write")
require_osd_read = require("osd", "read")
require_osd_write = require("osd", "write")
require_cluster_read = require("cluster", "read")
require_cluster_write = require("cluster", "write")
