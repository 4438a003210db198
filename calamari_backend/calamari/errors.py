"""Exceptions raised by the Calamari adapter."""

from typing import Any, Dict, Union


class CalamariError(Exception):
    """Base exception for Calamari adapter errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "CALAMARI_ERROR",
        status_code: int = 500,
        details: Union[Dict[str, Any], None] = None,
    ) -> None:
        """Initialize CalamariError.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return from the REST layer
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class ProgrammerError(CalamariError):
    """Adapter misuse: bad route name, bad method or a malformed binding."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        """Initialize ProgrammerError."""
        kwargs.setdefault("error_code", "CALAMARI_PROGRAMMER_ERROR")
        kwargs.setdefault("status_code", 500)
        super().__init__(message, **kwargs)


class UnknownRouteError(ProgrammerError):
    """Route name is not in the catalog."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        """Initialize UnknownRouteError.

        Args:
            name: The route name that was looked up
            **kwargs: Additional arguments
        """
        kwargs.setdefault("error_code", "CALAMARI_UNKNOWN_ROUTE")
        kwargs.setdefault("details", {})
        kwargs["details"]["route"] = name
        super().__init__(f"Unknown route: {name}", **kwargs)


class UnsupportedMethodError(ProgrammerError):
    """HTTP method is not one the transport can issue."""

    def __init__(self, method: str, **kwargs: Any) -> None:
        """Initialize UnsupportedMethodError."""
        kwargs.setdefault("error_code", "CALAMARI_INVALID_METHOD")
        kwargs.setdefault("details", {})
        kwargs["details"]["method"] = method
        super().__init__(f"Invalid method type: {method}", **kwargs)


class UnboundPlaceholderError(ProgrammerError):
    """A route pattern and its substitutions do not line up."""

    def __init__(self, route: str, pattern: str, placeholder: str, **kwargs: Any) -> None:
        """Initialize UnboundPlaceholderError.

        Args:
            route: Route name
            pattern: Pattern as it stood when the mismatch was found
            placeholder: The offending placeholder, braces included
            **kwargs: Additional arguments
        """
        kwargs.setdefault("error_code", "CALAMARI_UNBOUND_PLACEHOLDER")
        kwargs.setdefault("details", {})
        kwargs["details"].update({"route": route, "pattern": pattern, "placeholder": placeholder})
        super().__init__(f"Placeholder {placeholder} not bound in route {route}", **kwargs)


class EncodeError(CalamariError):
    """Request body could not be serialised to JSON."""

    def __init__(self, message: str = "Error forming request body", **kwargs: Any) -> None:
        """Initialize EncodeError."""
        kwargs.setdefault("error_code", "CALAMARI_ENCODE_ERROR")
        kwargs.setdefault("status_code", 500)
        super().__init__(message, **kwargs)


class TransportError(CalamariError):
    """Network-level failure talking to the monitor."""

    def __init__(self, message: str = "Calamari API is unreachable", **kwargs: Any) -> None:
        """Initialize TransportError."""
        kwargs.setdefault("error_code", "CALAMARI_TRANSPORT_ERROR")
        kwargs.setdefault("status_code", 503)
        super().__init__(message, **kwargs)


class DecodeError(CalamariError):
    """Response body unreadable or not the JSON that was expected."""

    def __init__(self, message: str = "Error parsing response data", **kwargs: Any) -> None:
        """Initialize DecodeError."""
        kwargs.setdefault("error_code", "CALAMARI_DECODE_ERROR")
        kwargs.setdefault("status_code", 502)
        super().__init__(message, **kwargs)


class RemoteError(CalamariError):
    """Calamari answered with an unexpected HTTP status."""

    def __init__(self, status: int, body: str, **kwargs: Any) -> None:
        """Initialize RemoteError.

        Args:
            status: HTTP status returned by the monitor
            body: Raw response body
            **kwargs: Additional arguments
        """
        self.status = status
        self.body = body
        kwargs.setdefault("error_code", "CALAMARI_REMOTE_ERROR")
        kwargs.setdefault("status_code", 502)
        kwargs.setdefault("details", {})
        kwargs["details"].update({"remote_status": status, "remote_body": body})
        super().__init__(f"Calamari API returned HTTP {status}", **kwargs)


class SchemaError(CalamariError):
    """Response parsed as JSON but lacks required fields."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        """Initialize SchemaError."""
        kwargs.setdefault("error_code", "CALAMARI_SCHEMA_ERROR")
        kwargs.setdefault("status_code", 502)
        super().__init__(message, **kwargs)


class JobFailed(CalamariError):
    """Asynchronous request completed with an error."""

    def __init__(self, error_message: str, **kwargs: Any) -> None:
        """Initialize JobFailed.

        Args:
            error_message: Error message reported by the request status
            **kwargs: Additional arguments
        """
        self.error_message = error_message
        kwargs.setdefault("error_code", "CALAMARI_REQUEST_FAILED")
        kwargs.setdefault("status_code", 409)
        kwargs.setdefault("details", {})
        kwargs["details"]["error_message"] = error_message
        super().__init__(f"Request failed. error: {error_message}", **kwargs)


class JobTimeout(CalamariError):
    """Asynchronous request did not complete before the deadline."""

    def __init__(self, request_id: str, timeout: float, **kwargs: Any) -> None:
        """Initialize JobTimeout."""
        kwargs.setdefault("error_code", "CALAMARI_REQUEST_TIMEOUT")
        kwargs.setdefault("status_code", 504)
        kwargs.setdefault("details", {})
        kwargs["details"].update({"request_id": request_id, "timeout": timeout})
        super().__init__(f"Request {request_id} did not complete within {timeout}s", **kwargs)


class NotFoundError(CalamariError):
    """A lookup returned nothing where one result was required."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        """Initialize NotFoundError."""
        kwargs.setdefault("error_code", "CALAMARI_NOT_FOUND")
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)


class ClusterNotFound(NotFoundError):
    """Cluster name is not in the catalog."""

    def __init__(self, cluster_name: str, **kwargs: Any) -> None:
        """Initialize ClusterNotFound."""
        kwargs.setdefault("error_code", "CLUSTER_NOT_FOUND")
        kwargs.setdefault("details", {})
        kwargs["details"]["cluster_name"] = cluster_name
        super().__init__(f"Could not get id for cluster: {cluster_name}", **kwargs)


class OSDNotFound(NotFoundError):
    """OSD lookup came back empty."""

    def __init__(self, osd_id: str, **kwargs: Any) -> None:
        """Initialize OSDNotFound."""
        kwargs.setdefault("error_code", "OSD_NOT_FOUND")
        kwargs.setdefault("details", {})
        kwargs["details"]["osd_id"] = osd_id
        super().__init__(f"Couldn't retrieve OSD {osd_id}", **kwargs)


class CommandFailed(CalamariError):
    """Cluster command exited with a non-zero status."""

    def __init__(self, stderr: str, command_status: int, **kwargs: Any) -> None:
        """Initialize CommandFailed.

        Args:
            stderr: Error output reported by the cluster
            command_status: Non-zero status of the command
            **kwargs: Additional arguments
        """
        self.stderr = stderr
        self.command_status = command_status
        kwargs.setdefault("error_code", "CEPH_COMMAND_FAILED")
        kwargs.setdefault("status_code", 400)
        kwargs.setdefault("details", {})
        kwargs["details"].update({"stderr": stderr, "exit_code": command_status})
        super().__init__(stderr or f"Command failed with status {command_status}", **kwargs)


class DatastoreError(CalamariError):
    """Cluster catalog could not be read or written."""

    def __init__(self, message: str = "Cluster catalog is unavailable", **kwargs: Any) -> None:
        """Initialize DatastoreError."""
        kwargs.setdefault("error_code", "DATASTORE_ERROR")
        kwargs.setdefault("status_code", 503)
        super().__init__(message, **kwargs)
