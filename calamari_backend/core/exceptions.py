"""Exceptions raised by the REST layer before a request reaches Calamari."""

from typing import Any, Dict, Union


class CalamariAPIException(Exception):
    """Base exception for REST API errors.

    Subclasses fix ``code`` and ``status_code``; the handler in ``main``
    turns them into the error envelope.
    """

    code = "API_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Union[Dict[str, Any], None] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidAPIKeyError(CalamariAPIException):
    """API key missing or unknown."""

    code = "INVALID_API_KEY"
    status_code = 401

    def __init__(self, reason: str) -> None:
        super().__init__("Invalid or missing API key", {"reason": reason})


class PermissionDeniedError(CalamariAPIException):
    """API key lacks the permission an endpoint requires."""

    code = "PERMISSION_DENIED"
    status_code = 403

    def __init__(self, permission: str) -> None:
        super().__init__(
            f"Permission denied. Required permission: {permission}",
            {"required_permission": permission},
        )


class InvalidRequestError(CalamariAPIException):
    """Request passed validation but cannot be sent to Calamari."""

    code = "INVALID_REQUEST"
    status_code = 400
