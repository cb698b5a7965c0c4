"""
Custom exceptions for session and catalog operations.

This module defines the error taxonomy shared by the transport, the
session controller and the catalog view-model.
"""
from typing import Optional


class CatalogError(Exception):
    """Base exception for all otpcatalog errors."""

    kind = "error"

    def __init__(self, message: str) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable message shown to the user
        """
        self.message = message
        super().__init__(message)


class InvalidInput(CatalogError):
    """Raised when local validation fails before any call is made."""

    kind = "invalid_input"


class PreconditionFailed(CatalogError):
    """Raised when an operation's required prior state is missing."""

    kind = "precondition_failed"


class RemoteError(CatalogError):
    """Base for failures of a remote call."""

    kind = "remote"


class NetworkFailure(RemoteError):
    """Transport-level failure (connection refused, timeout, ...)."""

    kind = "network_failure"


class ServerRejected(RemoteError):
    """Exception raised for non-success responses carrying a reason."""

    kind = "server_rejected"

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Reason provided by the server (or a default)
            status: HTTP status code (if available)
        """
        self.status = status
        super().__init__(message)


class MalformedResponse(RemoteError):
    """Success status but the payload lacks expected fields."""

    kind = "malformed_response"
