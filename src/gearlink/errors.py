"""Error taxonomy shared by the coordinators."""

from __future__ import annotations


class GearlinkError(Exception):
    """Base class for coordinator errors."""


class BackendUnavailable(GearlinkError):
    """No command executor is reachable."""

    def __init__(self, message: str = "Backend service not available") -> None:
        super().__init__(message)


class RemoteFailure(GearlinkError):
    """The backend answered ``success: false`` or the call itself faulted."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command
        self.message = message


class NotFound(GearlinkError, KeyError):
    """A registry operation referenced an unknown identifier."""

    def __init__(self, device_id: str) -> None:
        super().__init__(device_id)
        self.device_id = device_id

    def __str__(self) -> str:
        return f"Device not found: {self.device_id}"


class UnsupportedOperation(GearlinkError):
    """The device universe defines no command for the requested operation."""
