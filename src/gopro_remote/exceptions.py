"""Custom exception classes."""

from __future__ import annotations

__all__ = [
    "AdapterInitError",
    "BleConnectionError",
    "BleTimeoutError",
    "ConnectionLostError",
    "DisconnectionError",
    "GoProRemoteError",
    "NotConnectedError",
    "PairingError",
    "ReadError",
    "ScanStartError",
    "WriteError",
]


class GoProRemoteError(Exception):
    """Base class for all GoPro remote exceptions.

    Every error carries enough context for user-facing display.

    Attributes:
        operation: Name of the operation that failed (e.g. "connect")
        device_id: Identifier of the device involved, if known
        cause: Underlying transport exception, if any
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        device_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.device_id = device_id
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message} ({type(self.cause).__name__}: {self.cause})"
        return message


class AdapterInitError(GoProRemoteError):
    """BLE adapter initialization failed."""


class ScanStartError(GoProRemoteError):
    """BLE scan could not be started."""


class BleConnectionError(GoProRemoteError):
    """BLE connection related error."""


class BleTimeoutError(BleConnectionError):
    """BLE connection attempt timed out."""


class DisconnectionError(GoProRemoteError):
    """No matching live connection to disconnect, or disconnect failed."""


class PairingError(GoProRemoteError):
    """Pairing trigger write failed (non-fatal to the connection)."""


class NotConnectedError(GoProRemoteError):
    """Operation requires an active connection but none exists."""


class WriteError(GoProRemoteError):
    """GATT write failed."""


class ConnectionLostError(WriteError):
    """Link dropped while a write was in flight."""


class ReadError(GoProRemoteError):
    """GATT read failed."""
