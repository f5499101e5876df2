"""Operation results reported to callers."""

from __future__ import annotations

__all__ = ["OperationResult"]

from dataclasses import dataclass
from typing import Any

from .exceptions import GoProRemoteError


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a controller operation.

    Failures are reported here instead of being raised, so a failing camera
    never crashes the caller. Nothing is retried automatically.

    Attributes:
        operation: Operation name (e.g. "send_command")
        device_id: Device involved, if known
        value: Operation output (payload written, bytes read, handle, device list)
        error: The failure, None on success
    """

    operation: str
    device_id: str | None = None
    value: Any = None
    error: GoProRemoteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: GoProRemoteError, operation: str | None = None) -> OperationResult:
        """Build a failed result from an error, reusing its context."""
        return cls(operation=operation or error.operation or "unknown", device_id=error.device_id, error=error)
