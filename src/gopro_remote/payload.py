"""Command payload encoding.

Maps each logical command to the exact bytes written to the command request
characteristic. Payloads are TLV-style: a one-byte general header carrying the
remaining length, the command id, then (for commands with a parameter) the
parameter length and value.
"""

from __future__ import annotations

__all__ = ["GoProCommand", "encode"]

from enum import Enum

from open_gopro.models.constants import CmdId


class GoProCommand(Enum):
    """Logical commands supported by the controller."""

    SHUTDOWN = "shutdown"
    SHUTTER = "shutter"
    ENABLE_WIFI = "enable_wifi"

    @property
    def payload(self) -> bytes:
        """Encoded payload for this command."""
        return encode(self)


def _build(cmd_id: int, *params: bytes) -> bytes:
    body = bytearray([int(cmd_id)])
    for param in params:
        body.append(len(param))
        body.extend(param)
    return bytes([len(body)]) + bytes(body)


_PAYLOADS: dict[GoProCommand, bytes] = {
    GoProCommand.SHUTDOWN: _build(CmdId.SLEEP),  # 01 05
    GoProCommand.SHUTTER: _build(CmdId.SET_SHUTTER, b"\x01"),  # 03 01 01 01
    GoProCommand.ENABLE_WIFI: _build(CmdId.SET_WIFI, b"\x01"),  # 03 17 01 01
}


def encode(command: GoProCommand) -> bytes:
    """Encode a command into its wire payload.

    Args:
        command: Command to encode

    Returns:
        Payload bytes, identical on every call
    """
    return _PAYLOADS[command]
