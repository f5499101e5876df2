"""Pairing trigger.

GoPro cameras start the bonding exchange the first time a central performs an
authenticated write, so the controller does not implement a bonding protocol of
its own. Right after connecting it writes the enable-Wi-Fi command, which the
camera accepts as the bonding stimulus (and which also powers up the camera's
access point). This only holds for this camera family.

The trigger sits behind ``PairingTrigger`` so a real bonding handshake can
replace it without changing command dispatch.
"""

from __future__ import annotations

__all__ = ["GattWriter", "PairingTrigger", "WifiCommandPairingTrigger"]

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from .ble_uuid import GoProBleUUID
from .exceptions import PairingError
from .payload import GoProCommand, encode

if TYPE_CHECKING:
    from .connection.ble_manager import ConnectionHandle

logger = logging.getLogger(__name__)

# (service_uuid, characteristic_uuid, data) -> None, bound to the new connection
GattWriter = Callable[[str, str, bytes], Awaitable[None]]


class PairingTrigger(ABC):
    """Hook run once on every newly established connection."""

    @abstractmethod
    async def trigger(self, handle: ConnectionHandle, write: GattWriter) -> None:
        """Bring the peripheral into a paired state.

        Raises:
            PairingError: The peripheral did not accept the pairing stimulus
        """


class WifiCommandPairingTrigger(PairingTrigger):
    """Pairs by writing ENABLE_WIFI to the command request characteristic."""

    command = GoProCommand.ENABLE_WIFI

    async def trigger(self, handle: ConnectionHandle, write: GattWriter) -> None:
        payload = encode(self.command)
        logger.info(f"Triggering pairing with {handle.label} ({payload.hex()})")
        try:
            await write(GoProBleUUID.S_CONTROL_QUERY, GoProBleUUID.CQ_COMMAND, payload)
        except Exception as e:
            raise PairingError(
                f"Pairing write to {handle.label} failed",
                operation="pair",
                device_id=handle.device_id,
                cause=e,
            ) from e
        logger.info(f"✅ Pairing write accepted by {handle.label}")
