"""BLE command dispatch.

Writes encoded commands to the command request characteristic of the connected
camera and reads characteristic values back. Every method reports its outcome as
an ``OperationResult``; calling without a connection is safe and performs no
transport call.
"""

from __future__ import annotations

__all__ = ["CommandDispatcher", "WifiCredentials"]

import logging
from dataclasses import dataclass

from ..ble_uuid import GoProBleUUID, get_uuid_name
from ..connection.ble_manager import BleConnectionManager, ConnectionHandle
from ..exceptions import GoProRemoteError, NotConnectedError, ReadError
from ..payload import GoProCommand, encode
from ..results import OperationResult

logger = logging.getLogger(__name__)


@dataclass
class WifiCredentials:
    """Camera access point credentials.

    Attributes:
        ssid: Access point SSID
        password: Access point password
    """

    ssid: str
    password: str


class CommandDispatcher:
    """BLE command interface.

    Commands go to (control & query service, command request characteristic) on
    whichever camera the connection manager currently holds.
    """

    def __init__(self, ble_manager: BleConnectionManager) -> None:
        """Initialize command dispatcher.

        Args:
            ble_manager: BLE connection manager
        """
        self.ble = ble_manager

    def _not_connected(self, operation: str) -> OperationResult:
        logger.warning(f"Cannot {operation}: BLE device not connected")
        return OperationResult.failure(NotConnectedError("BLE device not connected", operation=operation))

    async def send_command(self, command: GoProCommand) -> OperationResult:
        """Send a command to the connected camera.

        Args:
            command: Command to send

        Returns:
            Result whose value is the payload written. Errors: ``NotConnectedError``
            without a connection, ``WriteError`` (cause attached) on transport failure.
        """
        handle = self.ble.active_handle
        if handle is None:
            return self._not_connected("send_command")

        logger.info(f"🎬 Sending {command.name} to {handle.label}")
        return await self._write(handle, "send_command", encode(command))

    async def send_raw(self, payload: bytes) -> OperationResult:
        """Send a pre-encoded payload to the command request characteristic."""
        handle = self.ble.active_handle
        if handle is None:
            return self._not_connected("send_raw")
        return await self._write(handle, "send_raw", bytes(payload))

    async def _write(self, handle: ConnectionHandle, operation: str, payload: bytes) -> OperationResult:
        try:
            await self.ble.write(handle, GoProBleUUID.S_CONTROL_QUERY, GoProBleUUID.CQ_COMMAND, payload)
        except GoProRemoteError as e:
            logger.error(f"❌ {operation} to {handle.label} failed: {e}")
            return OperationResult.failure(e, operation)

        logger.debug(f"✅ {operation} to {handle.label}: {payload.hex()}")
        return OperationResult(operation=operation, device_id=handle.device_id, value=payload)

    async def read_characteristic(
        self,
        characteristic_uuid: str,
        service_uuid: str = GoProBleUUID.S_CONTROL_QUERY,
    ) -> OperationResult:
        """Read a characteristic's current value.

        Args:
            characteristic_uuid: Characteristic to read
            service_uuid: Service the characteristic belongs to

        Returns:
            Result whose value is the bytes read. Errors: ``NotConnectedError``
            without a connection, ``ReadError`` on transport failure.
        """
        handle = self.ble.active_handle
        if handle is None:
            return self._not_connected("read_characteristic")

        try:
            data = await self.ble.read(handle, service_uuid, characteristic_uuid)
        except GoProRemoteError as e:
            logger.error(f"❌ Reading {get_uuid_name(characteristic_uuid)} from {handle.label} failed: {e}")
            return OperationResult.failure(e, "read_characteristic")

        return OperationResult(operation="read_characteristic", device_id=handle.device_id, value=data)

    async def read_wifi_credentials(self) -> OperationResult:
        """Read the camera access point SSID and password.

        The access point must have been enabled first (``GoProCommand.ENABLE_WIFI``).

        Returns:
            Result whose value is a ``WifiCredentials``
        """
        values: list[str] = []
        for uuid in (GoProBleUUID.WAP_SSID, GoProBleUUID.WAP_PASSWORD):
            result = await self.read_characteristic(uuid, GoProBleUUID.S_WIFI_ACCESS_POINT)
            if not result.ok:
                return OperationResult.failure(result.error, "read_wifi_credentials")
            try:
                values.append(result.value.decode("utf-8"))
            except UnicodeDecodeError as e:
                error = ReadError(
                    f"{get_uuid_name(uuid)} is not valid UTF-8",
                    operation="read_wifi_credentials",
                    device_id=result.device_id,
                    cause=e,
                )
                logger.error(f"❌ {error}")
                return OperationResult.failure(error)

        ssid, password = values
        logger.info(f"📶 Camera access point: {ssid}")
        return OperationResult(
            operation="read_wifi_credentials",
            device_id=result.device_id,
            value=WifiCredentials(ssid=ssid, password=password),
        )
