"""GoPro BLE remote client.

Uses composition and delegation to assemble independent modules:
- connection/: advertisement scanning and the single BLE connection
- commands/: command writes and characteristic reads
- pairing: the post-connect pairing trigger

The client is the outer boundary: every operation reports failures as an
``OperationResult`` instead of raising.
"""

from __future__ import annotations

__all__ = ["GoProRemote"]

import logging
from collections.abc import Callable, Sequence

from .adapter import AdvertisementCallback, BleAdapter, BleakAdapter, DisconnectCallback, DiscoveredDevice
from .ble_uuid import GoProBleUUID
from .commands import CommandDispatcher
from .config import PairedDevice, PairedDeviceStore, TimeoutConfig
from .connection import DEFAULT_SERVICE_FILTER, AdvertisementScanner, BleConnectionManager
from .exceptions import DisconnectionError, GoProRemoteError
from .pairing import PairingTrigger
from .payload import GoProCommand
from .results import OperationResult

logger = logging.getLogger(__name__)


class GoProRemote:
    """GoPro BLE remote.

    Design principles:
    - One camera at a time (single BLE session)
    - Composition over inheritance (holds scanner, connection manager, dispatcher)
    - Failures are reported, never raised, and never retried automatically

    Usage example:
        >>> async with GoProRemote() as remote:
        ...     found = await remote.scan()
        ...     if found.ok and found.value:
        ...         await remote.connect(found.value[0])  # pairing write happens here
        ...         await remote.shutter()
    """

    def __init__(
        self,
        adapter: BleAdapter | None = None,
        timeout_config: TimeoutConfig | None = None,
        pairing_trigger: PairingTrigger | None = None,
        device_store: PairedDeviceStore | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            adapter: Platform BLE adapter (defaults to bleak)
            timeout_config: Timeout configuration
            pairing_trigger: Post-connect pairing hook (defaults to the Wi-Fi command write)
            device_store: Where to record successfully paired cameras (optional)
        """
        self._adapter = adapter or BleakAdapter()
        self._timeout = timeout_config or TimeoutConfig()
        self._device_store = device_store

        self.scanner = AdvertisementScanner(self._adapter, self._timeout)
        self.ble = BleConnectionManager(self._adapter, pairing_trigger, self._timeout)
        self.commands = CommandDispatcher(self.ble)

        self._subscriptions: list[Callable[[], None]] = []

    async def __aenter__(self) -> GoProRemote:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== State ====================

    @property
    def is_scanning(self) -> bool:
        return self.scanner.is_scanning

    @property
    def scan_results(self) -> list[DiscoveredDevice]:
        return self.scanner.results

    @property
    def is_connected(self) -> bool:
        return self.ble.is_connected

    @property
    def connected_device_id(self) -> str | None:
        handle = self.ble.active_handle
        return handle.device_id if handle else None

    def add_disconnect_listener(self, callback: DisconnectCallback) -> Callable[[], None]:
        """Subscribe to peripheral-initiated disconnects.

        The subscription is cancelled automatically by ``close()``.

        Returns:
            A function that cancels the subscription early
        """
        unsubscribe = self.ble.add_disconnect_listener(callback)
        self._subscriptions.append(unsubscribe)
        return unsubscribe

    # ==================== Discovery ====================

    async def start_scan(
        self,
        service_filter: Sequence[str] = DEFAULT_SERVICE_FILTER,
        on_result: AdvertisementCallback | None = None,
        timeout: float | None = None,
    ) -> OperationResult:
        """Start a background scan that stops by itself after ``timeout``."""
        try:
            await self.scanner.start_scan(service_filter, on_result, timeout)
        except GoProRemoteError as e:
            return OperationResult.failure(e, "start_scan")
        return OperationResult(operation="start_scan")

    async def stop_scan(self) -> OperationResult:
        await self.scanner.stop_scan()
        return OperationResult(operation="stop_scan", value=self.scanner.results)

    async def scan(
        self,
        service_filter: Sequence[str] = DEFAULT_SERVICE_FILTER,
        on_result: AdvertisementCallback | None = None,
        timeout: float | None = None,
    ) -> OperationResult:
        """Scan for the full window and return every advertisement received."""
        try:
            devices = await self.scanner.scan(service_filter, on_result, timeout)
        except GoProRemoteError as e:
            return OperationResult.failure(e, "scan")
        return OperationResult(operation="scan", value=devices)

    # ==================== Connection ====================

    async def connect(
        self,
        device: DiscoveredDevice | str,
        on_disconnect: DisconnectCallback | None = None,
    ) -> OperationResult:
        """Connect to a camera; the pairing trigger fires automatically.

        Args:
            device: Scan result or bare device id
            on_disconnect: Called with the device id if the camera drops this connection

        Returns:
            Result whose value is the ``ConnectionHandle``. A failed pairing write
            does not fail the connect; check ``handle.pairing_error``.
        """
        if isinstance(device, DiscoveredDevice):
            device_id, display_name = device.device_id, device.display_name
        else:
            device_id, display_name = device, None

        if self.scanner.is_scanning:
            logger.info("Stopping scan before connecting")
            await self.scanner.stop_scan()

        try:
            handle = await self.ble.connect(device_id, on_disconnect, display_name)
        except GoProRemoteError as e:
            return OperationResult.failure(e, "connect")

        if self._device_store is not None and handle.is_paired:
            try:
                self._device_store.save(PairedDevice(device_id=device_id, display_name=display_name))
            except Exception as e:
                logger.warning(f"Could not record paired device {device_id}: {e}")

        return OperationResult(operation="connect", device_id=device_id, value=handle)

    async def disconnect(self) -> OperationResult:
        """Disconnect the current camera."""
        handle = self.ble.active_handle
        if handle is None:
            error = DisconnectionError("No live connection to disconnect", operation="disconnect")
            logger.warning(str(error))
            return OperationResult.failure(error)

        try:
            await self.ble.disconnect(handle)
        except GoProRemoteError as e:
            return OperationResult.failure(e, "disconnect")
        return OperationResult(operation="disconnect", device_id=handle.device_id)

    # ==================== Commands ====================

    async def send_command(self, command: GoProCommand) -> OperationResult:
        return await self.commands.send_command(command)

    async def shutdown(self) -> OperationResult:
        """Put the camera to sleep."""
        return await self.commands.send_command(GoProCommand.SHUTDOWN)

    async def shutter(self) -> OperationResult:
        """Press the shutter (start capture in the current mode)."""
        return await self.commands.send_command(GoProCommand.SHUTTER)

    async def enable_wifi(self) -> OperationResult:
        """Turn on the camera access point."""
        return await self.commands.send_command(GoProCommand.ENABLE_WIFI)

    async def read_characteristic(
        self, characteristic_uuid: str, service_uuid: str = GoProBleUUID.S_CONTROL_QUERY
    ) -> OperationResult:
        return await self.commands.read_characteristic(characteristic_uuid, service_uuid)

    async def read_wifi_credentials(self) -> OperationResult:
        """Read the camera access point SSID and password."""
        return await self.commands.read_wifi_credentials()

    # ==================== Teardown ====================

    async def close(self) -> None:
        """Stop scanning, disconnect, and cancel disconnect subscriptions."""
        await self.scanner.stop_scan()
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()
        await self.ble.close()
        logger.debug("GoPro remote closed")
