"""Platform BLE adapter.

The controller only talks to the radio through the ``BleAdapter`` interface:
initialize, scan, connect, write, read and disconnect primitives. ``BleakAdapter``
is the production implementation on top of bleak.
"""

from __future__ import annotations

__all__ = ["AdvertisementCallback", "BleAdapter", "BleakAdapter", "DisconnectCallback", "DiscoveredDevice"]

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice as BleakDevice
from bleak.backends.scanner import AdvertisementData

from .ble_uuid import get_uuid_name, normalize_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveredDevice:
    """One observed advertisement.

    Attributes:
        device_id: Stable identifier of the physical device (BLE address)
        display_name: Advertised local name, if any
        raw_advertisement: Platform advertisement object, passed through untouched
        service_uuids: Advertised service UUIDs (lowercase)
        rssi: Signal strength, if reported
    """

    device_id: str
    display_name: str | None = None
    raw_advertisement: Any = field(default=None, compare=False, repr=False)
    service_uuids: tuple[str, ...] = ()
    rssi: int | None = None

    @property
    def label(self) -> str:
        """Name to show to a user (falls back to the device id)."""
        return self.display_name or self.device_id

    def advertises(self, service_uuid: str) -> bool:
        """Whether the advertisement lists the given service."""
        return normalize_uuid(service_uuid) in {normalize_uuid(u) for u in self.service_uuids}


AdvertisementCallback = Callable[[DiscoveredDevice], None]
DisconnectCallback = Callable[[str], None]


class BleAdapter(ABC):
    """Primitives of the platform BLE stack used by the controller."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the radio. Must complete before scanning."""

    @abstractmethod
    async def start_scan(self, service_uuids: Sequence[str], callback: AdvertisementCallback) -> None:
        """Start reporting advertisements (empty ``service_uuids`` means no filter)."""

    @abstractmethod
    async def stop_scan(self) -> None:
        """Stop the active scan."""

    @abstractmethod
    async def connect(self, device_id: str, on_disconnect: DisconnectCallback) -> None:
        """Open a link; ``on_disconnect`` receives the device id when the link drops."""

    @abstractmethod
    async def disconnect(self, device_id: str) -> None:
        """Close the link to a device."""

    @abstractmethod
    async def write(self, device_id: str, service_uuid: str, characteristic_uuid: str, data: bytes) -> None:
        """Write a characteristic value (with response)."""

    @abstractmethod
    async def read(self, device_id: str, service_uuid: str, characteristic_uuid: str) -> bytes:
        """Read a characteristic value."""


class BleakAdapter(BleAdapter):
    """BLE adapter backed by bleak's BleakScanner and BleakClient.

    bleak addresses characteristics by UUID alone; the service UUID is only used
    for logging. GoPro characteristic UUIDs are unique across services.
    """

    def __init__(self, adapter: str | None = None) -> None:
        """Initialize adapter.

        Args:
            adapter: Platform adapter name (e.g. "hci0" on BlueZ), None for default
        """
        self._adapter = adapter
        self._loop: asyncio.AbstractEventLoop | None = None
        self._scanner: BleakScanner | None = None
        self._clients: dict[str, BleakClient] = {}
        # Devices seen while scanning; connecting with a BLEDevice skips a rescan
        self._seen: dict[str, BleakDevice] = {}

    async def initialize(self) -> None:
        """Resolve the platform backend.

        Fails when bleak has no backend for this platform or the named adapter is
        unknown. Constructing a scanner does not power the radio on BlueZ, so a
        switched-off adapter is only reported when the scan starts (``ScanStartError``).
        """
        self._loop = asyncio.get_running_loop()
        BleakScanner(**self._scanner_kwargs())
        logger.debug("BLE adapter initialized")

    def _scanner_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self._adapter:
            kwargs["adapter"] = self._adapter
        return kwargs

    async def start_scan(self, service_uuids: Sequence[str], callback: AdvertisementCallback) -> None:
        def _detection_callback(device: BleakDevice, advertisement_data: AdvertisementData) -> None:
            self._seen[device.address] = device
            callback(
                DiscoveredDevice(
                    device_id=device.address,
                    display_name=advertisement_data.local_name or device.name,
                    raw_advertisement=advertisement_data,
                    service_uuids=tuple(normalize_uuid(u) for u in advertisement_data.service_uuids),
                    rssi=advertisement_data.rssi,
                )
            )

        self._seen.clear()
        self._scanner = BleakScanner(
            detection_callback=_detection_callback,
            service_uuids=list(service_uuids) or None,
            **self._scanner_kwargs(),
        )
        await self._scanner.start()

    async def stop_scan(self) -> None:
        if self._scanner is None:
            return
        try:
            await self._scanner.stop()
        finally:
            self._scanner = None

    async def connect(self, device_id: str, on_disconnect: DisconnectCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()

        def _disconnected(client: BleakClient) -> None:
            # Some backends invoke this from their own thread
            loop.call_soon_threadsafe(self._on_link_lost, device_id, client, on_disconnect)

        client = BleakClient(
            self._seen.get(device_id, device_id),
            disconnected_callback=_disconnected,
            **self._scanner_kwargs(),
        )
        await client.connect()
        self._clients[device_id] = client

    def _on_link_lost(self, device_id: str, client: BleakClient, on_disconnect: DisconnectCallback) -> None:
        if self._clients.get(device_id) is client:
            del self._clients[device_id]
        on_disconnect(device_id)

    async def disconnect(self, device_id: str) -> None:
        client = self._clients.pop(device_id, None)
        if client is None:
            logger.debug(f"No BLE client for {device_id}, nothing to disconnect")
            return
        await client.disconnect()

    def _client(self, device_id: str) -> BleakClient:
        client = self._clients.get(device_id)
        if client is None or not client.is_connected:
            raise RuntimeError(f"BLE client for {device_id} is not connected")
        return client

    async def write(self, device_id: str, service_uuid: str, characteristic_uuid: str, data: bytes) -> None:
        logger.debug(
            f"📤 Writing {data.hex()} to {get_uuid_name(characteristic_uuid)} ({get_uuid_name(service_uuid)})"
        )
        await self._client(device_id).write_gatt_char(characteristic_uuid, data, response=True)

    async def read(self, device_id: str, service_uuid: str, characteristic_uuid: str) -> bytes:
        data = await self._client(device_id).read_gatt_char(characteristic_uuid)
        logger.debug(f"📥 Read {len(data)} bytes from {get_uuid_name(characteristic_uuid)}")
        return bytes(data)
