"""Pytest configuration and common fixtures.

Everything runs against ``FakeAdapter``, an in-memory BLE adapter that records
each call and lets tests inject advertisements, failures, delays and
peripheral-initiated disconnects.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Callable, Sequence

import pytest

from gopro_remote import (
    AdvertisementScanner,
    BleConnectionManager,
    CommandDispatcher,
    DiscoveredDevice,
    GoProRemote,
    TimeoutConfig,
)
from gopro_remote.adapter import AdvertisementCallback, BleAdapter, DisconnectCallback
from gopro_remote.ble_uuid import GoProBleUUID

DEVICE_ID = "AA:BB"
DEVICE_NAME = "GoPro 1234"


def make_device(
    device_id: str = DEVICE_ID,
    name: str | None = DEVICE_NAME,
    services: Sequence[str] = (GoProBleUUID.S_CONTROL_QUERY,),
    rssi: int | None = -60,
) -> DiscoveredDevice:
    return DiscoveredDevice(
        device_id=device_id,
        display_name=name,
        raw_advertisement={"local_name": name},
        service_uuids=tuple(services),
        rssi=rssi,
    )


class FakeAdapter(BleAdapter):
    """Recording BLE adapter."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.writes: list[tuple[str, str, str, bytes]] = []
        self.reads: list[tuple[str, str, str]] = []
        self.scan_filters: list[list[str]] = []

        # Scheduled advertisements: (delay seconds, device)
        self.advertisements: list[tuple[float, DiscoveredDevice]] = []
        self.read_values: dict[str, bytes] = {}

        self.init_error: Exception | None = None
        self.init_delay = 0.0
        self.start_scan_error: Exception | None = None
        self.stop_scan_error: Exception | None = None
        self.connect_error: Exception | None = None
        self.connect_delay = 0.0
        # Camera drops the link as connect completes: "now" fires inside connect,
        # "soon" schedules the event on the loop
        self.drop_on_connect: str | None = None
        self.disconnect_error: Exception | None = None
        self.disconnect_fires_event = False
        self.write_error: Exception | None = None
        self.write_delay = 0.0
        self.read_error: Exception | None = None

        self._scan_callback: AdvertisementCallback | None = None
        self._scan_tasks: list[asyncio.Task[None]] = []
        self._links: dict[str, DisconnectCallback] = {}

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def initialize(self) -> None:
        self.calls.append("initialize")
        if self.init_delay:
            await asyncio.sleep(self.init_delay)
        if self.init_error:
            raise self.init_error

    async def start_scan(self, service_uuids: Sequence[str], callback: AdvertisementCallback) -> None:
        self.calls.append("start_scan")
        self.scan_filters.append(list(service_uuids))
        if self.start_scan_error:
            raise self.start_scan_error
        self._scan_callback = callback
        for delay, device in self.advertisements:
            self._scan_tasks.append(asyncio.create_task(self._deliver_later(delay, device)))

    async def _deliver_later(self, delay: float, device: DiscoveredDevice) -> None:
        await asyncio.sleep(delay)
        self.advertise(device)

    def advertise(self, device: DiscoveredDevice) -> None:
        """Deliver an advertisement now, if a scan is running."""
        if self._scan_callback is not None:
            self._scan_callback(device)

    async def stop_scan(self) -> None:
        self.calls.append("stop_scan")
        self._scan_callback = None
        for task in self._scan_tasks:
            task.cancel()
        self._scan_tasks.clear()
        if self.stop_scan_error:
            raise self.stop_scan_error

    async def connect(self, device_id: str, on_disconnect: DisconnectCallback) -> None:
        self.calls.append("connect")
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error:
            raise self.connect_error
        if self.drop_on_connect == "now":
            on_disconnect(device_id)
            return
        if self.drop_on_connect == "soon":
            asyncio.get_running_loop().call_soon(on_disconnect, device_id)
            return
        self._links[device_id] = on_disconnect

    async def disconnect(self, device_id: str) -> None:
        self.calls.append("disconnect")
        callback = self._links.pop(device_id, None)
        if self.disconnect_fires_event and callback is not None:
            callback(device_id)
        if self.disconnect_error:
            raise self.disconnect_error

    def drop_link(self, device_id: str = DEVICE_ID) -> None:
        """Simulate the camera dropping the connection."""
        callback = self._links.pop(device_id)
        callback(device_id)

    async def write(self, device_id: str, service_uuid: str, characteristic_uuid: str, data: bytes) -> None:
        self.calls.append("write")
        self.writes.append((device_id, service_uuid, characteristic_uuid, bytes(data)))
        if self.write_delay:
            await asyncio.sleep(self.write_delay)
        if self.write_error:
            raise self.write_error

    async def read(self, device_id: str, service_uuid: str, characteristic_uuid: str) -> bytes:
        self.calls.append("read")
        self.reads.append((device_id, service_uuid, characteristic_uuid))
        if self.read_error:
            raise self.read_error
        return self.read_values[characteristic_uuid]


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def timeout_config() -> TimeoutConfig:
    """Short timeouts so tests finish quickly."""
    return TimeoutConfig(
        ble_scan_timeout=0.2,
        ble_adapter_init_timeout=0.2,
        ble_connect_timeout=0.2,
        ble_write_timeout=0.2,
        ble_read_timeout=0.2,
        ble_disconnect_timeout=0.2,
    )


@pytest.fixture
def scanner(adapter: FakeAdapter, timeout_config: TimeoutConfig) -> AdvertisementScanner:
    return AdvertisementScanner(adapter, timeout_config)


@pytest.fixture
def manager(adapter: FakeAdapter, timeout_config: TimeoutConfig) -> BleConnectionManager:
    return BleConnectionManager(adapter, timeout_config=timeout_config)


@pytest.fixture
def dispatcher(manager: BleConnectionManager) -> CommandDispatcher:
    return CommandDispatcher(manager)


@pytest.fixture
async def remote(adapter: FakeAdapter, timeout_config: TimeoutConfig) -> AsyncGenerator[GoProRemote, None]:
    client = GoProRemote(adapter=adapter, timeout_config=timeout_config)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def device_factory() -> Callable[..., DiscoveredDevice]:
    return make_device
