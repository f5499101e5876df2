"""BLE advertisement scanner.

Time-bounded discovery of nearby GoPro cameras.
"""

from __future__ import annotations

__all__ = ["DEFAULT_SERVICE_FILTER", "AdvertisementScanner"]

import asyncio
import contextlib
import logging
from collections.abc import Sequence

from ..adapter import AdvertisementCallback, BleAdapter, DiscoveredDevice
from ..ble_uuid import GoProBleUUID, normalize_uuid
from ..config import TimeoutConfig
from ..exceptions import AdapterInitError, ScanStartError

logger = logging.getLogger(__name__)

# Only GoPro cameras advertise this service. Pass an empty filter to see every peripheral.
DEFAULT_SERVICE_FILTER: tuple[str, ...] = (GoProBleUUID.S_CONTROL_QUERY,)


class AdvertisementScanner:
    """BLE advertisement scanner.

    Holds at most one scan session. A session ends on explicit ``stop_scan()`` or
    when its timeout expires, and both paths leave ``is_scanning`` false.

    Results are kept in discovery order and are not deduplicated: a camera that
    advertises twice during the window appears twice.

    Usage example:
    ```python
    scanner = AdvertisementScanner(BleakAdapter())
    devices = await scanner.scan(timeout=3.5)
    for dev in devices:
        print(f"Discovered: {dev.label}")
    ```
    """

    def __init__(self, adapter: BleAdapter, timeout_config: TimeoutConfig | None = None) -> None:
        self._adapter = adapter
        self._timeout = timeout_config or TimeoutConfig()

        self._is_scanning = False
        self._stopping = False
        self._results: list[DiscoveredDevice] = []
        self._service_filter: frozenset[str] = frozenset()
        self._on_result: AdvertisementCallback | None = None
        self._timer: asyncio.Task[None] | None = None
        self._finished = asyncio.Event()
        self._finished.set()
        # Cleared while start_scan is still bringing the radio up
        self._started = asyncio.Event()
        self._started.set()

    @property
    def is_scanning(self) -> bool:
        """Whether a scan session is active."""
        return self._is_scanning

    @property
    def results(self) -> list[DiscoveredDevice]:
        """Advertisements accepted in the current or last session."""
        return list(self._results)

    async def start_scan(
        self,
        service_filter: Sequence[str] = DEFAULT_SERVICE_FILTER,
        on_result: AdvertisementCallback | None = None,
        timeout: float | None = None,
    ) -> None:
        """Start a time-bounded scan.

        Args:
            service_filter: Service UUIDs to filter on, empty for all peripherals
            on_result: Called once per accepted advertisement
            timeout: Scan window in seconds, None uses ``ble_scan_timeout``

        Raises:
            ScanStartError: A scan is already running, or the adapter refused to start
            AdapterInitError: Adapter initialization failed
        """
        if self._is_scanning:
            raise ScanStartError("Scan already in progress", operation="start_scan")

        timeout = self._timeout.ble_scan_timeout if timeout is None else timeout
        self._is_scanning = True
        self._finished.clear()
        self._started.clear()
        try:
            await self._start_session(service_filter, on_result, timeout)
        finally:
            self._started.set()

    async def _start_session(
        self, service_filter: Sequence[str], on_result: AdvertisementCallback | None, timeout: float
    ) -> None:
        try:
            await asyncio.wait_for(self._adapter.initialize(), timeout=self._timeout.ble_adapter_init_timeout)
        except Exception as e:
            self._end_session()
            logger.error(f"BLE adapter initialization failed: {e}")
            raise AdapterInitError("BLE adapter initialization failed", operation="start_scan", cause=e) from e

        self._results = []
        self._service_filter = frozenset(normalize_uuid(u) for u in service_filter)
        self._on_result = on_result

        try:
            await self._adapter.start_scan(list(service_filter), self._on_advertisement)
        except Exception as e:
            self._end_session()
            logger.error(f"Failed to start BLE scan: {e}")
            raise ScanStartError("Failed to start BLE scan", operation="start_scan", cause=e) from e

        logger.info(f"🔍 Scanning for {timeout}s (filter: {sorted(self._service_filter) or 'none'})")
        self._timer = asyncio.create_task(self._stop_after(timeout))

    async def stop_scan(self) -> None:
        """Stop the active scan. No-op when idle.

        A stop issued while ``start_scan`` is still initializing the adapter waits
        for the start to finish, then stops the radio it started.
        """
        if not self._is_scanning:
            return
        if not self._started.is_set():
            await self._started.wait()
            if not self._is_scanning:
                return
        if self._stopping:
            await self._finished.wait()
            return

        self._stopping = True
        timer = self._timer
        self._timer = None
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()

        try:
            await self._adapter.stop_scan()
        except Exception as e:
            logger.warning(f"Error stopping BLE scan: {e}")
        finally:
            self._stopping = False
            self._end_session()

        logger.info(f"BLE scan stopped, {len(self._results)} advertisement(s) received")

    async def wait(self) -> list[DiscoveredDevice]:
        """Wait for the current session to end and return its results."""
        await self._finished.wait()
        return self.results

    async def scan(
        self,
        service_filter: Sequence[str] = DEFAULT_SERVICE_FILTER,
        on_result: AdvertisementCallback | None = None,
        timeout: float | None = None,
    ) -> list[DiscoveredDevice]:
        """One-shot scan: start, wait for the timeout, return results."""
        await self.start_scan(service_filter, on_result, timeout)
        return await self.wait()

    async def _stop_after(self, timeout: float) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            await asyncio.sleep(timeout)
            logger.debug(f"Scan window of {timeout}s elapsed")
            await self.stop_scan()

    def _end_session(self) -> None:
        self._is_scanning = False
        self._on_result = None
        self._finished.set()

    def _on_advertisement(self, device: DiscoveredDevice) -> None:
        if not self._is_scanning:
            return

        advertised = {normalize_uuid(u) for u in device.service_uuids}
        if self._service_filter and not self._service_filter.intersection(advertised):
            logger.debug(f"Ignoring {device.label}: does not advertise a filtered service")
            return

        logger.debug(f"Received scan result: {device.label} ({device.device_id}, rssi={device.rssi})")
        self._results.append(device)

        if self._on_result is not None:
            try:
                self._on_result(device)
            except Exception:
                logger.exception("Scan result callback raised")
