"""BLE connection manager.

Responsible for establishing, disconnecting, and tracking the single camera
connection, and for surfacing peripheral-initiated disconnects.

State machine::

    IDLE -> CONNECTING -> CONNECTED -> DISCONNECTING -> IDLE
                              |
                              +--(link lost)--> IDLE
"""

from __future__ import annotations

__all__ = ["BleConnectionManager", "ConnectionHandle", "ConnectionState"]

import asyncio
import contextlib
import functools
import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from ..adapter import BleAdapter, DisconnectCallback
from ..ble_uuid import get_uuid_name
from ..config import TimeoutConfig
from ..exceptions import (
    BleConnectionError,
    BleTimeoutError,
    ConnectionLostError,
    DisconnectionError,
    GoProRemoteError,
    NotConnectedError,
    PairingError,
    ReadError,
    WriteError,
)
from ..pairing import PairingTrigger, WifiCommandPairingTrigger

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConnectionState(Enum):
    """Connection lifecycle state."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class ConnectionHandle:
    """A live link to one camera.

    Only the manager creates handles. A handle dies on explicit disconnect or when
    the camera drops the link, and is never revived; reconnecting yields a new one.
    """

    def __init__(self, device_id: str, display_name: str | None = None) -> None:
        self.device_id = device_id
        self.display_name = display_name
        self.connected_at = time.time()
        self.pairing_error: PairingError | None = None
        self._lost = asyncio.Event()

    @property
    def is_alive(self) -> bool:
        """Whether the link is still up."""
        return not self._lost.is_set()

    @property
    def label(self) -> str:
        return self.display_name or self.device_id

    @property
    def is_paired(self) -> bool:
        """Whether the pairing trigger succeeded on this connection."""
        return self.pairing_error is None

    async def wait_lost(self) -> None:
        """Wait until the link goes down."""
        await self._lost.wait()

    def _mark_lost(self) -> None:
        self._lost.set()

    def __repr__(self) -> str:
        state = "alive" if self.is_alive else "dead"
        return f"ConnectionHandle({self.device_id!r}, {state})"


class BleConnectionManager:
    """BLE connection manager.

    Responsibilities:
    - Hold at most one connection (a second connect fails instead of superseding)
    - Run the pairing trigger once on every new connection
    - Serialize connect, write, read and disconnect on the single radio
    - Deliver disconnect events to the per-connection callback and to listeners
    """

    def __init__(
        self,
        adapter: BleAdapter,
        pairing_trigger: PairingTrigger | None = None,
        timeout_config: TimeoutConfig | None = None,
    ) -> None:
        """Initialize BLE connection manager.

        Args:
            adapter: Platform BLE adapter
            pairing_trigger: Hook run after connecting, defaults to the Wi-Fi command write
            timeout_config: Timeout configuration
        """
        self._adapter = adapter
        self._pairing = pairing_trigger or WifiCommandPairingTrigger()
        self._timeout = timeout_config or TimeoutConfig()

        self._lock = asyncio.Lock()
        self._state = ConnectionState.IDLE
        self._handle: ConnectionHandle | None = None
        self._connection_callback: DisconnectCallback | None = None
        # Device being connected, and whether its link dropped before connect returned
        self._connecting_id: str | None = None
        self._lost_while_connecting = False
        self._listeners: list[DisconnectCallback] = []
        self._disconnect_count = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """Whether a live connection exists."""
        return self._handle is not None and self._handle.is_alive

    @property
    def active_handle(self) -> ConnectionHandle | None:
        """The live connection, or None."""
        return self._handle if self.is_connected else None

    @property
    def disconnect_count(self) -> int:
        """Number of peripheral-initiated disconnects observed."""
        return self._disconnect_count

    def add_disconnect_listener(self, callback: DisconnectCallback) -> Callable[[], None]:
        """Register a callback for peripheral-initiated disconnects.

        Args:
            callback: Receives the disconnected device id

        Returns:
            A function that unregisters the callback (safe to call twice)
        """
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(callback)

        return _unsubscribe

    async def connect(
        self,
        device_id: str,
        on_disconnect: DisconnectCallback | None = None,
        display_name: str | None = None,
    ) -> ConnectionHandle:
        """Connect to a camera and trigger pairing.

        Args:
            device_id: Device identifier from a scan result
            on_disconnect: Called with the device id if the camera drops this connection
            display_name: Name used in log messages

        Returns:
            Handle of the new connection

        Raises:
            BleConnectionError: Already connected, or the transport failed
            BleTimeoutError: Connection not established within ``ble_connect_timeout``
        """
        label = display_name or device_id
        async with self._lock:
            if self._state is not ConnectionState.IDLE:
                current = self._handle.label if self._handle else "another device"
                raise BleConnectionError(
                    f"Cannot connect to {label}: already {self._state.value} ({current})",
                    operation="connect",
                    device_id=device_id,
                )

            self._state = ConnectionState.CONNECTING
            self._connecting_id = device_id
            self._lost_while_connecting = False
            logger.info(f"Starting BLE connection to {label}...")
            timeout = self._timeout.ble_connect_timeout

            try:
                await asyncio.wait_for(self._adapter.connect(device_id, self._on_disconnected), timeout=timeout)
            except TimeoutError as e:
                await self._abort_connect(device_id)
                logger.error(f"Connection to {label} timed out after {timeout}s")
                raise BleTimeoutError(
                    f"Connection to {label} timed out after {timeout}s",
                    operation="connect",
                    device_id=device_id,
                    cause=e,
                ) from e
            except Exception as e:
                await self._abort_connect(device_id)
                logger.error(f"Connection to {label} failed: {e}")
                raise BleConnectionError(
                    f"Connection to {label} failed", operation="connect", device_id=device_id, cause=e
                ) from e

            if self._lost_while_connecting:
                await self._abort_connect(device_id)
                logger.error(f"Connection to {label} dropped before it was established")
                raise BleConnectionError(
                    f"Connection to {label} dropped while connecting", operation="connect", device_id=device_id
                )
            self._connecting_id = None

            handle = ConnectionHandle(device_id, display_name)
            self._handle = handle
            self._connection_callback = on_disconnect
            self._state = ConnectionState.CONNECTED
            logger.info(f"✅ BLE connected to {label}")

            # Pairing runs under the same lock, so it precedes any caller write
            try:
                await self._pairing.trigger(handle, functools.partial(self._write_unlocked, handle))
            except Exception as e:
                if not isinstance(e, PairingError):
                    e = PairingError(f"Pairing with {label} failed", operation="pair", device_id=device_id, cause=e)
                handle.pairing_error = e
                logger.warning(f"Pairing with {label} failed, staying connected: {e}")

            if not handle.is_alive:
                raise BleConnectionError(
                    f"Connection to {label} lost during setup", operation="connect", device_id=device_id
                )
            return handle

    async def _abort_connect(self, device_id: str) -> None:
        with contextlib.suppress(Exception):
            await self._adapter.disconnect(device_id)
        self._connecting_id = None
        self._lost_while_connecting = False
        self._handle = None
        self._state = ConnectionState.IDLE

    async def disconnect(self, handle: ConnectionHandle) -> None:
        """Disconnect a live connection.

        State is reset to idle even when the transport reports an error.

        Raises:
            DisconnectionError: ``handle`` is not the live connection, or the transport failed
        """
        self._require_live(handle, "disconnect", DisconnectionError)

        async with self._lock:
            self._require_live(handle, "disconnect", DisconnectionError)
            self._state = ConnectionState.DISCONNECTING
            error: Exception | None = None
            try:
                await asyncio.wait_for(
                    self._adapter.disconnect(handle.device_id), timeout=self._timeout.ble_disconnect_timeout
                )
            except Exception as e:
                error = e
            finally:
                handle._mark_lost()
                self._handle = None
                self._connection_callback = None
                self._state = ConnectionState.IDLE

            if error is not None:
                logger.warning(f"Error disconnecting {handle.label}: {error}")
                raise DisconnectionError(
                    f"Error disconnecting {handle.label}",
                    operation="disconnect",
                    device_id=handle.device_id,
                    cause=error,
                ) from error
            logger.info(f"{handle.label} BLE disconnected")

    async def write(self, handle: ConnectionHandle, service_uuid: str, characteristic_uuid: str, data: bytes) -> None:
        """Write a characteristic on the connected camera.

        Raises:
            NotConnectedError: ``handle`` is not the live connection
            ConnectionLostError: The link dropped while the write was in flight
            WriteError: Transport error or timeout
        """
        self._require_live(handle, "write", NotConnectedError)
        async with self._lock:
            await self._write_unlocked(handle, service_uuid, characteristic_uuid, data)

    async def _write_unlocked(
        self, handle: ConnectionHandle, service_uuid: str, characteristic_uuid: str, data: bytes
    ) -> None:
        self._require_live(handle, "write", NotConnectedError)
        logger.debug(f"📤 {handle.label}: {get_uuid_name(characteristic_uuid)} <- {data.hex()}")
        try:
            await self._until_lost(
                handle,
                "write",
                self._adapter.write(handle.device_id, service_uuid, characteristic_uuid, data),
                self._timeout.ble_write_timeout,
            )
        except ConnectionLostError:
            raise
        except Exception as e:
            raise WriteError(
                f"Write to {get_uuid_name(characteristic_uuid)} failed",
                operation="write",
                device_id=handle.device_id,
                cause=e,
            ) from e

    async def read(self, handle: ConnectionHandle, service_uuid: str, characteristic_uuid: str) -> bytes:
        """Read a characteristic from the connected camera.

        Raises:
            NotConnectedError: ``handle`` is not the live connection
            ReadError: Transport error, timeout, or link lost during the read
        """
        self._require_live(handle, "read", NotConnectedError)
        async with self._lock:
            self._require_live(handle, "read", NotConnectedError)
            try:
                data = await self._until_lost(
                    handle,
                    "read",
                    self._adapter.read(handle.device_id, service_uuid, characteristic_uuid),
                    self._timeout.ble_read_timeout,
                )
            except Exception as e:
                raise ReadError(
                    f"Read from {get_uuid_name(characteristic_uuid)} failed",
                    operation="read",
                    device_id=handle.device_id,
                    cause=e,
                ) from e
        logger.debug(f"📥 {handle.label}: {get_uuid_name(characteristic_uuid)} -> {data.hex()}")
        return data

    async def _until_lost(
        self, handle: ConnectionHandle, name: str, operation: Awaitable[T], timeout: float
    ) -> T:
        """Await a transport operation, failing fast if the link drops meanwhile."""
        op_task = asyncio.ensure_future(operation)
        lost_task = asyncio.ensure_future(handle.wait_lost())
        try:
            done, _ = await asyncio.wait({op_task, lost_task}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            lost_task.cancel()
            if not op_task.done():
                op_task.cancel()

        if op_task in done:
            return op_task.result()
        if lost_task in done:
            raise ConnectionLostError(
                f"Connection to {handle.label} lost during operation",
                operation=name,
                device_id=handle.device_id,
            )
        raise TimeoutError(f"No response from {handle.label} within {timeout}s")

    def _require_live(
        self, handle: ConnectionHandle | None, operation: str, error_type: type[GoProRemoteError]
    ) -> None:
        if handle is None or handle is not self._handle or not handle.is_alive:
            device_id = handle.device_id if handle is not None else None
            raise error_type(f"No live connection for {operation}", operation=operation, device_id=device_id)

    def _on_disconnected(self, device_id: str) -> None:
        """Adapter callback for a dropped link."""
        if self._state is ConnectionState.CONNECTING and device_id == self._connecting_id:
            logger.warning(f"Link to {device_id} dropped while connecting")
            self._lost_while_connecting = True
            return
        handle = self._handle
        if handle is None or handle.device_id != device_id:
            logger.debug(f"Ignoring disconnect event for {device_id} (not the active connection)")
            return
        if self._state is ConnectionState.DISCONNECTING:
            logger.debug(f"Disconnect event for {device_id} during explicit disconnect")
            return

        self._disconnect_count += 1
        logger.warning(f"{handle.label} BLE connection unexpectedly disconnected ({self._disconnect_count} time(s))")

        handle._mark_lost()
        self._handle = None
        self._state = ConnectionState.IDLE
        callbacks = [self._connection_callback, *self._listeners]
        self._connection_callback = None

        for callback in callbacks:
            if callback is None:
                continue
            try:
                callback(device_id)
            except Exception:
                logger.exception(f"Disconnect callback for {device_id} raised")

    async def close(self) -> None:
        """Disconnect if connected and drop all listeners."""
        handle = self.active_handle
        if handle is not None:
            try:
                await self.disconnect(handle)
            except DisconnectionError as e:
                logger.warning(f"Error during BLE teardown: {e}")
        self._listeners.clear()
