"""Timeout configuration and paired device persistence."""

from __future__ import annotations

__all__ = ["PairedDevice", "PairedDeviceStore", "TimeoutConfig"]

import contextlib
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from tinydb import Query, TinyDB
from tinydb.storages import MemoryStorage

logger = logging.getLogger(__name__)


@dataclass
class TimeoutConfig:
    """Timeout configuration (seconds)."""

    ble_scan_timeout: float = 3.5  # Scan window, scan stops automatically afterwards
    ble_adapter_init_timeout: float = 5.0  # Adapter initialization
    ble_connect_timeout: float = 20.0  # Connection establishment
    ble_write_timeout: float = 10.0  # Single GATT write
    ble_read_timeout: float = 10.0  # Single GATT read
    ble_disconnect_timeout: float = 10.0  # Explicit disconnect


@dataclass
class PairedDevice:
    """A camera that accepted the pairing trigger.

    Attributes:
        device_id: BLE device identifier (address)
        display_name: Advertised name, if any
        last_paired: Unix timestamp of the last successful pairing write
    """

    device_id: str
    display_name: str | None = None
    last_paired: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, str | float | None]:
        """Convert to dictionary."""
        return {
            "device_id": self.device_id,
            "display_name": self.display_name,
            "last_paired": self.last_paired,
        }

    @classmethod
    def from_dict(cls, data: dict) -> PairedDevice:
        """Create from dictionary."""
        return cls(
            device_id=data["device_id"],
            display_name=data.get("display_name"),
            last_paired=data.get("last_paired", 0.0),
        )


class PairedDeviceStore:
    """Paired device persistence.

    Wraps a TinyDB table keyed by device id. Passing ``db_path=None`` keeps the
    records in memory only.

    Supports context manager protocol:
        with PairedDeviceStore(Path("paired_devices.json")) as store:
            store.save(PairedDevice("AA:BB:CC:DD:EE:FF", "GoPro 1234"))
    """

    def __init__(self, db_path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: JSON database file, None for an in-memory store
        """
        if db_path is None:
            self._db = TinyDB(storage=MemoryStorage)
        else:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = TinyDB(str(db_path))
        self._db_path = db_path
        self._table = self._db.table("paired_devices")
        logger.debug(f"Paired device store initialized: {db_path or 'memory'}")

    def __enter__(self) -> PairedDeviceStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        with contextlib.suppress(Exception):
            if getattr(self, "_db", None) is not None:
                self._db.close()

    def save(self, device: PairedDevice) -> None:
        """Save or update a paired device."""
        query = Query()
        self._table.upsert(device.to_dict(), query.device_id == device.device_id)
        logger.info(f"Recorded paired device {device.display_name or device.device_id}")

    def load(self, device_id: str) -> PairedDevice | None:
        """Load a paired device.

        Args:
            device_id: BLE device identifier

        Returns:
            The stored record, or None if the device was never paired
        """
        query = Query()
        result = self._table.search(query.device_id == device_id)
        if not result:
            return None
        return PairedDevice.from_dict(result[0])

    def is_known(self, device_id: str) -> bool:
        """Whether the device has been paired before."""
        return self.load(device_id) is not None

    def delete(self, device_id: str) -> bool:
        """Forget a paired device.

        Returns:
            Whether a record was removed
        """
        query = Query()
        removed = self._table.remove(query.device_id == device_id)
        if removed:
            logger.info(f"Forgot paired device {device_id}")
        return bool(removed)

    def list_all(self) -> list[PairedDevice]:
        """List all paired devices, most recently paired first."""
        devices = [PairedDevice.from_dict(record) for record in self._table.all()]
        return sorted(devices, key=lambda d: d.last_paired, reverse=True)

    def close(self) -> None:
        """Close database."""
        if getattr(self, "_db", None) is not None:
            self._db.close()
            self._db = None
            logger.debug("Paired device store closed")
