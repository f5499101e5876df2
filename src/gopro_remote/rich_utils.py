"""Rich utilities for displaying scan results."""

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table

from .adapter import DiscoveredDevice
from .ble_uuid import get_uuid_name

# Global console instance
console = Console()


def create_table(title: str, *columns: str, **kwargs) -> Table:
    """
    Create a table with standard styling.

    Args:
        title: Table title
        *columns: Column names
        **kwargs: Additional Table arguments

    Returns:
        Table instance
    """
    table = Table(title=title, **kwargs)
    for col in columns:
        table.add_column(col)
    return table


def create_device_table(devices: Iterable[DiscoveredDevice], title: str = "Discovered devices") -> Table:
    """One row per scan result, in discovery order (duplicates included)."""
    table = create_table(title, "#", "Name", "Device ID", "RSSI", "Services")
    for index, device in enumerate(devices, 1):
        table.add_row(
            str(index),
            device.display_name or "-",
            device.device_id,
            "-" if device.rssi is None else str(device.rssi),
            ", ".join(get_uuid_name(u) for u in device.service_uuids) or "-",
        )
    return table


__all__ = [
    "Console",
    "Table",
    "console",
    "create_device_table",
    "create_table",
]
