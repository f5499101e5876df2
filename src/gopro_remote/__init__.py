"""GoPro Remote - control a single GoPro camera over Bluetooth Low Energy.

Main components:
- payload.py: command to byte payload encoding
- connection/: advertisement scanning and the BLE connection state machine
- pairing.py: post-connect pairing trigger
- commands/: command writes and characteristic reads
- client.py: main client interface (composition + delegation pattern)
- config.py: timeouts and paired device persistence
"""

from importlib.metadata import version

__version__ = version("gopro-remote")

from .adapter import BleAdapter, BleakAdapter, DiscoveredDevice
from .ble_uuid import GoProBleUUID
from .client import GoProRemote
from .commands import CommandDispatcher, WifiCredentials
from .config import PairedDevice, PairedDeviceStore, TimeoutConfig
from .connection import AdvertisementScanner, BleConnectionManager, ConnectionHandle, ConnectionState
from .logging_config import setup_logging
from .pairing import PairingTrigger, WifiCommandPairingTrigger
from .payload import GoProCommand, encode
from .results import OperationResult
from .rich_utils import console, create_device_table, create_table

__all__ = [
    "AdvertisementScanner",
    "BleAdapter",
    "BleConnectionManager",
    "BleakAdapter",
    "CommandDispatcher",
    "ConnectionHandle",
    "ConnectionState",
    "DiscoveredDevice",
    "GoProBleUUID",
    "GoProCommand",
    "GoProRemote",
    "OperationResult",
    "PairedDevice",
    "PairedDeviceStore",
    "PairingTrigger",
    "TimeoutConfig",
    "WifiCommandPairingTrigger",
    "WifiCredentials",
    "console",
    "create_device_table",
    "create_table",
    "encode",
    "setup_logging",
]
