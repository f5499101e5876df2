"""GoPro connection management module.

Contains:
- BLE connection management
- BLE advertisement scanner
"""

from .ble_manager import *  # noqa: F403
from .ble_scanner import *  # noqa: F403
