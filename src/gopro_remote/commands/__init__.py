"""GoPro command module.

- dispatcher: encoded command writes and characteristic reads over BLE
"""

from .dispatcher import *  # noqa: F403
