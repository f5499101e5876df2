"""Scan example: list nearby BLE peripherals.

By default only GoPro cameras are listed (full 128-bit control service UUID
filter). ``--all`` scans with an empty filter and lists every peripheral.

Usage:
    python scan_example.py
    python scan_example.py --all --timeout 10
"""

import argparse
import asyncio
import logging

from gopro_remote import AdvertisementScanner, BleakAdapter, console, create_device_table, setup_logging
from gopro_remote.connection import DEFAULT_SERVICE_FILTER

setup_logging(level=logging.INFO)


async def async_main(show_all: bool, timeout: float):
    scanner = AdvertisementScanner(BleakAdapter())
    service_filter = () if show_all else DEFAULT_SERVICE_FILTER
    devices = await scanner.scan(service_filter=service_filter, timeout=timeout)
    console.print(create_device_table(devices, title=f"{len(devices)} advertisement(s)"))


def main():
    parser = argparse.ArgumentParser(description="List nearby GoPro cameras over BLE")
    parser.add_argument("--all", action="store_true", help="List every peripheral, not only GoPro cameras")
    parser.add_argument("--timeout", type=float, default=3.5, help="Scan window in seconds (default: 3.5)")
    args = parser.parse_args()

    asyncio.run(async_main(args.all, args.timeout))


if __name__ == "__main__":
    main()
