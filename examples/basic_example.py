"""Basic example: find a GoPro over BLE, pair, press the shutter, then put it to sleep.

This example demonstrates:
- Scanning for cameras advertising the GoPro control service
- Connecting (the pairing write is sent automatically)
- Sending shutter / enable Wi-Fi / shutdown commands
- Reading the camera access point credentials

Prerequisites:
    For first-time pairing, put your GoPro in pairing mode:
    See: https://community.gopro.com/s/article/GoPro-Quik-How-To-Pair-Your-Camera?language=en_US

Usage:
    python basic_example.py            # connect to the first camera found
    python basic_example.py "GoPro 1234"
"""

import argparse
import asyncio
import logging

from gopro_remote import GoProRemote, console, create_device_table, setup_logging

# Enable logging with rich formatting
setup_logging(level=logging.INFO)

logger = logging.getLogger(__name__)


async def async_main(name: str | None, scan_timeout: float):
    """Scan, connect and control the camera."""
    async with GoProRemote() as remote:
        remote.add_disconnect_listener(lambda device_id: logger.warning(f"Camera {device_id} disconnected"))

        found = await remote.scan(timeout=scan_timeout)
        if not found.ok:
            logger.error(f"Scan failed: {found.error}")
            return
        console.print(create_device_table(found.value))

        candidates = [d for d in found.value if name is None or d.display_name == name]
        if not candidates:
            logger.error("No matching camera found")
            return

        connected = await remote.connect(candidates[0])
        if not connected.ok:
            logger.error(f"Connect failed: {connected.error}")
            return
        if connected.value.pairing_error:
            logger.warning(f"Pairing write failed: {connected.value.pairing_error}")

        logger.info("Pressing shutter...")
        result = await remote.shutter()
        logger.info("Shutter sent!" if result.ok else f"Shutter failed: {result.error}")
        await asyncio.sleep(2)

        await remote.enable_wifi()
        credentials = await remote.read_wifi_credentials()
        if credentials.ok:
            logger.info(f"Camera Wi-Fi: {credentials.value.ssid} / {credentials.value.password}")

        logger.info("Putting camera to sleep...")
        await remote.shutdown()


def main():
    """Find a GoPro camera via BLE and control it."""
    parser = argparse.ArgumentParser(description="Find a GoPro camera via BLE and control it")
    parser.add_argument("name", nargs="?", help="Advertised camera name, e.g. 'GoPro 1234' (default: first found)")
    parser.add_argument("--scan-timeout", type=float, default=3.5, help="Scan window in seconds (default: 3.5)")
    args = parser.parse_args()

    asyncio.run(async_main(args.name, args.scan_timeout))


if __name__ == "__main__":
    main()
