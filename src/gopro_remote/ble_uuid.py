"""GoPro BLE GATT identifiers.

Full 128-bit UUID strings for the services and characteristics this controller
addresses. The camera firmware rejects the 16-bit short form of the control and
query service (``FEA6``) as a scan filter, so only the 128-bit form is used.

References:
- OpenGoPro BLE specification: https://gopro.github.io/OpenGoPro/ble/
- https://github.com/gopro/OpenGoPro/discussions/41
"""

from __future__ import annotations

__all__ = ["GoProBleUUID", "get_uuid_name", "normalize_uuid"]

from typing import Final

# GoPro vendor UUID template
GOPRO_BASE_UUID: Final = "b5f9{}-aa8d-11e3-9046-0002a5d5c51b"


class GoProBleUUID:
    """GoPro BLE UUID constants.

    Lowercase 8-4-4-4-12 strings, the form bleak reports them in.
    """

    # Control & Query service (advertised, used as the scan filter)
    S_CONTROL_QUERY: Final = "0000fea6-0000-1000-8000-00805f9b34fb"
    CQ_COMMAND: Final = GOPRO_BASE_UUID.format("0072")
    CQ_COMMAND_RESP: Final = GOPRO_BASE_UUID.format("0073")

    # Wi-Fi Access Point service
    S_WIFI_ACCESS_POINT: Final = GOPRO_BASE_UUID.format("0001")
    WAP_SSID: Final = GOPRO_BASE_UUID.format("0002")
    WAP_PASSWORD: Final = GOPRO_BASE_UUID.format("0003")


UUID_NAME_MAP: Final[dict[str, str]] = {
    GoProBleUUID.S_CONTROL_QUERY: "Control and Query Service",
    GoProBleUUID.CQ_COMMAND: "Command",
    GoProBleUUID.CQ_COMMAND_RESP: "Command Response",
    GoProBleUUID.S_WIFI_ACCESS_POINT: "WiFi Access Point Service",
    GoProBleUUID.WAP_SSID: "WiFi AP SSID",
    GoProBleUUID.WAP_PASSWORD: "WiFi AP Password",
}


def normalize_uuid(uuid: str) -> str:
    """Lowercase and strip a UUID string so comparisons are case-insensitive."""
    return uuid.strip().lower()


def get_uuid_name(uuid: str) -> str:
    """Get human-readable name for UUID.

    Args:
        uuid: UUID string (any case)

    Returns:
        Human-readable name for the UUID, or the UUID itself if not found
    """
    return UUID_NAME_MAP.get(normalize_uuid(uuid), uuid)
