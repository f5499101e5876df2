"""Unit tests - no hardware required.

Tests package imports, constants, errors and display helpers.
"""

import io
import logging

from rich.console import Console

from gopro_remote.exceptions import ConnectionLostError, GoProRemoteError, WriteError


def test_package_imports():
    """Test that the main package can be imported."""
    import gopro_remote

    assert gopro_remote.__version__ is not None
    assert isinstance(gopro_remote.__version__, str)
    assert len(gopro_remote.__version__) > 0


def test_client_import():
    """Test that GoProRemote can be imported."""
    from gopro_remote import GoProRemote

    assert GoProRemote is not None


def test_gatt_uuids():
    """UUIDs must match the camera firmware exactly."""
    from gopro_remote import GoProBleUUID

    assert GoProBleUUID.S_CONTROL_QUERY == "0000fea6-0000-1000-8000-00805f9b34fb"
    assert GoProBleUUID.S_WIFI_ACCESS_POINT == "b5f90001-aa8d-11e3-9046-0002a5d5c51b"
    assert GoProBleUUID.CQ_COMMAND == "b5f90072-aa8d-11e3-9046-0002a5d5c51b"
    assert GoProBleUUID.WAP_SSID == "b5f90002-aa8d-11e3-9046-0002a5d5c51b"
    assert GoProBleUUID.WAP_PASSWORD == "b5f90003-aa8d-11e3-9046-0002a5d5c51b"


def test_uuid_names_are_case_insensitive():
    from gopro_remote.ble_uuid import get_uuid_name

    assert get_uuid_name("0000FEA6-0000-1000-8000-00805F9B34FB") == "Control and Query Service"
    assert get_uuid_name("unknown") == "unknown"


def test_error_context():
    cause = OSError("GATT error")
    error = ConnectionLostError("Connection lost", operation="write", device_id="AA:BB", cause=cause)

    assert isinstance(error, WriteError)
    assert isinstance(error, GoProRemoteError)
    assert error.operation == "write"
    assert error.device_id == "AA:BB"
    assert "GATT error" in str(error)
    assert str(GoProRemoteError("plain")) == "plain"


def test_operation_result_failure_reuses_error_context():
    from gopro_remote import OperationResult

    error = WriteError("boom", operation="send_command", device_id="AA:BB")
    result = OperationResult.failure(error)

    assert not result.ok
    assert result.operation == "send_command"
    assert result.device_id == "AA:BB"
    assert OperationResult(operation="scan", value=[]).ok


def test_discovered_device_label(device_factory):
    assert device_factory("AA:BB", name="GoPro 1234").label == "GoPro 1234"
    assert device_factory("AA:BB", name=None).label == "AA:BB"


def test_device_table(device_factory):
    from gopro_remote import create_device_table

    devices = [device_factory("AA:BB"), device_factory("AA:BB"), device_factory("CC:DD", name=None, rssi=None)]
    table = create_device_table(devices)

    assert table.row_count == 3
    console = Console(record=True, width=200)
    console.print(table)
    output = console.export_text()
    assert "GoPro 1234" in output
    assert "Control and Query Service" in output


def test_setup_logging_with_file(tmp_path):
    from gopro_remote import setup_logging

    log_file = tmp_path / "logs" / "remote.log"
    setup_logging(level=logging.DEBUG, log_file=log_file, console=Console(file=io.StringIO()))
    logging.getLogger("gopro_remote.test").info("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "hello from test" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger("bleak").level == logging.WARNING


def test_setup_logging_ble_debug():
    from gopro_remote import setup_logging

    setup_logging(level=logging.DEBUG, console=Console(file=io.StringIO()), ble_debug=True)

    assert logging.getLogger("bleak").level == logging.DEBUG
