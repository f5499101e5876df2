"""Command payload encoding tests."""

import pytest

from gopro_remote import GoProCommand, encode


@pytest.mark.parametrize(
    ("command", "expected"),
    [
        (GoProCommand.SHUTDOWN, bytes([0x01, 0x05])),
        (GoProCommand.SHUTTER, bytes([0x03, 0x01, 0x01, 0x01])),
        (GoProCommand.ENABLE_WIFI, bytes([0x03, 0x17, 0x01, 0x01])),
    ],
)
def test_encode_exact_bytes(command: GoProCommand, expected: bytes):
    assert encode(command) == expected
    assert command.payload == expected


def test_encode_is_deterministic():
    for command in GoProCommand:
        assert encode(command) == encode(command)


def test_every_command_has_a_payload():
    """Header byte always equals the number of bytes that follow it."""
    for command in GoProCommand:
        payload = encode(command)
        assert isinstance(payload, bytes)
        assert payload[0] == len(payload) - 1
