"""Configuration and paired device store tests."""

from gopro_remote import PairedDevice, PairedDeviceStore, TimeoutConfig


def test_default_scan_timeout():
    assert TimeoutConfig().ble_scan_timeout == 3.5


def test_store_save_and_load(tmp_path):
    with PairedDeviceStore(tmp_path / "paired.json") as store:
        store.save(PairedDevice("AA:BB", "GoPro 1234", last_paired=100.0))

        loaded = store.load("AA:BB")

    assert loaded == PairedDevice("AA:BB", "GoPro 1234", last_paired=100.0)


def test_store_persists_across_instances(tmp_path):
    db_path = tmp_path / "nested" / "paired.json"
    with PairedDeviceStore(db_path) as store:
        store.save(PairedDevice("AA:BB", "GoPro 1234"))

    with PairedDeviceStore(db_path) as store:
        assert store.is_known("AA:BB")
        assert not store.is_known("CC:DD")


def test_store_update_does_not_duplicate():
    with PairedDeviceStore() as store:
        store.save(PairedDevice("AA:BB", None, last_paired=1.0))
        store.save(PairedDevice("AA:BB", "GoPro 1234", last_paired=2.0))

        devices = store.list_all()

    assert len(devices) == 1
    assert devices[0].display_name == "GoPro 1234"


def test_store_list_most_recent_first():
    with PairedDeviceStore() as store:
        store.save(PairedDevice("AA:BB", last_paired=1.0))
        store.save(PairedDevice("CC:DD", last_paired=5.0))

        assert [d.device_id for d in store.list_all()] == ["CC:DD", "AA:BB"]


def test_store_delete():
    with PairedDeviceStore() as store:
        store.save(PairedDevice("AA:BB"))

        assert store.delete("AA:BB")
        assert not store.delete("AA:BB")
        assert store.load("AA:BB") is None
