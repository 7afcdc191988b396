from __future__ import annotations

import random

from shbstream.core.catalog import DeviceCatalog, ScanCollector
from shbstream.core.model import ScanRecord
from tests.fake_radio import FakeAdapter, FakePeripheral, RecordingConsole


def test_duplicate_address_is_ignored() -> None:
    console = RecordingConsole()
    catalog = DeviceCatalog(console)

    assert catalog.on_found(ScanRecord("SHB1000", "AA:BB", True)) is True
    assert catalog.on_found(ScanRecord("SHB1000-renamed", "AA:BB", True)) is False

    assert [r.identifier for r in catalog] == ["SHB1000"]
    assert console.lines == ["Found device: SHB1000 [AA:BB]"]


def test_non_connectable_and_empty_address_rejected() -> None:
    catalog = DeviceCatalog()
    assert catalog.on_found(ScanRecord("SHB1000", "AA:BB", False)) is False
    assert catalog.on_found(ScanRecord("SHB1000", "", True)) is False
    assert len(catalog) == 0


def test_random_sequences_keep_unique_connectable_records() -> None:
    rng = random.Random(1234)
    for _ in range(50):
        catalog = DeviceCatalog()
        for _ in range(rng.randint(0, 30)):
            catalog.on_found(
                ScanRecord(
                    identifier=rng.choice(["SHB1000", "Other", ""]),
                    address=rng.choice(["", "AA:01", "AA:02", "AA:03", "AA:04"]),
                    connectable=rng.random() > 0.3,
                )
            )
        addresses = [r.address for r in catalog]
        assert len(addresses) == len(set(addresses))
        assert all(r.connectable and r.address for r in catalog)


def test_filter_is_exact_and_order_preserving() -> None:
    catalog = DeviceCatalog()
    for identifier, address in [
        ("SHB1000", "01"),
        ("shb1000", "02"),
        ("SHB1000 ", "03"),
        ("Other", "04"),
        ("SHB1000", "05"),
    ]:
        catalog.on_found(ScanRecord(identifier, address, True))

    matches = catalog.filter_by_identifier("SHB1000")
    assert [r.address for r in matches] == ["01", "05"]
    assert all(r.identifier == "SHB1000" for r in matches)


def test_filter_has_no_side_effects() -> None:
    catalog = DeviceCatalog()
    catalog.on_found(ScanRecord("SHB1000", "01", True))
    catalog.filter_by_identifier("Other")
    assert len(catalog) == 1


def test_collector_drains_callbacks_in_order() -> None:
    console = RecordingConsole()
    adapter = FakeAdapter(
        [
            FakePeripheral("SHB1000", "AA:BB"),
            FakePeripheral("Speaker", "CC:DD", connectable=False),
            FakePeripheral("SHB1000", "AA:BB"),
        ]
    )

    catalog = ScanCollector(DeviceCatalog(console), console).scan(adapter, 2.5)

    assert adapter.scan_timeouts == [2500]
    assert [r.address for r in catalog] == ["AA:BB"]
    assert catalog.records[0].peripheral is adapter.peripherals[0]
    assert console.lines == ["Scan started.", "Found device: SHB1000 [AA:BB]", "Scan stopped."]
