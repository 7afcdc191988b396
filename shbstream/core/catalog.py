"""Scan result accumulation, deduplication, and identifier filtering."""

from __future__ import annotations

import logging
import queue
from enum import Enum
from typing import Any

from shbstream.core.console import Console
from shbstream.core.model import ScanRecord
from shbstream.transports.base import Adapter, Peripheral

LOGGER = logging.getLogger(__name__)


class DeviceCatalog:
    """Connectable scan records, one per address, in discovery order."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console
        self._records: list[ScanRecord] = []
        self._seen: set[str] = set()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def records(self) -> tuple[ScanRecord, ...]:
        return tuple(self._records)

    def on_found(self, record: ScanRecord) -> bool:
        if not record.connectable or not record.address:
            return False
        if record.address in self._seen:
            return False
        self._seen.add(record.address)
        self._records.append(record)
        if self._console is not None:
            self._console.echo(f"Found device: {record.identifier} [{record.address}]")
        return True

    def filter_by_identifier(self, target: str) -> list[ScanRecord]:
        return [record for record in self._records if record.identifier == target]


class _ScanEvent(Enum):
    STARTED = "Scan started."
    STOPPED = "Scan stopped."


class ScanCollector:
    """Bridges adapter scan callbacks into a DeviceCatalog.

    Callbacks only enqueue; the catalog is filled on the caller's thread by
    ``drain`` once ``scan_for`` has returned.
    """

    def __init__(self, catalog: DeviceCatalog, console: Console | None = None) -> None:
        self.catalog = catalog
        self._console = console
        self._events: queue.SimpleQueue[Any] = queue.SimpleQueue()

    def attach(self, adapter: Adapter) -> None:
        adapter.set_callback_on_scan_found(self._found)
        adapter.set_callback_on_scan_start(lambda: self._events.put(_ScanEvent.STARTED))
        adapter.set_callback_on_scan_stop(lambda: self._events.put(_ScanEvent.STOPPED))

    def _found(self, peripheral: Peripheral) -> None:
        self._events.put(
            ScanRecord(
                identifier=peripheral.identifier(),
                address=peripheral.address(),
                connectable=peripheral.is_connectable(),
                peripheral=peripheral,
            )
        )

    def drain(self) -> DeviceCatalog:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            if isinstance(event, _ScanEvent):
                if self._console is not None:
                    self._console.echo(event.value)
                continue
            if not self.catalog.on_found(event):
                LOGGER.debug("Ignored scan result %s [%s]", event.identifier, event.address)
        return self.catalog

    def scan(self, adapter: Adapter, timeout_s: float) -> DeviceCatalog:
        self.attach(adapter)
        adapter.scan_for(int(timeout_s * 1000))
        return self.drain()
