"""Service layer used by CLI and API frontends."""

from __future__ import annotations

import logging
from typing import Any

from shbstream.core.catalog import DeviceCatalog, ScanCollector
from shbstream.core.console import Console, TyperConsole
from shbstream.core.errors import DeviceDiscoveryError, EmptyCatalogError, NoAdapterError, TransportError
from shbstream.core.model import Profile, ScanRecord, SessionResult
from shbstream.core.profile_loader import load_profiles
from shbstream.core.selection import select_peripheral
from shbstream.core.session import SubscriptionSession
from shbstream.transports.base import Radio
from shbstream.transports.ble_gatt import BleakRadio

LOGGER = logging.getLogger(__name__)


class StreamService:
    def __init__(
        self,
        *,
        profile: Profile | None = None,
        profile_id: str | None = None,
        radio: Radio | None = None,
        console: Console | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> None:
        self.load_warnings: tuple[str, ...] = ()
        if profile is None:
            loaded = load_profiles()
            self.load_warnings = loaded.warnings
            profile = loaded.get(profile_id)
        if overrides:
            profile = profile.with_overrides(**overrides)
        self.profile = profile
        self.radio = radio or BleakRadio(connect_timeout_s=profile.connect_timeout_s)
        self.console = console or TyperConsole()

    def discover(self) -> DeviceCatalog:
        adapter = self.radio.get_adapter(self.profile.adapter)
        if adapter is None:
            raise NoAdapterError("No Bluetooth adapter found.")
        LOGGER.debug("Scanning on adapter %s for %.1fs", adapter.identifier(), self.profile.scan_timeout_s)

        collector = ScanCollector(DeviceCatalog(self.console), self.console)
        try:
            return collector.scan(adapter, self.profile.scan_timeout_s)
        except TransportError as exc:
            raise DeviceDiscoveryError(f"Scan failed: {exc}") from exc

    def candidates(self, catalog: DeviceCatalog) -> list[ScanRecord]:
        if not len(catalog):
            raise EmptyCatalogError("No connectable peripherals discovered.")
        matches = catalog.filter_by_identifier(self.profile.identifier)
        if not matches:
            raise EmptyCatalogError(
                f"No {self.profile.name} devices (identifier: {self.profile.identifier}) found."
            )
        return matches

    def scan(self) -> list[ScanRecord]:
        try:
            return list(self.discover())
        finally:
            self.radio.close()

    def run(self) -> SessionResult:
        try:
            chosen = select_peripheral(self.candidates(self.discover()), self.console)
            self.console.echo(f"Connecting to {chosen.identifier} [{chosen.address}]")
            session = SubscriptionSession(chosen.peripheral, self.profile.characteristic_uuid, self.console)
            return session.run()
        finally:
            self.radio.close()
