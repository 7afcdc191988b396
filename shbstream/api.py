"""Stable public API for building tooling on top of shbstream.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from typing import Any

from shbstream.core.console import Console, TyperConsole
from shbstream.core.errors import (
    CharacteristicNotFoundError,
    ConnectionFailedError,
    DeviceDiscoveryError,
    EmptyCatalogError,
    ErrorKind,
    InvalidSelectionError,
    NoAdapterError,
    NoSubscriptionCapabilityError,
    ProfileLoadError,
    ProfileValidationError,
    ServiceDiscoveryError,
    ShbStreamError,
    SubscriptionFailedError,
    TransportError,
    UnsubscribeFailedError,
)
from shbstream.core.model import (
    Profile,
    ScanRecord,
    SessionResult,
    SessionState,
    SubscriptionMode,
    TargetCharacteristic,
)
from shbstream.core.profile_loader import load_profiles
from shbstream.core.render import render
from shbstream.core.service import StreamService
from shbstream.transports.base import Radio
from shbstream.transports.ble_gatt import BleakRadio

__all__ = [
    "ShbStreamError",
    "ErrorKind",
    "NoAdapterError",
    "EmptyCatalogError",
    "InvalidSelectionError",
    "DeviceDiscoveryError",
    "ConnectionFailedError",
    "ServiceDiscoveryError",
    "CharacteristicNotFoundError",
    "NoSubscriptionCapabilityError",
    "SubscriptionFailedError",
    "UnsubscribeFailedError",
    "ProfileLoadError",
    "ProfileValidationError",
    "TransportError",
    "Profile",
    "ScanRecord",
    "SessionResult",
    "SessionState",
    "SubscriptionMode",
    "TargetCharacteristic",
    "BleakRadio",
    "Console",
    "TyperConsole",
    "render",
    "Client",
]


class Client:
    """Public client for discovering a bezel and streaming its payloads.

    A `Client` instance wraps profile loading, scanning, device selection and
    the subscription session behind a stable API intended for third-party
    tools (GUI/TUI/services/scripts). Pass a custom `radio` or `console` to
    drive a different BLE stack or capture output.
    """

    def __init__(
        self,
        *,
        profile_id: str | None = None,
        radio: Radio | None = None,
        console: Console | None = None,
        **overrides: Any,
    ) -> None:
        self._service = StreamService(
            profile_id=profile_id,
            radio=radio,
            console=console,
            overrides=overrides,
        )

    @property
    def profile(self) -> Profile:
        return self._service.profile

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_profiles(self) -> list[Profile]:
        return sorted(load_profiles().profiles.values(), key=lambda p: p.id)

    def scan(self) -> list[ScanRecord]:
        return self._service.scan()

    def stream(self) -> SessionResult:
        return self._service.run()
