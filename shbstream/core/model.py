"""Core data models used across loader, service, session, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from shbstream.core.errors import ShbStreamError

SIMIONIC_G1000_IDENTIFIER = "SHB1000"
BLE_CHARACTERISTIC_UUID = "f62a9f56-f29e-48a8-a317-47ee37a58999"
DEFAULT_SCAN_TIMEOUT_S = 10.0
DEFAULT_CONNECT_TIMEOUT_S = 10.0


class SubscriptionMode(str, Enum):
    NONE = "none"
    INDICATE = "indicate"
    NOTIFY = "notify"


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RESOLVING = "resolving"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBING = "unsubscribing"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanRecord:
    identifier: str
    address: str
    connectable: bool
    peripheral: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TargetCharacteristic:
    service_id: str
    characteristic_id: str
    can_indicate: bool
    can_notify: bool


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    identifier: str = SIMIONIC_G1000_IDENTIFIER
    characteristic_uuid: str = BLE_CHARACTERISTIC_UUID
    scan_timeout_s: float = DEFAULT_SCAN_TIMEOUT_S
    connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S
    adapter: str | None = None

    def with_overrides(self, **overrides: Any) -> Profile:
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class SessionResult:
    state: SessionState
    mode: SubscriptionMode = SubscriptionMode.NONE
    target: TargetCharacteristic | None = None
    payload_count: int = 0
    error: ShbStreamError | None = None

    @property
    def ok(self) -> bool:
        return self.state is SessionState.DISCONNECTED and self.error is None
