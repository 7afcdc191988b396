"""Radio collaborator interfaces.

Callbacks registered here may be invoked from a thread owned by the
collaborator, never from the caller's thread.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

PayloadCallback = Callable[[bytes], None]


class Characteristic(Protocol):
    def uuid(self) -> str: ...

    def can_indicate(self) -> bool: ...

    def can_notify(self) -> bool: ...


class Service(Protocol):
    def uuid(self) -> str: ...

    def characteristics(self) -> Sequence[Characteristic]: ...


class Peripheral(Protocol):
    def identifier(self) -> str: ...

    def address(self) -> str: ...

    def is_connectable(self) -> bool: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def services(self) -> Sequence[Service]: ...

    def indicate(self, service_uuid: str, characteristic_uuid: str, callback: PayloadCallback) -> None: ...

    def notify(self, service_uuid: str, characteristic_uuid: str, callback: PayloadCallback) -> None: ...

    def unsubscribe(self, service_uuid: str, characteristic_uuid: str) -> None: ...


class Adapter(Protocol):
    def identifier(self) -> str: ...

    def set_callback_on_scan_found(self, callback: Callable[[Peripheral], None]) -> None: ...

    def set_callback_on_scan_start(self, callback: Callable[[], None]) -> None: ...

    def set_callback_on_scan_stop(self, callback: Callable[[], None]) -> None: ...

    def scan_for(self, timeout_ms: int) -> None:
        """Scan for ``timeout_ms`` milliseconds, blocking the caller."""


class Radio(Protocol):
    def get_adapter(self, name: str | None = None) -> Adapter | None:
        """Return the requested (or default) adapter, or None when none exists."""

    def close(self) -> None: ...
