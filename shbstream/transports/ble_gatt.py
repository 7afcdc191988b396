"""BLE GATT collaborator implemented on top of bleak.

bleak is asyncio-only while the session drives the radio synchronously, so
``BleakRadio`` owns one event loop running on a daemon thread. Every public
method submits a coroutine with ``run_coroutine_threadsafe`` and blocks on its
result; scan and payload callbacks therefore fire on the loop thread.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import sys
import threading
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, TypeVar

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError

from shbstream.core.errors import (
    TransportConnectError,
    TransportDiscoveryError,
    TransportError,
    TransportSubscribeError,
    TransportTimeoutError,
)
from shbstream.core.model import DEFAULT_CONNECT_TIMEOUT_S
from shbstream.transports.base import PayloadCallback

LOGGER = logging.getLogger(__name__)
_SYSFS_BLUETOOTH = Path("/sys/class/bluetooth")
_OPERATION_GRACE_S = 5.0

T = TypeVar("T")


class _LoopThread:
    """Asyncio event loop running forever on a daemon thread."""

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_event_loop, daemon=True, name="shbstream-ble")
        self._thread.start()

    def _run_event_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        LOGGER.debug("BLE event loop thread started")
        self.loop.run_forever()
        LOGGER.debug("BLE event loop thread stopped")

    def run(self, coro: Coroutine[Any, Any, T], *, timeout_s: float | None = None) -> T:
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        try:
            return future.result(timeout=timeout_s)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise TransportTimeoutError(f"BLE operation timed out after {timeout_s:.1f}s") from exc

    def stop(self) -> None:
        if not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self.loop.stop)
        if self._thread.is_alive():
            self._thread.join(timeout=5.0)


class BleakCharacteristic:
    def __init__(self, char: Any) -> None:
        self._char = char

    def uuid(self) -> str:
        return str(self._char.uuid)

    def can_indicate(self) -> bool:
        return "indicate" in (self._char.properties or ())

    def can_notify(self) -> bool:
        return "notify" in (self._char.properties or ())


class BleakService:
    def __init__(self, service: Any) -> None:
        self._service = service

    def uuid(self) -> str:
        return str(self._service.uuid)

    def characteristics(self) -> list[BleakCharacteristic]:
        return [BleakCharacteristic(char) for char in self._service.characteristics]


class BleakPeripheral:
    def __init__(
        self,
        runner: _LoopThread,
        device: Any,
        *,
        local_name: str | None = None,
        connectable: bool = True,
        adapter: str | None = None,
        timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ) -> None:
        self._runner = runner
        self._device = device
        self._local_name = local_name
        self._connectable = connectable
        self._adapter = adapter
        self._timeout_s = timeout_s
        self._client: BleakClient | None = None

    def identifier(self) -> str:
        return self._local_name or getattr(self._device, "name", None) or ""

    def address(self) -> str:
        return getattr(self._device, "address", None) or ""

    def is_connectable(self) -> bool:
        return self._connectable

    def _call(self, coro: Coroutine[Any, Any, T], error_cls: type[TransportError], what: str) -> T:
        try:
            return self._runner.run(coro, timeout_s=self._timeout_s + _OPERATION_GRACE_S)
        except TransportError:
            raise
        except (BleakError, asyncio.TimeoutError, OSError) as exc:
            raise error_cls(f"BLE {what} failed for {self.address()}: {exc}") from exc

    def _require_client(self) -> BleakClient:
        if self._client is None or not self._client.is_connected:
            raise TransportConnectError(f"BLE peripheral {self.address()} is not connected")
        return self._client

    def connect(self) -> None:
        kwargs: dict[str, Any] = {"timeout": self._timeout_s}
        if self._adapter:
            kwargs["adapter"] = self._adapter

        async def _connect() -> BleakClient:
            client = BleakClient(self._device, **kwargs)
            await client.connect()
            return client

        client = self._call(_connect(), TransportConnectError, "connect")
        if not client.is_connected:
            raise TransportConnectError(f"BLE connect failed for {self.address()}")
        self._client = client

    def disconnect(self) -> None:
        client = self._client
        self._client = None
        if client is None:
            return
        self._call(client.disconnect(), TransportConnectError, "disconnect")

    def services(self) -> list[BleakService]:
        client = self._require_client()
        try:
            collection = client.services
        except BleakError as exc:
            raise TransportDiscoveryError(f"BLE service discovery failed for {self.address()}: {exc}") from exc
        return [BleakService(service) for service in collection]

    def _characteristic(self, service_uuid: str, characteristic_uuid: str) -> Any:
        client = self._require_client()
        service = client.services.get_service(service_uuid)
        char = service.get_characteristic(characteristic_uuid) if service is not None else None
        if char is None:
            raise TransportSubscribeError(
                f"Characteristic {characteristic_uuid} not present in service {service_uuid}"
            )
        return char

    def _subscribe(
        self,
        service_uuid: str,
        characteristic_uuid: str,
        callback: PayloadCallback,
        what: str,
        **kwargs: Any,
    ) -> None:
        client = self._require_client()
        char = self._characteristic(service_uuid, characteristic_uuid)

        def _handler(_: Any, data: bytearray) -> None:
            callback(bytes(data))

        self._call(client.start_notify(char, _handler, **kwargs), TransportSubscribeError, what)

    def indicate(self, service_uuid: str, characteristic_uuid: str, callback: PayloadCallback) -> None:
        # force_indicate is honoured by the WinRT backend; BlueZ and CoreBluetooth
        # accept it and pick the CCCD mode themselves.
        self._subscribe(service_uuid, characteristic_uuid, callback, "indicate", force_indicate=True)

    def notify(self, service_uuid: str, characteristic_uuid: str, callback: PayloadCallback) -> None:
        self._subscribe(service_uuid, characteristic_uuid, callback, "notify")

    def unsubscribe(self, service_uuid: str, characteristic_uuid: str) -> None:
        client = self._require_client()
        char = self._characteristic(service_uuid, characteristic_uuid)
        self._call(client.stop_notify(char), TransportSubscribeError, "unsubscribe")


class BleakAdapter:
    def __init__(
        self,
        runner: _LoopThread,
        name: str | None = None,
        *,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
    ) -> None:
        self._runner = runner
        self._name = name
        self._connect_timeout_s = connect_timeout_s
        self._on_found: Callable[[BleakPeripheral], None] | None = None
        self._on_start: Callable[[], None] | None = None
        self._on_stop: Callable[[], None] | None = None

    def identifier(self) -> str:
        return self._name or "default"

    def set_callback_on_scan_found(self, callback: Callable[[BleakPeripheral], None]) -> None:
        self._on_found = callback

    def set_callback_on_scan_start(self, callback: Callable[[], None]) -> None:
        self._on_start = callback

    def set_callback_on_scan_stop(self, callback: Callable[[], None]) -> None:
        self._on_stop = callback

    def _detected(self, device: Any, adv: Any) -> None:
        if self._on_found is None:
            return
        peripheral = BleakPeripheral(
            self._runner,
            device,
            local_name=getattr(adv, "local_name", None),
            connectable=_is_connectable(adv),
            adapter=self._name,
            timeout_s=self._connect_timeout_s,
        )
        self._on_found(peripheral)

    async def _scan(self, timeout_s: float) -> None:
        kwargs: dict[str, Any] = {"detection_callback": self._detected}
        if self._name:
            kwargs["adapter"] = self._name
        scanner = BleakScanner(**kwargs)
        await scanner.start()
        if self._on_start:
            self._on_start()
        try:
            await asyncio.sleep(timeout_s)
        finally:
            await scanner.stop()
            if self._on_stop:
                self._on_stop()

    def scan_for(self, timeout_ms: int) -> None:
        timeout_s = timeout_ms / 1000.0
        try:
            self._runner.run(self._scan(timeout_s), timeout_s=timeout_s + _OPERATION_GRACE_S)
        except TransportError:
            raise
        except (BleakError, OSError) as exc:
            raise TransportDiscoveryError(f"BLE scan failed on adapter {self.identifier()}: {exc}") from exc


class BleakRadio:
    def __init__(self, *, connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S) -> None:
        self._connect_timeout_s = connect_timeout_s
        self._runner: _LoopThread | None = None

    def get_adapter(self, name: str | None = None) -> BleakAdapter | None:
        available = _linux_adapters()
        if available is not None:
            if not available or (name is not None and name not in available):
                LOGGER.debug("No matching Bluetooth adapter (requested=%s, available=%s)", name, available)
                return None
        if self._runner is None:
            self._runner = _LoopThread()
        return BleakAdapter(self._runner, name, connect_timeout_s=self._connect_timeout_s)

    def close(self) -> None:
        if self._runner is not None:
            self._runner.stop()
            self._runner = None


def _is_connectable(adv: Any) -> bool:
    # Only some bleak backends report connectability; assume connectable otherwise.
    value = getattr(adv, "connectable", None)
    return True if value is None else bool(value)


def _linux_adapters() -> list[str] | None:
    """Return adapter names known to BlueZ, or None where sysfs does not apply."""
    if not sys.platform.startswith("linux"):
        return None
    if not _SYSFS_BLUETOOTH.is_dir():
        return []
    return sorted(p.name for p in _SYSFS_BLUETOOTH.iterdir() if p.name.startswith("hci") and ":" not in p.name)
