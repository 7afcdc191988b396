"""Connection and subscription lifecycle for a single peripheral.

The session walks IDLE -> CONNECTING -> CONNECTED -> RESOLVING ->
SUBSCRIBED -> UNSUBSCRIBING -> DISCONNECTED, or ends in FAILED. Collaborator
calls never raise into the state machine: each one is wrapped by
``_attempt`` and comes back as an ``Outcome``.

Once ``connect`` has succeeded, ``disconnect`` is attempted exactly once on
every path out of the session, and ``unsubscribe`` only after a successful
subscribe.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from shbstream.core.console import Console
from shbstream.core.errors import (
    CharacteristicNotFoundError,
    ConnectionFailedError,
    NoSubscriptionCapabilityError,
    ServiceDiscoveryError,
    ShbStreamError,
    SubscriptionFailedError,
    UnsubscribeFailedError,
)
from shbstream.core.model import SessionResult, SessionState, SubscriptionMode, TargetCharacteristic
from shbstream.core.render import render
from shbstream.core.resolver import read_capabilities, resolve_characteristic
from shbstream.transports.base import Peripheral

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: T | None = None
    error: ShbStreamError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _attempt(
    error_cls: type[ShbStreamError],
    what: str,
    fn: Callable[..., T],
    *args: Any,
    passthrough: tuple[type[ShbStreamError], ...] = (),
) -> Outcome[T]:
    try:
        return Outcome(value=fn(*args))
    except passthrough as exc:
        return Outcome(error=exc)
    except Exception as exc:
        wrapped = error_cls(f"{what}: {exc}")
        wrapped.__cause__ = exc
        return Outcome(error=wrapped)


class PayloadPump:
    """Renders payloads on its own thread in the order they arrived."""

    _STOP = object()

    def __init__(self, console: Console) -> None:
        self._console = console
        self._queue: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._thread = threading.Thread(target=self._run, daemon=True, name="shbstream-payloads")
        self.count = 0

    def start(self) -> None:
        self._thread.start()

    def submit(self, payload: bytes) -> None:
        self._queue.put(bytes(payload))

    def _run(self) -> None:
        while True:
            payload = self._queue.get()
            if payload is self._STOP:
                return
            self.count += 1
            self._console.echo(render(payload))

    def stop(self) -> None:
        self._queue.put(self._STOP)
        if self._thread.is_alive():
            self._thread.join()


class SubscriptionSession:
    def __init__(self, peripheral: Peripheral, characteristic_uuid: str, console: Console) -> None:
        self.peripheral = peripheral
        self.characteristic_uuid = characteristic_uuid
        self.console = console
        self.state = SessionState.IDLE
        self.mode = SubscriptionMode.NONE
        self.subscribed = False
        self.target: TargetCharacteristic | None = None
        self._pump = PayloadPump(console)
        self._released = False

    def _transition(self, state: SessionState) -> None:
        LOGGER.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state

    def _result(self, error: ShbStreamError | None = None) -> SessionResult:
        return SessionResult(
            state=self.state,
            mode=self.mode,
            target=self.target,
            payload_count=self._pump.count,
            error=error,
        )

    def _disconnect(self) -> None:
        if self._released:
            return
        self._released = True
        outcome = _attempt(ConnectionFailedError, "Disconnect failed", self.peripheral.disconnect)
        if not outcome.ok:
            LOGGER.warning("%s", outcome.error)
            self.console.echo(f"Warning: {outcome.error}", err=True)

    def _fail(self, error: ShbStreamError, *, disconnect: bool) -> SessionResult:
        if disconnect:
            self._disconnect()
        self._transition(SessionState.FAILED)
        return self._result(error)

    def run(self) -> SessionResult:
        self._transition(SessionState.CONNECTING)
        connected = _attempt(ConnectionFailedError, "Connection failed", self.peripheral.connect)
        if not connected.ok:
            return self._fail(connected.error, disconnect=False)
        self._transition(SessionState.CONNECTED)

        try:
            return self._run_connected()
        except BaseException:
            LOGGER.debug("Session interrupted in state %s; releasing connection", self.state.value)
            self._pump.stop()
            self._disconnect()
            self._transition(SessionState.FAILED)
            raise

    def _run_connected(self) -> SessionResult:
        self._transition(SessionState.RESOLVING)
        resolved = _attempt(
            ServiceDiscoveryError,
            "Service discovery failed",
            resolve_characteristic,
            self.peripheral,
            self.characteristic_uuid,
            passthrough=(CharacteristicNotFoundError, ServiceDiscoveryError),
        )
        if not resolved.ok:
            return self._fail(resolved.error, disconnect=True)
        target = resolved.value
        self.target = target

        subscribed = self._subscribe(target)
        if not subscribed.ok:
            return self._fail(subscribed.error, disconnect=True)

        label = "Indication" if self.mode is SubscriptionMode.INDICATE else "Notification"
        self.console.echo(
            f"{label} active on characteristic {target.characteristic_id}. Press Enter to stop..."
        )
        try:
            self.console.wait_for_enter()
        except KeyboardInterrupt:
            LOGGER.debug("Interrupted while waiting for operator; tearing down")
        return self._teardown(target)

    def _subscribe(self, target: TargetCharacteristic) -> Outcome[SubscriptionMode]:
        capabilities = _attempt(
            ServiceDiscoveryError,
            "Service discovery failed",
            read_capabilities,
            self.peripheral,
            target.service_id,
            target.characteristic_id,
        )
        if not capabilities.ok:
            return Outcome(error=capabilities.error)
        can_indicate, can_notify = capabilities.value

        if can_indicate:
            mode, subscribe = SubscriptionMode.INDICATE, self.peripheral.indicate
        elif can_notify:
            mode, subscribe = SubscriptionMode.NOTIFY, self.peripheral.notify
        else:
            return Outcome(
                error=NoSubscriptionCapabilityError(
                    f"Characteristic {target.characteristic_id} supports neither indicate nor notify."
                )
            )

        self._pump.start()
        outcome = _attempt(
            SubscriptionFailedError,
            "Subscription failed",
            subscribe,
            target.service_id,
            target.characteristic_id,
            self._pump.submit,
        )
        if not outcome.ok:
            self._pump.stop()
            return Outcome(error=outcome.error)

        self.mode = mode
        self.subscribed = True
        self._transition(SessionState.SUBSCRIBED)
        return Outcome(value=mode)

    def _teardown(self, target: TargetCharacteristic) -> SessionResult:
        self._transition(SessionState.UNSUBSCRIBING)
        outcome = _attempt(
            UnsubscribeFailedError,
            "Unsubscribe failed (continuing)",
            self.peripheral.unsubscribe,
            target.service_id,
            target.characteristic_id,
        )
        if not outcome.ok:
            LOGGER.warning("%s", outcome.error)
            self.console.echo(str(outcome.error), err=True)
        self.subscribed = False
        self._pump.stop()

        self._disconnect()
        self._transition(SessionState.DISCONNECTED)
        self.console.echo("Disconnected. Exiting.")
        return self._result()
