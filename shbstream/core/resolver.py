"""Locate the target characteristic on a connected peripheral."""

from __future__ import annotations

from shbstream.core.errors import CharacteristicNotFoundError, ServiceDiscoveryError
from shbstream.core.model import TargetCharacteristic
from shbstream.transports.base import Peripheral


def resolve_characteristic(peripheral: Peripheral, characteristic_uuid: str) -> TargetCharacteristic:
    """Return the first characteristic whose UUID matches, ignoring case.

    Services and characteristics are walked in the order the radio stack
    reports them. Uniqueness of the UUID is not checked.
    """
    wanted = characteristic_uuid.strip().lower()
    try:
        for service in peripheral.services():
            for char in service.characteristics():
                if char.uuid().lower() == wanted:
                    return TargetCharacteristic(
                        service_id=service.uuid(),
                        characteristic_id=char.uuid(),
                        can_indicate=bool(char.can_indicate()),
                        can_notify=bool(char.can_notify()),
                    )
    except Exception as exc:
        raise ServiceDiscoveryError(f"Service discovery failed: {exc}") from exc

    raise CharacteristicNotFoundError(
        f"Characteristic {characteristic_uuid} not found on selected device."
    )


def read_capabilities(
    peripheral: Peripheral,
    service_id: str,
    characteristic_id: str,
) -> tuple[bool, bool]:
    """Re-read (can_indicate, can_notify) for an exact service/characteristic pair."""
    for service in peripheral.services():
        if service.uuid() != service_id:
            continue
        for char in service.characteristics():
            if char.uuid() != characteristic_id:
                continue
            return bool(char.can_indicate()), bool(char.can_notify())
    return False, False
