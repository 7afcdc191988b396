"""Domain-specific errors for shbstream."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NO_ADAPTER = "NoAdapter"
    EMPTY_CATALOG = "EmptyCatalog"
    INVALID_SELECTION = "InvalidSelection"
    DISCOVERY_FAILED = "DiscoveryFailed"
    CONNECTION_FAILED = "ConnectionFailed"
    SERVICE_DISCOVERY_FAILED = "ServiceDiscoveryFailed"
    CHARACTERISTIC_NOT_FOUND = "CharacteristicNotFound"
    NO_SUBSCRIPTION_CAPABILITY = "NoSubscriptionCapability"
    SUBSCRIPTION_FAILED = "SubscriptionFailed"
    UNSUBSCRIBE_FAILED = "UnsubscribeFailed"
    CONFIGURATION = "Configuration"
    TRANSPORT = "Transport"


class ShbStreamError(Exception):
    """Base error for shbstream."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    phase: str = "stream"


class ProfileValidationError(ShbStreamError):
    """Raised when a profile file does not conform to schema or semantics."""

    kind = ErrorKind.CONFIGURATION
    phase = "configuration"


class ProfileLoadError(ShbStreamError):
    """Raised when loading profile sources fails."""

    kind = ErrorKind.CONFIGURATION
    phase = "configuration"


class NoAdapterError(ShbStreamError):
    """Raised when no local Bluetooth controller is available."""

    kind = ErrorKind.NO_ADAPTER
    phase = "adapter"


class DeviceDiscoveryError(ShbStreamError):
    """Raised when the scan itself fails."""

    kind = ErrorKind.DISCOVERY_FAILED
    phase = "scan"


class EmptyCatalogError(ShbStreamError):
    """Raised when the scan produced no usable candidate."""

    kind = ErrorKind.EMPTY_CATALOG
    phase = "scan"


class InvalidSelectionError(ShbStreamError):
    """Raised when the operator picks a device index that does not exist."""

    kind = ErrorKind.INVALID_SELECTION
    phase = "selection"


class ConnectionFailedError(ShbStreamError):
    kind = ErrorKind.CONNECTION_FAILED
    phase = "connect"


class ServiceDiscoveryError(ShbStreamError):
    kind = ErrorKind.SERVICE_DISCOVERY_FAILED
    phase = "service discovery"


class CharacteristicNotFoundError(ShbStreamError):
    kind = ErrorKind.CHARACTERISTIC_NOT_FOUND
    phase = "service discovery"


class NoSubscriptionCapabilityError(ShbStreamError):
    kind = ErrorKind.NO_SUBSCRIPTION_CAPABILITY
    phase = "subscribe"


class SubscriptionFailedError(ShbStreamError):
    kind = ErrorKind.SUBSCRIPTION_FAILED
    phase = "subscribe"


class UnsubscribeFailedError(ShbStreamError):
    """Non-fatal: logged and followed by a disconnect."""

    kind = ErrorKind.UNSUBSCRIBE_FAILED
    phase = "unsubscribe"


class TransportError(ShbStreamError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised on BLE connect/disconnect failures."""


class TransportDiscoveryError(TransportError):
    """Raised when scanning or GATT enumeration fails."""


class TransportSubscribeError(TransportError):
    """Raised when enabling or disabling indications/notifications fails."""


class TransportTimeoutError(TransportError):
    """Raised when a radio operation does not complete in time."""
