"""
Custom exceptions for the Govee device layer.

Provides explicit error types instead of silent failures.
"""


class GoveeError(Exception):
    """Base exception for all device and backend errors."""

    pass


class TransportError(GoveeError):
    """Raised when a UDP socket cannot be bound or a datagram cannot be sent."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"LAN transport failed during {operation}: {cause}")


class DeviceTimeoutError(GoveeError, TimeoutError):
    """Raised when a device does not answer within the response window."""

    def __init__(self, ip: str, timeout: float):
        self.ip = ip
        self.timeout = timeout
        super().__init__(
            f"Timeout waiting for device state from {ip} after {timeout:.1f}s"
        )


class DeviceNotFoundError(GoveeError):
    """Raised when a device is not present in the discovery results."""

    def __init__(self, device_id: str):
        self.device_id = device_id
        super().__init__(
            f"LAN device '{device_id}' not found. "
            "Run list_devices first to discover devices."
        )


class UnknownCapabilityError(GoveeError, ValueError):
    """Raised when a command name is not understood by a translator."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Unknown command: {name}")


class UnsupportedByBackendError(GoveeError):
    """Raised when an operation is not implemented by the selected backend."""

    def __init__(self, operation: str, backend: str):
        self.operation = operation
        self.backend = backend
        super().__init__(f"{operation} is not supported by the '{backend}' backend")


class BackendDisabledError(GoveeError):
    """Raised when a backend name is not among the configured backends."""

    def __init__(self, backend: str):
        self.backend = backend
        super().__init__(f"Backend '{backend}' is not enabled")


class GoveeApiError(GoveeError):
    """Raised when a Govee cloud API call fails or returns an unexpected payload."""

    def __init__(self, api: str, message: str, status: int | None = None):
        self.api = api
        self.status = status
        if status is not None:
            super().__init__(f"Govee {api} API error ({status}): {message}")
        else:
            super().__init__(f"Unexpected Govee {api} API response: {message}")
