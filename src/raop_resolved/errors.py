"""
Custom exceptions for raop-resolved.
"""


class RaopResolvedError(Exception):
    """Base class for all raop-resolved errors."""
    pass


class RecordDecodeError(RaopResolvedError):
    """Raised when a raw resource record or name is truncated or malformed."""
    def __init__(self, offset: int, cause: str):
        super().__init__(f"cannot decode record at byte {offset}: {cause}")
        self.offset = offset
        self.cause = cause


class ResolverError(RaopResolvedError):
    """Raised when a call to the system resolver fails (unreachable, timeout, method error)."""
    def __init__(self, method: str, message: str, dbus_name: str | None = None):
        super().__init__(f"{method} failed: {message}")
        self.method = method
        self.dbus_name = dbus_name


class ResolverConnectionError(ResolverError):
    """Raised when the connection to the system bus cannot be established at startup."""
    pass


class UnsupportedAddressError(RaopResolvedError):
    """Raised for an address family / raw length combination that cannot be turned into a socket address."""
    def __init__(self, family: int, address: bytes):
        super().__init__(f"unknown address family: {family} {address!r}")
        self.family = family
        self.address = address


class ChannelClosed(RaopResolvedError):
    """Raised when sending on an event channel whose consumer is gone."""
    pass


class SinkLoadError(RaopResolvedError):
    """Raised when the external sink module could not be loaded."""
    def __init__(self, module_name: str, message: str):
        super().__init__(f"loading {module_name} failed: {message}")
        self.module_name = module_name
