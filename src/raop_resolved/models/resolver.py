"""
Plain values exchanged with systemd-resolved, independent of the D-Bus binding.
"""
from dataclasses import dataclass

IFINDEX_ANY = 0

CLASS_IN = 1
TYPE_PTR = 12

# SD_RESOLVED_* protocol flags
SD_RESOLVED_MDNS_IPV4 = 1 << 3
SD_RESOLVED_MDNS_IPV6 = 1 << 4
SD_RESOLVED_MDNS = SD_RESOLVED_MDNS_IPV4 | SD_RESOLVED_MDNS_IPV6


@dataclass(frozen=True)
class RawRecord:
    """One element of a ResolveRecord reply; ``data`` is the wire-format resource record."""
    interface_index: int
    rclass: int
    type: int
    data: bytes


@dataclass(frozen=True)
class ServiceAddress:
    interface_index: int
    family: int
    address: bytes


@dataclass(frozen=True)
class ServiceRecord:
    priority: int
    weight: int
    port: int
    hostname: str
    addresses: tuple[ServiceAddress, ...]
    domain: str


@dataclass(frozen=True)
class ServiceResolution:
    services: tuple[ServiceRecord, ...]
    txt: tuple[bytes, ...]
    name: str = ""
    type: str = ""
    domain: str = ""
