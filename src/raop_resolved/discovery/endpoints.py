"""
Resolution of browsed RAOP instances into socket endpoints.

The resolver loop runs its own browse every cycle (no hysteresis), resolves
each PTR target with ResolveService and emits one DiscoveredEndpoint per
usable address onto the event channel.
"""
from __future__ import annotations

import ipaddress
import socket
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Optional, Union

import structlog

from ..config import AddressFamily
from ..errors import ChannelClosed, ResolverError, UnsupportedAddressError
from ..models.resolver import SD_RESOLVED_MDNS_IPV4, SD_RESOLVED_MDNS_IPV6, ServiceResolution
from .browse import PointerTarget, ResolverClient, iter_pointer_targets
from .channel import EventChannel
from .polling import PollingLoop

logger = structlog.get_logger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class SocketAddress:
    """IP, port and (IPv6 only) scope id. ``scope_id`` is None for IPv4."""
    ip: IPAddress
    port: int
    scope_id: Optional[int] = None

    @property
    def version(self) -> int:
        return self.ip.version

    def __str__(self) -> str:
        if self.ip.version == 6:
            scope = f"%{self.scope_id}" if self.scope_id else ""
            return f"[{self.ip}{scope}]:{self.port}"
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class DiscoveredEndpoint:
    hostname: str
    socket_address: SocketAddress
    auxiliary_text: tuple[str, ...] = ()


def build_socket_address(interface_index: int, family: int, address: bytes, port: int) -> SocketAddress:
    """Turn one resolved (ifindex, family, raw address) tuple into a socket address.

    Link-local IPv6 addresses are only meaningful on one interface, so they
    carry the interface index as scope id; other IPv6 addresses get scope 0.

    Raises:
        UnsupportedAddressError: unknown family, or a raw length that does not match it.
    """
    if family == socket.AF_INET6 and len(address) == 16:
        ip6 = ipaddress.IPv6Address(address)
        return SocketAddress(ip6, port, interface_index if ip6.is_link_local else 0)
    if family == socket.AF_INET and len(address) == 4:
        return SocketAddress(ipaddress.IPv4Address(address), port)
    raise UnsupportedAddressError(family, address)


def decode_txt(entries) -> tuple[str, ...]:
    return tuple(bytes(entry).decode("utf-8", errors="replace") for entry in entries)


def resolution_endpoints(resolution: ServiceResolution, log=None) -> list[DiscoveredEndpoint]:
    """Every usable endpoint of a ResolveService answer, each carrying the full TXT list."""
    log = log or logger
    txt = decode_txt(resolution.txt)
    endpoints = []
    for service in resolution.services:
        for entry in service.addresses:
            try:
                socket_address = build_socket_address(entry.interface_index, entry.family, entry.address, service.port)
            except UnsupportedAddressError as e:
                log.warning("Skipping address", error=str(e), hostname=service.hostname)
                continue
            endpoints.append(DiscoveredEndpoint(service.hostname, socket_address, txt))
    return endpoints


class EndpointResolver(PollingLoop):
    """Browses and resolves every cycle, pushing endpoints to the registry's channel."""

    name = "resolver-loop"

    def __init__(
        self,
        client: ResolverClient,
        channel: EventChannel[DiscoveredEndpoint],
        service_name: str,
        address_family: AddressFamily = AddressFamily.IPV4,
        interval: float = 3.0,
        stop_event: Optional[threading.Event] = None,
    ):
        super().__init__(interval, stop_event, logger.bind(loop=self.name, service=service_name))
        self.client = client
        self.channel = channel
        self.service_name = service_name
        self.address_family = AddressFamily(address_family)

    @property
    def family(self) -> int:
        return socket.AF_INET if self.address_family == AddressFamily.IPV4 else socket.AF_INET6

    @property
    def browse_flags(self) -> int:
        return SD_RESOLVED_MDNS_IPV4 if self.address_family == AddressFamily.IPV4 else SD_RESOLVED_MDNS_IPV6

    def resolve_target(self, target: PointerTarget) -> list[DiscoveredEndpoint]:
        resolution = self.client.resolve_service(target.domain, self.family)
        return resolution_endpoints(resolution, self.logger)

    def iter_endpoints(self) -> Iterator[DiscoveredEndpoint]:
        """One browse + resolve pass, yielding endpoints as each target is resolved.

        Raises:
            ResolverError: the browse query itself failed (raised on first iteration).
        """
        self.logger.info("scanning", address_family=self.address_family.value)
        records = self.client.resolve_record(self.service_name, flags=self.browse_flags)
        for target in iter_pointer_targets(records, self.logger):
            try:
                endpoints = self.resolve_target(target)
            except ResolverError as e:
                self.logger.warning("Service resolution failed", domain=target.domain, error=str(e))
                continue
            yield from endpoints

    def scan(self) -> list[DiscoveredEndpoint]:
        return list(self.iter_endpoints())

    def run_cycle(self) -> bool:
        try:
            for endpoint in self.iter_endpoints():
                self.channel.send(endpoint)
        except ResolverError as e:
            self.logger.warning("Browse query failed, skipping cycle", error=str(e), dbus_name=e.dbus_name)
        except ChannelClosed:
            self.logger.error("receiver is dead")
            return False
        return True
