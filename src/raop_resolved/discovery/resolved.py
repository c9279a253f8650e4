"""
Client for the systemd-resolved D-Bus API (org.freedesktop.resolve1.Manager).

Only the two calls needed for DNS-SD browsing are wrapped: ResolveRecord for
the PTR browse and ResolveService for SRV/TXT/address resolution. D-Bus types
are converted to plain Python values before leaving this module.
"""
from __future__ import annotations

import dbus
import structlog
from dbus.exceptions import DBusException

from ..config import ResolverConfig
from ..errors import ResolverConnectionError, ResolverError
from ..models.resolver import (
    CLASS_IN,
    IFINDEX_ANY,
    SD_RESOLVED_MDNS,
    TYPE_PTR,
    RawRecord,
    ServiceAddress,
    ServiceRecord,
    ServiceResolution,
)

logger = structlog.get_logger(__name__)

RESOLVE1_MANAGER_INTERFACE = "org.freedesktop.resolve1.Manager"


class ResolvedClient:
    """Blocking resolve1 client. Each polling thread owns its own instance."""

    def __init__(self, manager: dbus.Interface, timeout_seconds: float = 2.0):
        self._manager = manager
        self.timeout_seconds = timeout_seconds

    @classmethod
    def connect(cls, config: ResolverConfig) -> "ResolvedClient":
        """Open a private system bus connection and bind to the resolver manager.

        Raises:
            ResolverConnectionError: the system bus or the resolver object is unavailable.
        """
        try:
            bus = dbus.SystemBus(private=True)
            proxy = bus.get_object(config.bus_name, config.object_path, introspect=False)
        except DBusException as e:
            raise ResolverConnectionError("connect", str(e), dbus_name=e.get_dbus_name()) from e
        logger.debug("Connected to resolver", bus_name=config.bus_name, object_path=config.object_path)
        return cls(dbus.Interface(proxy, RESOLVE1_MANAGER_INTERFACE), timeout_seconds=config.call_timeout_seconds)

    def resolve_record(
        self,
        name: str,
        rclass: int = CLASS_IN,
        rtype: int = TYPE_PTR,
        flags: int = SD_RESOLVED_MDNS,
        interface_index: int = IFINDEX_ANY,
    ) -> list[RawRecord]:
        """Run ResolveRecord and return its records (the returned flags are dropped)."""
        try:
            records, _flags = self._manager.ResolveRecord(
                dbus.Int32(interface_index),
                name,
                dbus.UInt16(rclass),
                dbus.UInt16(rtype),
                dbus.UInt64(flags),
                timeout=self.timeout_seconds,
                byte_arrays=True,
            )
        except DBusException as e:
            raise ResolverError("ResolveRecord", str(e), dbus_name=e.get_dbus_name()) from e
        return [
            RawRecord(interface_index=int(ifindex), rclass=int(rclass_), type=int(type_), data=bytes(data))
            for ifindex, rclass_, type_, data in records
        ]

    def resolve_service(
        self,
        domain: str,
        family: int,
        name: str = "",
        type_: str = "",
        flags: int = 0,
        interface_index: int = IFINDEX_ANY,
    ) -> ServiceResolution:
        """Run ResolveService for a DNS-SD instance name given as ``domain``."""
        try:
            srv_data, txt_data, canonical_name, canonical_type, canonical_domain, _flags = self._manager.ResolveService(
                dbus.Int32(interface_index),
                name,
                type_,
                domain,
                dbus.Int32(family),
                dbus.UInt64(flags),
                timeout=self.timeout_seconds,
                byte_arrays=True,
            )
        except DBusException as e:
            raise ResolverError("ResolveService", str(e), dbus_name=e.get_dbus_name()) from e

        services = []
        for priority, weight, port, hostname, addresses, srv_domain in srv_data:
            services.append(ServiceRecord(
                priority=int(priority),
                weight=int(weight),
                port=int(port),
                hostname=str(hostname),
                addresses=tuple(
                    ServiceAddress(interface_index=int(ifindex), family=int(af), address=bytes(address))
                    for ifindex, af, address in addresses
                ),
                domain=str(srv_domain),
            ))
        return ServiceResolution(
            services=tuple(services),
            txt=tuple(bytes(entry) for entry in txt_data),
            name=str(canonical_name),
            type=str(canonical_type),
            domain=str(canonical_domain),
        )
