"""
Shared fixtures: wire-format record builders and an in-memory resolver.
"""
import socket

import pytest
from dnslib.buffer import Buffer

from raop_resolved.models.resolver import (
    CLASS_IN,
    TYPE_PTR,
    RawRecord,
    ServiceAddress,
    ServiceRecord,
    ServiceResolution,
)

SERVICE = "_raop._tcp.local"


def _encode_name(name: str) -> bytes:
    out = b""
    for label in name.split(".") if name else []:
        raw = label.encode("utf-8")
        out += bytes([len(raw)]) + raw
    return out + b"\x00"


def _encode_rr(name: str, rtype: int, rclass: int, ttl: int, payload: bytes) -> bytes:
    buffer = Buffer()
    buffer.append(_encode_name(name))
    buffer.pack("!HHIH", rtype, rclass, ttl, len(payload))
    buffer.append(payload)
    return bytes(buffer.data)


def _ptr_record(instance: str, service: str = SERVICE, interface_index: int = 2, ttl: int = 120) -> RawRecord:
    data = _encode_rr(service, TYPE_PTR, CLASS_IN, ttl, _encode_name(f"{instance}.{service}"))
    return RawRecord(interface_index=interface_index, rclass=CLASS_IN, type=TYPE_PTR, data=data)


def _resolution(hostname: str, port: int, addresses, txt=()) -> ServiceResolution:
    return ServiceResolution(
        services=(ServiceRecord(
            priority=0,
            weight=0,
            port=port,
            hostname=hostname,
            addresses=tuple(ServiceAddress(ifindex, family, bytes(raw)) for ifindex, family, raw in addresses),
            domain="local",
        ),),
        txt=tuple(entry.encode("utf-8") if isinstance(entry, str) else entry for entry in txt),
    )


class FakeResolver:
    """Stands in for ResolvedClient; answers from canned data and records every call."""

    def __init__(self, records=None, services=None, browse_error=None):
        self.records = list(records or [])
        self.services = dict(services or {})
        self.browse_error = browse_error
        self.browse_calls = []
        self.service_calls = []

    def resolve_record(self, name, rclass=CLASS_IN, rtype=TYPE_PTR, flags=0, interface_index=0):
        self.browse_calls.append((name, rclass, rtype, flags))
        if self.browse_error is not None:
            raise self.browse_error
        return list(self.records)

    def resolve_service(self, domain, family, name="", type_="", flags=0, interface_index=0):
        self.service_calls.append((domain, family))
        result = self.services[domain]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def encode_name():
    return _encode_name


@pytest.fixture
def encode_rr():
    return _encode_rr


@pytest.fixture
def ptr_record():
    return _ptr_record


@pytest.fixture
def resolution():
    return _resolution


@pytest.fixture
def make_resolver():
    return FakeResolver


@pytest.fixture
def kitchen_resolver():
    """One advertised receiver with an IPv4 and a link-local IPv6 address."""
    domain = f"AABBCCDDEEFF@Kitchen.{SERVICE}"
    return FakeResolver(
        records=[_ptr_record("AABBCCDDEEFF@Kitchen")],
        services={
            domain: _resolution(
                "kitchen.local",
                7000,
                [
                    (2, socket.AF_INET, bytes([192, 168, 1, 20])),
                    (3, socket.AF_INET6, bytes.fromhex("fe800000000000000000000000000001")),
                ],
                txt=["tp=UDP", "et=0,4", "cn=0,1", "am=AudioAccessory5,1"],
            ),
        },
    )
