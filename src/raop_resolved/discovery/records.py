"""
Decoding of the raw resource records handed back by systemd-resolved.

ResolveRecord returns every answer as a wire-format resource record
(owner name, type, class, TTL, RDATA). Names are plain sequences of
length-prefixed labels; resolved never compresses them, so compression
pointers are not followed here. A pointer byte is read as an ordinary
label length and will make the decoder fail or desynchronize.
"""
from __future__ import annotations

from dataclasses import dataclass

from dnslib import CLASS, QTYPE
from dnslib.buffer import Buffer
from dnslib.buffer import BufferError as DNSBufferError

from ..errors import RecordDecodeError


@dataclass(frozen=True)
class ResourceRecord:
    name: str
    type: int
    rclass: int
    ttl: int
    payload: bytes

    def describe(self) -> str:
        return f"{self.name} {describe_class(self.rclass)} {describe_type(self.type)} ttl={self.ttl}"


def describe_type(value: int) -> str:
    """Mnemonic for a record type ('PTR'), or the number when dnslib does not know it."""
    return QTYPE.get(value)


def describe_class(value: int) -> str:
    return CLASS.get(value)


def _unpack(buffer: Buffer, fmt: str, field: str) -> int:
    offset = buffer.offset
    try:
        (value,) = buffer.unpack(fmt)
    except DNSBufferError as e:
        raise RecordDecodeError(offset, f"truncated {field} ({e})") from e
    return value


def _take(buffer: Buffer, length: int, field: str) -> bytes:
    offset = buffer.offset
    try:
        return buffer.get(length)
    except DNSBufferError as e:
        raise RecordDecodeError(offset, f"truncated {field} ({e})") from e


def _read_name(buffer: Buffer) -> str:
    labels = []
    while True:
        length = _unpack(buffer, "!B", "label length")
        if length == 0:
            return ".".join(labels)
        label = _take(buffer, length, "label")
        labels.append(label.decode("utf-8", errors="replace"))


def _rest(buffer: Buffer) -> bytes:
    return bytes(buffer.data[buffer.offset:])


def parse_name(data: bytes) -> tuple[bytes, str]:
    """Decode a dotted name from the start of ``data``.

    Returns:
        The bytes following the terminating zero label, and the name.

    Raises:
        RecordDecodeError: a label length runs past the end of the buffer,
            or the terminating zero label is missing.
    """
    buffer = Buffer(data)
    name = _read_name(buffer)
    return _rest(buffer), name


def parse_rr(data: bytes) -> tuple[bytes, ResourceRecord]:
    """Decode one resource record from the start of ``data``.

    The layout is name, type (u16), class (u16), TTL (u32), RDATA length
    (u16) and RDATA, all integers big-endian.

    Returns:
        The bytes following the record, and the record.

    Raises:
        RecordDecodeError: any fixed-width field or the RDATA is truncated.
    """
    buffer = Buffer(data)
    name = _read_name(buffer)
    rtype = _unpack(buffer, "!H", "type")
    rclass = _unpack(buffer, "!H", "class")
    ttl = _unpack(buffer, "!I", "ttl")
    rdlength = _unpack(buffer, "!H", "rdata length")
    payload = _take(buffer, rdlength, "rdata")
    return _rest(buffer), ResourceRecord(name=name, type=rtype, rclass=rclass, ttl=ttl, payload=payload)
