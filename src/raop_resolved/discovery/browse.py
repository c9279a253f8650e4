"""
PTR browsing shared by the presence loop and the endpoint resolver loop.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

import structlog

from ..errors import RecordDecodeError
from ..models.resolver import CLASS_IN, TYPE_PTR, RawRecord, ServiceResolution
from .records import describe_class, describe_type, parse_name, parse_rr

logger = structlog.get_logger(__name__)


class ResolverClient(Protocol):
    """The part of ResolvedClient the polling loops depend on."""

    def resolve_record(self, name: str, rclass: int = ..., rtype: int = ..., flags: int = ...,
                       interface_index: int = ...) -> list[RawRecord]: ...

    def resolve_service(self, domain: str, family: int, name: str = ..., type_: str = ..., flags: int = ...,
                        interface_index: int = ...) -> ServiceResolution: ...


@dataclass(frozen=True)
class PointerTarget:
    """A decoded PTR answer: ``name`` is the browsed service, ``domain`` the instance it points to."""
    interface_index: int
    name: str
    domain: str


def iter_pointer_targets(records: Iterable[RawRecord], log=None) -> Iterator[PointerTarget]:
    """Decode PTR answers, logging and skipping every element that is not a well-formed IN/PTR record."""
    log = log or logger
    for record in records:
        if record.rclass != CLASS_IN or record.type != TYPE_PTR:
            log.warning("unexpected class/type record",
                        rclass=describe_class(record.rclass), type=describe_type(record.type))
            continue
        try:
            _rest, rr = parse_rr(record.data)
        except RecordDecodeError as e:
            log.warning("Failed to decode resource record", error=str(e), offset=e.offset)
            continue
        if rr.rclass != CLASS_IN or rr.type != TYPE_PTR:
            log.warning("unexpected class/type rr", record=rr.describe())
            continue
        try:
            _rest, domain = parse_name(rr.payload)
        except RecordDecodeError as e:
            log.warning("Failed to decode PTR target", record=rr.describe(), error=str(e))
            continue
        yield PointerTarget(interface_index=record.interface_index, name=rr.name, domain=domain)
