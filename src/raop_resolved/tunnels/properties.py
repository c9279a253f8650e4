"""
Translation of RAOP TXT records into sink module properties.

Decoding rules (for each key the first record that yields a value wins):

- ``am=<name>``   display name, ``<unnamed>`` when absent
- ``tp=<list>``   ``udp`` if the list has UDP, else ``tcp`` if it has TCP,
                  else unset
- ``et=<list>``   1 -> RSA, else 4 -> auth_setup, else none
- ``cn=<list>``   3 -> AAC-ELD, else 2 -> AAC, else 1 -> ALAC, else 0 -> PCM,
                  else unset

Lists are comma separated; membership is exact item equality.
"""
from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Optional

import structlog

from ..discovery.endpoints import DiscoveredEndpoint
from ..models.common import AudioCodec, EncryptionType, Transport
from ..models.sink import SinkProperties, TxtProperties

logger = structlog.get_logger(__name__)

_CODEC_PREFERENCE = (
    ("3", AudioCodec.AAC_ELD),
    ("2", AudioCodec.AAC),
    ("1", AudioCodec.ALAC),
    ("0", AudioCodec.PCM),
)


def list_contains(value: str, item: str) -> bool:
    """Whether the comma-separated ``value`` has ``item`` as one of its elements."""
    return item in value.split(",")


def parse_transport(value: str, log=None) -> Optional[Transport]:
    if list_contains(value, "UDP"):
        return Transport.UDP
    if list_contains(value, "TCP"):
        return Transport.TCP
    (log or logger).warning("unknown transport", value=value)
    return None


def parse_encryption_type(value: str, log=None) -> EncryptionType:
    if list_contains(value, "1"):
        return EncryptionType.RSA
    if list_contains(value, "4"):
        return EncryptionType.AUTH_SETUP
    (log or logger).warning("unknown encryption type", value=value)
    return EncryptionType.NONE


def parse_audio_codec(value: str, log=None) -> Optional[AudioCodec]:
    for item, codec in _CODEC_PREFERENCE:
        if list_contains(value, item):
            return codec
    (log or logger).warning("unknown codec", value=value)
    return None


def parse_txt_properties(records: Iterable[str], log=None) -> TxtProperties:
    """Structured properties from TXT records; unknown values are logged and left at their default."""
    log = log or logger
    found: dict[str, object] = {}
    parsers = {
        "am=": ("display_name", lambda value, _log: value),
        "tp=": ("transport", parse_transport),
        "et=": ("encryption_type", parse_encryption_type),
        "cn=": ("audio_codec", parse_audio_codec),
    }
    for record in records:
        prefix = record[:3]
        if prefix not in parsers:
            continue
        field_name, parse = parsers[prefix]
        if field_name in found:
            continue
        value = parse(record[3:], log)
        if value is not None:
            found[field_name] = value
    return TxtProperties(**found)


def build_sink_properties(endpoint: DiscoveredEndpoint, log=None) -> SinkProperties:
    """Compose the module properties of one endpoint."""
    txt = parse_txt_properties(endpoint.auxiliary_text, log)
    address = endpoint.socket_address
    name = txt.display_name
    if address.version == 4:
        name = f"{name} (IPv4)"
    return SinkProperties(
        ip=str(address.ip),
        ip_version=str(address.version),
        port=address.port,
        name=name,
        hostname=endpoint.hostname,
        transport=txt.transport,
        encryption_type=txt.encryption_type,
        audio_codec=txt.audio_codec,
    )


def serialize_module_args(args: dict[str, str]) -> str:
    """Brace-delimited key/value block passed to the module loader.

    Keys and values are JSON strings, which PipeWire's relaxed SPA JSON parser accepts.
    """
    if not args:
        return "{ }"
    items = ", ".join(f"{json.dumps(key)}: {json.dumps(value)}" for key, value in args.items())
    return "{ " + items + " }"

