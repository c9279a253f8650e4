"""
Data models for raop-resolved.
"""
from .common import AudioCodec, BasePydanticModel, EncryptionType, Transport
from .resolver import RawRecord, ServiceAddress, ServiceRecord, ServiceResolution
from .sink import SinkProperties, TxtProperties

__all__ = [
    "AudioCodec",
    "BasePydanticModel",
    "EncryptionType",
    "RawRecord",
    "ServiceAddress",
    "ServiceRecord",
    "ServiceResolution",
    "SinkProperties",
    "Transport",
    "TxtProperties",
]
