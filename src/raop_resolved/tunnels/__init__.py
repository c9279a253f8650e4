"""
Tunnel registry: deduplicated sink creation for discovered endpoints.
"""
from .processor import TunnelEventProcessor
from .registry import Tunnel, TunnelKey, TunnelRegistry
from .sink import PipewireModuleLoader, SinkLoader

__all__ = [
    "PipewireModuleLoader",
    "SinkLoader",
    "Tunnel",
    "TunnelEventProcessor",
    "TunnelKey",
    "TunnelRegistry",
]
