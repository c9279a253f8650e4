"""
Tunnel registry: one external sink per unique (hostname, socket address).

The registry is owned by the consumer side (the asyncio loop driving
``tick``). It is never touched from the polling threads; endpoints reach it
only through the event channel.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..discovery.channel import EventChannel
from ..discovery.endpoints import DiscoveredEndpoint, SocketAddress
from ..errors import SinkLoadError
from .properties import build_sink_properties, serialize_module_args
from .sink import SinkLoader

logger = structlog.get_logger(__name__)

DEFAULT_MODULE_NAME = "libpipewire-module-raop-sink"


@dataclass(frozen=True)
class TunnelKey:
    hostname: str
    socket_address: SocketAddress

    @classmethod
    def for_endpoint(cls, endpoint: DiscoveredEndpoint) -> "TunnelKey":
        return cls(endpoint.hostname, endpoint.socket_address)

    def __str__(self) -> str:
        return f"{self.hostname} {self.socket_address}"


@dataclass
class Tunnel:
    key: TunnelKey
    handle: Any


class TunnelRegistry:
    """Deduplicates endpoints and requests exactly one sink per TunnelKey.

    Handles are kept for the lifetime of the process; a host disappearing from
    presence tracking does not tear its tunnel down. ``close`` releases them
    all at shutdown.
    """

    def __init__(
        self,
        channel: EventChannel[DiscoveredEndpoint],
        loader: SinkLoader,
        module_name: str = DEFAULT_MODULE_NAME,
        slow_tick_threshold: float = 0.001,
    ):
        self.channel = channel
        self.loader = loader
        self.module_name = module_name
        self.slow_tick_threshold = slow_tick_threshold
        self.logger = logger.bind(module=module_name)
        self._tunnels: dict[TunnelKey, Tunnel] = {}

    @property
    def tunnels(self) -> dict[TunnelKey, Tunnel]:
        return dict(self._tunnels)

    def __contains__(self, key: object) -> bool:
        return key in self._tunnels

    def __len__(self) -> int:
        return len(self._tunnels)

    def tick(self) -> bool:
        """Take at most one pending endpoint off the channel and handle it. Never blocks.

        Returns:
            True if an endpoint was taken (whether or not it created a tunnel).
        """
        started = time.monotonic()
        try:
            endpoint = self.channel.try_receive()
            if endpoint is None:
                return False
            self.add_endpoint(endpoint)
            backlog = self.channel.pending()
            if backlog:
                self.logger.debug("Endpoints still pending", backlog=backlog)
            return True
        finally:
            elapsed = time.monotonic() - started
            if elapsed >= self.slow_tick_threshold:
                self.logger.debug("took", elapsed_seconds=round(elapsed, 6))

    def add_endpoint(self, endpoint: DiscoveredEndpoint) -> Optional[Tunnel]:
        """Create the sink for a new endpoint; returns None for an already registered key."""
        key = TunnelKey.for_endpoint(endpoint)
        if key in self._tunnels:
            return None

        properties = build_sink_properties(endpoint, self.logger)
        args = serialize_module_args(properties.to_module_args())
        try:
            handle = self.loader.load(self.module_name, args)
        except SinkLoadError as e:
            # Still recorded: creation is attempted once per key, not on every re-sighting.
            self.logger.error("Failed to create sink", tunnel=str(key), error=str(e))
            handle = None

        tunnel = Tunnel(key=key, handle=handle)
        self._tunnels[key] = tunnel
        self.logger.info("discovered new tunnel", tunnel=str(key), name=properties.name)
        return tunnel

    def close(self) -> None:
        """Release every sink handle (process shutdown)."""
        for key, tunnel in list(self._tunnels.items()):
            if tunnel.handle is None:
                continue
            try:
                self.loader.unload(tunnel.handle)
            except OSError as e:
                self.logger.warning("Failed to release sink", tunnel=str(key), error=str(e))
        self._tunnels.clear()
