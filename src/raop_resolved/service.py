"""
RaopDiscoveryService: wires the presence loop, the endpoint resolver loop and
the tunnel registry together.

Three execution contexts:
  - presence loop thread (logs hosts appearing/disappearing, hysteresis)
  - resolver loop thread (feeds the event channel)
  - the asyncio loop running TunnelEventProcessor (sole owner of the tunnels)
"""
from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Optional

import structlog

from .config import Config
from .discovery.browse import ResolverClient
from .discovery.channel import EventChannel
from .discovery.endpoints import DiscoveredEndpoint, EndpointResolver
from .discovery.presence import PresenceLoop, PresenceReconciler
from .tunnels.processor import TunnelEventProcessor
from .tunnels.registry import TunnelRegistry
from .tunnels.sink import PipewireModuleLoader, SinkLoader

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[], ResolverClient]


def connect_resolved(app_config: Config) -> ResolverClient:
    """Open one systemd-resolved client. Raises ResolverConnectionError when the bus is unavailable."""
    from .discovery.resolved import ResolvedClient # dbus is only needed once we actually connect

    return ResolvedClient.connect(app_config.resolver)


class RaopDiscoveryService:
    """Owns every component; ``start``/``stop`` must be awaited from the asyncio loop."""

    def __init__(
        self,
        app_config: Config,
        client_factory: Optional[ClientFactory] = None,
        loader: Optional[SinkLoader] = None,
    ):
        self.app_config = app_config
        self.logger = logger.bind(service="RaopDiscoveryService")
        self.client_factory = client_factory or (lambda: connect_resolved(app_config))
        self.loader = loader or PipewireModuleLoader(app_config.sink.pw_cli_path)

        discovery = app_config.discovery
        self.stop_event = threading.Event()
        self.channel: EventChannel[DiscoveredEndpoint] = EventChannel()
        self.reconciler = PresenceReconciler(retries=discovery.presence_retries)
        self.registry = TunnelRegistry(
            self.channel,
            self.loader,
            module_name=app_config.sink.module_name,
            slow_tick_threshold=app_config.sink.slow_tick_threshold_seconds,
        )
        self.processor = TunnelEventProcessor(
            self.registry,
            initial_delay=app_config.sink.drain_initial_delay_seconds,
            interval=app_config.sink.drain_interval_seconds,
            logger=self.logger.bind(component="TunnelEventProcessor"),
        )
        self.presence_loop: Optional[PresenceLoop] = None
        self.resolver_loop: Optional[EndpointResolver] = None

    def build_loops(self) -> None:
        """Connect one resolver client per loop. Connection failures propagate (fatal at startup)."""
        discovery = self.app_config.discovery
        if discovery.enable_presence:
            self.presence_loop = PresenceLoop(
                self.client_factory(),
                self.reconciler,
                discovery.service_name,
                interval=discovery.poll_interval_seconds,
                stop_event=self.stop_event,
            )
        self.resolver_loop = EndpointResolver(
            self.client_factory(),
            self.channel,
            discovery.service_name,
            address_family=discovery.address_family,
            interval=discovery.poll_interval_seconds,
            stop_event=self.stop_event,
        )

    async def start(self) -> None:
        self.logger.info("Starting discovery service.", service_name=self.app_config.discovery.service_name)
        if self.resolver_loop is None:
            self.build_loops()
        if self.presence_loop is not None:
            self.presence_loop.start()
        self.resolver_loop.start()
        await self.processor.start()

    async def stop(self) -> None:
        self.logger.info("Stopping discovery service.")
        await self.processor.stop()
        self.channel.close()
        self.stop_event.set()
        self.registry.close()
        self.logger.info("Discovery service stopped.", tunnels_released=True)

    async def run(self) -> None:
        """Start and keep running until the processor task ends or the caller cancels."""
        await self.start()
        try:
            await self.processor.wait()
        finally:
            await self.stop()

    def get_summary(self) -> dict[str, Any]:
        return {
            "stable_hosts": len(self.reconciler),
            "tunnels": len(self.registry),
            "pending_endpoints": self.channel.pending(),
            "registry_ticks": self.processor.ticks,
        }
