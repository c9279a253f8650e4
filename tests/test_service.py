"""
Unit tests for RaopDiscoveryService.
"""
import asyncio
from unittest.mock import MagicMock

import pytest

from raop_resolved.config import Config, DiscoveryConfig, SinkConfig
from raop_resolved.errors import ResolverConnectionError
from raop_resolved.service import RaopDiscoveryService


@pytest.fixture
def app_config():
    return Config(
        discovery=DiscoveryConfig(poll_interval_seconds=0.01),
        sink=SinkConfig(drain_initial_delay_seconds=0, drain_interval_seconds=0.01),
    )


@pytest.fixture
def loader():
    return MagicMock()


def test_build_loops_connects_one_client_per_loop(app_config, kitchen_resolver, loader):
    factory = MagicMock(return_value=kitchen_resolver)
    service = RaopDiscoveryService(app_config, client_factory=factory, loader=loader)

    service.build_loops()

    assert factory.call_count == 2
    assert service.presence_loop is not None
    assert service.resolver_loop.channel is service.channel


def test_presence_loop_can_be_disabled(kitchen_resolver, loader):
    config = Config(discovery=DiscoveryConfig(enable_presence=False))
    factory = MagicMock(return_value=kitchen_resolver)
    service = RaopDiscoveryService(config, client_factory=factory, loader=loader)

    service.build_loops()

    assert service.presence_loop is None
    assert factory.call_count == 1


def test_connection_failure_propagates(app_config, loader):
    factory = MagicMock(side_effect=ResolverConnectionError("connect", "no system bus"))
    service = RaopDiscoveryService(app_config, client_factory=factory, loader=loader)
    with pytest.raises(ResolverConnectionError):
        service.build_loops()


@pytest.mark.asyncio
async def test_end_to_end_creates_one_sink_per_endpoint(app_config, kitchen_resolver, loader):
    """Repeated sightings over many cycles still create exactly one sink per endpoint."""
    loader.load.side_effect = lambda module_name, args: object()
    service = RaopDiscoveryService(app_config, client_factory=lambda: kitchen_resolver, loader=loader)

    await service.start()
    for _ in range(200):
        if len(service.registry) == 2 and len(kitchen_resolver.browse_calls) > 6:
            break
        await asyncio.sleep(0.01)
    summary = service.get_summary()
    await service.stop()

    assert loader.load.call_count == 2
    assert summary["tunnels"] == 2
    assert summary["stable_hosts"] == 1
    assert loader.unload.call_count == 2
    assert service.channel.closed


@pytest.mark.asyncio
async def test_stop_releases_sinks_and_ends_loops(app_config, kitchen_resolver, loader):
    service = RaopDiscoveryService(app_config, client_factory=lambda: kitchen_resolver, loader=loader)
    await service.start()
    await service.stop()

    service.resolver_loop.stop(timeout=1)
    service.presence_loop.stop(timeout=1)
    assert not service.resolver_loop.running
    assert not service.presence_loop.running
    assert len(service.registry) == 0
