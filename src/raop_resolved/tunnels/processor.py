"""Periodic driver of the tunnel registry.

This module contains the TunnelEventProcessor class which runs the registry's
bounded tick on the asyncio event loop: every tick takes at most one
discovered endpoint off the channel, so a burst of endpoints is worked off
gradually, one per tick.
"""
from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from .registry import TunnelRegistry


class TunnelEventProcessor:
    """Calls ``registry.tick()`` on a fixed schedule from a single asyncio task.

    The first tick happens after ``initial_delay``, the following ones every
    ``interval`` seconds. The tick itself never blocks, so the event loop is
    only ever held for the time it takes to handle one endpoint.

    Attributes:
        registry: The registry whose channel is drained
        initial_delay: Seconds before the first tick
        interval: Seconds between ticks
    """

    def __init__(
        self,
        registry: TunnelRegistry,
        initial_delay: float = 0.001,
        interval: float = 3.0,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.registry = registry
        self.initial_delay = initial_delay
        self.interval = interval
        self.logger = logger or structlog.get_logger(__name__)

        self._stop_event = asyncio.Event()
        self._processor_task: Optional[asyncio.Task] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._processor_task is not None and not self._processor_task.done()

    async def start(self) -> None:
        """Start ticking."""
        self.logger.info("Tunnel event processor starting...", initial_delay=self.initial_delay, interval=self.interval)
        self._stop_event.clear()
        if not self._processor_task or self._processor_task.done():
            self._processor_task = asyncio.create_task(self._process_tunnel_events())

    async def stop(self) -> None:
        """Stop ticking; the current tick, if any, completes first."""
        if self._processor_task:
            self.logger.info("Tunnel event processor stopping...")
            self._stop_event.set()
            try:
                await self._processor_task
            except asyncio.CancelledError:
                pass
            self._processor_task = None
            self.logger.info("Tunnel event processor stopped.")

    async def wait(self) -> None:
        """Wait until the processor task ends."""
        if self._processor_task:
            await self._processor_task

    async def _sleep(self, delay: float) -> bool:
        """Sleep unless stopped first; returns False when stopped."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    async def _process_tunnel_events(self) -> None:
        self.logger.info("Tunnel event processor started.")
        if not await self._sleep(self.initial_delay):
            return
        while True:
            try:
                self.registry.tick()
            except Exception as e:
                self.logger.exception("Error in tunnel event processor", error=str(e))
            self.ticks += 1
            if not await self._sleep(self.interval):
                return
