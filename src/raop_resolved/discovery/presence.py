"""
Presence tracking of advertised RAOP hosts with retry-count hysteresis.

Lookups over mDNS are lossy: a host that is missing from one browse answer
is not necessarily gone. Every host keeps a retry budget that is reset on
each sighting and spent on each cycle it is absent; it is declared removed
only when it is absent while the budget is already exhausted.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Optional

import structlog

from ..errors import ResolverError
from ..models.resolver import SD_RESOLVED_MDNS
from .browse import ResolverClient, iter_pointer_targets
from .polling import PollingLoop

logger = structlog.get_logger(__name__)

DEFAULT_RETRIES = 8


@dataclass(frozen=True, order=True)
class CandidateHost:
    """An advertised host. ``retries_remaining`` takes no part in equality, hashing or ordering."""
    interface_index: int
    name: str
    domain: str
    retries_remaining: int = field(default=DEFAULT_RETRIES, compare=False)


@dataclass(frozen=True)
class PresenceChange:
    added: tuple[CandidateHost, ...] = ()
    removed: tuple[CandidateHost, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


class PresenceReconciler:
    """Owns the stable host set and folds each new browse snapshot into it."""

    def __init__(self, retries: int = DEFAULT_RETRIES):
        if retries < 0:
            raise ValueError("retries must not be negative.")
        self.retries = retries
        # Keyed by the host itself; the value carries the current retry budget.
        self._stable: dict[CandidateHost, CandidateHost] = {}

    @property
    def stable(self) -> list[CandidateHost]:
        return sorted(self._stable.values())

    def get(self, host: CandidateHost) -> Optional[CandidateHost]:
        return self._stable.get(host)

    def __contains__(self, host: object) -> bool:
        return host in self._stable

    def __len__(self) -> int:
        return len(self._stable)

    def reconcile(self, sightings: Iterable[CandidateHost]) -> PresenceChange:
        """Replace the stable set with this cycle's sightings plus the hosts still within their budget.

        Returns:
            The hosts that entered the stable set and the hosts that left it.
        """
        current: dict[CandidateHost, CandidateHost] = {}
        for host in sightings:
            current[host] = replace(host, retries_remaining=self.retries)

        removed = []
        for host in self._stable.values():
            if host in current:
                continue
            if host.retries_remaining > 0:
                current[host] = replace(host, retries_remaining=host.retries_remaining - 1)
            else:
                removed.append(host)

        added = [host for host in current.values() if host not in self._stable]
        self._stable = current
        return PresenceChange(added=tuple(sorted(added)), removed=tuple(sorted(removed)))


class PresenceLoop(PollingLoop):
    """Browses the service on its own cadence and logs hosts appearing and disappearing."""

    name = "presence-loop"

    def __init__(
        self,
        client: ResolverClient,
        reconciler: PresenceReconciler,
        service_name: str,
        interval: float = 3.0,
        stop_event: Optional[threading.Event] = None,
    ):
        super().__init__(interval, stop_event, logger.bind(loop=self.name, service=service_name))
        self.client = client
        self.reconciler = reconciler
        self.service_name = service_name

    def run_cycle(self) -> bool:
        try:
            records = self.client.resolve_record(self.service_name, flags=SD_RESOLVED_MDNS)
        except ResolverError as e:
            self.logger.warning("Browse query failed, skipping cycle", error=str(e), dbus_name=e.dbus_name)
            return True

        sightings = [
            CandidateHost(target.interface_index, target.name, target.domain, self.reconciler.retries)
            for target in iter_pointer_targets(records, self.logger)
        ]
        change = self.reconciler.reconcile(sightings)
        for host in change.removed:
            self.logger.info("removed host", host=host)
        for host in change.added:
            self.logger.info("added host", host=host)
        return True
