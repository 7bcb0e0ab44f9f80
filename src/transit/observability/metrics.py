"""Pipeline metrics.

The coordinator reports counters and one timing through a
:class:`MetricsHook`.  Nothing is recorded unless a hook is passed as
``TransitConfig(metrics=...)``; any StatsD or Prometheus adapter with
``increment`` and ``timing`` methods will do.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Counters
ACQUIRE_TOTAL = "transit.acquire_total"  # tag: source
TRANSFORM_TOTAL = "transit.transform_total"
TRANSFORM_FAILURE_TOTAL = "transit.transform_failure_total"
TRANSPORT_TOTAL = "transit.transport_total"  # one per transported file
TRANSPORT_FAILURE_TOTAL = "transit.transport_failure_total"
ROLLBACK_DELETES_TOTAL = "transit.rollback_deletes_total"  # tag: stage

# Timings
TRANSPORT_DURATION_MS = "transit.transport_duration_ms"


@runtime_checkable
class MetricsHook(Protocol):
    """What a metrics backend must implement."""

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Discards everything.  Used when no hook is configured."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
