"""Prometheus metrics for TypeID generation and parsing.

Counters are registered in the default ``prometheus_client`` registry,
so an application that already exposes ``/metrics`` picks them up
without extra wiring.

All metrics use the ``typeids_`` prefix.
"""

from __future__ import annotations

from prometheus_client import Counter

from typeids.configs.config import get_settings

# ---------------------------------------------------------------------------
# Generation metrics
# ---------------------------------------------------------------------------

GENERATED_TOTAL = Counter(
    "typeids_generated_total",
    "Total UUIDv7 values produced, by generator mode",
    ["mode"],  # "per_instance" | "shared"
)

CLOCK_BUMPS_TOTAL = Counter(
    "typeids_clock_bumps_total",
    "Generations where the clock did not advance and the counter was bumped",
)

TICK_WAITS_TOTAL = Counter(
    "typeids_tick_waits_total",
    "Bounded waits for the next clock tick after sequence exhaustion",
    ["result"],  # "advanced" | "exhausted"
)

# ---------------------------------------------------------------------------
# Parse metrics
# ---------------------------------------------------------------------------

PARSE_ERRORS_TOTAL = Counter(
    "typeids_parse_errors_total",
    "TypeID strings rejected by the grammar, by error code",
    ["code"],
)


_enabled: bool | None = None


def metrics_enabled() -> bool:
    """Whether counters should be recorded.

    Read once from ``TYPEIDS_METRICS__ENABLED``; generation calls this on
    every ``next()``, so settings are not re-read each time.
    """
    global _enabled
    if _enabled is None:
        _enabled = get_settings().metrics.enabled
    return _enabled


def set_metrics_enabled(enabled: bool | None) -> None:
    """Override the cached flag; ``None`` re-reads settings on next use."""
    global _enabled
    _enabled = enabled
