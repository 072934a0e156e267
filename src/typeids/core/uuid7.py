"""UUIDv7 generation: time-ordered 128-bit identifiers.

Bit layout (most significant first):

- 48 bits: Unix timestamp in milliseconds
- 4 bits: version (``0111``)
- 12 bits: sub-millisecond sequence, monotonic within a generator
- 2 bits: variant (``10``)
- 62 bits: cryptographically random

A ``Generator`` keeps the last emitted ``(millis << 12) | sequence``
counter and forces it forward by one whenever the clock stalls or
runs backwards, so successive values from one instance are strictly
increasing no matter what the wall clock does.  Separate instances are
independent: their outputs are neither ordered nor coordinated.

Sharing policy:

* ``Generator`` has no lock.  Use one per thread; ``default_generator()``
  hands out exactly that.
* ``SharedGenerator`` wraps the read-modify-write in a
  ``threading.Lock``.  Every caller of one instance is serialised on
  that lock, so it becomes a bottleneck under heavy concurrency.  Opt in
  with ``TYPEIDS_GENERATOR__SHARED=true`` or ``get_shared_generator()``.

Usage::

    gen = Generator()
    value = gen.next()          # int, 0 <= value < 2**128
    raw = gen.next_bytes()      # 16 bytes, big-endian
    format_uuid(value)          # "01890a5d-ac96-774b-bcce-b302099a8057"
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
import uuid
from collections.abc import Callable

from typeids.configs.config import get_settings
from typeids.infra.metrics import (
    CLOCK_BUMPS_TOTAL,
    GENERATED_TOTAL,
    TICK_WAITS_TOTAL,
    metrics_enabled,
)
from typeids.infra.singleton import singleton

from .errors import InvalidUUID, InvalidUUIDLength, TimestampOverflow

logger = logging.getLogger(__name__)

RandomSource = Callable[[int], int]
Clock = Callable[[], int]

NS_PER_MS = 1_000_000
SEQUENCE_BITS = 12
SEQUENCE_MASK = (1 << SEQUENCE_BITS) - 1
# Nanosecond remainder >> 8 spans 0..3906, leaving headroom below 4095
# for forced bumps before the sequence carries into the next millisecond.
SEQUENCE_SHIFT = 8
MAX_TIMESTAMP_MS = (1 << 48) - 1
RANDOM_BITS = 62
RANDOM_MASK = (1 << RANDOM_BITS) - 1

VERSION = 0x7
VARIANT = 0x2

UUID_BYTES = 16
DEFAULT_TICK_RETRIES = 64


class Generator:
    """Monotonic UUIDv7 generator.  Not safe to share between threads."""

    mode = "per_instance"

    def __init__(
        self,
        random_source: RandomSource | None = None,
        *,
        clock: Clock | None = None,
        tick_retries: int = DEFAULT_TICK_RETRIES,
    ) -> None:
        if tick_retries < 0:
            raise ValueError("tick_retries must be >= 0")
        self._random = random_source or secrets.randbits
        self._clock = clock or time.time_ns
        self._tick_retries = tick_retries
        self._last = 0

    @property
    def last(self) -> int:
        """Last emitted ``(millis << 12) | sequence`` counter (0 before use)."""
        return self._last

    def _read_clock(self) -> tuple[int, int]:
        nano = self._clock()
        if nano < 0:
            raise TimestampOverflow(f"Clock reads before the Unix epoch: {nano}ns")
        millis = nano // NS_PER_MS
        if millis > MAX_TIMESTAMP_MS:
            raise TimestampOverflow(
                f"Clock reads {millis}ms, beyond the 48-bit millisecond range"
            )
        seq = (nano - millis * NS_PER_MS) >> SEQUENCE_SHIFT
        return millis, (millis << SEQUENCE_BITS) | seq

    def _monotonic_time(self) -> int:
        """Advance and return the combined counter."""
        millis, now = self._read_clock()
        last = self._last

        if (
            self._tick_retries
            and now <= last
            and ((last + 1) >> SEQUENCE_BITS) == millis + 1
        ):
            # Sequence space of the current millisecond is used up: give
            # the clock a bounded chance to tick before running ahead.
            for _ in range(self._tick_retries):
                millis, now = self._read_clock()
                if now > last:
                    if metrics_enabled():
                        TICK_WAITS_TOTAL.labels(result="advanced").inc()
                    break
            else:
                if metrics_enabled():
                    TICK_WAITS_TOTAL.labels(result="exhausted").inc()
                logger.debug(
                    "Sequence exhausted at %dms after %d clock reads; running ahead",
                    millis,
                    self._tick_retries,
                )

        if now <= last:
            timestamp = last + 1
            if metrics_enabled():
                CLOCK_BUMPS_TOTAL.inc()
            if millis < last >> SEQUENCE_BITS:
                logger.debug(
                    "Clock is %dms behind the last issued timestamp; bumping counter",
                    (last >> SEQUENCE_BITS) - millis,
                )
        else:
            timestamp = now

        if timestamp >> SEQUENCE_BITS > MAX_TIMESTAMP_MS:
            raise TimestampOverflow("Monotonic counter exceeded the 48-bit range")

        self._last = timestamp
        return timestamp

    def next(self) -> int:
        """Generate a new UUIDv7 as an unsigned 128-bit integer."""
        timestamp = self._monotonic_time()
        rand_b = self._random(RANDOM_BITS) & RANDOM_MASK

        value = (timestamp >> SEQUENCE_BITS) << 80  # timestamp (48 bits)
        value |= VERSION << 76  # version (4 bits)
        value |= (timestamp & SEQUENCE_MASK) << 64  # sequence (12 bits)
        value |= VARIANT << 62  # variant (2 bits)
        value |= rand_b  # random (62 bits)

        if metrics_enabled():
            GENERATED_TOTAL.labels(mode=self.mode).inc()
        return value

    def next_bytes(self) -> bytes:
        """Generate a new UUIDv7 as 16 big-endian bytes."""
        return self.next().to_bytes(UUID_BYTES, "big")


class SharedGenerator(Generator):
    """Generator safe to share between threads.

    All callers of one instance contend for a single lock around the
    counter update.  Prefer one ``Generator`` per thread where
    throughput matters.
    """

    mode = "shared"

    def __init__(
        self,
        random_source: RandomSource | None = None,
        *,
        clock: Clock | None = None,
        tick_retries: int = DEFAULT_TICK_RETRIES,
    ) -> None:
        super().__init__(random_source, clock=clock, tick_retries=tick_retries)
        self._lock = threading.Lock()

    def _monotonic_time(self) -> int:
        with self._lock:
            return super()._monotonic_time()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def new_generator(random_source: RandomSource | None = None) -> Generator:
    """Build a per-instance generator from the current settings."""
    cfg = get_settings().generator
    return Generator(random_source, tick_retries=cfg.tick_retries)


@singleton
def get_shared_generator() -> SharedGenerator:
    """Process-wide locked generator, created on first use."""
    cfg = get_settings().generator
    logger.info("Creating process-wide shared UUIDv7 generator")
    return SharedGenerator(tick_retries=cfg.tick_retries)


_local = threading.local()


def default_generator() -> Generator:
    """Generator used by ``TypeID.new()`` when none is passed.

    One per thread by default.  With ``generator.shared`` enabled every
    thread gets the process-wide ``SharedGenerator`` instead.  Settings
    are read once per thread.
    """
    gen = getattr(_local, "generator", None)
    if gen is None:
        if get_settings().generator.shared:
            gen = get_shared_generator()
        else:
            gen = new_generator()
        _local.generator = gen
    return gen


def reset_default_generator() -> None:
    """Forget the calling thread's default generator."""
    _local.__dict__.pop("generator", None)


# ---------------------------------------------------------------------------
# UUID helpers
# ---------------------------------------------------------------------------


def format_uuid(value: int | bytes) -> str:
    """Format 128 bits as lowercase ``8-4-4-4-12`` hex."""
    if isinstance(value, int):
        if not 0 <= value < 1 << 128:
            raise InvalidUUID(f"UUID value out of 128-bit range: {value}")
        return str(uuid.UUID(int=value))
    if len(value) != UUID_BYTES:
        raise InvalidUUIDLength(
            f"UUID must be {UUID_BYTES} bytes, got {len(value)}"
        )
    return str(uuid.UUID(bytes=bytes(value)))


def parse_uuid(text: str) -> bytes:
    """Parse a UUID string (hyphenated or bare hex, any case) into 16 bytes."""
    try:
        return uuid.UUID(text).bytes
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidUUID(f"Invalid UUID string: {text!r}") from exc


def version(value: int) -> int:
    """The 4-bit version field."""
    return (value >> 76) & 0xF


def variant(value: int) -> int:
    """The 2-bit variant field."""
    return (value >> 62) & 0x3


def timestamp_ms(value: int) -> int:
    """The 48-bit millisecond timestamp field."""
    return value >> 80
