"""TAI64N timestamps with whitened sub-second precision."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

TIMESTAMP_SIZE = 12
BASE = 0x400000000000000A
WHITENER_MASK = 0x1000000 - 1
_NANOS_PER_SECOND = 1_000_000_000
_UINT64 = (1 << 64) - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Timestamp:
    """A 12-byte big-endian TAI64N label: 8 bytes of seconds, 4 of nanoseconds."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != TIMESTAMP_SIZE:
            raise ValueError(f"timestamp must be {TIMESTAMP_SIZE} bytes, got {len(self.raw)}")
        object.__setattr__(self, "raw", bytes(self.raw))

    def after(self, other: Timestamp) -> bool:
        """Whether this timestamp is strictly later than ``other``."""
        return self.raw > other.raw

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        secs = int.from_bytes(self.raw[:8], "big") - BASE
        extra, nanos = divmod(int.from_bytes(self.raw[8:], "big"), _NANOS_PER_SECOND)
        moment = _EPOCH + timedelta(seconds=secs + extra)
        frac = f".{nanos:09d}".rstrip("0") if nanos else ""
        return f"{moment:%Y-%m-%d %H:%M:%S}{frac} +0000 UTC"


def stamp(unix_nanos: int) -> Timestamp:
    """Build a whitened timestamp from nanoseconds since the Unix epoch."""
    secs, nanos = divmod(unix_nanos, _NANOS_PER_SECOND)
    tai_secs = (BASE + secs) & _UINT64
    nanos &= ~WHITENER_MASK & 0xFFFFFFFF
    return Timestamp(tai_secs.to_bytes(8, "big") + nanos.to_bytes(4, "big"))


def now() -> Timestamp:
    """The current time as a whitened timestamp."""
    return stamp(time.time_ns())