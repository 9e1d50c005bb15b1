"""Per-address token-bucket rate limiting for handshake messages."""

from __future__ import annotations

import ipaddress
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

PACKETS_PER_SECOND = 20
PACKETS_BURSTABLE = 5
GARBAGE_COLLECT_TIME = 1_000_000_000
PACKET_COST = 1_000_000_000 // PACKETS_PER_SECOND
MAX_TOKENS = PACKET_COST * PACKETS_BURSTABLE
_COLLECT_INTERVAL = 1.0

Address = Union[str, int, bytes, ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass
class _Entry:
    last_time: int
    tokens: int


class Ratelimiter:
    """Allows a short burst per source address, then a steady packet rate.

    ``clock`` returns nanoseconds; stale entries are swept in the background
    every second while the table is not empty.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or time.monotonic_ns
        self._cond = threading.Condition()
        self._table: Dict[object, _Entry] = {}
        self._generation = 0
        self.reset()

    def __enter__(self) -> Ratelimiter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def reset(self) -> None:
        """Forget every address and restart the background sweeper."""
        with self._cond:
            self._generation += 1
            self._table = {}
            generation = self._generation
            self._cond.notify_all()
        worker = threading.Thread(
            target=self._collect, args=(generation,), name="ratelimiter-gc", daemon=True
        )
        worker.start()

    def close(self) -> None:
        """Stop the background sweeper."""
        with self._cond:
            self._generation += 1
            self._cond.notify_all()

    def _collect(self, generation: int) -> None:
        with self._cond:
            while self._generation == generation:
                if not self._table:
                    self._cond.wait()
                    continue
                self._cond.wait(timeout=_COLLECT_INTERVAL)
                if self._generation != generation:
                    return
                self._cleanup_locked()

    def _cleanup_locked(self) -> bool:
        now = self._clock()
        stale = [key for key, entry in self._table.items() if now - entry.last_time > GARBAGE_COLLECT_TIME]
        for key in stale:
            del self._table[key]
        return not self._table

    def cleanup(self) -> bool:
        """Drop entries idle for over a second; report whether the table is now empty."""
        with self._cond:
            return self._cleanup_locked()

    def allow(self, ip: Address) -> bool:
        """Whether a packet from ``ip`` may be processed now."""
        key = ipaddress.ip_address(ip)
        with self._cond:
            now = self._clock()
            entry = self._table.get(key)
            if entry is None:
                self._table[key] = _Entry(last_time=now, tokens=MAX_TOKENS - PACKET_COST)
                if len(self._table) == 1:
                    self._cond.notify_all()
                return True
            entry.tokens = min(entry.tokens + now - entry.last_time, MAX_TOKENS)
            entry.last_time = now
            if entry.tokens > PACKET_COST:
                entry.tokens -= PACKET_COST
                return True
            return False