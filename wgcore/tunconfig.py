"""Per-platform queue sizes and the MTU and up/down events of the tunnel device."""

from __future__ import annotations

import enum
import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_MTU = 1420
IDEAL_BATCH_SIZE = 128
MESSAGE_TRANSPORT_SIZE = 32
_LARGEST_UDP = (1 << 16) - 1
MAX_CONTENT_SIZE = _LARGEST_UDP - MESSAGE_TRANSPORT_SIZE

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueSizes:
    """Queue capacities and buffer limits chosen for one platform."""

    staged: int
    outbound: int
    inbound: int
    handshake: int
    max_segment_size: int
    preallocated_buffers_per_pool: int

    @property
    def max_content_size(self) -> int:
        """The largest plaintext that fits in one transport message."""
        return self.max_segment_size - MESSAGE_TRANSPORT_SIZE


_SIZES = {
    "default": QueueSizes(IDEAL_BATCH_SIZE, 1024, 1024, 1024, _LARGEST_UDP, 0),
    "android": QueueSizes(IDEAL_BATCH_SIZE, 1024, 1024, 1024, _LARGEST_UDP, 4096),
    "ios": QueueSizes(128, 1024, 1024, 1024, 1700, 1024),
    "windows": QueueSizes(128, 1024, 1024, 1024, 2048 - 32, 0),
}


def queue_sizes(platform: Optional[str] = None) -> QueueSizes:
    """Queue sizes for ``platform``, defaulting to the running system."""
    name = (platform or sys.platform).lower()
    if name in ("win32", "windows", "cygwin"):
        return _SIZES["windows"]
    if name == "ios":
        return _SIZES["ios"]
    if name == "android":
        return _SIZES["android"]
    return _SIZES["default"]


class TunEvent(enum.IntFlag):
    """Events reported by the tunnel device; several may arrive at once."""

    UP = enum.auto()
    DOWN = enum.auto()
    MTU_UPDATE = enum.auto()


def clamp_mtu(mtu: int) -> int:
    """Cap ``mtu`` at the largest content size; negative values raise ValueError."""
    if mtu < 0:
        raise ValueError(f"MTU not updated to negative value: {mtu}")
    return min(mtu, MAX_CONTENT_SIZE)


@dataclass
class MTUState:
    """The device's current MTU and the handling of tunnel events."""

    mtu: int = DEFAULT_MTU
    max_content_size: int = MAX_CONTENT_SIZE
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def update(self, mtu: int) -> bool:
        """Store a new MTU, capped; return whether the stored value changed."""
        if mtu < 0:
            raise ValueError(f"MTU not updated to negative value: {mtu}")
        too_large = ""
        if mtu > self.max_content_size:
            too_large = f" (too large, capped at {self.max_content_size})"
            mtu = self.max_content_size
        with self._lock:
            old, self.mtu = self.mtu, mtu
        if old != mtu:
            _log.debug("MTU updated: %d%s", mtu, too_large)
            return True
        return False

    def handle_event(self, event: TunEvent, mtu: Optional[int]) -> List[TunEvent]:
        """Apply ``event`` and return the interface changes it requests, in order.

        ``mtu`` is the device's MTU as read for an MTU update, or None if it
        could not be read. A failed MTU update drops the rest of the event.
        """
        if event & TunEvent.MTU_UPDATE:
            if mtu is None:
                _log.error("Failed to load updated MTU of device")
                return []
            try:
                self.update(mtu)
            except ValueError as err:
                _log.error("%s", err)
                return []
        actions: List[TunEvent] = []
        if event & TunEvent.UP:
            _log.debug("Interface up requested")
            actions.append(TunEvent.UP)
        if event & TunEvent.DOWN:
            _log.debug("Interface down requested")
            actions.append(TunEvent.DOWN)
        return actions