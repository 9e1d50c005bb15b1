"""Peer endpoint bookkeeping and packet preparation helpers."""

from __future__ import annotations

import base64
import threading
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol

KEY_SIZE = 32
RESERVED_SIZE = 3


class _Endpoint(Protocol):
    def clear_src(self) -> None: ...


def abbreviated_key(public_key: bytes) -> str:
    """Short human form of a peer's public key, e.g. ``peer(AbCd…WxYz)``."""
    if len(public_key) != KEY_SIZE:
        raise ValueError(f"public key must be {KEY_SIZE} bytes, got {len(public_key)}")
    encoded = base64.b64encode(bytes(public_key)).decode("ascii")
    return f"peer({encoded[0:4]}…{encoded[39:43]})"


def stamp_reserved(buffers: Iterable[bytes], reserved: bytes) -> List[bytes]:
    """Copy the three reserved bytes into the header of each WireGuard message.

    Only buffers longer than three bytes whose first byte is a message type
    (1 to 4) are changed; the rest are returned as they were.
    """
    if len(reserved) != RESERVED_SIZE:
        raise ValueError(f"reserved must be {RESERVED_SIZE} bytes, got {len(reserved)}")
    reserved = bytes(reserved)
    stamped = []
    for buf in buffers:
        buf = bytes(buf)
        if len(buf) > 3 and 0 < buf[0] < 5:
            buf = buf[:1] + reserved + buf[4:]
        stamped.append(buf)
    return stamped


@dataclass
class EndpointSlot:
    """A peer's current remote endpoint, guarded for concurrent use."""

    endpoint: Optional[_Endpoint] = None
    clear_src_on_tx: bool = False
    disable_roaming: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def set_from_packet(self, endpoint: _Endpoint) -> None:
        """Roam to the source of an authenticated packet, unless roaming is off."""
        with self._lock:
            if self.disable_roaming:
                return
            self.clear_src_on_tx = False
            self.endpoint = endpoint

    def set(self, endpoint: Optional[_Endpoint]) -> None:
        """Set the endpoint explicitly, regardless of roaming."""
        with self._lock:
            self.endpoint = endpoint

    def mark_src_for_clearing(self) -> None:
        """Ask for the source address to be cleared before the next send."""
        with self._lock:
            if self.endpoint is None:
                return
            self.clear_src_on_tx = True

    def take_for_send(self) -> _Endpoint:
        """The endpoint to send to, clearing its source first if requested."""
        with self._lock:
            if self.endpoint is None:
                raise LookupError("no known endpoint for peer")
            if self.clear_src_on_tx:
                self.endpoint.clear_src()
                self.clear_src_on_tx = False
            return self.endpoint