"""Routing, sealing and staging of packets on their way to a peer."""

from __future__ import annotations

import ipaddress
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional, Sequence, Union

from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .inbound import IPV4_HEADER_LEN, IPV6_HEADER_LEN, MESSAGE_TRANSPORT_HEADER_SIZE, MessageType
from .tricks import calculate_padding_size
from .tunconfig import queue_sizes

IPV4_OFFSET_DST = 16
IPV6_OFFSET_DST = 24

REKEY_AFTER_MESSAGES = 1 << 60
REKEY_AFTER_TIME = 120.0

_UINT32 = 1 << 32
_UINT64 = 1 << 64

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
Batch = List[bytes]


def destination_address(packet: bytes) -> Address:
    """The destination address of an IP packet read from the tunnel.

    Packets too short for their header or of an unknown IP version raise
    ``ValueError``.
    """
    if not packet:
        raise ValueError("empty packet")
    version = packet[0] >> 4
    if version == 4:
        if len(packet) < IPV4_HEADER_LEN:
            raise ValueError("IPv4 packet shorter than its header")
        return ipaddress.IPv4Address(bytes(packet[IPV4_OFFSET_DST:IPV4_OFFSET_DST + 4]))
    if version == 6:
        if len(packet) < IPV6_HEADER_LEN:
            raise ValueError("IPv6 packet shorter than its header")
        return ipaddress.IPv6Address(bytes(packet[IPV6_OFFSET_DST:IPV6_OFFSET_DST + 16]))
    raise ValueError("Received packet with unknown IP version")


def seal_transport(key: bytes, receiver: int, nonce: int, packet: bytes, mtu: int) -> bytes:
    """Build an encrypted transport message carrying ``packet``.

    The plaintext is padded with zeros to a multiple of 16 bytes (bounded by
    ``mtu``, 0 meaning unbounded) and sealed with ``key`` under ``nonce``.
    """
    if not 0 <= receiver < _UINT32:
        raise ValueError(f"receiver index out of range: {receiver}")
    if not 0 <= nonce < _UINT64:
        raise ValueError(f"nonce out of range: {nonce}")
    header = (
        int(MessageType.TRANSPORT).to_bytes(4, "little")
        + receiver.to_bytes(4, "little")
        + nonce.to_bytes(8, "little")
    )
    assert len(header) == MESSAGE_TRANSPORT_HEADER_SIZE
    plaintext = bytes(packet)
    plaintext += bytes(calculate_padding_size(len(plaintext), mtu))
    aead_nonce = bytes(4) + nonce.to_bytes(8, "little")
    return header + ChaCha20Poly1305(bytes(key)).encrypt(aead_nonce, plaintext, None)


def needs_rekey(nonce: int, is_initiator: bool, age_seconds: float) -> bool:
    """Whether sending should trigger a new handshake for the current keypair."""
    return nonce > REKEY_AFTER_MESSAGES or (bool(is_initiator) and age_seconds > REKEY_AFTER_TIME)


class StagedQueue:
    """Bounded queue of packet batches waiting for a usable keypair.

    When full, the oldest batches are dropped to make room for new ones.
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        if capacity is None:
            capacity = queue_sizes().staged
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._batches: Deque[Batch] = deque()
        self._lock = threading.Lock()

    def stage(self, packets: Iterable[bytes]) -> List[Batch]:
        """Queue a batch of packets; return the older batches dropped to fit it."""
        batch = [bytes(p) for p in packets]
        dropped: List[Batch] = []
        with self._lock:
            while len(self._batches) >= self.capacity:
                dropped.append(self._batches.popleft())
            self._batches.append(batch)
        return dropped

    def drain(self) -> List[Batch]:
        """Remove and return every queued batch, oldest first."""
        with self._lock:
            batches = list(self._batches)
            self._batches.clear()
        return batches

    def flush(self) -> int:
        """Discard every queued batch; return how many were discarded."""
        with self._lock:
            count = len(self._batches)
            self._batches.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._batches)


def _batch_sizes(batches: Sequence[Batch]) -> List[int]:
    return [len(b) for b in batches]