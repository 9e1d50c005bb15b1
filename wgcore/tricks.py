"""Transport padding and the junk-packet tricks sent before handshakes and keepalives."""

from __future__ import annotations

import secrets
from typing import Iterator, Optional, Tuple

PADDING_MULTIPLE = 16

_T2_FIRST_BYTES = bytes([0xDC, 0xDE, 0xD3, 0xD9, 0xD0, 0xEC, 0xEE, 0xE3])
_T2_TEMPLATE = bytes(
    [
        0x00, 0x00, 0x00, 0x00, 0x01, 0x08,
        0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x44, 0xD0,
    ]
)
_T2_RANDOM = slice(6, 14)
_MIN_PACKETS, _MAX_PACKETS = 20, 50
_EXTRA_LENGTH = 120
_MIN_EXTRA = 10
_MIN_DELAY_MS, _MAX_DELAY_MS = 80, 150


def _round_up(size: int) -> int:
    return (size + PADDING_MULTIPLE - 1) & ~(PADDING_MULTIPLE - 1)


def calculate_padding_size(packet_size: int, mtu: int) -> int:
    """Zero bytes to append so the packet fills a multiple of 16, never beyond ``mtu``.

    An ``mtu`` of 0 means no upper bound.
    """
    last_unit = packet_size
    if mtu == 0:
        return _round_up(last_unit) - last_unit
    if last_unit > mtu:
        last_unit %= mtu
    padded = min(_round_up(last_unit), mtu)
    return padded - last_unit


def random_int(low: int, high: int) -> int:
    """A cryptographically random integer in ``[low, high)``; 0 when the range is empty."""
    span = high - low
    if span < 1:
        return 0
    return low + secrets.randbelow(span)


def tricks_enabled(trick: str) -> bool:
    """Whether ``trick`` asks for junk packets to be sent at all."""
    return trick not in ("", "t0")


def trick_header(trick: str) -> Optional[bytes]:
    """The header each junk packet starts with, or None when ``trick`` sends nothing.

    ``t1`` uses an empty header; ``t2`` a QUIC-like long header with a random
    first byte and an eight-byte random connection id.
    """
    if trick == "t1":
        return b""
    if trick == "t2":
        header = bytearray(_T2_TEMPLATE)
        header[0] = _T2_FIRST_BYTES[random_int(0, len(_T2_FIRST_BYTES) - 1)]
        header[_T2_RANDOM] = secrets.token_bytes(_T2_RANDOM.stop - _T2_RANDOM.start)
        return bytes(header)
    return None


def junk_packets(trick: str) -> Iterator[Tuple[bytes, float]]:
    """Yield ``(packet, delay_seconds)`` pairs to send for ``trick``.

    The sender transmits each packet and then waits ``delay_seconds`` before the
    next one; it stops early if the peer goes away or a send fails.
    """
    header = trick_header(trick)
    if header is None:
        return
    count = random_int(_MIN_PACKETS, _MAX_PACKETS)
    max_length = len(header) + _EXTRA_LENGTH
    for _ in range(count):
        size = random_int(len(header) + _MIN_EXTRA, max_length)
        packet = header + secrets.token_bytes(size - len(header))
        delay = random_int(_MIN_DELAY_MS, _MAX_DELAY_MS) / 1000.0
        yield packet, delay