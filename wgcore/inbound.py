"""Checks and decryption applied to datagrams arriving from peers."""

from __future__ import annotations

import enum
import ipaddress
from typing import Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

MESSAGE_INITIATION_SIZE = 148
MESSAGE_RESPONSE_SIZE = 92
MESSAGE_COOKIE_REPLY_SIZE = 64
MESSAGE_TRANSPORT_HEADER_SIZE = 16
MESSAGE_TRANSPORT_SIZE = MESSAGE_TRANSPORT_HEADER_SIZE + 16
MESSAGE_KEEPALIVE_SIZE = MESSAGE_TRANSPORT_SIZE
MIN_MESSAGE_SIZE = MESSAGE_KEEPALIVE_SIZE

MESSAGE_TRANSPORT_OFFSET_RECEIVER = 4
MESSAGE_TRANSPORT_OFFSET_COUNTER = 8
MESSAGE_TRANSPORT_OFFSET_CONTENT = 16

IPV4_HEADER_LEN = 20
IPV6_HEADER_LEN = 40
IPV4_OFFSET_TOTAL_LENGTH = 2
IPV4_OFFSET_SRC = 12
IPV6_OFFSET_PAYLOAD_LENGTH = 4
IPV6_OFFSET_SRC = 8

REKEY_TIMEOUT = 5.0
KEEPALIVE_TIMEOUT = 10.0
REJECT_AFTER_TIME = 180.0
LAST_MINUTE_HANDSHAKE_AGE = REJECT_AFTER_TIME - KEEPALIVE_TIMEOUT - REKEY_TIMEOUT

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class MessageType(enum.IntEnum):
    """The message types found in the first byte of every datagram."""

    INITIATION = 1
    RESPONSE = 2
    COOKIE_REPLY = 3
    TRANSPORT = 4


class InboundError(ValueError):
    """A received datagram or packet that must be dropped."""


_FIXED_SIZES = {
    MessageType.INITIATION: MESSAGE_INITIATION_SIZE,
    MessageType.RESPONSE: MESSAGE_RESPONSE_SIZE,
    MessageType.COOKIE_REPLY: MESSAGE_COOKIE_REPLY_SIZE,
}


def classify_datagram(packet: bytes) -> Tuple[MessageType, bytes]:
    """Identify a datagram's message type and clear its three reserved bytes.

    Returns the type and the datagram with the reserved bytes zeroed.
    Datagrams too short, of unknown type, or of the wrong size for a
    handshake message raise :class:`InboundError`.
    """
    packet = bytes(packet)
    if len(packet) < MIN_MESSAGE_SIZE:
        raise InboundError(f"datagram too short: {len(packet)} bytes")
    normalized = packet[:1] + b"\x00\x00\x00" + packet[4:]
    raw_type = int.from_bytes(normalized[:4], "little")
    try:
        kind = MessageType(raw_type)
    except ValueError:
        raise InboundError("Received message with unknown type") from None
    if kind is MessageType.TRANSPORT:
        if len(normalized) < MESSAGE_TRANSPORT_SIZE:
            raise InboundError("transport message too short")
    elif len(normalized) != _FIXED_SIZES[kind]:
        raise InboundError(
            f"{kind.name.lower()} message must be {_FIXED_SIZES[kind]} bytes, got {len(normalized)}"
        )
    return kind, normalized


def transport_receiver(packet: bytes) -> int:
    """The receiver index carried by a transport message."""
    if len(packet) < MESSAGE_TRANSPORT_SIZE:
        raise InboundError("transport message too short")
    return int.from_bytes(
        packet[MESSAGE_TRANSPORT_OFFSET_RECEIVER:MESSAGE_TRANSPORT_OFFSET_COUNTER], "little"
    )


def open_transport(key: bytes, packet: bytes) -> Tuple[int, bytes]:
    """Decrypt a transport message with the receiving ``key``.

    Returns the message counter and the plaintext (empty for a keepalive).
    A message that fails authentication raises :class:`InboundError`.
    """
    if len(packet) < MESSAGE_TRANSPORT_SIZE:
        raise InboundError("transport message too short")
    counter = int.from_bytes(
        packet[MESSAGE_TRANSPORT_OFFSET_COUNTER:MESSAGE_TRANSPORT_OFFSET_CONTENT], "little"
    )
    nonce = bytes(4) + counter.to_bytes(8, "little")
    content = bytes(packet[MESSAGE_TRANSPORT_OFFSET_CONTENT:])
    try:
        plaintext = ChaCha20Poly1305(bytes(key)).decrypt(nonce, content, None)
    except InvalidTag:
        raise InboundError("failed to decrypt transport message") from None
    return counter, plaintext


def validate_inbound_ip(packet: bytes) -> bytes:
    """Check a decrypted IP packet and trim it to the length its header states.

    An empty packet is a keepalive and comes back empty. Packets with a bad
    header, a bad length or an unknown IP version raise :class:`InboundError`.
    """
    packet = bytes(packet)
    if not packet:
        return packet
    version = packet[0] >> 4
    if version == 4:
        if len(packet) < IPV4_HEADER_LEN:
            raise InboundError("IPv4 packet shorter than its header")
        length = int.from_bytes(
            packet[IPV4_OFFSET_TOTAL_LENGTH:IPV4_OFFSET_TOTAL_LENGTH + 2], "big"
        )
        if length > len(packet) or length < IPV4_HEADER_LEN:
            raise InboundError(f"IPv4 packet with invalid total length {length}")
        return packet[:length]
    if version == 6:
        if len(packet) < IPV6_HEADER_LEN:
            raise InboundError("IPv6 packet shorter than its header")
        payload = int.from_bytes(
            packet[IPV6_OFFSET_PAYLOAD_LENGTH:IPV6_OFFSET_PAYLOAD_LENGTH + 2], "big"
        )
        length = (payload + IPV6_HEADER_LEN) & 0xFFFF
        if length > len(packet):
            raise InboundError(f"IPv6 packet with invalid length {length}")
        return packet[:length]
    raise InboundError("Packet with invalid IP version")


def source_address(packet: bytes) -> Address:
    """The source address of a validated IPv4 or IPv6 packet."""
    if not packet:
        raise InboundError("empty packet has no source address")
    version = packet[0] >> 4
    if version == 4 and len(packet) >= IPV4_HEADER_LEN:
        return ipaddress.IPv4Address(bytes(packet[IPV4_OFFSET_SRC:IPV4_OFFSET_SRC + 4]))
    if version == 6 and len(packet) >= IPV6_HEADER_LEN:
        return ipaddress.IPv6Address(bytes(packet[IPV6_OFFSET_SRC:IPV6_OFFSET_SRC + 16]))
    raise InboundError("packet has no readable source address")


def needs_last_minute_handshake(is_initiator: bool, age_seconds: float) -> bool:
    """Whether a keypair we initiated is old enough to need a fresh handshake on receipt."""
    return bool(is_initiator) and age_seconds > LAST_MINUTE_HANDSHAKE_AGE