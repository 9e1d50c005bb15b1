# wgcore

`wgcore` is a set of self-contained pieces for the data path of a userspace
WireGuard device. You can use and test each module on its own. The only
runtime dependency is `cryptography`, which provides ChaCha20-Poly1305.

## Modules

- `wgcore.replay`: `Filter` is a sliding-window anti-replay filter (RFC 6479).
  - `validate_counter(counter, limit)` accepts each counter once.
  - It rejects counters at or above `limit`, and counters that lie more than
    `WINDOW_SIZE` behind the newest one.
  - `reset()` empties the filter.
- `wgcore.tai64n`: handshake timestamps.
  - `stamp(unix_nanos)` builds a 12-byte TAI64N `Timestamp` from nanoseconds
    since the epoch.
  - `now()` does the same for the current time.
  - Both whiten the sub-second part, so stamps less than about 16 ms apart
    compare equal.
  - `Timestamp.after(other)` compares two stamps.
  - `str(ts)` renders a stamp as a UTC date.
- `wgcore.ratelimiter`: `Ratelimiter(clock=None)` is a token bucket for each
  source address.
  - `allow(ip)` permits a burst of 5 packets, then 20 per second. It accepts
    strings, integers, packed bytes or `ipaddress` objects.
  - `clock` returns nanoseconds and defaults to `time.monotonic_ns`.
  - A background thread drops entries that have been idle for over a second.
    `cleanup()` does the same on demand.
  - `reset()` forgets every address.
  - `close()` stops the sweeper. The limiter is also a context manager.
- `wgcore.pools`: `WaitPool(max_count, factory)` reuses the items that
  `factory` makes.
  - If `max_count` is not zero, `get()` blocks while that many items are out.
  - `put()` returns an item to the pool.
  - `in_use()` reports how many items are out.
- `wgcore.peers`: endpoint and key helpers.
  - `EndpointSlot` holds a peer's current endpoint.
    - `set_from_packet()` roams to a new endpoint unless `disable_roaming` is
      set.
    - `set()` sets the endpoint explicitly.
    - `mark_src_for_clearing()` marks the source address to be cleared.
    - `take_for_send()` returns the endpoint. If clearing was requested, it
      first calls the endpoint's `clear_src()`. It raises `LookupError` when
      there is no endpoint.
  - `abbreviated_key(public_key)` formats a 32-byte key as `peer(AbCd…WxYz)`.
  - `stamp_reserved(buffers, reserved)` writes three reserved bytes into the
    header of each WireGuard message.
- `wgcore.tricks`: padding and junk packets.
  - `calculate_padding_size(packet_size, mtu)` gives the padding to a multiple
    of 16, bounded by the MTU. An MTU of 0 means no bound.
  - `random_int(low, high)` returns a secure random integer in
    `[low, high)`.
  - `tricks_enabled()` tells whether a `trick` mode sends junk packets.
  - `trick_header()` returns the header for `t1` or `t2`.
  - `junk_packets(trick)` yields `(packet, delay_seconds)` pairs to send.
- `wgcore.tunconfig`: tunnel settings and events.
  - `queue_sizes(platform=None)` returns the `QueueSizes` for `default`,
    `android`, `ios` or `windows`.
  - `TunEvent` flags up, down and MTU-update events.
  - `clamp_mtu()` caps an MTU at the largest content size.
  - `MTUState.update(mtu)` stores a new MTU.
  - `MTUState.handle_event(event, mtu)` applies an event. It returns the
    interface changes requested.
- `wgcore.inbound`: checks on received datagrams.
  - `classify_datagram()` returns a `MessageType` and clears the reserved
    bytes.
  - `transport_receiver()` reads the receiver index.
  - `open_transport(key, packet)` decrypts a transport message. It returns
    `(counter, plaintext)`.
  - `validate_inbound_ip()` checks and trims an inner IP packet.
  - `source_address()` reads the source address of a packet.
  - `needs_last_minute_handshake()` decides on a rekey when a packet is
    received.
  - Datagrams that must be dropped raise `InboundError`.
- `wgcore.outbound`: preparing packets to send.
  - `destination_address()` finds the destination of a packet read from the
    tunnel.
  - `seal_transport(key, receiver, nonce, packet, mtu)` pads and encrypts a
    packet into a transport message.
  - `needs_rekey()` decides on a rekey when sending.
  - `StagedQueue(capacity=None)` holds batches that wait for a keypair. When
    full, it drops the oldest batches. It has `stage()`, `drain()`,
    `flush()` and `len()`.

## Installation

```
pip install .
```

## Example

```python
import os

from wgcore.inbound import MessageType, classify_datagram, open_transport, transport_receiver
from wgcore.outbound import seal_transport
from wgcore.ratelimiter import Ratelimiter
from wgcore.replay import Filter

key = os.urandom(32)
message = seal_transport(key, receiver=7, nonce=0, packet=b"hello", mtu=1420)

kind, message = classify_datagram(message)
assert kind is MessageType.TRANSPORT
assert transport_receiver(message) == 7

counter, plaintext = open_transport(key, message)
assert plaintext == b"hello" + bytes(11)  # padded to 16 bytes

replay = Filter()
limit = 2**64 - 2**13 - 1
assert replay.validate_counter(counter, limit)
assert not replay.validate_counter(counter, limit)

with Ratelimiter(clock=lambda: 0) as limiter:
    results = [limiter.allow("192.0.2.1") for _ in range(6)]
assert results == [True] * 5 + [False]
```

## What it does not do

These are separate parts. They are not a running device.

- The package opens no sockets and no tunnel interface.
- It does not perform the Noise handshake or derive keys. The caller
  supplies the 32-byte ChaCha20-Poly1305 keys.
- It has no protocol timers.
- It does not implement the `get=1` / `set=1` configuration protocol or its
  control socket.
- It has no command-line program.

## Running the tests

```
pip install .[test]
pytest
```