"""Building blocks for a userspace WireGuard device: replay filtering, TAI64N stamps,
rate limiting, pools, endpoint tracking, padding tricks and transport framing."""

__version__ = "0.1.0"