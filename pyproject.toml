[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wgcore"
version = "0.1.0"
description = "Building blocks of a userspace WireGuard device: replay filtering, TAI64N stamps, rate limiting, pools, endpoint tracking and transport framing"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["wireguard", "vpn", "tai64n", "replay-protection", "ratelimiter", "chacha20poly1305"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["wgcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
