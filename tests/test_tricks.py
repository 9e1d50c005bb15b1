import pytest

from wgcore.tricks import (
    PADDING_MULTIPLE,
    calculate_padding_size,
    junk_packets,
    random_int,
    trick_header,
    tricks_enabled,
)


@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 100, 1419, 4095])
def test_padding_without_mtu_reaches_multiple(size):
    pad = calculate_padding_size(size, 0)
    assert 0 <= pad < PADDING_MULTIPLE
    assert (size + pad) % PADDING_MULTIPLE == 0


@pytest.mark.parametrize("size", [0, 1, 100, 1410, 1415, 1420])
def test_padding_never_exceeds_mtu(size):
    mtu = 1420
    pad = calculate_padding_size(size, mtu)
    assert 0 <= pad < PADDING_MULTIPLE
    assert size + pad <= mtu


def test_padding_at_mtu_is_capped():
    assert calculate_padding_size(1420, 1420) == 0


def test_padding_wraps_large_packets():
    mtu = 1420
    size = mtu + 5
    assert calculate_padding_size(size, mtu) == calculate_padding_size(5, mtu)


def test_random_int_in_range():
    values = {random_int(20, 50) for _ in range(500)}
    assert min(values) >= 20
    assert max(values) < 50


def test_random_int_empty_range_is_zero():
    assert random_int(5, 5) == 0
    assert random_int(9, 3) == 0


def test_tricks_enabled():
    assert not tricks_enabled("")
    assert not tricks_enabled("t0")
    assert tricks_enabled("t1")
    assert tricks_enabled("t2")


def test_t1_header_is_empty():
    assert trick_header("t1") == b""


def test_unknown_trick_has_no_header():
    assert trick_header("t0") is None
    assert trick_header("other") is None


def test_t2_header_layout():
    header = trick_header("t2")
    assert len(header) == 18
    assert header[0] in bytes([0xDC, 0xDE, 0xD3, 0xD9, 0xD0, 0xEC, 0xEE, 0xE3])
    assert header[1:6] == bytes([0x00, 0x00, 0x00, 0x01, 0x08])
    assert header[14:] == bytes([0x00, 0x00, 0x44, 0xD0])


def test_t2_connection_id_varies():
    ids = {trick_header("t2")[6:14] for _ in range(20)}
    assert len(ids) > 1


def test_junk_packets_t2_share_header_and_bounds():
    packets = list(junk_packets("t2"))
    assert 20 <= len(packets) < 50
    header = packets[0][0][:18]
    for packet, delay in packets:
        assert packet[:18] == header
        assert 18 + 10 <= len(packet) < 18 + 120
        assert 0.08 <= delay < 0.15


def test_junk_packets_t1_lengths():
    packets = list(junk_packets("t1"))
    assert 20 <= len(packets) < 50
    assert all(10 <= len(packet) < 120 for packet, _ in packets)


@pytest.mark.parametrize("trick", ["", "t0", "t9"])
def test_junk_packets_none_for_other_tricks(trick):
    assert list(junk_packets(trick)) == []