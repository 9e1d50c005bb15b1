import pytest

from wgcore.tunconfig import (
    DEFAULT_MTU,
    MAX_CONTENT_SIZE,
    MTUState,
    TunEvent,
    clamp_mtu,
    queue_sizes,
)


def test_windows_sizes():
    sizes = queue_sizes("windows")
    assert sizes.staged == 128
    assert sizes.max_segment_size == 2048 - 32
    assert sizes.preallocated_buffers_per_pool == 0


def test_ios_sizes():
    sizes = queue_sizes("ios")
    assert sizes.max_segment_size == 1700
    assert sizes.preallocated_buffers_per_pool == 1024


def test_android_sizes():
    sizes = queue_sizes("android")
    assert sizes.preallocated_buffers_per_pool == 4096
    assert sizes.max_segment_size == (1 << 16) - 1


def test_default_sizes():
    sizes = queue_sizes("linux")
    assert sizes.preallocated_buffers_per_pool == 0
    assert sizes.max_segment_size == (1 << 16) - 1
    assert sizes.outbound == sizes.inbound == sizes.handshake == 1024


def test_win32_alias():
    assert queue_sizes("win32") == queue_sizes("windows")


def test_default_platform_is_known():
    assert queue_sizes() in {queue_sizes(p) for p in ("linux", "windows", "ios", "android")}


def test_clamp_mtu_keeps_normal_values():
    assert clamp_mtu(DEFAULT_MTU) == DEFAULT_MTU


def test_clamp_mtu_caps_large_values():
    assert clamp_mtu(MAX_CONTENT_SIZE + 1000) == MAX_CONTENT_SIZE


def test_clamp_mtu_rejects_negative():
    with pytest.raises(ValueError):
        clamp_mtu(-1)


def test_state_update_reports_change():
    state = MTUState()
    assert state.mtu == DEFAULT_MTU
    assert state.update(1280) is True
    assert state.mtu == 1280
    assert state.update(1280) is False


def test_state_update_caps():
    state = MTUState()
    state.update(MAX_CONTENT_SIZE * 2)
    assert state.mtu == MAX_CONTENT_SIZE


def test_state_update_rejects_negative():
    state = MTUState()
    with pytest.raises(ValueError):
        state.update(-5)
    assert state.mtu == DEFAULT_MTU


def test_event_up_with_mtu():
    state = MTUState()
    actions = state.handle_event(TunEvent.UP | TunEvent.MTU_UPDATE, 1380)
    assert actions == [TunEvent.UP]
    assert state.mtu == 1380


def test_event_up_and_down_in_order():
    state = MTUState()
    assert state.handle_event(TunEvent.UP | TunEvent.DOWN, None) == [TunEvent.UP, TunEvent.DOWN]
    assert state.mtu == DEFAULT_MTU


def test_failed_mtu_read_skips_event():
    state = MTUState()
    assert state.handle_event(TunEvent.MTU_UPDATE | TunEvent.UP, None) == []
    assert state.mtu == DEFAULT_MTU


def test_negative_mtu_skips_event():
    state = MTUState()
    assert state.handle_event(TunEvent.MTU_UPDATE | TunEvent.DOWN, -1) == []
    assert state.mtu == DEFAULT_MTU