from __future__ import annotations

import pytest

from rendering.view_state import (DEFAULT_KEY_BINDINGS, DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y,
                                  DEFAULT_ZOOM, ViewState, action_for_key)
from utils.enums import NavAction


def test_defaults() -> None:
    vs = ViewState()
    vp = vs.snapshot()
    assert (vp.width, vp.height) == (800, 600)
    assert vp.offset_x == DEFAULT_OFFSET_X
    assert vp.offset_y == DEFAULT_OFFSET_Y
    assert vp.zoom == DEFAULT_ZOOM


def test_pan_right_at_unit_zoom_adds_exactly_a_tenth() -> None:
    vs = ViewState(offset_x=0.0, offset_y=0.0, zoom=1.0)
    assert vs.apply(NavAction.PAN_RIGHT)
    assert vs.offset_x == 0.1
    assert vs.offset_y == 0.0


def test_pan_step_scales_with_zoom() -> None:
    vs = ViewState()
    vs.apply(NavAction.PAN_LEFT)
    assert vs.offset_x == pytest.approx(DEFAULT_OFFSET_X - 0.1 / DEFAULT_ZOOM)


def test_pan_up_and_down_follow_pixel_rows() -> None:
    vs = ViewState(offset_x=0.0, offset_y=0.0, zoom=2.0)
    vs.apply(NavAction.PAN_UP)
    assert vs.offset_y == pytest.approx(-0.05)
    vs.apply(NavAction.PAN_DOWN)
    vs.apply(NavAction.PAN_DOWN)
    assert vs.offset_y == pytest.approx(0.05)


def test_zoom_in_then_out_restores_zoom() -> None:
    vs = ViewState()
    vs.apply(NavAction.ZOOM_IN)
    assert vs.zoom == pytest.approx(DEFAULT_ZOOM * 1.05)
    vs.apply(NavAction.ZOOM_OUT)
    assert vs.zoom == pytest.approx(DEFAULT_ZOOM)


def test_zoom_does_not_move_center() -> None:
    vs = ViewState()
    vs.apply(NavAction.ZOOM_IN)
    vs.apply(NavAction.ZOOM_IN)
    assert (vs.offset_x, vs.offset_y) == (DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y)


def test_overflowing_zoom_is_rejected() -> None:
    vs = ViewState(zoom=1e300, zoom_ratio=1e10)
    assert not vs.apply(NavAction.ZOOM_IN)
    assert vs.zoom == 1e300


def test_underflowing_zoom_is_rejected() -> None:
    vs = ViewState(zoom=1e-300, zoom_ratio=1e30)
    assert not vs.apply(NavAction.ZOOM_OUT)
    assert vs.zoom == 1e-300


@pytest.mark.parametrize("kwargs", [
    {"zoom": 0.0},
    {"zoom": -1.0},
    {"offset_x": float("nan")},
    {"width": 0},
    {"zoom_ratio": 0.0},
])
def test_invalid_initial_state(kwargs) -> None:
    with pytest.raises(ValueError):
        ViewState(**kwargs)


def test_reset_restores_defaults() -> None:
    vs = ViewState()
    vs.apply(NavAction.PAN_DOWN)
    vs.apply(NavAction.ZOOM_OUT)
    vs.reset()
    assert (vs.offset_x, vs.offset_y, vs.zoom) == (DEFAULT_OFFSET_X, DEFAULT_OFFSET_Y, DEFAULT_ZOOM)


@pytest.mark.parametrize("key,action", sorted(DEFAULT_KEY_BINDINGS.items()))
def test_default_bindings(key: str, action: NavAction) -> None:
    assert action_for_key(key) is action
    assert action_for_key(key.upper()) is action


@pytest.mark.parametrize("key", ["", "x", "1", " "])
def test_unbound_keys(key: str) -> None:
    assert action_for_key(key) is None
