from __future__ import annotations

import pytest

from api.render_api import RenderConfigBuilder, ViewerConfig, build_api
from devices.manager import DeviceManager
from utils.enums import BackendType, NavAction, PrecisionMode, RedrawPolicy
from utils.errors import BackendInitError

TIMEOUT = 30.0


def test_config_defaults() -> None:
    cfg = ViewerConfig()
    assert (cfg.width, cfg.height, cfg.max_iter) == (800, 600, 800)
    assert cfg.precision is PrecisionMode.Single
    assert cfg.backend is BackendType.AUTO
    assert cfg.redraw_policy is RedrawPolicy.DROP


def test_builder_sets_fields() -> None:
    cfg = (RenderConfigBuilder()
           .resolution(80, 60)
           .max_iter(100)
           .precision(PrecisionMode.Double)
           .backend(BackendType.CPU)
           .redraw_policy(RedrawPolicy.LATEST)
           .frame_interval(5)
           .build())
    assert (cfg.width, cfg.height, cfg.max_iter) == (80, 60, 100)
    assert cfg.precision is PrecisionMode.Double
    assert cfg.backend is BackendType.CPU
    assert cfg.redraw_policy is RedrawPolicy.LATEST
    assert cfg.frame_interval_ms == 5


@pytest.mark.parametrize("step", [
    lambda b: b.resolution(0, 10),
    lambda b: b.max_iter(0),
    lambda b: b.frame_interval(-1),
])
def test_builder_rejects_invalid_values(step) -> None:
    with pytest.raises(ValueError):
        step(RenderConfigBuilder()).build()


def test_explicit_unavailable_backend_is_fatal(cpu_devices: DeviceManager) -> None:
    cfg = RenderConfigBuilder().resolution(16, 12).backend(BackendType.OPENCL).build()
    with pytest.raises(BackendInitError):
        build_api(cfg, devices=cpu_devices)


@pytest.mark.integration
def test_navigation_produces_new_frame(cpu_devices: DeviceManager) -> None:
    cfg = RenderConfigBuilder().resolution(80, 60).max_iter(200).backend(BackendType.CPU).build()
    api = build_api(cfg, devices=cpu_devices)
    try:
        api.request_redraw()
        api.tick().result(TIMEOUT)
        assert api.orchestrator.wait_idle(TIMEOUT)
        first, seq = api.latest_frame()
        assert seq == 1
        assert first.shape == (60, 80, 3)

        assert api.navigate(NavAction.ZOOM_IN)
        assert api.navigate_key("d")
        assert not api.navigate_key("x")
        api.tick().result(TIMEOUT)
        assert api.orchestrator.wait_idle(TIMEOUT)
        second, seq = api.latest_frame()
        assert seq == 2
        assert first.tobytes() != second.tobytes()
    finally:
        api.shutdown()
