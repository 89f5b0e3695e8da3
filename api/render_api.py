from __future__ import annotations
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from devices.manager import DeviceManager
from fractals.base import RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from rendering.core import FrameGenerator
from rendering.executor import RenderExecutor
from rendering.orchestrator import GenerationOrchestrator
from rendering.view_state import ViewState, action_for_key
from utils.backend_helpers import precision_mode_to_dtype
from utils.enums import BackendType, NavAction, PrecisionMode, RedrawPolicy
from utils.errors import BackendInitError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewerConfig:
    """
    Startup configuration. Resolution and iteration cap are fixed for the
    lifetime of the viewer.
    """
    width: int = 800
    height: int = 600
    max_iter: int = 800
    precision: PrecisionMode = PrecisionMode.Single
    backend: BackendType = BackendType.AUTO
    device: Optional[int] = None
    redraw_policy: RedrawPolicy = RedrawPolicy.DROP
    frame_interval_ms: int = 16

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")
        if self.frame_interval_ms < 0:
            raise ValueError(f"frame_interval_ms must be >= 0, got {self.frame_interval_ms}")


class RenderConfigBuilder:
    """
    Builder for configuring the viewer.
    """
    def __init__(self, base: Optional[ViewerConfig] = None):
        self._values = dict((base or ViewerConfig()).__dict__)

    def resolution(self, width: int, height: int) -> 'RenderConfigBuilder':
        self._values["width"] = int(width)
        self._values["height"] = int(height)
        return self

    def max_iter(self, value: int) -> 'RenderConfigBuilder':
        self._values["max_iter"] = int(value)
        return self

    def precision(self, mode: PrecisionMode) -> 'RenderConfigBuilder':
        self._values["precision"] = mode
        return self

    def backend(self, backend: BackendType, device: Optional[int] = None) -> 'RenderConfigBuilder':
        self._values["backend"] = backend
        self._values["device"] = device
        return self

    def redraw_policy(self, policy: RedrawPolicy) -> 'RenderConfigBuilder':
        self._values["redraw_policy"] = policy
        return self

    def frame_interval(self, ms: int) -> 'RenderConfigBuilder':
        self._values["frame_interval_ms"] = int(ms)
        return self

    def build(self) -> ViewerConfig:
        return ViewerConfig(**self._values)


class RenderAPI:
    """
    Facade the display layer talks to: navigation in, frames out.
    """
    def __init__(self, view: ViewState, orchestrator: GenerationOrchestrator):
        self.view = view
        self.orchestrator = orchestrator

    # ---------- Callbacks --------------------------------
    def on_frame(self, cb): self.orchestrator.on_frame = cb
    def on_log(self, cb): self.orchestrator.on_log = cb

    # ----------- Navigation ------------------------------
    def navigate(self, action: NavAction) -> bool:
        """
        Applies one navigation step and requests a redraw if the view changed.

        Args:
            action (NavAction): The navigation action to apply.

        Returns:
            bool: True when the view changed.
        """
        changed = self.view.apply(action)
        if changed:
            self.orchestrator.request_redraw()
        return changed

    def navigate_key(self, key: str) -> bool:
        """
        Translates a key identifier through the default bindings and navigates.
        Unbound keys are ignored.
        """
        action = action_for_key(key)
        if action is None:
            return False
        return self.navigate(action)

    def request_redraw(self) -> None:
        self.orchestrator.request_redraw()

    # ----------- Display loop ----------------------------
    def tick(self) -> Optional[Future]:
        """
        One display-loop iteration: launch a pending generation if allowed.
        """
        return self.orchestrator.poll()

    def latest_frame(self) -> Tuple[np.ndarray, int]:
        """
        The most recent complete frame and its sequence number.
        """
        return self.orchestrator.frames.latest()

    def shutdown(self) -> None:
        """
        Waits for an in-flight generation, then releases backend resources.
        """
        try:
            self.orchestrator.shutdown(wait=True)
        finally:
            self.orchestrator.generator.close()


def build_api(config: ViewerConfig, devices: Optional[DeviceManager] = None) -> RenderAPI:
    """
    Wires devices, backend pool, generator, orchestrator and view state.
    Raises BackendInitError when no usable compute backend can be brought up.
    """
    fractal = MandelbrotFractal()
    settings = RenderSettings(max_iter=config.max_iter,
                              precision=precision_mode_to_dtype(config.precision))
    backend = None if config.backend is BackendType.AUTO else config.backend.name
    executor = RenderExecutor(devices=devices, backend=backend, device=config.device)

    try:
        generator = FrameGenerator(fractal, settings, executor=executor)
    except BackendInitError:
        executor.close()
        raise
    except Exception as e:
        executor.close()
        raise BackendInitError(f"Backend initialization failed: {e}") from e

    logger.info("Generating on %s", generator.device.label)
    view = ViewState(width=config.width, height=config.height)
    orchestrator = GenerationOrchestrator(generator, view, policy=config.redraw_policy)
    return RenderAPI(view, orchestrator)
