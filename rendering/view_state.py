from __future__ import annotations
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from fractals.base import Viewport
from utils.enums import NavAction

logger = logging.getLogger(__name__)


DEFAULT_OFFSET_X = -0.705922586560551705765
DEFAULT_OFFSET_Y = -0.267652025962102419929
DEFAULT_ZOOM = 0.5

DEFAULT_KEY_BINDINGS: Dict[str, NavAction] = {
    "w": NavAction.PAN_UP,
    "s": NavAction.PAN_DOWN,
    "a": NavAction.PAN_LEFT,
    "d": NavAction.PAN_RIGHT,
    "e": NavAction.ZOOM_IN,
    "q": NavAction.ZOOM_OUT,
}


def action_for_key(key: str, bindings: Optional[Dict[str, NavAction]] = None) -> Optional[NavAction]:
    if not key:
        return None
    return (bindings or DEFAULT_KEY_BINDINGS).get(key.lower())


@dataclass
class ViewState:
    """
    Holds the current navigation state and provides methods for manipulating it.

    Pans move the center by pan_step / zoom along one axis (y grows
    downwards, as pixel rows do); zoom steps multiply or divide by
    zoom_ratio. Transitions that would leave zoom non-finite or <= 0, or an
    offset non-finite, are rejected and leave the state untouched.
    """
    width: int = 800
    height: int = 600
    offset_x: float = DEFAULT_OFFSET_X
    offset_y: float = DEFAULT_OFFSET_Y
    zoom: float = DEFAULT_ZOOM
    pan_step: float = 0.1
    zoom_ratio: float = 1.05

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")
        if not self._valid(self.offset_x, self.offset_y, self.zoom):
            raise ValueError(f"Invalid initial view ({self.offset_x}, {self.offset_y}, zoom={self.zoom})")
        if self.zoom_ratio <= 0 or not math.isfinite(self.zoom_ratio):
            raise ValueError(f"zoom_ratio must be a positive finite number, got {self.zoom_ratio}")

    @staticmethod
    def _valid(ox: float, oy: float, zoom: float) -> bool:
        return math.isfinite(ox) and math.isfinite(oy) and math.isfinite(zoom) and zoom > 0.0

    def snapshot(self) -> Viewport:
        with self._lock:
            return Viewport(offset_x=self.offset_x, offset_y=self.offset_y,
                            zoom=self.zoom, width=self.width, height=self.height)

    def apply(self, action: NavAction) -> bool:
        """
        Apply one navigation step. Returns True when the view changed.
        """
        with self._lock:
            ox, oy, zoom = self.offset_x, self.offset_y, self.zoom
            step = self.pan_step / zoom

            if action is NavAction.PAN_UP:
                oy -= step
            elif action is NavAction.PAN_DOWN:
                oy += step
            elif action is NavAction.PAN_LEFT:
                ox -= step
            elif action is NavAction.PAN_RIGHT:
                ox += step
            elif action is NavAction.ZOOM_IN:
                zoom *= self.zoom_ratio
            elif action is NavAction.ZOOM_OUT:
                zoom /= self.zoom_ratio
            else:
                raise ValueError(f"Unknown navigation action: {action!r}")

            if not self._valid(ox, oy, zoom):
                logger.warning("Rejected %s: would leave view at (%r, %r, zoom=%r)",
                               action.name, ox, oy, zoom)
                return False

            self.offset_x, self.offset_y, self.zoom = ox, oy, zoom
        return True

    def reset(self) -> None:
        with self._lock:
            self.offset_x = DEFAULT_OFFSET_X
            self.offset_y = DEFAULT_OFFSET_Y
            self.zoom = DEFAULT_ZOOM
