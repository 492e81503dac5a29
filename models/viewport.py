"""
Viewport (pan/zoom) model.

Maps world space, where node positions live, to screen space, where
pointer events arrive:

    screen = world * scale + translate
"""

import math
from dataclasses import dataclass
from typing import Optional


MIN_SCALE = 0.1
MAX_SCALE = 5.0
DEFAULT_ZOOM_INTENSITY = 0.001


def clamp_scale(scale: float) -> float:
    """Clamp a zoom factor into the supported range."""
    return min(max(MIN_SCALE, scale), MAX_SCALE)


@dataclass
class ViewState:
    """Current zoom factor and screen-space pan offset."""
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def __post_init__(self):
        self.scale = clamp_scale(self.scale)

    def to_dict(self) -> dict:
        return {"scale": self.scale, "x": self.translate_x, "y": self.translate_y}

    @classmethod
    def from_dict(cls, data: dict) -> "ViewState":
        """
        Create from a persisted dictionary. Out-of-range scales are clamped.

        Raises:
            KeyError, ValueError, TypeError: if the entry is malformed
        """
        return cls(
            scale=float(data["scale"]),
            translate_x=float(data["x"]),
            translate_y=float(data["y"]),
        )


class ViewportController:
    """
    Owns the view state and converts between screen and world coordinates.

    Zoom is anchored at the transform origin, not at the cursor, so the
    content under the pointer shifts while zooming.
    """

    def __init__(self, view: Optional[ViewState] = None, zoom_intensity: float = DEFAULT_ZOOM_INTENSITY):
        self._view = view or ViewState()
        self.zoom_intensity = zoom_intensity

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def scale(self) -> float:
        return self._view.scale

    @property
    def translate_x(self) -> float:
        return self._view.translate_x

    @property
    def translate_y(self) -> float:
        return self._view.translate_y

    @property
    def zoom_percent(self) -> int:
        """Zoom level for display, e.g. 150 for 1.5x."""
        return round(self._view.scale * 100)

    def screen_to_world(self, sx: float, sy: float) -> tuple[float, float]:
        v = self._view
        return ((sx - v.translate_x) / v.scale, (sy - v.translate_y) / v.scale)

    def world_to_screen(self, wx: float, wy: float) -> tuple[float, float]:
        v = self._view
        return (wx * v.scale + v.translate_x, wy * v.scale + v.translate_y)

    def zoom(self, delta_y: float) -> float:
        """
        Zoom by a wheel delta. Positive deltas (scrolling down) zoom out.

        Returns the new scale.
        """
        if not math.isfinite(delta_y):
            return self._view.scale
        self._view.scale = clamp_scale(self._view.scale - delta_y * self.zoom_intensity)
        return self._view.scale

    def pan(self, dx: float, dy: float):
        """Shift the view by a screen-space delta."""
        self._view.translate_x += dx
        self._view.translate_y += dy

    def reset(self):
        """Return to identity: scale 1, no pan."""
        self._view.scale = 1.0
        self._view.translate_x = 0.0
        self._view.translate_y = 0.0

    def set_view(self, view: ViewState):
        """Adopt a view state (e.g. a loaded one)."""
        self._view.scale = clamp_scale(view.scale)
        self._view.translate_x = view.translate_x
        self._view.translate_y = view.translate_y
