"""Pointer-to-page coordinate math.

Positions on a page are stored as percentages of the page width/height so
they survive zooming and re-rendering at any resolution.
"""

from typing import NamedTuple, Tuple

from .constants import MAX_FIELD_SIZE, MAX_X_PERCENT, MAX_Y_PERCENT, MIN_FIELD_SIZE


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def to_percent(pointer: Point, rect: Rect) -> Tuple[float, float]:
    if rect.is_empty:
        raise ValueError(f"container has no area: {rect!r}")
    x = 100 * (pointer.x - rect.left) / rect.width
    y = 100 * (pointer.y - rect.top) / rect.height
    return x, y


def _bound(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def clamp(x: float, y: float) -> Tuple[float, float]:
    # keeps a default-sized field on the page; large custom sizes can still spill
    return _bound(x, 0.0, MAX_X_PERCENT), _bound(y, 0.0, MAX_Y_PERCENT)


def clamp_size(width: float, height: float) -> Tuple[float, float]:
    return (
        _bound(width, MIN_FIELD_SIZE, MAX_FIELD_SIZE),
        _bound(height, MIN_FIELD_SIZE, MAX_FIELD_SIZE),
    )
