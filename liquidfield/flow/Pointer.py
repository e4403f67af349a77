"""Pointer input shared by both engines.

Both engines take the pointer in UV space: position in [0, 1]², origin at
the bottom-left, velocity in UV units per frame. Pointer producers that work
in NDC ([-1, 1]², y up) convert once with ndc_to_uv / ndc_velocity_to_uv.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from OneEuroFilter import OneEuroFilter

from liquidfield.utils import Point2f


def ndc_to_uv(point: Point2f) -> Point2f:
    return Point2f(point.x * 0.5 + 0.5, point.y * 0.5 + 0.5)


def uv_to_ndc(point: Point2f) -> Point2f:
    return Point2f(point.x * 2.0 - 1.0, point.y * 2.0 - 1.0)


def ndc_velocity_to_uv(velocity: Point2f) -> Point2f:
    return Point2f(velocity.x * 0.5, velocity.y * 0.5)


@dataclass
class PointerState:
    position: Point2f = field(default_factory=lambda: Point2f(0.5, 0.5))
    velocity: Point2f = field(default_factory=Point2f)
    active: bool = False


class PointerTracker:
    """Smooths raw pointer samples and derives the per-frame velocity.

    Samples come in NDC (as reported by a window or browser event), the
    state goes out in UV. Each axis runs through a One Euro filter, which
    smooths jitter at rest and lets fast strokes through with little lag.
    Timestamps in seconds let the filters follow the actual frame rate.

    :freq: Nominal frame rate in Hz, used until timestamps arrive
    :mincutoff: Cutoff frequency at rest, lower = smoother
    :beta: Cutoff increase with speed, higher = less lag on fast strokes
    :dcutoff: Cutoff frequency of the speed estimate
    """

    def __init__(self, freq: float = 60.0, mincutoff: float = 1.0, beta: float = 0.0, dcutoff: float = 1.0) -> None:
        if freq <= 0:
            raise ValueError("freq should be >0")
        if mincutoff <= 0:
            raise ValueError("mincutoff should be >0")
        if dcutoff <= 0:
            raise ValueError("dcutoff should be >0")
        self._freq: float = float(freq)
        self._mincutoff: float = float(mincutoff)
        self._beta: float = float(beta)
        self._dcutoff: float = float(dcutoff)
        self._filters: tuple[OneEuroFilter, OneEuroFilter] = self._create_filters()
        self._target: Point2f | None = None
        self._smooth: Point2f | None = None
        self._last_time: float | None = None

    def _create_filters(self) -> tuple[OneEuroFilter, OneEuroFilter]:
        return (OneEuroFilter(self._freq, self._mincutoff, self._beta, self._dcutoff),
                OneEuroFilter(self._freq, self._mincutoff, self._beta, self._dcutoff))

    def move(self, ndc: Point2f) -> None:
        """Register a raw pointer position in NDC."""
        self._target = ndc.copy()

    def leave(self) -> None:
        """Pointer left the surface; the state becomes inactive and the filters restart."""
        self._target = None
        self._smooth = None
        self._last_time = None
        self._filters = self._create_filters()

    def update(self, timestamp: float | None = None) -> PointerState:
        """Advance the smoothing by one frame and return the pointer state."""
        if self._target is None:
            return PointerState()

        # the filters divide by the timestamp delta
        if timestamp is not None and (self._last_time is None or timestamp > self._last_time):
            self._last_time = timestamp
        else:
            timestamp = None

        filter_x, filter_y = self._filters
        smooth = Point2f(filter_x(self._target.x, timestamp), filter_y(self._target.y, timestamp))
        velocity: Point2f = smooth - self._smooth if self._smooth is not None else Point2f()
        self._smooth = smooth

        return PointerState(
            position=ndc_to_uv(smooth),
            velocity=ndc_velocity_to_uv(velocity),
            active=True,
        )
