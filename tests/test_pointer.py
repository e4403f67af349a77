import pytest

from liquidfield import PointerTracker, ndc_to_uv, uv_to_ndc
from liquidfield.flow import ndc_velocity_to_uv
from liquidfield.utils import Point2f


def test_ndc_uv_conversion():
    assert ndc_to_uv(Point2f(-1.0, -1.0)) == Point2f(0.0, 0.0)
    assert ndc_to_uv(Point2f(0.0, 0.0)) == Point2f(0.5, 0.5)
    assert ndc_to_uv(Point2f(1.0, 1.0)) == Point2f(1.0, 1.0)
    assert uv_to_ndc(ndc_to_uv(Point2f(0.25, -0.75))) == Point2f(0.25, -0.75)
    assert ndc_velocity_to_uv(Point2f(0.2, -0.4)) == Point2f(0.1, -0.2)


def test_tracker_is_inactive_without_samples():
    state = PointerTracker().update()
    assert not state.active
    assert state.velocity == Point2f()


def test_first_sample_has_no_velocity():
    tracker = PointerTracker()
    tracker.move(Point2f(0.5, 0.0))
    state = tracker.update(1.0)
    assert state.active
    assert state.position == Point2f(0.75, 0.5)
    assert state.velocity == Point2f()


def test_high_cutoff_follows_the_raw_samples():
    tracker = PointerTracker(mincutoff=1e6)
    tracker.move(Point2f(0.0, 0.0))
    tracker.update(1.0)
    tracker.move(Point2f(0.2, -0.1))
    state = tracker.update(1.0 + 1.0 / 60.0)
    assert state.position.x == pytest.approx(0.6, abs=1e-4)
    assert state.position.y == pytest.approx(0.45, abs=1e-4)
    assert state.velocity.x == pytest.approx(0.1, abs=1e-4)
    assert state.velocity.y == pytest.approx(-0.05, abs=1e-4)


def test_smoothing_lags_then_converges():
    tracker = PointerTracker(freq=60.0)
    tracker.move(Point2f(0.0, 0.0))
    tracker.update(1.0)
    tracker.move(Point2f(1.0, 1.0))
    first = tracker.update(1.0 + 1.0 / 60.0)
    assert 0.5 < first.position.x < 0.75
    assert first.velocity.x > 0.0

    for frame in range(2, 600):
        state = tracker.update(1.0 + frame / 60.0)
    assert state.position.x == pytest.approx(1.0, abs=1e-6)
    assert state.velocity.length < 1e-6


def test_beta_reduces_lag_on_fast_strokes():
    steady, responsive = PointerTracker(beta=0.0), PointerTracker(beta=1.0)
    for tracker in (steady, responsive):
        tracker.move(Point2f(0.0, 0.0))
        tracker.update(1.0)
        tracker.move(Point2f(1.0, 0.0))
    steady_state = steady.update(1.0 + 1.0 / 60.0)
    responsive_state = responsive.update(1.0 + 1.0 / 60.0)
    assert 1.0 - responsive_state.position.x < 1.0 - steady_state.position.x


def test_timestamps_set_the_filter_rate():
    stamped, nominal = PointerTracker(freq=60.0), PointerTracker(freq=30.0)
    for tracker in (stamped, nominal):
        tracker.move(Point2f(0.0, 0.0))
    stamped.update(1.0)
    nominal.update()
    stamped.move(Point2f(1.0, 0.0))
    nominal.move(Point2f(1.0, 0.0))
    assert stamped.update(1.0 + 1.0 / 30.0).position.x == pytest.approx(nominal.update().position.x)


def test_repeated_timestamp_is_ignored():
    tracker = PointerTracker()
    tracker.move(Point2f(0.0, 0.0))
    tracker.update(1.0)
    tracker.move(Point2f(0.5, 0.0))
    state = tracker.update(1.0)
    assert state.active
    assert 0.5 < state.position.x < 0.75


def test_leave_deactivates_and_restarts():
    tracker = PointerTracker()
    tracker.move(Point2f(0.0, 0.0))
    tracker.update()
    tracker.leave()
    assert not tracker.update().active

    tracker.move(Point2f(1.0, 1.0))
    state = tracker.update()
    assert state.position == Point2f(1.0, 1.0)
    assert state.velocity == Point2f()


@pytest.mark.parametrize('freq, mincutoff, dcutoff', [(0.0, 1.0, 1.0), (60.0, 0.0, 1.0), (60.0, 1.0, 0.0)])
def test_invalid_tracker_arguments(freq, mincutoff, dcutoff):
    with pytest.raises(ValueError):
        PointerTracker(freq, mincutoff, 0.0, dcutoff)
