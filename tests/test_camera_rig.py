"""Camera framing math"""

import math
import pytest

from engine.camera_rig import CameraRig
from models.domain.camera import Bounds, CameraView, PanLimit, Vec3
from models.domain.config import CameraConfig
from models.enums import ViewportKind


@pytest.fixture
def rig():
    return CameraRig(CameraConfig(pan_limit=PanLimit(enabled=True, radius=2.0, origin=Vec3(0, 0, 0))))


def test_viewport_detection(rig):
    iphone = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
    assert rig.viewport_for(iphone) is ViewportKind.MOBILE
    assert rig.viewport_for("Mozilla/5.0 (X11; Linux x86_64)") is ViewportKind.DESKTOP
    assert rig.viewport_for(None, coarse_pointer=True) is ViewportKind.MOBILE
    assert rig.default_view(ViewportKind.MOBILE) == rig.config.mobile


def test_zoom_limits_only_on_mobile(rig):
    assert rig.zoom_limits(ViewportKind.DESKTOP) == (None, None)
    near, far = rig.zoom_limits(ViewportKind.MOBILE)
    assert 0 < near < far


def test_fit_distance_uses_the_tighter_fov(rig):
    bounds = Bounds(Vec3(-1, -1, -1), Vec3(1, 1, 1))
    square = rig.fit_distance(bounds, fov=90.0, aspect=1.0, offset=1.0)
    assert square == pytest.approx(1.0 / math.tan(math.radians(45)))

    narrow = rig.fit_distance(bounds, fov=90.0, aspect=0.5, offset=1.0)
    assert narrow > square


def test_fit_to_bounds_keeps_direction(rig):
    view = CameraView(position=Vec3(0, 0, 10), target=Vec3(0, 0, 0), fov=90.0)
    bounds = Bounds(Vec3(1, 1, 1), Vec3(3, 3, 3))

    fitted = rig.fit_to_bounds(view, bounds, aspect=1.0, offset=1.0)

    assert fitted.target == Vec3(2, 2, 2)
    direction = (fitted.position - fitted.target).normalized()
    expected = (view.position - Vec3(2, 2, 2)).normalized()
    assert direction.as_tuple() == pytest.approx(expected.as_tuple())


def test_pan_clamp_moves_camera_with_target(rig):
    inside = CameraView(position=Vec3(0, 0, 5), target=Vec3(1, 0, 0))
    assert rig.clamp_pan(inside) is inside

    outside = CameraView(position=Vec3(4, 0, 5), target=Vec3(4, 0, 0))
    clamped = rig.clamp_pan(outside)

    assert clamped.target.as_tuple() == pytest.approx((2.0, 0.0, 0.0))
    assert clamped.position.as_tuple() == pytest.approx((2.0, 0.0, 5.0))
