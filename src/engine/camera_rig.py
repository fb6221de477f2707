"""
CameraRig — camera framing math for the render surface.

Pure functions over the camera config: default view per viewport,
fit-to-bounds distance, zoom limits and the pan boundary that keeps the
orbit target inside a sphere around an origin. The render surface applies
the results; nothing here touches a renderer.
"""

import math
import re
from typing import Optional, Tuple

from models.domain.camera import Bounds, CameraView, Vec3
from models.domain.config import CameraConfig
from models.enums import ViewportKind
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CAMERA)

MOBILE_USER_AGENT = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)

# Reference views the mobile zoom limits are measured from (eye, target)
MOBILE_MAX_ZOOM_IN = (Vec3(-1.587, 1.381, 4.671), Vec3(-2.023, 0.861, -4.356))
MOBILE_MAX_ZOOM_OUT = (Vec3(-6.756, 2.575, 34.772), Vec3(-8.627, 0.340, -4.007))


class CameraRig:

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()

    @staticmethod
    def is_mobile_user_agent(user_agent: Optional[str], coarse_pointer: bool = False) -> bool:
        if coarse_pointer:
            return True
        return bool(user_agent and MOBILE_USER_AGENT.search(user_agent))

    def viewport_for(self, user_agent: Optional[str], coarse_pointer: bool = False) -> ViewportKind:
        if self.is_mobile_user_agent(user_agent, coarse_pointer):
            return ViewportKind.MOBILE
        return ViewportKind.DESKTOP

    def default_view(self, viewport: ViewportKind) -> CameraView:
        if viewport is ViewportKind.MOBILE:
            return self.config.mobile
        return self.config.desktop

    def zoom_limits(self, viewport: ViewportKind) -> Tuple[Optional[float], Optional[float]]:
        """(min_distance, max_distance); unbounded on desktop"""
        if viewport is not ViewportKind.MOBILE:
            return None, None

        min_distance = self.config.mobile_min_distance
        if min_distance is None:
            min_distance = MOBILE_MAX_ZOOM_IN[0].distance_to(MOBILE_MAX_ZOOM_IN[1])
        max_distance = self.config.mobile_max_distance
        if max_distance is None:
            max_distance = MOBILE_MAX_ZOOM_OUT[0].distance_to(MOBILE_MAX_ZOOM_OUT[1])
        return min_distance, max_distance

    def fit_distance(self, bounds: Bounds, fov: float, aspect: float, offset: Optional[float] = None) -> float:
        """
        Distance from the bounds center at which the largest box dimension
        fits both the vertical and the horizontal field of view.
        """
        offset = self.config.fit_offset if offset is None else offset
        size = bounds.size()
        max_size = max(size.x, size.y, size.z)

        v_fov = math.radians(fov)
        h_fov = 2 * math.atan(math.tan(v_fov / 2) * aspect)
        v_dist = (max_size / 2) / math.tan(v_fov / 2)
        h_dist = (max_size / 2) / math.tan(h_fov / 2)
        return max(v_dist, h_dist) * offset

    def fit_to_bounds(self, view: CameraView, bounds: Bounds, aspect: float, offset: Optional[float] = None) -> CameraView:
        """Keep the viewing direction, target the center and move to the fit distance"""
        if bounds.is_empty():
            return view

        center = bounds.center()
        direction = view.position - center
        if direction.length() ** 2 < 1e-6:
            direction = Vec3(0.0, 0.0, 1.0)

        distance = self.fit_distance(bounds, view.fov, aspect, offset)
        fitted = CameraView(
            position=center + direction.with_length(distance),
            target=center,
            fov=view.fov,
        )
        log.debug("Camera fitted to bounds", distance=f"{distance:.3f}", center=center.as_tuple())
        return fitted

    def clamp_pan(self, view: CameraView) -> CameraView:
        """
        Pull the orbit target back onto the pan sphere; the camera moves by
        the same correction so the viewing direction is unchanged.
        """
        limit = self.config.pan_limit
        if not limit.enabled or limit.radius <= 0:
            return view

        offset = view.target - limit.origin
        if offset.length() <= limit.radius:
            return view

        clamped_target = limit.origin + offset.with_length(limit.radius)
        adjust = clamped_target - view.target
        return CameraView(position=view.position + adjust, target=clamped_target, fov=view.fov)
