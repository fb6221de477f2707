"""
Viewer configuration models

Typed view of the merged YAML configuration (see ConfigManager).
"""

from dataclasses import dataclass, field
from typing import List, Optional
from models.enums import ClosedBookPagePolicy, LaterPagesPolicy, LogLevel
from models.domain.camera import CameraView, PanLimit, Vec3


@dataclass(frozen=True)
class RenderLoopConfig:
    """Tick rate; fixed_delta=None means measured wall-clock delta"""
    fps: int = 60
    fixed_delta: Optional[float] = 0.016


@dataclass(frozen=True)
class CascadePolicy:
    closed_book_pages: ClosedBookPagePolicy = ClosedBookPagePolicy.REJECT
    later_pages_on_open: LaterPagesPolicy = LaterPagesPolicy.AUTO_CLOSE


@dataclass(frozen=True)
class ApiConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    docs_enabled: bool = True
    cors_origins: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoggingConfig:
    level: LogLevel = LogLevel.INFO
    colors: bool = True


@dataclass(frozen=True)
class CameraConfig:
    desktop: CameraView = CameraView(position=Vec3(-4.459, 0.474, 21.784), target=Vec3(-4.459, -0.269, -0.411))
    mobile: CameraView = CameraView(position=Vec3(0.848, 2.395, 37.029), target=Vec3(-1.148, 0.010, -4.349))
    pan_limit: PanLimit = PanLimit(enabled=True, radius=10.0, origin=Vec3(-9.121, 0.358, -3.984))
    fit_offset: float = 1.2
    mobile_min_distance: Optional[float] = None
    mobile_max_distance: Optional[float] = None


@dataclass(frozen=True)
class ViewerConfig:
    """Complete runtime configuration"""
    model_path: Optional[str] = None
    render_loop: RenderLoopConfig = RenderLoopConfig()
    cascade: CascadePolicy = CascadePolicy()
    api: ApiConfig = ApiConfig()
    logging: LoggingConfig = LoggingConfig()
    camera: CameraConfig = CameraConfig()
