"""Domain models - clips, parts, playbacks, scene, camera and config objects"""

from models.domain.clip import AnimationClip, track_node_name
from models.domain.part import Part, ClipClassification, LATCH, FRONT_COVER
from models.domain.playback import InFlightPlayback, FinishedAction
from models.domain.scene import SceneModel, TrackBinding
from models.domain.camera import Vec3, CameraView, PanLimit, Bounds
from models.domain.config import (
    ViewerConfig,
    RenderLoopConfig,
    CascadePolicy,
    ApiConfig,
    LoggingConfig,
    CameraConfig,
)

__all__ = [
    "AnimationClip",
    "track_node_name",
    "Part",
    "ClipClassification",
    "LATCH",
    "FRONT_COVER",
    "InFlightPlayback",
    "FinishedAction",
    "SceneModel",
    "TrackBinding",
    "Vec3",
    "CameraView",
    "PanLimit",
    "Bounds",
    "ViewerConfig",
    "RenderLoopConfig",
    "CascadePolicy",
    "ApiConfig",
    "LoggingConfig",
    "CameraConfig",
]
