"""
Camera endpoints - default view per viewport and pan boundary clamping
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from api.dependencies import get_service_container
from api.schemas.camera import CameraClampResponse, CameraDefaultsResponse, CameraViewSchema
from models.domain.camera import CameraView, Vec3
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CAMERA)

router = APIRouter(prefix="/camera", tags=["Camera"])


def _to_schema(view: CameraView) -> CameraViewSchema:
    return CameraViewSchema(
        position=list(view.position.as_tuple()),
        target=list(view.target.as_tuple()),
        fov=view.fov
    )


@router.get("", response_model=CameraDefaultsResponse, summary="Default camera for the caller's viewport")
async def get_camera_defaults(
    coarse_pointer: bool = Query(False, description="Client reports a touch (coarse) pointer"),
    user_agent: Optional[str] = Header(None),
    services: ServiceContainer = Depends(get_service_container)
) -> CameraDefaultsResponse:
    rig = services.camera_rig
    viewport = rig.viewport_for(user_agent, coarse_pointer)
    min_distance, max_distance = rig.zoom_limits(viewport)
    return CameraDefaultsResponse(
        viewport=viewport.name,
        view=_to_schema(rig.default_view(viewport)),
        min_distance=min_distance,
        max_distance=max_distance
    )


@router.post("/clamp", response_model=CameraClampResponse, summary="Apply the pan boundary to a view")
async def clamp_camera(
    view: CameraViewSchema,
    services: ServiceContainer = Depends(get_service_container)
) -> CameraClampResponse:
    current = CameraView(
        position=Vec3.from_seq(view.position),
        target=Vec3.from_seq(view.target),
        fov=view.fov
    )
    clamped = services.camera_rig.clamp_pan(current)
    return CameraClampResponse(clamped=clamped != current, view=_to_schema(clamped))
