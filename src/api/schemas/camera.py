"""
Camera schemas - default views, zoom limits and pan clamping
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class CameraViewSchema(BaseModel):
    position: List[float] = Field(min_length=3, max_length=3, description="Camera eye [x, y, z]")
    target: List[float] = Field(min_length=3, max_length=3, description="Orbit target [x, y, z]")
    fov: float = Field(45.0, gt=0, lt=180, description="Vertical field of view in degrees")


class CameraDefaultsResponse(BaseModel):
    viewport: str = Field(description="DESKTOP or MOBILE")
    view: CameraViewSchema
    min_distance: Optional[float] = None
    max_distance: Optional[float] = None

    class Config:
        json_schema_extra = {
            "example": {
                "viewport": "DESKTOP",
                "view": {
                    "position": [-4.459, 0.474, 21.784],
                    "target": [-4.459, -0.269, -0.411],
                    "fov": 45.0
                },
                "min_distance": None,
                "max_distance": None
            }
        }


class CameraClampResponse(BaseModel):
    clamped: bool
    view: CameraViewSchema
