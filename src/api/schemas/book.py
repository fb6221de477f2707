"""
Book schemas - Pydantic models for part, clip and playback requests/responses
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class PartStateRequest(BaseModel):
    """Request to drive a part to a state"""
    state: str = Field(description="Desired state: OPEN or CLOSED (case-insensitive)")

    class Config:
        json_schema_extra = {"example": {"state": "OPEN"}}


class PartResponse(BaseModel):
    """One part of the loaded book"""
    part: str = Field(description="Part identifier: LATCH, FRONT_COVER, PAGE_<n>")
    kind: str = Field(description="PAGE, FRONT_COVER or LATCH")
    index: Optional[int] = Field(None, description="0-based page position (pages only)")
    state: str = Field(description="Recorded state: OPEN or CLOSED")
    transitioning: bool = Field(description="A clip of the part is in flight")
    direction: Optional[str] = Field(None, description="FORWARD or REVERSE while transitioning")
    clips: List[str] = Field(default_factory=list, description="Clips driving the part")

    class Config:
        json_schema_extra = {
            "example": {
                "part": "PAGE_0",
                "kind": "PAGE",
                "index": 0,
                "state": "CLOSED",
                "transitioning": True,
                "direction": "FORWARD",
                "clips": ["page_1_turn"]
            }
        }


class PartListResponse(BaseModel):
    parts: List[PartResponse]
    book_open: bool = Field(description="Latch and front cover settled open")


class TransitionResponse(BaseModel):
    """Outcome of a state request, plus the part right after it"""
    outcome: str = Field(description="ACCEPTED, NOOP, REJECTED, UNAVAILABLE or FAILED")
    part: PartResponse

    class Config:
        json_schema_extra = {
            "example": {
                "outcome": "REJECTED",
                "part": {
                    "part": "PAGE_1",
                    "kind": "PAGE",
                    "index": 1,
                    "state": "CLOSED",
                    "transitioning": False,
                    "direction": None,
                    "clips": ["page_2_turn"]
                }
            }
        }


class ClipResponse(BaseModel):
    name: str
    duration: float
    nodes: List[str]
    kind: str = Field(description="PAGE, FRONT_COVER, LATCH, ANCILLARY or UNCLASSIFIED")
    primary_node: Optional[str] = None
    page_number: Optional[int] = Field(None, description="Digits parsed from the page node name")


class ClipListResponse(BaseModel):
    clips: List[ClipResponse]


class PlaybackResponse(BaseModel):
    playback_id: int
    clip_name: str
    direction: str
    start_time: float
    position: Optional[float] = None
    duration: float
    running_for: float = Field(description="Seconds since the playback started")


class PlaybackListResponse(BaseModel):
    playbacks: List[PlaybackResponse]


class ModelLoadResponse(BaseModel):
    model: str
    clips: int
    parts: List[str]
    missing_tracks: int
