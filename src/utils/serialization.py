"""
Serialization utilities - Central enum and model serialization for JSON API

Provides bidirectional conversion between:
- Enums ↔ Strings (PartState, PartKind, PlaybackDirection, TransitionOutcome)
- Part identifiers ↔ Strings (LATCH, FRONT_COVER, PAGE_<n>)
- Domain models ↔ Dicts (clips, playbacks)

Single source of truth for frontend JSON API compatibility.
"""

import math
import re
import time
from typing import TypeVar, Type, Any, Dict, Optional
from enum import Enum

from models.enums import PartKind
from models.domain.clip import AnimationClip
from models.domain.part import Part, ClipClassification
from models.domain.playback import InFlightPlayback
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.GENERAL)

T = TypeVar('T', bound=Enum)

_PAGE_KEY = re.compile(r"^PAGE_(\d+)$")


class Serializer:
    """Central enum and model serialization for JSON API"""

    # ========================================================================
    # ENUM SERIALIZATION
    # ========================================================================

    @staticmethod
    def enum_to_str(value: Optional[Enum]) -> Optional[str]:
        """Convert any enum to string name"""
        return value.name if value else None

    @staticmethod
    def str_to_enum(value: str, enum_type: Type[T]) -> T:
        """Convert string to enum (case-insensitive), raise ValueError if invalid"""
        try:
            return enum_type[value.upper()]
        except (KeyError, AttributeError):
            raise ValueError(f"Invalid {enum_type.__name__}: {value}")

    # ========================================================================
    # PART SERIALIZATION
    # ========================================================================

    @staticmethod
    def str_to_part(value: str) -> Part:
        """
        Parse a part identifier

        Accepts LATCH, FRONT_COVER and PAGE_<n> (case-insensitive).
        Raises ValueError for anything else.
        """
        key = value.strip().upper()
        if key == PartKind.LATCH.name:
            return Part.latch()
        if key == PartKind.FRONT_COVER.name:
            return Part.front_cover()

        match = _PAGE_KEY.match(key)
        if match:
            return Part.page(int(match.group(1)))

        raise ValueError(f"Invalid part: {value}")

    # ========================================================================
    # CLIP / PLAYBACK SERIALIZATION
    # ========================================================================

    @staticmethod
    def clip_to_dict(clip: AnimationClip, classification: ClipClassification) -> Dict[str, Any]:
        page_number = classification.page_number
        return {
            "name": clip.name,
            "duration": clip.duration,
            "nodes": list(clip.node_names()),
            "kind": classification.kind.name,
            "primary_node": classification.primary_node,
            "page_number": None if math.isinf(page_number) else page_number,
        }

    @staticmethod
    def playback_to_dict(playback: InFlightPlayback, position: Optional[float]) -> Dict[str, Any]:
        return {
            "playback_id": playback.playback_id,
            "clip_name": playback.clip_name,
            "direction": playback.direction.name,
            "start_time": playback.start_time,
            "position": position,
            "duration": playback.clip.duration,
            "running_for": time.monotonic() - playback.started_at,
        }
