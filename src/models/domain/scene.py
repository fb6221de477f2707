"""
Scene model - bulk input produced by the asset loader per model load
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple
from models.domain.clip import AnimationClip


@dataclass(frozen=True)
class TrackBinding:
    """Whether a clip track resolves to a node of the loaded scene"""
    clip_name: str
    track: str
    node: str
    found: bool


@dataclass
class SceneModel:
    """Loaded model: scene node names plus its animation clips"""
    name: str
    node_names: Tuple[str, ...] = field(default_factory=tuple)
    clips: List[AnimationClip] = field(default_factory=list)
    bindings: List[TrackBinding] = field(default_factory=list)

    def missing_bindings(self) -> List[TrackBinding]:
        return [b for b in self.bindings if not b.found]

    def clips_by_name(self) -> Dict[str, AnimationClip]:
        return {clip.name: clip for clip in self.clips}
