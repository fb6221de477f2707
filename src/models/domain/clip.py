"""
Animation clip domain model

Clips are supplied by the asset loader and are read-only to the core.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


def track_node_name(track_name: str) -> str:
    """
    Node a track animates.

    Track names follow the `<node>.<property>` convention
    (e.g. `page_3.quaternion` → `page_3`).
    """
    return track_name.split('.')[0]


@dataclass(frozen=True)
class AnimationClip:
    """Immutable pre-authored clip: name, fixed duration, animated tracks"""
    name: str
    duration: float
    tracks: Tuple[str, ...] = field(default_factory=tuple)

    def node_names(self) -> Tuple[str, ...]:
        """Affected node names in track order, without duplicates"""
        seen = []
        for track in self.tracks:
            node = track_node_name(track)
            if node and node not in seen:
                seen.append(node)
        return tuple(seen)

    def target_node_names(self) -> FrozenSet[str]:
        """Set of affected node names (conflict detection key)"""
        return frozenset(self.node_names())
