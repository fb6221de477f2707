"""
Conflict Resolver - halts in-flight playbacks that claim the same nodes

The newer request always wins: before a clip starts, every other
in-flight playback whose node set overlaps it is halted. Halted
playbacks fire no completion and leave part state untouched.
"""

from typing import Iterable, List, Set

from models.domain.playback import InFlightPlayback
from services.playback_driver import PlaybackDriver
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFLICT)


class ConflictResolver:

    def __init__(self, driver: PlaybackDriver):
        self.driver = driver

    def conflicts(self, affected_nodes: Iterable[str], exclude_clips: Iterable[str] = ()) -> List[InFlightPlayback]:
        nodes: Set[str] = set(affected_nodes)
        excluded = set(exclude_clips)
        return [
            playback for playback in self.driver.active()
            if playback.clip_name not in excluded
            and nodes & playback.clip.target_node_names()
        ]

    async def resolve(self, affected_nodes: Iterable[str], exclude_clips: Iterable[str] = ()) -> List[InFlightPlayback]:
        """
        Halt every overlapping playback not in exclude_clips.

        Returns:
            The halted playbacks
        """
        nodes = set(affected_nodes)
        halted = []
        for playback in self.conflicts(nodes, exclude_clips):
            overlap = sorted(nodes & playback.clip.target_node_names())
            await self.driver.halt(playback.clip_name)
            halted.append(playback)
            log.info(
                f"Conflicting playback halted: {playback.clip_name}",
                nodes=", ".join(overlap),
                direction=playback.direction.name
            )
        return halted
