"""
Asset Manager

Loads a book manifest (YAML) into a SceneModel: scene node names plus the
animation clips, with a per-track binding report (found node vs missing
node). Missing nodes are a partial failure: the clip is kept and the
unresolved track is reported.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from models.domain.clip import AnimationClip, track_node_name
from models.domain.scene import SceneModel, TrackBinding
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.ASSET)


class AssetManager:
    """
    Book manifest loader

    Manifest layout:
        name: book
        nodes: [latch, front_cover, spline, page_1, ...]
        clips:
          - name: page_1_turn
            duration: 1.5
            tracks: [page_1.quaternion]

    Example:
        scene = AssetManager().load_manifest("config/book.yaml")
        await viewer.load_model(scene)
    """

    def load_manifest(self, path: Union[str, Path]) -> SceneModel:
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        log.info(f"Manifest read: {path.name}")
        return self.load_data(data, default_name=path.stem)

    def load_data(self, data: Dict[str, Any], default_name: str = "book") -> SceneModel:
        name = str(data.get("name") or default_name)
        node_names = tuple(str(n) for n in data.get("nodes") or [])
        clips = self._parse_clips(data.get("clips") or [])
        bindings = self._bind(clips, set(node_names))

        scene = SceneModel(name=name, node_names=node_names, clips=clips, bindings=bindings)
        self._report(scene)
        return scene

    def _parse_clips(self, raw_clips: List[Dict[str, Any]]) -> List[AnimationClip]:
        clips: List[AnimationClip] = []
        used: Set[str] = set()

        for position, raw in enumerate(raw_clips):
            try:
                duration = float(raw.get("duration", 0))
            except (TypeError, ValueError):
                duration = 0.0

            clip_name = str(raw.get("name") or "").strip()
            if duration <= 0:
                log.error(f"Clip dropped, non-positive duration: {clip_name or f'#{position}'}", duration=raw.get("duration"))
                continue

            clip_name = self._unique_name(clip_name or f"clip_{position}", used)
            used.add(clip_name)

            tracks = tuple(str(t) for t in raw.get("tracks") or [])
            clips.append(AnimationClip(name=clip_name, duration=duration, tracks=tracks))

        return clips

    @staticmethod
    def _unique_name(name: str, used: Set[str]) -> str:
        """Deterministic rename of duplicates: name, name_2, name_3, ..."""
        if name not in used:
            return name
        suffix = 2
        while f"{name}_{suffix}" in used:
            suffix += 1
        renamed = f"{name}_{suffix}"
        log.warn(f"Duplicate clip name renamed: {name} → {renamed}")
        return renamed

    @staticmethod
    def _bind(clips: List[AnimationClip], node_names: Set[str]) -> List[TrackBinding]:
        bindings = []
        for clip in clips:
            for track in clip.tracks:
                node = track_node_name(track)
                bindings.append(TrackBinding(clip.name, track, node, node in node_names))
        return bindings

    @staticmethod
    def _report(scene: SceneModel) -> None:
        """Clip binding debug report"""
        for clip in scene.clips:
            clip_bindings = [b for b in scene.bindings if b.clip_name == clip.name]
            found = sum(1 for b in clip_bindings if b.found)
            log.debug(
                f"Clip {clip.name}",
                duration=f"{clip.duration:.3f}s",
                tracks=f"{found}/{len(clip_bindings)} bound",
                nodes=", ".join(clip.node_names()) or "-"
            )

        for binding in scene.missing_bindings():
            log.warn(
                f"Track target not found: {binding.track}",
                clip=binding.clip_name,
                node=binding.node
            )

        log.info(
            f"Scene {scene.name} loaded",
            nodes=len(scene.node_names),
            clips=len(scene.clips),
            missing_tracks=len(scene.missing_bindings())
        )
