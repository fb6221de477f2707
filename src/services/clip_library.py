"""
Clip Library - current clip set and part discovery

Holds the clips of the loaded model. Every query reclassifies and
reorders from the current clip set, so a reload never leaves stale parts.
"""

from typing import List, Optional, Tuple

from models.domain.clip import AnimationClip
from models.domain.part import Part, ClipClassification, LATCH, FRONT_COVER
from models.enums import PartKind
from services.clip_classifier import ClipClassifier
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CLIP)


class ClipLibrary:

    def __init__(self, clips: Optional[List[AnimationClip]] = None):
        self._clips: List[AnimationClip] = list(clips or [])

    def load(self, clips: List[AnimationClip]) -> None:
        """Replace the clip set (model reload)"""
        self._clips = list(clips)
        log.info(
            "Clip set loaded",
            clips=len(self._clips),
            pages=len(self.ordered_pages()),
            parts=", ".join(p.key for p in self.parts()) or "-"
        )

    @property
    def all(self) -> List[AnimationClip]:
        return list(self._clips)

    def get(self, name: str) -> Optional[AnimationClip]:
        for clip in self._clips:
            if clip.name == name:
                return clip
        return None

    def classified(self) -> List[Tuple[AnimationClip, ClipClassification]]:
        return [(clip, ClipClassifier.classify(clip)) for clip in self._clips]

    def ordered_pages(self) -> List[AnimationClip]:
        """
        Page clips sorted ascending by parsed page number.

        sorted() is stable, so ties keep discovery order; clips without
        digits sort last.
        """
        pages = [(clip, c) for clip, c in self.classified() if c.is_page]
        pages = sorted(pages, key=lambda item: item[1].page_number)
        return [clip for clip, _ in pages]

    def page_count(self) -> int:
        return len(self.ordered_pages())

    def clips_for(self, part: Part) -> List[AnimationClip]:
        """Clips driving a part; empty list = absent capability"""
        if part.is_page:
            pages = self.ordered_pages()
            if part.index is None or not 0 <= part.index < len(pages):
                return []
            return [pages[part.index]]

        return [clip for clip, c in self.classified() if c.kind is part.kind]

    def ancillary_clips(self) -> List[AnimationClip]:
        return [clip for clip, c in self.classified() if c.kind is PartKind.ANCILLARY]

    def parts(self) -> List[Part]:
        """Discovered parts in dependency order: Latch, FrontCover, pages"""
        result = [part for part in (LATCH, FRONT_COVER) if self.clips_for(part)]
        result.extend(Part.page(i) for i in range(self.page_count()))
        return result

    def parts_for_clip(self, clip_name: str) -> List[Part]:
        """Every part the named clip belongs to (empty for ancillary clips)"""
        clip = self.get(clip_name)
        if clip is None:
            return []

        classification = ClipClassifier.classify(clip)
        if classification.kind in (PartKind.LATCH, PartKind.FRONT_COVER):
            return [Part(classification.kind)]
        if classification.is_page:
            return [Part.page(i) for i, page in enumerate(self.ordered_pages()) if page.name == clip_name]
        return []

