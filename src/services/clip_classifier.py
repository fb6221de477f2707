"""
Clip Classifier - tags clips with the part they drive

Pure and stateless: the result depends only on the clip's name and the
node names its tracks animate, so it is recomputed on demand.
"""

import math
import re
from typing import FrozenSet, Optional, Union

from models.domain.clip import AnimationClip
from models.domain.part import ClipClassification
from models.enums import PartKind

FRONT_COVER_NODE = "front_cover"
LATCH_NODE = "latch"
SPLINE_NODE = "spline"
PAGE_MARKER = "page"
SPLINE_MARKER = "spline"

_DIGITS = re.compile(r"\d+")


class ClipClassifier:
    """
    classify(clip) → Page / FrontCover / Latch / Ancillary / Unclassified

    Precedence: FrontCover > Latch > Page > Ancillary > Unclassified.
    Never raises; unknown input is Unclassified.
    """

    @staticmethod
    def target_node_names(clip: AnimationClip) -> FrozenSet[str]:
        return clip.target_node_names()

    @staticmethod
    def primary_page_node(clip: AnimationClip) -> Optional[str]:
        """First affected node whose lower-cased name contains 'page'"""
        for node in clip.node_names():
            if PAGE_MARKER in node.lower():
                return node
        return None

    @staticmethod
    def extract_page_number(node_name: Optional[str]) -> Union[int, float]:
        """First digit run in the node name, math.inf when there is none"""
        if not node_name:
            return math.inf
        match = _DIGITS.search(node_name)
        if match is None:
            return math.inf
        return int(match.group(0))

    @staticmethod
    def classify(clip: AnimationClip) -> ClipClassification:
        nodes = clip.target_node_names()

        if FRONT_COVER_NODE in nodes:
            return ClipClassification(PartKind.FRONT_COVER, FRONT_COVER_NODE)
        if LATCH_NODE in nodes:
            return ClipClassification(PartKind.LATCH, LATCH_NODE)

        page_node = ClipClassifier.primary_page_node(clip)
        if page_node is not None:
            return ClipClassification(
                PartKind.PAGE,
                page_node,
                ClipClassifier.extract_page_number(page_node),
            )

        if SPLINE_MARKER in clip.name.lower() or SPLINE_NODE in nodes:
            return ClipClassification(PartKind.ANCILLARY, SPLINE_NODE if SPLINE_NODE in nodes else None)

        return ClipClassification(PartKind.UNCLASSIFIED)
