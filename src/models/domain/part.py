"""
Part domain models

A Part is the logical hinged component a clip drives. Parts are keyed by
stable identifiers (kind + page position), never by engine objects, so
state survives engine object lifetimes.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union
from models.enums import PartKind


@dataclass(frozen=True)
class Part:
    """Latch, FrontCover or Page(index); index is the 0-based page position"""
    kind: PartKind
    index: Optional[int] = None

    @classmethod
    def page(cls, index: int) -> "Part":
        return cls(PartKind.PAGE, index)

    @classmethod
    def front_cover(cls) -> "Part":
        return cls(PartKind.FRONT_COVER)

    @classmethod
    def latch(cls) -> "Part":
        return cls(PartKind.LATCH)

    @property
    def is_page(self) -> bool:
        return self.kind is PartKind.PAGE

    @property
    def key(self) -> str:
        """API / log identifier: LATCH, FRONT_COVER, PAGE_<n>"""
        if self.is_page:
            return f"PAGE_{self.index}"
        return self.kind.name

    def __str__(self) -> str:
        return self.key


LATCH = Part.latch()
FRONT_COVER = Part.front_cover()


@dataclass(frozen=True)
class ClipClassification:
    """
    Result of classifying one clip.

    page_number: digits parsed from the primary page node (math.inf when
    the name carries none, so such pages sort last)
    """
    kind: PartKind
    primary_node: Optional[str] = None
    page_number: Union[int, float] = math.inf

    @property
    def is_page(self) -> bool:
        return self.kind is PartKind.PAGE
