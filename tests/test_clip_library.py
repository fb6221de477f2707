"""Clip classification, page ordering and part discovery"""

import math

from models.domain.part import Part, LATCH, FRONT_COVER
from models.enums import PartKind
from services.clip_classifier import ClipClassifier
from services.clip_library import ClipLibrary

from conftest import make_clip


def test_classification_by_target_nodes():
    cases = {
        make_clip("cover", 1.0, "front_cover.quaternion"): PartKind.FRONT_COVER,
        make_clip("lock", 1.0, "latch.position"): PartKind.LATCH,
        make_clip("turn", 1.0, "Page_12.quaternion"): PartKind.PAGE,
        make_clip("spline_bend", 1.0, "ribbon.scale"): PartKind.ANCILLARY,
        make_clip("bend", 1.0, "spline.morphTargetInfluences"): PartKind.ANCILLARY,
        make_clip("spin", 1.0, "globe.rotation"): PartKind.UNCLASSIFIED,
        make_clip("empty", 1.0): PartKind.UNCLASSIFIED,
    }
    for clip, kind in cases.items():
        assert ClipClassifier.classify(clip).kind is kind, clip.name


def test_cover_wins_over_page_nodes():
    clip = make_clip("cover_and_page", 1.0, "page_1.quaternion", "front_cover.quaternion")
    assert ClipClassifier.classify(clip).kind is PartKind.FRONT_COVER


def test_page_number_parsing():
    assert ClipClassifier.extract_page_number("page_12") == 12
    assert ClipClassifier.extract_page_number("page3_left") == 3
    assert ClipClassifier.extract_page_number("page") == math.inf
    assert ClipClassifier.extract_page_number(None) == math.inf

    clip = make_clip("turn", 1.0, "bookmark.position", "Page_7.quaternion")
    result = ClipClassifier.classify(clip)
    assert result.primary_node == "Page_7"
    assert result.page_number == 7


def test_pages_ordered_by_number_stable_on_ties():
    library = ClipLibrary([
        make_clip("c", 1.0, "page_10.quaternion"),
        make_clip("unnumbered", 1.0, "page.quaternion"),
        make_clip("a", 1.0, "page_2.quaternion"),
        make_clip("b_first", 1.0, "page_2a.quaternion"),
        make_clip("b_second", 1.0, "page_2b.quaternion"),
    ])

    assert [c.name for c in library.ordered_pages()] == ["a", "b_first", "b_second", "c", "unnumbered"]
    assert library.clips_for(Part.page(3))[0].name == "c"
    assert library.clips_for(Part.page(5)) == []


def test_parts_discovered_in_dependency_order(clips):
    library = ClipLibrary(clips)

    assert library.parts() == [LATCH, FRONT_COVER, Part.page(0), Part.page(1), Part.page(2)]
    assert [c.name for c in library.ancillary_clips()] == ["spline_bend"]
    assert library.parts_for_clip("page_2_turn") == [Part.page(1)]
    assert library.parts_for_clip("latch_open") == [LATCH]
    assert library.parts_for_clip("spline_bend") == []


def test_reload_recomputes_parts(clips):
    library = ClipLibrary(clips)
    library.load([make_clip("front_cover_open", 1.0, "front_cover.quaternion")])

    assert library.parts() == [FRONT_COVER]
    assert library.page_count() == 0
    assert library.clips_for(LATCH) == []
