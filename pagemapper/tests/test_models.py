import json

import pytest

from pagemapper.models.page_annotation import AnnotationDocument, PageAnnotation
from pagemapper.models.placed_object import (
    ImageObject, OutputRegion, PlacedObject, TextObject, object_from_dict
)
from pagemapper.utils.color import BLACK, parse_fill


# ── Boundary defaults ───────────────────────────────────────────────────────

def test_empty_dict_gets_documented_defaults():
    obj = PlacedObject.from_dict({})
    assert (obj.left, obj.top, obj.width, obj.height, obj.angle) == (0, 0, 0, 0, 0)
    assert (obj.scale_x, obj.scale_y) == (1, 1)
    assert not obj.flip_x and not obj.flip_y
    assert (obj.origin_x, obj.origin_y) == ("left", "top")


def test_zero_or_null_scale_means_unset():
    obj = PlacedObject.from_dict({"scaleX": 0, "scaleY": None})
    assert (obj.scale_x, obj.scale_y) == (1, 1)


def test_text_defaults():
    obj = TextObject.from_dict({"type": "textbox"})
    assert obj.text == ""
    assert obj.font_size == 24
    assert obj.line_height == pytest.approx(1.16)
    assert obj.fill is None and obj.underline is False


def test_text_fields_read_from_editor_keys():
    obj = TextObject.from_dict({
        "left": 10, "top": "20", "width": 100.5, "height": 30, "angle": -15,
        "flipX": True, "originX": "center", "originY": "center",
        "text": "Hi", "fontSize": 18, "lineHeight": 1.4, "fill": "#112233",
        "underline": True, "fontFamily": "Times",
    })
    assert (obj.left, obj.top, obj.width) == (10, 20, 100.5)
    assert obj.angle == -15 and obj.flip_x
    assert obj.is_centered_x and obj.is_centered_y
    assert (obj.text, obj.font_size, obj.line_height) == ("Hi", 18, 1.4)
    assert obj.font_family == "Times"


def test_to_dict_round_trips_editor_keys():
    src = {"type": "image", "left": 5, "top": 6, "width": 7, "height": 8, "scaleX": 2,
           "scaleY": 3, "angle": 45, "flipX": False, "flipY": True, "originX": "center",
           "originY": "top", "src": "logo.png"}
    obj = ImageObject.from_dict(src)
    assert ImageObject.from_dict(obj.to_dict()) == obj


@pytest.mark.parametrize("kind, cls", [
    ("text", TextObject), ("i-text", TextObject), ("textbox", TextObject), ("image", ImageObject),
])
def test_object_from_dict_dispatches_on_type(kind, cls):
    assert isinstance(object_from_dict({"type": kind}), cls)


@pytest.mark.parametrize("data", [{"type": "rect"}, {"type": "group"}, {}, "textbox", None])
def test_unsupported_objects_are_ignored(data):
    assert object_from_dict(data) is None


# ── Fill colors ─────────────────────────────────────────────────────────────

def test_hex_fill_parses_to_fractions():
    assert parse_fill("#ff0080") == pytest.approx((1.0, 0.0, 128 / 255))
    assert parse_fill("#FFFFFF") == (1.0, 1.0, 1.0)


@pytest.mark.parametrize("fill", [None, 123, "ff0000", "rgb(1,2,3)", "#zzzzzz", "#", ""])
def test_malformed_fill_is_black(fill):
    assert parse_fill(fill) == BLACK


# ── Page annotations ────────────────────────────────────────────────────────

PAGE = {
    "viewportDimensions": {"width": 600, "height": 800},
    "fabricJSON": {"objects": [
        {"type": "textbox", "text": "A"},
        {"type": "rect"},
        {"type": "image", "src": "a.png"},
    ]},
}


def test_page_annotation_keeps_supported_objects_in_order():
    ann = PageAnnotation.from_dict(PAGE)
    kinds = [type(o) for o in ann.objects()]
    assert kinds == [TextObject, ImageObject]
    assert ann.crop_box is None and ann.rotation == 0


def test_region_defaults_to_full_page_unless_cropped():
    ann = PageAnnotation.from_dict(PAGE)
    assert ann.region_for(612, 792) == OutputRegion(width=612, height=792)
    cropped = PageAnnotation.from_dict({**PAGE, "cropBox": {"width": 500, "height": 700, "x": 10}})
    assert cropped.region_for(612, 792) == OutputRegion(width=500, height=700, x=10, y=0)


@pytest.mark.parametrize("viewport", [None, {}, {"width": 0, "height": 800}, {"width": 600, "height": -1}])
def test_unusable_viewport_is_rejected(viewport):
    blob = {**PAGE, "viewportDimensions": viewport}
    with pytest.raises(ValueError, match="viewportDimensions"):
        PageAnnotation.from_dict(blob)


def test_scene_may_be_a_json_string():
    ann = PageAnnotation.from_dict({**PAGE, "fabricJSON": json.dumps(PAGE["fabricJSON"])})
    assert len(ann.objects()) == 2


def test_document_iterates_pages_numerically(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"pages": {"10": PAGE, "2": PAGE, "1": PAGE}}), encoding="utf-8")
    doc = AnnotationDocument.load(path)
    assert [n for n, _ in doc] == [1, 2, 10]
    assert AnnotationDocument.from_dict(doc.to_dict()).pages.keys() == doc.pages.keys()


@pytest.mark.parametrize("key", ["first", "0"])
def test_document_rejects_bad_page_keys(key):
    with pytest.raises(ValueError):
        AnnotationDocument.from_dict({"pages": {key: PAGE}})
