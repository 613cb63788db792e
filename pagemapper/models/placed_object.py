# placed_object.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Optional

from pagemapper.config import (
    CENTER, DEFAULT_FONT_SIZE, DEFAULT_LINE_HEIGHT, TEXT_TYPES, IMAGE_TYPES
)


def _num(data: dict, key: str, default: float) -> float:
    """Editor numbers are optional; None, "" and 0-for-scale fall back to the default."""
    value = data.get(key)
    if value is None or value == "":
        return float(default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


@dataclass(frozen=True)
class ViewportDimensions:
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: dict) -> "ViewportDimensions":
        return cls(width=_num(data, "width", 0), height=_num(data, "height", 0))

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class OutputRegion:
    """Crop box of the output page. Origin bottom-left, y up, page units."""
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "OutputRegion":
        return cls(
            width=_num(data, "width", 0),
            height=_num(data, "height", 0),
            x=_num(data, "x", 0),
            y=_num(data, "y", 0),
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class PlacedObject:
    """
    Geometry of one editor object.

    width/height are pre-scale local units; scale_x/scale_y turn them into the
    on-canvas footprint. left/top is the center only when origin_x/origin_y
    say "center", otherwise it is the top-left corner.
    """
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    angle: float = 0.0
    flip_x: bool = False
    flip_y: bool = False
    origin_x: str = "left"
    origin_y: str = "top"

    @property
    def is_centered_x(self) -> bool:
        return self.origin_x == CENTER

    @property
    def is_centered_y(self) -> bool:
        return self.origin_y == CENTER

    @staticmethod
    def _geometry_kwargs(data: dict) -> dict:
        # `or 1` on scale mirrors the editor, where a zero scale means "unset"
        return dict(
            left=_num(data, "left", 0),
            top=_num(data, "top", 0),
            width=_num(data, "width", 0),
            height=_num(data, "height", 0),
            scale_x=_num(data, "scaleX", 1) or 1.0,
            scale_y=_num(data, "scaleY", 1) or 1.0,
            angle=_num(data, "angle", 0),
            flip_x=bool(data.get("flipX", False)),
            flip_y=bool(data.get("flipY", False)),
            origin_x=str(data.get("originX") or "left"),
            origin_y=str(data.get("originY") or "top"),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "PlacedObject":
        return cls(**cls._geometry_kwargs(data))

    def to_dict(self) -> dict:
        d = asdict(self)
        return {
            "left": d["left"],
            "top": d["top"],
            "width": d["width"],
            "height": d["height"],
            "scaleX": d["scale_x"],
            "scaleY": d["scale_y"],
            "angle": d["angle"],
            "flipX": d["flip_x"],
            "flipY": d["flip_y"],
            "originX": d["origin_x"],
            "originY": d["origin_y"],
        }


@dataclass(frozen=True)
class TextObject(PlacedObject):
    text: str = ""
    font_size: float = DEFAULT_FONT_SIZE
    line_height: float = DEFAULT_LINE_HEIGHT
    fill: Optional[Any] = None
    underline: bool = False
    font_family: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "TextObject":
        text = data.get("text")
        family = data.get("fontFamily")
        return cls(
            **cls._geometry_kwargs(data),
            text=text if isinstance(text, str) else "",
            font_size=_num(data, "fontSize", DEFAULT_FONT_SIZE) or DEFAULT_FONT_SIZE,
            line_height=_num(data, "lineHeight", DEFAULT_LINE_HEIGHT) or DEFAULT_LINE_HEIGHT,
            fill=data.get("fill"),
            underline=bool(data.get("underline", False)),
            font_family=family if isinstance(family, str) and family else None,
        )

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "type": "textbox",
            "text": self.text,
            "fontSize": self.font_size,
            "lineHeight": self.line_height,
            "fill": self.fill,
            "underline": self.underline,
        })
        if self.font_family:
            d["fontFamily"] = self.font_family
        return d


@dataclass(frozen=True)
class ImageObject(PlacedObject):
    src: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ImageObject":
        src = data.get("src")
        return cls(**cls._geometry_kwargs(data), src=src if isinstance(src, str) else "")

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({"type": "image", "src": self.src})
        return d


def object_from_dict(data: dict) -> Optional[PlacedObject]:
    """Build the typed object for an editor dict, or None for unsupported types."""
    if not isinstance(data, dict):
        return None
    kind = str(data.get("type") or "").lower()
    if kind in TEXT_TYPES:
        return TextObject.from_dict(data)
    if kind in IMAGE_TYPES:
        return ImageObject.from_dict(data)
    return None
