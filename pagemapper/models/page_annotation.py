# page_annotation.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from pagemapper.models.placed_object import (
    OutputRegion, PlacedObject, ViewportDimensions, object_from_dict
)


@dataclass
class PageAnnotation:
    """
    Editor state of one page: the canvas size the objects were recorded under
    and the scene JSON. crop_box/rotation describe the output page; a missing
    crop box means the whole page.
    """
    viewport_dimensions: ViewportDimensions
    scene: dict = field(default_factory=dict)
    crop_box: Optional[OutputRegion] = None
    rotation: float = 0.0

    @property
    def raw_objects(self) -> List[dict]:
        objects = self.scene.get("objects") if isinstance(self.scene, dict) else None
        return objects if isinstance(objects, list) else []

    def objects(self) -> List[PlacedObject]:
        """Supported objects in paint order; unknown editor types are left out."""
        out = []
        for raw in self.raw_objects:
            obj = object_from_dict(raw)
            if obj is not None:
                out.append(obj)
        return out

    def region_for(self, page_width: float, page_height: float) -> OutputRegion:
        if self.crop_box is not None:
            return self.crop_box
        return OutputRegion(width=page_width, height=page_height)

    @classmethod
    def from_dict(cls, data: dict) -> "PageAnnotation":
        scene = data.get("fabricJSON") or data.get("scene") or {}
        if isinstance(scene, str):
            scene = json.loads(scene)
        crop = data.get("cropBox")
        viewport = ViewportDimensions.from_dict(data.get("viewportDimensions") or {})
        if viewport.width <= 0 or viewport.height <= 0:
            # object positions are divided by the viewport size
            raise ValueError(
                f"viewportDimensions must have a positive width and height, "
                f"got {viewport.width} x {viewport.height}"
            )
        return cls(
            viewport_dimensions=viewport,
            scene=scene,
            crop_box=OutputRegion.from_dict(crop) if isinstance(crop, dict) else None,
            rotation=float(data.get("rotation") or 0),
        )

    def to_dict(self) -> dict:
        d = {
            "viewportDimensions": self.viewport_dimensions.to_dict(),
            "fabricJSON": self.scene,
            "rotation": self.rotation,
        }
        if self.crop_box is not None:
            d["cropBox"] = self.crop_box.to_dict()
        return d


@dataclass
class AnnotationDocument:
    pages: Dict[int, PageAnnotation] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Tuple[int, PageAnnotation]]:
        for number in sorted(self.pages):
            yield number, self.pages[number]

    def __len__(self) -> int:
        return len(self.pages)

    @classmethod
    def from_dict(cls, data: dict) -> "AnnotationDocument":
        raw_pages = data.get("pages", data) if isinstance(data, dict) else None
        if not isinstance(raw_pages, dict):
            raise ValueError("Annotation data must map page numbers to page annotations")
        pages = {}
        for key, blob in raw_pages.items():
            try:
                number = int(key)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Page key must be a page number, got {key!r}") from e
            if number < 1:
                raise ValueError(f"Page numbers start at 1, got {number}")
            pages[number] = PageAnnotation.from_dict(blob)
        return cls(pages=pages)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "AnnotationDocument":
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def to_dict(self) -> dict:
        return {"pages": {str(n): page.to_dict() for n, page in self}}
