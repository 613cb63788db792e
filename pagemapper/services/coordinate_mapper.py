# coordinate_mapper.py
from __future__ import annotations

from typing import Tuple

from pagemapper.models.placed_object import PlacedObject, ViewportDimensions, OutputRegion


class CoordinateMapper:
    """
    Editor space (origin top-left, y down, canvas pixels) to output page space
    (origin bottom-left of the crop box, y up, page units).
    """

    @classmethod
    def scale_ratios(cls, viewport: ViewportDimensions, region: OutputRegion) -> Tuple[float, float]:
        # Independent axes: a differently proportioned region is filled anisotropically
        return region.width / viewport.width, region.height / viewport.height

    @classmethod
    def editor_center(cls, obj: PlacedObject) -> Tuple[float, float]:
        """Geometric center in editor pixels, whatever the anchor convention."""
        cx, cy = obj.left, obj.top
        if not obj.is_centered_x:
            cx += obj.width * obj.scale_x / 2
        if not obj.is_centered_y:
            cy += obj.height * obj.scale_y / 2
        return cx, cy

    @classmethod
    def map_point(
        cls,
        x: float,
        y: float,
        viewport: ViewportDimensions,
        region: OutputRegion,
    ) -> Tuple[float, float]:
        ratio_x, ratio_y = cls.scale_ratios(viewport, region)
        return (
            region.x + x * ratio_x,
            region.y + region.height - y * ratio_y,
        )

    @classmethod
    def map_center(
        cls,
        obj: PlacedObject,
        viewport: ViewportDimensions,
        region: OutputRegion,
    ) -> Tuple[float, float]:
        cx, cy = cls.editor_center(obj)
        return cls.map_point(cx, cy, viewport, region)
