# object_renderer.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from pagemapper.config import UNDERLINE_OFFSET_RATIO, UNDERLINE_THICKNESS_RATIO
from pagemapper.models.placed_object import (
    PlacedObject, TextObject, ImageObject, ViewportDimensions, OutputRegion
)
from pagemapper.services.baseline_resolver import BaselineResolver, FontMetrics
from pagemapper.services.coordinate_mapper import CoordinateMapper
from pagemapper.services.transform_composer import ComposedTransform, TransformComposer
from pagemapper.utils.color import parse_fill
from pagemapper.utils.graphics_state import PageBackend, scoped_state
from pagemapper.utils.text_lines import split_lines


@dataclass
class TransformTrace:
    """Everything computed for one object before drawing; handed to observers."""
    obj: PlacedObject
    editor_center: Tuple[float, float]
    center: Tuple[float, float]
    ratios: Tuple[float, float]
    page_rotation: float
    transform: ComposedTransform
    local_origin: Optional[Tuple[float, float]] = None
    extra: dict = field(default_factory=dict)


Observer = Optional[Callable[[TransformTrace], None]]


class ObjectRenderer:
    """
    Shared placement for every object kind: map the center, compose
    translate/rotate/scale, then draw in the object's local frame where
    (0, 0) is the visual center and one unit is one pre-scale editor pixel.
    """

    @classmethod
    def prepare(
        cls,
        obj: PlacedObject,
        viewport: ViewportDimensions,
        region: OutputRegion,
        page_rotation: float = 0.0,
    ) -> TransformTrace:
        ratio_x, ratio_y = CoordinateMapper.scale_ratios(viewport, region)
        editor_center = CoordinateMapper.editor_center(obj)
        center = CoordinateMapper.map_point(*editor_center, viewport, region)
        transform = TransformComposer.compose(
            center,
            obj.angle,
            page_rotation,
            obj.scale_x,
            obj.scale_y,
            obj.flip_x,
            obj.flip_y,
            ratio_x,
            ratio_y,
        )
        return TransformTrace(
            obj=obj,
            editor_center=editor_center,
            center=center,
            ratios=(ratio_x, ratio_y),
            page_rotation=page_rotation,
            transform=transform,
        )

    @staticmethod
    def _notify(observer: Observer, trace: TransformTrace) -> None:
        if observer is not None:
            observer(trace)


class TextRenderer(ObjectRenderer):

    @classmethod
    def render(
        cls,
        page: PageBackend,
        obj: TextObject,
        viewport: ViewportDimensions,
        region: OutputRegion,
        page_rotation: float,
        font,
        observer: Observer = None,
    ) -> TransformTrace:
        trace = cls.prepare(obj, viewport, region, page_rotation)
        size = obj.font_size
        metrics = FontMetrics.of(font)
        local_x, local_y = BaselineResolver.local_origin(
            obj.width, obj.height, metrics, size, obj.line_height
        )
        trace.local_origin = (local_x, local_y)
        trace.extra["metrics"] = metrics
        cls._notify(observer, trace)

        color = parse_fill(obj.fill)
        step = size * obj.line_height
        with scoped_state(page, trace.transform):
            # size is the raw font size; ratio and user scale are already in the CTM
            page.draw_text(obj.text, x=local_x, y=local_y, size=size, font=font, color=color,
                           line_height=step)
            if obj.underline:
                for i, line in enumerate(split_lines(obj.text)):
                    cls._draw_underline(page, line, local_x, local_y - i * step, size, font, color)
        return trace

    @staticmethod
    def _draw_underline(page, text, x, y, size, font, color) -> None:
        width = font.width_of_text_at_size(text, size)
        uy = y - size * UNDERLINE_OFFSET_RATIO
        page.draw_line(
            start=(x, uy),
            end=(x + width, uy),
            thickness=size * UNDERLINE_THICKNESS_RATIO,
            color=color,
        )


class ImageRenderer(ObjectRenderer):

    @classmethod
    def render(
        cls,
        page: PageBackend,
        obj: ImageObject,
        viewport: ViewportDimensions,
        region: OutputRegion,
        page_rotation: float,
        image,
        observer: Observer = None,
    ) -> TransformTrace:
        trace = cls.prepare(obj, viewport, region, page_rotation)
        trace.local_origin = (-obj.width / 2, -obj.height / 2)
        cls._notify(observer, trace)

        with scoped_state(page, trace.transform):
            page.draw_image(
                image,
                x=-obj.width / 2,
                y=-obj.height / 2,
                width=obj.width,
                height=obj.height,
            )
        return trace
