# baseline_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from pagemapper.config import DEFAULT_LINE_HEIGHT, FALLBACK_ASCENT_RATIO


class FontHandle(Protocol):
    """What the renderers need from a font: design-unit ascent/descent and text width."""
    ascent: Optional[float]    # >= 0
    descent: Optional[float]   # <= 0

    def width_of_text_at_size(self, text: str, size: float) -> float: ...


@dataclass(frozen=True)
class FontMetrics:
    ascent: float
    descent: float

    @property
    def bbox_height(self) -> float:
        return self.ascent - self.descent

    @property
    def ascent_ratio(self) -> float:
        return self.ascent / self.bbox_height

    @classmethod
    def of(cls, font) -> Optional["FontMetrics"]:
        """Metrics of a font handle, or None when it has none usable."""
        ascent = getattr(font, "ascent", None)
        descent = getattr(font, "descent", None)
        if ascent is None or descent is None:
            return None
        metrics = cls(float(ascent), float(descent))
        if metrics.bbox_height <= 0:
            return None
        return metrics


class BaselineResolver:
    """
    Places the text baseline inside the editor's line box.

    The editor centers glyphs in a line box of font_size * line_height, so half
    of the extra leading sits above the glyph body. This is an approximation of
    canvas text layout; it is not exact for every font and engine.
    """

    @classmethod
    def resolve_baseline_offset(
        cls,
        font_ascent: Optional[float],
        font_descent: Optional[float],
        font_size: float,
        line_height: Optional[float] = None,
    ) -> float:
        """Distance from the top of the text box down to the baseline, in local units."""
        metrics = None
        if font_ascent is not None and font_descent is not None:
            candidate = FontMetrics(float(font_ascent), float(font_descent))
            metrics = candidate if candidate.bbox_height > 0 else None
        return cls.offset_from_top(metrics, font_size, line_height)

    @classmethod
    def offset_from_top(
        cls,
        metrics: Optional[FontMetrics],
        font_size: float,
        line_height: Optional[float] = None,
    ) -> float:
        if metrics is None:
            # no usable metrics: a fixed share of the size, without line-box padding
            return FALLBACK_ASCENT_RATIO * font_size
        line_height = line_height or DEFAULT_LINE_HEIGHT
        actual_ascent = metrics.ascent_ratio * font_size
        line_box = font_size * line_height
        top_padding = (line_box - font_size) / 2
        return actual_ascent + top_padding

    @classmethod
    def local_origin(
        cls,
        width: float,
        height: float,
        metrics: Optional[FontMetrics],
        font_size: float,
        line_height: Optional[float] = None,
    ) -> Tuple[float, float]:
        """Draw point for the first line: left edge, baseline below the box top (local frame)."""
        local_x = -width / 2
        local_y = height / 2 - cls.offset_from_top(metrics, font_size, line_height)
        return local_x, local_y
