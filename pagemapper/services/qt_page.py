# qt_page.py
from __future__ import annotations

from typing import Optional, Tuple

from PySide6.QtCore import Qt, QPointF, QRectF, QSizeF
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QImage, QPainter, QPen, QTransform

from pagemapper.utils.color import RGB
from pagemapper.utils.text_lines import split_lines

# Metrics are read at this pixel size so they read like design units of a 1000-unit em
REFERENCE_PX = 1000


def qcolor(color: RGB) -> QColor:
    return QColor.fromRgbF(float(color[0]), float(color[1]), float(color[2]))


class QtFont:
    """Font handle over a QFont family/style. Size comes from the draw call."""

    def __init__(self, qfont: QFont):
        self._qfont = QFont(qfont)
        ref = QFont(self._qfont)
        ref.setPixelSize(REFERENCE_PX)
        self._ref_metrics = QFontMetricsF(ref)

    @classmethod
    def from_family(cls, family: str, *, bold: bool = False, italic: bool = False) -> "QtFont":
        qf = QFont(family)
        qf.setBold(bold)
        qf.setItalic(italic)
        return cls(qf)

    @property
    def family(self) -> str:
        return self._qfont.family()

    @property
    def ascent(self) -> Optional[float]:
        value = self._ref_metrics.ascent()
        return value if value > 0 else None

    @property
    def descent(self) -> Optional[float]:
        # Qt reports descent as a positive distance below the baseline
        value = self._ref_metrics.descent()
        return -value if value >= 0 else None

    def width_of_text_at_size(self, text: str, size: float) -> float:
        return self._ref_metrics.horizontalAdvance(text) * size / REFERENCE_PX

    def qfont_at(self, size: float, dpi: float) -> QFont:
        qf = QFont(self._qfont)
        qf.setPointSizeF(max(0.01, size * 72.0 / dpi))
        return qf

    def __repr__(self) -> str:
        return f"QtFont({self.family!r})"


class QtPage:
    """
    Page backend over a QPainter.

    The painter is put into a bottom-left, y-up frame sized `page_size`, so the
    renderers see the same coordinate system as a PDF page. Text and images are
    counter-flipped locally to stay upright.

    `rotation` is the page rotation the object transforms already carry. The
    base frame turns the raw page by the same angle, so an object with no angle
    of its own comes out upright on the rendered page; the device must be
    `rendered_size(page_size, rotation)`.
    """

    def __init__(self, painter: QPainter, page_size: QSizeF, rotation: float = 0.0):
        self._painter = painter
        self._page_size = QSizeF(page_size)
        self._rotation = float(rotation or 0.0)
        self._depth = 0
        painter.save()
        painter.setWorldTransform(self.base_transform(self._page_size, self._rotation), True)

    @staticmethod
    def _turn(page_size: QSizeF, rotation: float) -> Tuple[QTransform, QRectF]:
        # QTransform.rotate is counter-clockwise in a y-up frame
        turn = QTransform().rotate(rotation)
        bounds = turn.mapRect(QRectF(0, 0, page_size.width(), page_size.height()))
        return turn * QTransform.fromTranslate(-bounds.left(), -bounds.top()), bounds

    @classmethod
    def rendered_size(cls, page_size: QSizeF, rotation: float = 0.0) -> QSizeF:
        """Device size of the turned page; width and height swap at 90 and 270."""
        _, bounds = cls._turn(QSizeF(page_size), rotation)
        return QSizeF(round(bounds.width(), 6), round(bounds.height(), 6))

    @classmethod
    def base_transform(cls, page_size: QSizeF, rotation: float = 0.0) -> QTransform:
        """Raw y-up page frame -> turned page -> y-down device."""
        turn, bounds = cls._turn(QSizeF(page_size), rotation)
        flip = QTransform(1, 0, 0, -1, 0, bounds.height())
        return turn * flip

    @property
    def painter(self) -> QPainter:
        return self._painter

    @property
    def page_size(self) -> QSizeF:
        return QSizeF(self._page_size)

    @property
    def rotation(self) -> float:
        return self._rotation

    @property
    def depth(self) -> int:
        return self._depth

    def close(self) -> None:
        while self._depth:
            self.pop_state()
        self._painter.restore()

    def __enter__(self) -> "QtPage":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -------- State --------
    def push_state(self) -> None:
        self._painter.save()
        self._depth += 1

    def pop_state(self) -> None:
        if self._depth == 0:
            raise RuntimeError("pop_state() without a matching push_state()")
        self._painter.restore()
        self._depth -= 1

    def concat_matrix(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None:
        # QTransform(m11, m12, m21, m22, dx, dy) has the same layout as a PDF `cm`
        self._painter.setWorldTransform(QTransform(a, b, c, d, e, f), True)

    # -------- Drawing --------
    def _dpi(self) -> float:
        device = self._painter.device()
        return float(device.logicalDpiY()) if device is not None else 72.0

    def draw_text(self, text: str, *, x: float, y: float, size: float, font: QtFont, color: RGB,
                  line_height: Optional[float] = None) -> None:
        step = size if line_height is None else line_height
        p = self._painter
        p.save()
        p.setFont(font.qfont_at(size, self._dpi()))
        p.setPen(qcolor(color))
        for i, line in enumerate(split_lines(text)):
            if not line:
                continue
            p.save()
            p.translate(x, y - i * step)
            p.scale(1, -1)
            p.drawText(QPointF(0, 0), line)
            p.restore()
        p.restore()

    def draw_line(self, *, start: Tuple[float, float], end: Tuple[float, float], thickness: float, color: RGB) -> None:
        p = self._painter
        p.save()
        pen = QPen(qcolor(color))
        pen.setWidthF(thickness)
        pen.setCapStyle(Qt.FlatCap)
        p.setPen(pen)
        p.drawLine(QPointF(*start), QPointF(*end))
        p.restore()

    def draw_image(self, image: QImage, *, x: float, y: float, width: float, height: float) -> None:
        p = self._painter
        p.save()
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)
        p.translate(x, y + height)
        p.scale(1, -1)
        p.drawImage(QRectF(0, 0, width, height), image, QRectF(image.rect()))
        p.restore()
