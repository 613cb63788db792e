# export_manager.py
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QMarginsF, QSizeF
from PySide6.QtGui import QPainter, QPdfWriter, QPageLayout, QPageSize

from pagemapper.models.page_annotation import AnnotationDocument, PageAnnotation
from pagemapper.models.placed_object import ImageObject, PlacedObject, TextObject
from pagemapper.services.export_settings import ExportSettings
from pagemapper.services.object_renderer import ImageRenderer, TextRenderer
from pagemapper.services.qt_page import QtPage
from pagemapper.services.render_cache import RenderCache
from pagemapper.services.trace_hub import TraceHub


class ExportError(RuntimeError):
    """An object failed to render while the error policy is 'abort'."""


class ExportManager:
    def __init__(self, settings: Optional[ExportSettings] = None, hub: Optional[TraceHub] = None,
                 cache: Optional[RenderCache] = None):
        self.settings = settings or ExportSettings()
        self.hub = hub or TraceHub()
        self.cache = cache or RenderCache()
        self._stats = {"rendered": 0, "skipped": 0, "errors": 0}

        if self.settings.debug:
            self.hub.attach_console()
        self.settings.debug_changed.connect(self._on_debug_changed)

    @property
    def stats(self) -> dict:
        return self._stats.copy()

    def reset_stats(self) -> None:
        self._stats = {"rendered": 0, "skipped": 0, "errors": 0}

    def _on_debug_changed(self, enabled: bool) -> None:
        if enabled:
            self.hub.attach_console()
        else:
            self.hub.detach_console()

    def _observer(self):
        return self.hub.emit_trace if self.settings.debug else None

    # -------- Page geometry --------
    def page_size_for(self, annotation: PageAnnotation) -> QSizeF:
        crop = annotation.crop_box
        if crop is None:
            return self.settings.page_size_pt
        # the page must at least contain the crop box
        return QSizeF(crop.x + crop.width, crop.y + crop.height)

    def rendered_size_for(self, annotation: PageAnnotation) -> QSizeF:
        """Size of the written page: the raw page turned by its rotation."""
        return QtPage.rendered_size(self.page_size_for(annotation), annotation.rotation)

    # -------- Rendering --------
    def render_object(self, obj: PlacedObject, page, annotation: PageAnnotation, page_size: QSizeF):
        viewport = annotation.viewport_dimensions
        region = annotation.region_for(page_size.width(), page_size.height())
        observer = self._observer()

        if isinstance(obj, TextObject):
            family = obj.font_family or self.settings.default_font_family
            font = self.cache.font(family)
            return TextRenderer.render(page, obj, viewport, region, annotation.rotation, font, observer)
        if isinstance(obj, ImageObject):
            image = self.cache.image(obj.src)
            return ImageRenderer.render(page, obj, viewport, region, annotation.rotation, image, observer)
        raise TypeError(f"No renderer for {type(obj).__name__}")

    def render_page(self, annotation: PageAnnotation, page, page_size: QSizeF) -> int:
        """Render every supported object of one page. Returns the number drawn."""
        drawn = 0
        for obj in annotation.objects():
            try:
                self.render_object(obj, page, annotation, page_size)
            except Exception as e:
                self._stats["errors"] += 1
                if self.settings.on_error == "abort":
                    raise ExportError(f"Failed to render {type(obj).__name__}: {e}") from e
                self._stats["skipped"] += 1
                self.hub.object_skipped.emit(obj, str(e))
                continue
            self._stats["rendered"] += 1
            drawn += 1
        return drawn

    def export_pdf(self, document: AnnotationDocument, pdf_path: Union[str, Path]) -> Path:
        pdf_path = Path(pdf_path)
        if len(document) == 0:
            raise ValueError("Nothing to export: the document has no annotated pages")

        self.reset_stats()
        pdf_path.parent.mkdir(parents=True, exist_ok=True)

        pages = list(document)
        first_size = self.rendered_size_for(pages[0][1])

        writer = QPdfWriter(str(pdf_path))
        writer.setResolution(self.settings.resolution)
        writer.setPageSize(QPageSize(first_size, QPageSize.Point))
        writer.setPageMargins(QMarginsF(0, 0, 0, 0), QPageLayout.Point)

        painter = QPainter(writer)
        if not painter.isActive():
            raise ExportError(f"Could not open {pdf_path} for writing")
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setRenderHint(QPainter.TextAntialiasing, True)

        try:
            for i, (_, annotation) in enumerate(pages):
                size = self.page_size_for(annotation)
                if i > 0:
                    writer.setPageSize(QPageSize(self.rendered_size_for(annotation), QPageSize.Point))
                    writer.newPage()
                with QtPage(painter, size, annotation.rotation) as page:
                    self.render_page(annotation, page, size)
        finally:
            painter.end()

        return pdf_path
