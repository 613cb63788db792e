from PySide6.QtCore import QObject, Signal, Property, QSizeF

from pagemapper.config import (
    DEFAULT_FONT_FAMILY, DEFAULT_PAGE_SIZE, ERROR_POLICIES, PAGE_SIZES, PDF_RESOLUTION
)


class ExportSettings(QObject):
    debug_changed = Signal(bool)
    on_error_changed = Signal(str)
    font_family_changed = Signal(str)
    page_size_changed = Signal(object)

    def __init__(self, debug=False, on_error="skip", default_font_family=DEFAULT_FONT_FAMILY,
                 page_size=DEFAULT_PAGE_SIZE, resolution=PDF_RESOLUTION):
        super().__init__()
        if on_error not in ERROR_POLICIES:
            raise ValueError(f"Unknown error policy '{on_error}'. Use one of: {', '.join(ERROR_POLICIES)}.")
        self._debug = bool(debug)
        self._on_error = on_error
        self._default_font_family = default_font_family
        self._page_size_pt = self._resolve_page_size(page_size)
        self._resolution = resolution

    @staticmethod
    def _resolve_page_size(page_size) -> QSizeF:
        if isinstance(page_size, QSizeF):
            return QSizeF(page_size)
        if isinstance(page_size, str):
            found = PAGE_SIZES.get(page_size.lower())
            if found is None:
                raise ValueError(f"Unknown page size '{page_size}'. Use one of: {', '.join(PAGE_SIZES)}.")
            return QSizeF(found)
        w, h = page_size
        return QSizeF(float(w), float(h))

    @Property(bool)
    def debug(self):
        return self._debug

    @debug.setter
    def debug(self, value):
        value = bool(value)
        if value != self._debug:
            self._debug = value
            self.debug_changed.emit(value)

    @Property(str)
    def on_error(self):
        return self._on_error

    @on_error.setter
    def on_error(self, policy):
        if policy not in ERROR_POLICIES:
            raise ValueError(f"Unknown error policy '{policy}'. Use one of: {', '.join(ERROR_POLICIES)}.")
        if policy != self._on_error:
            self._on_error = policy
            self.on_error_changed.emit(policy)

    @Property(str)
    def default_font_family(self):
        return self._default_font_family

    @default_font_family.setter
    def default_font_family(self, family):
        if family and family != self._default_font_family:
            self._default_font_family = family
            self.font_family_changed.emit(family)

    @Property(object)
    def page_size_pt(self):
        return QSizeF(self._page_size_pt)

    @page_size_pt.setter
    def page_size_pt(self, page_size):
        new = self._resolve_page_size(page_size)
        if new != self._page_size_pt:
            self._page_size_pt = new
            self.page_size_changed.emit(QSizeF(new))

    @property
    def resolution(self):
        return self._resolution
