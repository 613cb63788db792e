# graphics_state.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Optional, Protocol, Tuple

from pagemapper.services.transform_composer import Matrix
from pagemapper.utils.color import RGB

Point = Tuple[float, float]


class PageBackend(Protocol):
    """
    Drawing primitives of an output page. Coordinates are page-space, y up.

    draw_text breaks `text` on newlines; each following baseline sits
    `line_height` lower (default: `size`).
    """

    def push_state(self) -> None: ...
    def pop_state(self) -> None: ...
    def concat_matrix(self, a: float, b: float, c: float, d: float, e: float, f: float) -> None: ...
    def draw_text(self, text: str, *, x: float, y: float, size: float, font, color: RGB,
                  line_height: Optional[float] = None) -> None: ...
    def draw_line(self, *, start: Point, end: Point, thickness: float, color: RGB) -> None: ...
    def draw_image(self, image, *, x: float, y: float, width: float, height: float) -> None: ...


@contextmanager
def scoped_state(page: PageBackend, matrices: Iterable[Matrix] = ()):
    """
    Save the page state, concatenate `matrices` in order, restore on exit.

        with scoped_state(page, transform):
            ... draw in the object's local frame ...

    The restore runs on every exit path, so a failing draw never leaves its
    transform on the page for the next object.
    """
    page.push_state()
    try:
        for m in matrices:
            page.concat_matrix(*m)
        yield page
    finally:
        page.pop_state()
