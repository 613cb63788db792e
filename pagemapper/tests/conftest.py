import pytest

# ------------------------------------------------------------
# Stub page backend and font so engine tests run without Qt painting.
# ------------------------------------------------------------

class DummyPage:
    """Records every primitive call as (name, args, kwargs)."""
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if name == self.fail_on:
            raise RuntimeError(f"{name} failed")

    def push_state(self):
        self._record("push_state")

    def pop_state(self):
        self._record("pop_state")

    def concat_matrix(self, a, b, c, d, e, f):
        self._record("concat_matrix", a, b, c, d, e, f)

    def draw_text(self, text, *, x, y, size, font, color, line_height=None):
        self._record("draw_text", text, x=x, y=y, size=size, font=font, color=color,
                     line_height=line_height)

    def draw_line(self, *, start, end, thickness, color):
        self._record("draw_line", start=start, end=end, thickness=thickness, color=color)

    def draw_image(self, image, *, x, y, width, height):
        self._record("draw_image", image, x=x, y=y, width=width, height=height)

    def named(self, name):
        return [c for c in self.calls if c[0] == name]


class DummyFont:
    def __init__(self, ascent=800.0, descent=-200.0, width=100.0):
        self.ascent = ascent
        self.descent = descent
        self._width = width

    def width_of_text_at_size(self, text, size):
        return self._width


@pytest.fixture
def page():
    return DummyPage()


@pytest.fixture
def font():
    return DummyFont()
