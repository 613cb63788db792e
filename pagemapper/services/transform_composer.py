# transform_composer.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, NamedTuple, Tuple


class Matrix(NamedTuple):
    """
    2D affine matrix in page-description order:
        x' = a*x + c*y + e
        y' = b*x + d*y + f
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def map(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def then(self, outer: "Matrix") -> "Matrix":
        """Matrix that applies self first, then `outer`."""
        a, b, c, d, e, f = self
        A, B, C, D, E, F = outer
        return Matrix(
            a * A + b * C,
            a * B + b * D,
            c * A + d * C,
            c * B + d * D,
            e * A + f * C + E,
            e * B + f * D + F,
        )


IDENTITY = Matrix()


@dataclass(frozen=True)
class ComposedTransform:
    """Translate, rotate, scale/flip; concatenated in that order onto the page state."""
    translate: Matrix
    rotate: Matrix
    scale: Matrix
    theta: float

    def __iter__(self) -> Iterator[Matrix]:
        yield self.translate
        yield self.rotate
        yield self.scale

    def combined(self) -> Matrix:
        """Single matrix mapping object-local units straight to page units."""
        # Each concat pre-multiplies, so the last one emitted acts first on local points
        return self.scale.then(self.rotate).then(self.translate)


class TransformComposer:

    @staticmethod
    def rotation_radians(angle_deg: float, page_rotation_deg: float = 0.0) -> float:
        # Editor angles are clockwise-positive, page space is counter-clockwise-positive
        return -(angle_deg + page_rotation_deg) * math.pi / 180

    @staticmethod
    def translation(x: float, y: float) -> Matrix:
        return Matrix(1.0, 0.0, 0.0, 1.0, x, y)

    @staticmethod
    def rotation(theta: float) -> Matrix:
        cos, sin = math.cos(theta), math.sin(theta)
        return Matrix(cos, sin, -sin, cos, 0.0, 0.0)

    @staticmethod
    def scale_flip(
        scale_x: float,
        scale_y: float,
        flip_x: bool,
        flip_y: bool,
        ratio_x: float,
        ratio_y: float,
    ) -> Matrix:
        fx = -1.0 if flip_x else 1.0
        fy = -1.0 if flip_y else 1.0
        return Matrix(fx * scale_x * ratio_x, 0.0, 0.0, fy * scale_y * ratio_y, 0.0, 0.0)

    @classmethod
    def compose(
        cls,
        center_out: Tuple[float, float],
        angle_deg: float,
        page_rotation_deg: float,
        scale_x: float,
        scale_y: float,
        flip_x: bool,
        flip_y: bool,
        ratio_x: float,
        ratio_y: float,
    ) -> ComposedTransform:
        theta = cls.rotation_radians(angle_deg, page_rotation_deg)
        return ComposedTransform(
            translate=cls.translation(*center_out),
            rotate=cls.rotation(theta),
            scale=cls.scale_flip(scale_x, scale_y, flip_x, flip_y, ratio_x, ratio_y),
            theta=theta,
        )
