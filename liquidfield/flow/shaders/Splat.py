"""Splat shader - add a Gaussian impulse to a field.

    out = source + value × exp(-|p - point|² / radius²)

Distances are measured in UV with x scaled by aspect, so the impulse stays
round on non-square viewports.
"""

from typing import Sequence

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture
from liquidfield.utils import Point2f


class Splat(Shader):
    """Additive Gaussian impulse."""

    def use(self, source: Texture, point: Point2f, radius: float,
            value: Sequence[float], aspect: float = 1.0) -> None:
        """Render source plus splat.

        Args:
            source: Field receiving the impulse
            point: Center in UV
            radius: Gaussian width in UV
            value: Impulse per channel at the center
            aspect: Width/height ratio used for the distance metric
        """
        if self._begin_pass(source) is None:
            return

        impulse: list[float] = [0.0, 0.0, 0.0, 0.0]
        for i, channel in enumerate(list(value)[:4]):
            impulse[i] = float(channel)

        self.bind_texture(source, "uSource")
        glUniform2f(self.get_uniform_loc("uPoint"), point.x, point.y)
        glUniform1f(self.get_uniform_loc("uRadius"), radius)
        glUniform4f(self.get_uniform_loc("uValue"), *impulse)
        glUniform1f(self.get_uniform_loc("uAspect"), aspect)

        self._end_pass()
