"""Clamp shader.

Clamps all texture channels to a specified min/max range. NaN becomes 0.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Clamp(Shader):
    """Clamp texture values to a range."""

    def use(self, src: Texture, min_val: float, max_val: float) -> None:
        """Clamp source texture values to range.

        Args:
            src: Source texture
            min_val: Minimum value for all channels
            max_val: Maximum value for all channels
        """
        if self._begin_pass(src) is None:
            return

        self.bind_texture(src, "uSource")
        glUniform1f(self.get_uniform_loc("uMin"), min_val)
        glUniform1f(self.get_uniform_loc("uMax"), max_val)

        self._end_pass()
