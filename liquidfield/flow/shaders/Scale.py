"""Scale shader.

Multiplies every channel by a scalar; the dissipation and decay pass. The
source is resampled when its size differs from the bound target.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Scale(Shader):
    """Multiply texture by scalar value."""

    def use(self, src: Texture, scale: float) -> None:
        if self._begin_pass(src) is None:
            return

        self.bind_texture(src, "uSource")
        glUniform1i(self.get_uniform_loc("uSourceChannels"), src.channels)
        glUniform1f(self.get_uniform_loc("uScale"), scale)

        self._end_pass()
