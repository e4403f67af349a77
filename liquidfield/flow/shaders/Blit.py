"""Blit shader for copying/resizing textures.

Copies texture data into the bound target, resampling with the source
filter when the sizes differ. Channels the source does not have are zero.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Blit(Shader):
    """Copy/stretch texture to target FBO."""

    def use(self, tex: Texture) -> None:
        """Render texture to the bound FBO.

        Args:
            tex: Source texture to copy
        """
        if self._begin_pass(tex) is None:
            return

        self.bind_texture(tex, "uSource")
        glUniform1i(self.get_uniform_loc("uSourceChannels"), tex.channels)

        self._end_pass()
