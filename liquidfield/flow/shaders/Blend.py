"""Add Multiplied shader.

Adds two textures with individual multipliers.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Blend(Shader):
    """Add two textures with individual strength multipliers."""

    def use(self, dst: Texture, src: Texture,
             dst_strength: float = 1.0, src_strength: float = 1.0) -> None:
        """Render dst * dst_strength + src * src_strength.

        Args:
            dst: Base texture, same size as the bound target
            src: Added texture, resampled when its size differs
            dst_strength: Multiplier for the base texture
            src_strength: Multiplier for the added texture
        """
        if self._begin_pass(dst, src) is None:
            return

        self.bind_texture(dst, "uDst")
        self.bind_texture(src, "uSrc")
        glUniform1i(self.get_uniform_loc("uDstChannels"), dst.channels)
        glUniform1i(self.get_uniform_loc("uSrcChannels"), src.channels)
        glUniform1f(self.get_uniform_loc("uDstStrength"), dst_strength)
        glUniform1f(self.get_uniform_loc("uSrcStrength"), src_strength)

        self._end_pass()
