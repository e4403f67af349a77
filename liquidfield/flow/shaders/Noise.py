"""Noise shader - time-varying value noise.

Smooth 3D lattice value noise; x and y span the texture, z is time. Used by
the liquid render stage for surface shimmer. The same value_noise() in
common.glsl drives the curl potential of the fluid field.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader


class Noise(Shader):
    """Fill the bound target with value noise in [0, 1]."""

    def use(self, scale: float, time: float, octaves: int = 2) -> None:
        """Render noise.

        Args:
            scale: Lattice cells across the texture
            time: Position along the time axis (time * speed)
            octaves: Fractal octaves
        """
        if self._begin_pass() is None:
            return

        glUniform1f(self.get_uniform_loc("uScale"), scale)
        glUniform1f(self.get_uniform_loc("uTime"), time)
        glUniform1i(self.get_uniform_loc("uOctaves"), octaves)

        self._end_pass()
