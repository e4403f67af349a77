"""Divergence shader - Compute divergence of velocity field."""

from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Divergence(Shader):
    """Compute velocity field divergence.

        div = ((uR - uL) / 2dx) + ((vT - vB) / 2dy)

    with dx = 1/width and dy = 1/height, so the result is in UV units.
    Neighbours outside the grid repeat the edge texel.
    """

    def use(self, velocity: Texture) -> None:
        """Compute divergence.

        Args:
            velocity: Velocity field (RG32F), same size as the target
        """
        if self._begin_pass(velocity) is None:
            return
        self.bind_texture(velocity, "uVelocity")
        self._end_pass()
