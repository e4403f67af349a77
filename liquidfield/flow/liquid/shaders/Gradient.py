"""Gradient shader - Subtract pressure gradient from velocity."""

from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Gradient(Shader):
    """Subtract pressure gradient from velocity (projection step)."""

    def use(self, velocity: Texture, pressure: Texture) -> None:
        """Apply pressure gradient subtraction.

        Args:
            velocity: Current velocity field (RG32F)
            pressure: Pressure field (R32F)
        """
        if self._begin_pass(velocity, pressure) is None:
            return
        self.bind_texture(velocity, "uVelocity")
        self.bind_texture(pressure, "uPressure")
        self._end_pass()
