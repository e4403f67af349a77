"""JacobiDiffusion shader - Iterative diffusion solver for velocity viscosity."""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class JacobiDiffusion(Shader):
    """Jacobi iterative solver for diffusion (viscosity).

        x = (x0 + a × (xL + xR + xB + xT)) / (1 + 4a),   a = ν·Δt / h²
    """

    def use(self, source: Texture, origin: Texture, viscosity_dt: float) -> None:
        """Apply one Jacobi iteration for diffusion.

        Args:
            source: Previous iteration of field to diffuse (velocity RG32F)
            origin: Field before diffusion started (x0)
            viscosity_dt: Viscosity * timestep (diffusion rate)
        """
        if self._begin_pass(source, origin) is None:
            return

        self.bind_texture(source, "uSource")
        self.bind_texture(origin, "uOrigin")
        glUniform1f(self.get_uniform_loc("uAlpha"), max(viscosity_dt, 0.0) * source.width * source.height)

        self._end_pass()
