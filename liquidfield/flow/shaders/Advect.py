"""Advect shader - Semi-Lagrangian advection with dissipation.

Backward trace:  uv_origin = uv - timestep × velocity × (1.0, aspect)
Velocity is measured in UV units along x. On a non-square target the y
component is scaled by aspect (width/height) so the same velocity covers
the same physical distance in both directions.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class Advect(Shader):
    """Semi-Lagrangian advection shader with dissipation and aspect correction."""

    def use(self, source: Texture, velocity: Texture, timestep: float,
            dissipation: float = 1.0, aspect: float = 1.0) -> None:
        """Apply advection.

        Args:
            source: Field to advect (density, velocity)
            velocity: Velocity field (RG), may be the same texture as source
            timestep: Fixed advection step, trace distance = timestep × velocity
            dissipation: Multiplier applied to the advected value (0.99 = 1% loss per step)
            aspect: Width/height ratio of the simulated area
        """
        if self._begin_pass(source, velocity) is None:
            return

        self.bind_texture(source, "uSource")
        self.bind_texture(velocity, "uVelocity")

        glUniform1f(self.get_uniform_loc("uTimestep"), timestep)
        glUniform1f(self.get_uniform_loc("uDissipation"), dissipation)
        glUniform1f(self.get_uniform_loc("uAspect"), aspect)

        self._end_pass()
