"""CurlImpulse shader - pointer impulse for the fluid field.

    out = source + g × force × velocity + force × curl × |velocity| × curl(ψ)

g is a Gaussian around the pointer and ψ = radius × g × (0.5 + noise) a
noise-modulated stream function. curl(ψ) = (∂ψ/∂v, -∂ψ/∂u) is divergence
free, so the rotational part swirls around the pointer without pushing
outward. Both parts scale with the pointer speed; a resting pointer adds
nothing.
"""

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture
from liquidfield.utils import Point2f

# Noise lattice cells per impulse radius
NOISE_CELLS_PER_RADIUS: float = 1.5


class CurlImpulse(Shader):
    """Directional plus curl-noise Gaussian impulse."""

    def use(self, source: Texture, point: Point2f, velocity: Point2f, radius: float,
            force: float, curl: float, aspect: float, time: float) -> None:
        """Render source plus impulse.

        Args:
            source: Vector field (RG)
            point: Pointer position in UV
            velocity: Pointer velocity in UV per frame
            radius: Gaussian width in UV
            force: Directional strength
            curl: Rotational strength relative to force
            aspect: Viewport width/height
            time: Noise time coordinate
        """
        target = self._begin_pass(source)
        if target is None:
            return

        radius = max(radius, 1e-4)

        self.bind_texture(source, "uSource")
        glUniform2f(self.get_uniform_loc("uPoint"), point.x, point.y)
        glUniform2f(self.get_uniform_loc("uVelocity"), velocity.x, velocity.y)
        glUniform1f(self.get_uniform_loc("uRadius"), radius)
        glUniform1f(self.get_uniform_loc("uForce"), force)
        glUniform1f(self.get_uniform_loc("uCurl"), curl)
        glUniform1f(self.get_uniform_loc("uAspect"), aspect)
        glUniform1f(self.get_uniform_loc("uTime"), time)
        glUniform1f(self.get_uniform_loc("uNoiseScale"), NOISE_CELLS_PER_RADIUS / radius)
        glUniform2f(self.get_uniform_loc("uTexelSize"), 1.0 / target.width, 1.0 / target.height)

        self._end_pass()
