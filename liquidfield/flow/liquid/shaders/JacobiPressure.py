"""JacobiPressure shader - Iterative Poisson pressure solver."""

from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture


class JacobiPressure(Shader):
    """Jacobi iterative solver for Poisson pressure equation.

        p = (pL + pR + pB + pT - div × h²) / 4

    Neighbours outside the grid repeat the edge texel (zero normal gradient).
    """

    def use(self, source: Texture, divergence: Texture) -> None:
        """Apply one Jacobi iteration.

        Args:
            source: Previous pressure estimate (R32F)
            divergence: Velocity divergence (R32F)
        """
        if self._begin_pass(source, divergence) is None:
            return
        self.bind_texture(source, "uPressure")
        self.bind_texture(divergence, "uDivergence")
        self._end_pass()
