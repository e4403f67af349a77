"""LiquidRender shader - shade the density field as a liquid surface.

Density is treated as a height field. Its gradient gives a surface normal,
lit by one fixed directional light:

    d       = clamp(density × density_mul) × (1 + noise_amp × (2·noise - 1))
    n       = normalize(-∂d/∂x, -∂d/∂y, normal_z)
    diffuse = max(n·L, 0) × diffuse_gain
    spec    = clamp(n·H)^specular_pow × specular_int
    color   = base × ((1 - diffuse_gain) + diffuse) + highlight × spec
    alpha   = min(smoothstep(0, alpha_edge, smoothstep(0, density_edge, d)), alpha_max)

Output is premultiplied RGBA.
"""

from typing import Sequence

from OpenGL.GL import *  # type: ignore
from liquidfield.gl.Shader import Shader
from liquidfield.gl import Texture

LIGHT_DIR: tuple[float, float, float] = (-0.35, 0.55, 1.0)


class LiquidRender(Shader):
    """Noise-modulated, lit, premultiplied liquid surface."""

    def use(self, density: Texture, noise: Texture,
            density_mul: float, noise_amp: float,
            specular_pow: float, specular_int: float,
            normal_z: float, diffuse_gain: float,
            density_edge: float, alpha_edge: float, alpha_max: float,
            base_color: Sequence[float], highlight_color: Sequence[float]) -> None:
        if self._begin_pass(density, noise) is None:
            return

        self.bind_texture(density, "uDensity")
        self.bind_texture(noise, "uNoise")

        glUniform1f(self.get_uniform_loc("uDensityMul"), density_mul)
        glUniform1f(self.get_uniform_loc("uNoiseAmp"), noise_amp)
        glUniform1f(self.get_uniform_loc("uSpecularPow"), max(specular_pow, 1e-3))
        glUniform1f(self.get_uniform_loc("uSpecularInt"), specular_int)
        glUniform1f(self.get_uniform_loc("uNormalZ"), max(normal_z, 1e-3))
        glUniform1f(self.get_uniform_loc("uDiffuseGain"), diffuse_gain)
        glUniform1f(self.get_uniform_loc("uDensityEdge"), density_edge)
        glUniform1f(self.get_uniform_loc("uAlphaEdge"), alpha_edge)
        glUniform1f(self.get_uniform_loc("uAlphaMax"), alpha_max)
        glUniform3f(self.get_uniform_loc("uBaseColor"), *base_color[:3])
        glUniform3f(self.get_uniform_loc("uHighlightColor"), *highlight_color[:3])
        glUniform3f(self.get_uniform_loc("uLightDir"), *LIGHT_DIR)

        self._end_pass()
