"""Liquid Solver - stable-fluids simulation with a shaded density surface.

Implements velocity, density and pressure fields with:
- Gaussian pointer splats (force and density)
- Semi-Lagrangian advection with dissipation
- Optional viscosity diffusion
- Jacobi pressure projection
- Lazy surface render (noise, normal, Lambert + Blinn specular)

After Stam, "Stable Fluids" (1999).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from liquidfield.ConfigBase import ConfigBase, config_field
from liquidfield.gl import Fbo, SwapFbo, Texture, TextureFormat, RenderCaps
from liquidfield.utils import Point2f
from .. import FlowBase, FlowUtil
from ..shaders import Advect, Noise, Splat
from .shaders import Divergence, Gradient, JacobiDiffusion, JacobiPressure, LiquidRender

logger = logging.getLogger(__name__)

# Encode ranges of the 8-bit fallback formats
PRESSURE_RANGE: float = 8.0
DIVERGENCE_RANGE: float = 256.0


@dataclass
class LiquidSolverConfig(ConfigBase):
    """Configuration for the liquid solver."""

    texture_size: int = config_field(
        128, fixed=True, min=8, max=1024,
        description="Square simulation grid resolution, fixed after construction"
    )

    # Simulation
    timestep: float = config_field(
        0.001, min=0.0001, max=0.01,
        description="Fixed advection step, independent of the frame time"
    )
    dissipation: float = config_field(
        0.904, min=0.8, max=1.0,
        description="Density multiplier per frame"
    )
    iterations: int = config_field(
        12, min=1, max=60,
        description="Jacobi pressure iterations per frame"
    )
    velocity_dissipation: float = config_field(
        0.98, min=0.8, max=1.0,
        description="Velocity multiplier per frame"
    )
    viscosity: float = config_field(
        0.0, min=0.0, max=1.0,
        description="Fluid thickness, 0.0 disables the diffusion pass"
    )
    viscosity_iterations: int = config_field(
        20, min=1, max=60,
        description="Jacobi iterations of the diffusion pass"
    )

    # Forcing
    force_radius: float = config_field(
        0.08, min=0.01, max=0.3,
        description="Gaussian splat width in UV"
    )
    force_strength: float = config_field(
        4.5, min=0.0, max=20.0,
        description="Velocity splat magnitude along the pointer direction"
    )
    splat_gain: float = config_field(
        5.0, min=0.0, max=20.0,
        description="Density splat magnitude at the pointer"
    )
    velocity_limit: float = config_field(
        8.0, min=0.1, max=64.0,
        description="Velocity is clamped to ±limit after splatting"
    )
    density_limit: float = config_field(
        1.0, min=0.1, max=8.0,
        description="Density is clamped to [0, limit] after splatting"
    )

    # Rendering
    density_mul: float = config_field(
        1.8, min=0.0, max=5.0,
        description="Density multiplier before shading"
    )
    noise_scale: float = config_field(
        9.5, min=0.5, max=40.0,
        description="Noise lattice cells across the surface"
    )
    noise_speed: float = config_field(
        0.02, min=0.0, max=1.0,
        description="Noise time per second"
    )
    noise_amp: float = config_field(
        0.1, min=0.0, max=1.0,
        description="Relative density modulation by noise"
    )
    specular_pow: float = config_field(
        8.0, min=1.0, max=128.0,
        description="Blinn specular exponent"
    )
    specular_int: float = config_field(
        1.8, min=0.0, max=5.0,
        description="Specular intensity"
    )
    normal_z: float = config_field(
        0.3, min=0.01, max=2.0,
        description="Normal z component, lower = steeper surface"
    )
    diffuse_gain: float = config_field(
        0.3, min=0.0, max=1.0,
        description="Share of the base color that is lit"
    )
    density_edge: float = config_field(
        0.5, min=0.01, max=1.0,
        description="Density at which the liquid body is solid"
    )
    alpha_edge: float = config_field(
        0.3, min=0.01, max=1.0,
        description="Body value at which the surface is opaque"
    )
    alpha_max: float = config_field(
        0.9, min=0.0, max=1.0,
        description="Maximum surface opacity"
    )
    base_color: tuple[float, float, float] = config_field(
        (0.8, 0.85, 0.85),
        description="Body color (RGB)"
    )
    highlight_color: tuple[float, float, float] = config_field(
        (0.9, 0.9, 0.9),
        description="Specular color (RGB)"
    )


class LiquidSolver(FlowBase):
    """Stable-fluids solver producing a shaded RGBA liquid texture.

    Fields:
        - velocity (RG32F)
        - density (R32F)
        - pressure (R32F)
        - divergence (R32F, intermediate result)
        - shaded density (RGBA32F, premultiplied)

    Update pipeline:
        1. Splat force and density at the pointer, clamp
        2. Advect velocity (with velocity dissipation)
        3. Apply viscosity (if enabled)
        4. Compute divergence
        5. Solve for pressure
        6. Subtract pressure gradient
        7. Advect density (with dissipation)

    The shaded texture is rendered on demand, once per update / set_time.
    """

    def __init__(self, config: LiquidSolverConfig | None = None, caps: RenderCaps | None = None) -> None:
        super().__init__(caps)

        self.config: LiquidSolverConfig = config or LiquidSolverConfig()

        # Simulation fields (SwapFbo for ping-pong)
        self._velocity_fbo: SwapFbo = SwapFbo()
        self._density_fbo: SwapFbo = SwapFbo()
        self._pressure_fbo: SwapFbo = SwapFbo()

        # Intermediate result FBOs (single buffer, no ping-pong)
        self._divergence_fbo: Fbo = Fbo()
        self._velocity_origin_fbo: Fbo = Fbo()
        self._noise_fbo: Fbo = Fbo()
        self._shaded_fbo: Fbo = Fbo()

        self._formats: dict[str, TextureFormat] = {}

        # Shaders
        self._splat_shader: Splat = Splat()
        self._advect_shader: Advect = Advect()
        self._divergence_shader: Divergence = Divergence()
        self._gradient_shader: Gradient = Gradient()
        self._jacobi_pressure_shader: JacobiPressure = JacobiPressure()
        self._jacobi_diffusion_shader: JacobiDiffusion = JacobiDiffusion()
        self._noise_shader: Noise = Noise()
        self._render_shader: LiquidRender = LiquidRender()

        self._time: float = 0.0
        self._render_dirty: bool = True

        self.allocate()

    # ========== Properties (Domain-specific API) ==========

    @property
    def texture_size(self) -> int:
        return self.config.texture_size

    @property
    def velocity(self) -> Texture:
        """RG32F velocity field."""
        return self._velocity_fbo.texture

    @property
    def density(self) -> Texture:
        """R32F density field."""
        return self._density_fbo.texture

    @property
    def pressure(self) -> Texture:
        """R32F pressure field."""
        return self._pressure_fbo.texture

    @property
    def divergence(self) -> Texture:
        """R32F divergence field (intermediate result)."""
        return self._divergence_fbo.texture

    @property
    def shaded_density(self) -> Texture:
        """RGBA32F premultiplied liquid surface, rendered if out of date."""
        self._render()
        return self._shaded_fbo.texture

    @property
    def formats(self) -> dict[str, TextureFormat]:
        """Internal format actually allocated per field."""
        return dict(self._formats)

    # ========== Allocation ==========

    def allocate(self) -> None:
        """Allocate all fields. Raises UnsupportedTextureError for unsupported sizes/formats."""
        size: int = self.config.texture_size
        params: dict[str, Any] = self.config.snapshot()
        velocity_range = (-params['velocity_limit'], params['velocity_limit'])
        density_range = (0.0, params['density_limit'])

        self._formats = {
            'velocity':   self._allocate_target(self._velocity_fbo, size, size, TextureFormat.RG32F, velocity_range),
            'density':    self._allocate_target(self._density_fbo, size, size, TextureFormat.R32F, density_range),
            'pressure':   self._allocate_target(self._pressure_fbo, size, size, TextureFormat.R32F,
                                                (-PRESSURE_RANGE, PRESSURE_RANGE)),
            'divergence': self._allocate_target(self._divergence_fbo, size, size, TextureFormat.R32F,
                                                (-DIVERGENCE_RANGE, DIVERGENCE_RANGE)),
            'viscosity':  self._allocate_target(self._velocity_origin_fbo, size, size, TextureFormat.RG32F, velocity_range),
            'noise':      self._allocate_target(self._noise_fbo, size, size, TextureFormat.R16F),
            'shaded':     self._allocate_target(self._shaded_fbo, size, size, TextureFormat.RGBA32F),
        }

        for shader in (self._splat_shader, self._advect_shader, self._divergence_shader, self._gradient_shader,
                       self._jacobi_pressure_shader, self._jacobi_diffusion_shader, self._noise_shader,
                       self._render_shader):
            self._own_shader(shader)

        self._allocated = True
        self._render_dirty = True
        logger.info(f"LiquidSolver: allocated {size}x{size} "
                    f"(velocity {self._formats['velocity'].name}, density {self._formats['density'].name})")

    def reset(self) -> None:
        """Reset all simulation fields to zero."""
        super().reset()
        self._render_dirty = True

    # ========== Input Methods ==========

    def set_velocity(self, texture: Texture, strength: float = 1.0) -> None:
        """Set velocity field."""
        FlowUtil.set(self._velocity_fbo, texture, strength)

    def add_velocity(self, texture: Texture, strength: float = 1.0) -> None:
        """Add to velocity field."""
        FlowUtil.add(self._velocity_fbo, texture, strength)

    def add_density(self, texture: Texture, strength: float = 1.0) -> None:
        """Add to density field."""
        FlowUtil.add(self._density_fbo, texture, strength)
        self._render_dirty = True

    def set_time(self, time: float) -> None:
        """Set the scene time in seconds; drives the surface noise."""
        self._time = float(time)
        self._render_dirty = True

    # ========== Update Pipeline ==========

    def _apply_config(self) -> dict[str, Any]:
        return self.config.snapshot()

    def update(self, pointer_pos: Point2f | Sequence[float] | None = None,
               pointer_velocity: Point2f | Sequence[float] | None = None) -> None:
        """Advance the simulation by one frame.

        Args:
            pointer_pos: Pointer in UV, None when the pointer is inactive
            pointer_velocity: Pointer velocity in UV per frame
        """
        if not self._allocated:
            return

        params: dict[str, Any] = self._apply_config()

        # ===== STEP 1: SPLAT =====
        if pointer_pos is not None:
            position = Point2f.of(pointer_pos)
            velocity = Point2f.of(pointer_velocity) if pointer_velocity is not None else Point2f()
            self._splat(position, velocity, params)

        # ===== STEP 2: ADVECT VELOCITY (with velocity dissipation) =====
        self._velocity_fbo.swap()
        with self._velocity_fbo:
            self._advect_shader.use(
                self._velocity_fbo.back_texture,    # Source
                self._velocity_fbo.back_texture,    # Velocity (self-advection)
                params['timestep'],
                params['velocity_dissipation']
            )

        # ===== STEP 3: VISCOSITY =====
        if params['viscosity'] > 0.0:
            self._diffuse(params['viscosity'] * params['timestep'], params['viscosity_iterations'])

        # ===== STEP 4-6: PRESSURE PROJECTION =====
        self.project(params['iterations'])

        # ===== STEP 7: ADVECT DENSITY =====
        self._density_fbo.swap()
        with self._density_fbo:
            self._advect_shader.use(
                self._density_fbo.back_texture,     # Source
                self._velocity_fbo.texture,         # Velocity
                params['timestep'],
                params['dissipation']
            )

        self._render_dirty = True

    def _splat(self, position: Point2f, velocity: Point2f, params: dict[str, Any]) -> None:
        direction: Point2f = velocity.normalized()
        force: float = params['force_strength']

        self._velocity_fbo.swap()
        with self._velocity_fbo:
            self._splat_shader.use(
                self._velocity_fbo.back_texture,
                position,
                params['force_radius'],
                (direction.x * force, direction.y * force)
            )

        self._density_fbo.swap()
        with self._density_fbo:
            self._splat_shader.use(
                self._density_fbo.back_texture,
                position,
                params['force_radius'],
                (params['splat_gain'],)
            )

        FlowUtil.clamp(self._velocity_fbo, -params['velocity_limit'], params['velocity_limit'])
        FlowUtil.clamp(self._density_fbo, 0.0, params['density_limit'])

    def _diffuse(self, viscosity_dt: float, iterations: int) -> None:
        FlowUtil.copy(self._velocity_origin_fbo, self._velocity_fbo)
        for _ in range(max(1, iterations)):
            self._velocity_fbo.swap()
            with self._velocity_fbo:
                self._jacobi_diffusion_shader.use(
                    self._velocity_fbo.back_texture,
                    self._velocity_origin_fbo.texture,
                    viscosity_dt
                )

    def compute_divergence(self) -> Texture:
        """Compute the divergence of the current velocity into the scratch field."""
        with self._divergence_fbo:
            self._divergence_shader.use(self._velocity_fbo.texture)
        return self._divergence_fbo.texture

    def project(self, iterations: int | None = None) -> None:
        """Make the velocity field approximately divergence free.

        Pressure starts from zero every call, followed by the given number of
        Jacobi iterations. update() passes the iteration count of its own
        config snapshot; only direct callers fall back to config.iterations.
        """
        if iterations is None:
            iterations = self.config.iterations

        self.compute_divergence()

        FlowUtil.zero(self._pressure_fbo)
        for _ in range(max(0, iterations)):
            self._pressure_fbo.swap()
            with self._pressure_fbo:
                self._jacobi_pressure_shader.use(
                    self._pressure_fbo.back_texture,
                    self._divergence_fbo.texture
                )

        self._velocity_fbo.swap()
        with self._velocity_fbo:
            self._gradient_shader.use(
                self._velocity_fbo.back_texture,
                self._pressure_fbo.texture
            )

    # ========== Output ==========

    def _render(self) -> None:
        if not self._render_dirty or not self._allocated:
            return
        params: dict[str, Any] = self.config.snapshot()

        with self._noise_fbo:
            self._noise_shader.use(params['noise_scale'], self._time * params['noise_speed'])

        with self._shaded_fbo:
            self._render_shader.use(
                self._density_fbo.texture,
                self._noise_fbo.texture,
                params['density_mul'],
                params['noise_amp'],
                params['specular_pow'],
                params['specular_int'],
                params['normal_z'],
                params['diffuse_gain'],
                params['density_edge'],
                params['alpha_edge'],
                params['alpha_max'],
                params['base_color'],
                params['highlight_color']
            )
        self._render_dirty = False

    def copy_density_to(self, target: Fbo) -> None:
        """Blit the shaded liquid surface into a caller-owned render target.

        Renders first when an update or set_time happened since the last
        render; otherwise repeated calls write identical content.
        """
        self._render()
        FlowUtil.blit(target, self._shaded_fbo.texture)
