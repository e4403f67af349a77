"""Fluid Field - pointer-driven 2D distortion field.

A decaying vector field stirred by the pointer:
- Semi-Lagrangian self-advection
- Curl-noise impulse around the pointer
- Uniform decay

No pressure projection; the field is not divergence free and is meant as an
artistic distortion source, sampled by the compositing pass.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from liquidfield.ConfigBase import ConfigBase, config_field
from liquidfield.gl import SwapFbo, Texture, TextureFormat, RenderCaps
from liquidfield.utils import Point2f
from .. import FlowBase, FlowUtil
from ..Pointer import PointerState
from ..shaders import Advect
from .shaders import CurlImpulse

logger = logging.getLogger(__name__)

# Encode range of the 8-bit fallback format
FIELD_RANGE: float = 1.0
# Noise time advanced per update
NOISE_TIME_STEP: float = 0.05


@dataclass
class FluidFieldConfig(ConfigBase):
    """Configuration for the fluid field."""

    force: float = config_field(
        1.0, min=0.0, max=5.0,
        description="Impulse strength per unit of pointer velocity"
    )
    curl: float = config_field(
        1.0, min=0.0, max=5.0,
        description="Curl-noise swirl relative to force"
    )
    decay: float = config_field(
        0.948, min=0.8, max=0.999,
        description="Field multiplier per frame, below 1.0"
    )
    radius: float = config_field(
        0.21, min=0.01, max=0.6,
        description="Gaussian impulse width in UV"
    )
    influence: float = config_field(
        0.06, min=0.0, max=0.3,
        description="Distortion strength used by the compositing pass"
    )
    advect: float = config_field(
        0.5, min=0.0, max=2.0,
        description="Self-advection distance per frame, UV per unit of field"
    )


class FluidField(FlowBase):
    """Non-projected 2D flow field perturbed by pointer motion.

    Owns one RG16F ping-pong field (RG8 on runtimes without float textures).

    Update pipeline:
        1. Self-advect the field along itself
        2. Add the curl-noise impulse at the pointer
        3. Multiply by decay
    """

    def __init__(self, resolution: int = 128, config: FluidFieldConfig | None = None,
                 caps: RenderCaps | None = None) -> None:
        super().__init__(caps)

        self.config: FluidFieldConfig = config or FluidFieldConfig()

        self._resolution: int = resolution
        self._field_fbo: SwapFbo = SwapFbo()
        self._internal_format: TextureFormat = TextureFormat.NONE

        # Shaders
        self._advect_shader: Advect = Advect()
        self._curl_impulse_shader: CurlImpulse = CurlImpulse()

        # Ephemeral inputs
        self._pointer: PointerState = PointerState()
        self._aspect: float = 1.0
        self._time: float = 0.0

        self.allocate()

    # ========== Properties ==========

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def texture(self) -> Texture:
        """RG field, zero before the first update."""
        return self._field_fbo.texture

    @property
    def internal_format(self) -> TextureFormat:
        return self._internal_format

    @property
    def influence(self) -> float:
        return self.config.influence

    def get_texture(self) -> Texture:
        return self._field_fbo.texture

    # ========== Allocation ==========

    def allocate(self) -> None:
        """Allocate the field. Raises UnsupportedTextureError for unsupported sizes/formats."""
        self._internal_format = self._allocate_target(
            self._field_fbo, self._resolution, self._resolution,
            TextureFormat.RG16F, encode_range=(-FIELD_RANGE, FIELD_RANGE)
        )
        self._own_shader(self._advect_shader)
        self._own_shader(self._curl_impulse_shader)
        self._allocated = True
        logger.info(f"FluidField: allocated {self._resolution}x{self._resolution} {self._internal_format.name}")

    # ========== Input ==========

    def set_pointer(self, position: Point2f | None, velocity: Point2f | None = None, aspect: float = 1.0) -> None:
        """Set the pointer for the next update.

        Args:
            position: Pointer in UV, None when there is no pointer
            velocity: Pointer velocity in UV per frame
            aspect: Viewport width/height
        """
        self._aspect = aspect if aspect > 0.0 else 1.0
        if position is None:
            self._pointer = PointerState()
            return
        self._pointer = PointerState(
            position=Point2f.of(position),
            velocity=Point2f.of(velocity) if velocity is not None else Point2f(),
            active=True,
        )

    def set_pointer_state(self, state: PointerState, aspect: float = 1.0) -> None:
        self.set_pointer(state.position if state.active else None, state.velocity, aspect)

    # ========== Update Pipeline ==========

    def _apply_config(self) -> dict[str, Any]:
        return self.config.snapshot()

    def update(self) -> None:
        """Advance the field by one step."""
        if not self._allocated:
            return

        params: dict[str, Any] = self._apply_config()

        # ===== STEP 1: SELF-ADVECT =====
        self._field_fbo.swap()
        with self._field_fbo:
            self._advect_shader.use(
                self._field_fbo.back_texture,   # Source field
                self._field_fbo.back_texture,   # Velocity (self-advection)
                params['advect'],
                1.0,
                self._aspect
            )

        # ===== STEP 2: POINTER IMPULSE =====
        if self._pointer.active:
            self._field_fbo.swap()
            with self._field_fbo:
                self._curl_impulse_shader.use(
                    self._field_fbo.back_texture,
                    self._pointer.position,
                    self._pointer.velocity,
                    params['radius'],
                    params['force'],
                    params['curl'],
                    self._aspect,
                    self._time
                )

        # ===== STEP 3: DECAY =====
        FlowUtil.scale(self._field_fbo, params['decay'])

        self._time += NOISE_TIME_STEP
