"""Real-time fluid layers for an interactive generative scene.

FluidField is a pointer-driven distortion field, LiquidSolver a stable-fluids
solver that renders its density as a shaded liquid surface. Both advance once
per animation frame and expose their results as textures.
"""

__version__ = "0.1.0"

from liquidfield.ConfigBase import ConfigBase, config_field
from liquidfield.gl import RenderCaps, UnsupportedTextureError, FeedbackLoopError, Fbo, SwapFbo, Texture, TextureFormat
from liquidfield.flow import (
    FluidField, FluidFieldConfig, LiquidSolver, LiquidSolverConfig,
    PointerState, PointerTracker, ndc_to_uv, uv_to_ndc,
)
from liquidfield.Settings import Settings

__all__ = [
    'ConfigBase', 'config_field',
    'RenderCaps', 'UnsupportedTextureError', 'FeedbackLoopError',
    'Fbo', 'SwapFbo', 'Texture', 'TextureFormat',
    'FluidField', 'FluidFieldConfig', 'LiquidSolver', 'LiquidSolverConfig',
    'PointerState', 'PointerTracker', 'ndc_to_uv', 'uv_to_ndc',
    'Settings',
]
