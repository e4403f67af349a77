# Base classes
from .FlowBase import FlowBase
from .FlowUtil import FlowUtil
from .Pointer import PointerState, PointerTracker, ndc_to_uv, uv_to_ndc, ndc_velocity_to_uv

# Engines
from .field import FluidField, FluidFieldConfig
from .liquid import LiquidSolver, LiquidSolverConfig

__all__ = [
    'FlowBase', 'FlowUtil',
    'PointerState', 'PointerTracker', 'ndc_to_uv', 'uv_to_ndc', 'ndc_velocity_to_uv',
    'FluidField', 'FluidFieldConfig',
    'LiquidSolver', 'LiquidSolverConfig',
]
