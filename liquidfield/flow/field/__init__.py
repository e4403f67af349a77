from .FluidField import FluidField, FluidFieldConfig

__all__ = ['FluidField', 'FluidFieldConfig']
