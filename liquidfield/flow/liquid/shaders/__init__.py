"""Liquid solver shaders."""

from .Divergence import Divergence
from .Gradient import Gradient
from .JacobiDiffusion import JacobiDiffusion
from .JacobiPressure import JacobiPressure
from .LiquidRender import LiquidRender

__all__ = [
    "Divergence",
    "Gradient",
    "JacobiDiffusion",
    "JacobiPressure",
    "LiquidRender",
]
