"""Generic flow shaders shared by the engines."""

from .Advect import Advect
from .Blend import Blend
from .Blit import Blit
from .Clamp import Clamp
from .Noise import Noise
from .Scale import Scale
from .Splat import Splat

__all__ = [
    "Advect",
    "Blend",
    "Blit",
    "Clamp",
    "Noise",
    "Scale",
    "Splat",
]
