"""Fluid field shaders."""

from .CurlImpulse import CurlImpulse

__all__ = [
    "CurlImpulse",
]
