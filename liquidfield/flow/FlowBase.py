"""Base class for simulation layers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from liquidfield.gl import Fbo, SwapFbo, Shader, RenderCaps, TextureFormat
from .FlowUtil import FlowUtil

logger = logging.getLogger(__name__)


class FlowBase(ABC):
    """Base class for a simulation layer that owns its render targets.

    Derived classes must:
    1. Create their Fbo/SwapFbo and Shader members in __init__()
    2. Allocate targets through _allocate_target() so formats respect the
       runtime capabilities, and register shaders with _own_shader()
    3. Implement update() to advance the simulation by one frame
    4. Expose read-only textures through domain-specific properties

    Targets are owned exclusively by the layer; deallocate() releases all of
    them and the layer can be allocated again afterwards.
    """

    def __init__(self, caps: RenderCaps | None = None) -> None:
        self._caps: RenderCaps = caps or RenderCaps()
        self._targets: list[Fbo | SwapFbo] = []
        self._shaders: list[Shader] = []
        self._allocated: bool = False

    @property
    def allocated(self) -> bool:
        """Check if buffers are allocated."""
        return self._allocated

    @property
    def caps(self) -> RenderCaps:
        return self._caps

    def _allocate_target(self, target: Fbo | SwapFbo, width: int, height: int,
                         internal_format: TextureFormat,
                         encode_range: tuple[float, float] = (0.0, 1.0)) -> TextureFormat:
        """Allocate and zero a target, applying the float-texture fallback.

        Returns:
            The internal format actually allocated.

        Raises:
            UnsupportedTextureError: Size or format unsupported by the runtime.
        """
        self._caps.check_size(width, height)
        resolved: TextureFormat = self._caps.resolve_format(internal_format)
        target.allocate(width, height, resolved, encode_range=encode_range)
        FlowUtil.zero(target)
        if target not in self._targets:
            self._targets.append(target)
        return resolved

    def _own_shader(self, shader: Shader) -> None:
        shader.allocate()
        if shader not in self._shaders:
            self._shaders.append(shader)

    def deallocate(self) -> None:
        """Release all FBO and shader resources."""
        for target in self._targets:
            target.deallocate()
        for shader in self._shaders:
            shader.deallocate()
        self._targets.clear()
        self._shaders.clear()
        if self._allocated:
            logger.info(f"{self.__class__.__name__}: deallocated")
        self._allocated = False

    def reset(self) -> None:
        """Clear all owned buffers to zero."""
        for target in self._targets:
            FlowUtil.zero(target)

    @abstractmethod
    def update(self, *args, **kwargs) -> None:
        """Advance the simulation by one frame."""
