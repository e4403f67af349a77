"""Flow utility functions for FBO operations."""

from __future__ import annotations

import logging

from liquidfield.gl import Fbo, SwapFbo, Texture

logger = logging.getLogger(__name__)


class FlowUtil:
    """Static utility methods for flow FBO operations.

    The helper shaders are created lazily and shared by all callers. Every
    helper binds its target in a with block, so a pass that raises leaves
    nothing bound.
    """

    @staticmethod
    def zero(fbo: Fbo | SwapFbo) -> None:
        """Clear FBO (both slots of a SwapFbo) to zero."""
        if isinstance(fbo, SwapFbo):
            fbo.clear_all(0.0, 0.0, 0.0, 0.0)
        else:
            fbo.clear(0.0, 0.0, 0.0, 0.0)

    @staticmethod
    def blit(dst_fbo: Fbo, src_texture: Texture) -> None:
        """Copy/stretch source texture to destination FBO."""
        if not dst_fbo.allocated:
            logger.warning("FlowUtil.blit: destination not allocated")
            return

        if not hasattr(FlowUtil, '_blit_shader'):
            from .shaders.Blit import Blit
            FlowUtil._blit_shader = Blit()
        FlowUtil._blit_shader.allocate()

        with dst_fbo:
            FlowUtil._blit_shader.use(src_texture)

    @staticmethod
    def copy(dst_fbo: Fbo, src_fbo: Fbo | SwapFbo) -> None:
        """Copy the readable texture of src_fbo to dst_fbo."""
        FlowUtil.blit(dst_fbo, src_fbo.texture)

    @staticmethod
    def add(dst_fbo: SwapFbo, src_texture: Texture, strength: float = 1.0) -> None:
        """curr = prev + src * strength, through the ping-pong pair."""
        if not hasattr(FlowUtil, '_add_shader'):
            from .shaders.Blend import Blend
            FlowUtil._add_shader = Blend()
        FlowUtil._add_shader.allocate()

        dst_fbo.swap()
        with dst_fbo:
            FlowUtil._add_shader.use(dst_fbo.back_texture, src_texture, 1.0, strength)

    @staticmethod
    def set(dst_fbo: SwapFbo, src: Texture, strength: float = 1.0) -> None:
        """Replace target with attenuated source, resampled to the target size (strength 0.0 clears)."""
        if not hasattr(FlowUtil, '_scale_shader'):
            from .shaders.Scale import Scale
            FlowUtil._scale_shader = Scale()
        FlowUtil._scale_shader.allocate()

        dst_fbo.swap()
        with dst_fbo:
            FlowUtil._scale_shader.use(src, strength)

    @staticmethod
    def scale(dst_fbo: SwapFbo, strength: float) -> None:
        """Multiply the field in place (through the ping-pong pair)."""
        FlowUtil.set(dst_fbo, dst_fbo.texture, strength)

    @staticmethod
    def clamp(dst_fbo: SwapFbo, min_value: float, max_value: float) -> None:
        """Clamp all channels of the field to [min_value, max_value]."""
        if not hasattr(FlowUtil, '_clamp_shader'):
            from .shaders.Clamp import Clamp
            FlowUtil._clamp_shader = Clamp()
        FlowUtil._clamp_shader.allocate()

        dst_fbo.swap()
        with dst_fbo:
            FlowUtil._clamp_shader.use(dst_fbo.back_texture, min_value, max_value)

    @staticmethod
    def deallocate() -> None:
        """Release the shared helper shaders; call before destroying the context."""
        for name in ('_blit_shader', '_add_shader', '_scale_shader', '_clamp_shader'):
            shader = getattr(FlowUtil, name, None)
            if shader is not None:
                shader.deallocate()
