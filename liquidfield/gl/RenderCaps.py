"""Runtime capabilities of the render backend.

Decides which texture formats and sizes can be allocated. Float formats the
runtime lacks fall back to normalized 8-bit formats; anything else that
cannot be honoured fails fast with UnsupportedTextureError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from OpenGL.GL import *  # type: ignore

from liquidfield.gl.Texture import (
    TextureFormat, get_normalized_format, is_float_format, is_half_float_format
)

logger = logging.getLogger(__name__)

MIN_TEXTURE_SIZE: int = 8


class UnsupportedTextureError(RuntimeError):
    """Requested texture size or format is not available on this runtime."""


@dataclass(frozen=True)
class RenderCaps:
    max_texture_size: int = 8192
    float_textures: bool = True
    half_float_textures: bool = True
    normalized_textures: bool = True

    def supports(self, internal_format: TextureFormat) -> bool:
        if internal_format == TextureFormat.NONE:
            return False
        if is_half_float_format(internal_format):
            return self.half_float_textures
        if is_float_format(internal_format):
            return self.float_textures
        return self.normalized_textures

    def resolve_format(self, internal_format: TextureFormat) -> TextureFormat:
        """Format to allocate for a requested format.

        Unsupported float formats degrade to the 8-bit normalized format with
        the same channel layout. Values then quantize to 256 levels inside the
        texture's encode range, which shows up as banding.

        Raises:
            UnsupportedTextureError: Neither the format nor its fallback is supported.
        """
        if self.supports(internal_format):
            return internal_format
        if is_float_format(internal_format):
            fallback: TextureFormat = get_normalized_format(internal_format)
            if self.supports(fallback):
                logger.info(f"RenderCaps: {internal_format.name} not supported, falling back to {fallback.name}")
                return fallback
        raise UnsupportedTextureError(f"Texture format {internal_format.name} is not supported by this runtime")

    def check_size(self, width: int, height: int) -> None:
        """Raises UnsupportedTextureError for sizes outside [MIN_TEXTURE_SIZE, max_texture_size]."""
        for name, value in (('width', width), ('height', height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise UnsupportedTextureError(f"Texture {name} must be an integer, got {value!r}")
            if value < MIN_TEXTURE_SIZE:
                raise UnsupportedTextureError(f"Texture {name} {value} is below the minimum of {MIN_TEXTURE_SIZE}")
            if value > self.max_texture_size:
                raise UnsupportedTextureError(f"Texture {name} {value} exceeds the maximum of {self.max_texture_size}")

    @classmethod
    def from_current_context(cls) -> RenderCaps:
        """Query the OpenGL context current on this thread.

        Requires a current context, e.g. from HeadlessContext.create() or the
        host window that composites the simulation output.
        """
        max_size = int(glGetIntegerv(GL_MAX_TEXTURE_SIZE))
        version: str = (glGetString(GL_VERSION) or b'').decode(errors='replace')
        is_es: bool = version.startswith('OpenGL ES')
        numbers: str = version.split()[2] if is_es and len(version.split()) > 2 else version.split(' ')[0]
        try:
            major = int(numbers.split('.')[0])
        except ValueError:
            major = 0

        extensions: set[str] = set()
        if major >= 3:
            for i in range(int(glGetIntegerv(GL_NUM_EXTENSIONS))):
                extensions.add(glGetStringi(GL_EXTENSIONS, i).decode(errors='replace'))

        if is_es:
            float_textures = 'GL_EXT_color_buffer_float' in extensions
            half_float_textures = float_textures or 'GL_EXT_color_buffer_half_float' in extensions
        else:
            float_textures = major >= 3 or 'GL_ARB_texture_float' in extensions
            half_float_textures = float_textures or 'GL_ARB_half_float_pixel' in extensions

        caps = cls(
            max_texture_size=max_size,
            float_textures=float_textures,
            half_float_textures=half_float_textures,
            normalized_textures=True,
        )
        logger.info(f"RenderCaps: {version} -> {caps}")
        return caps
