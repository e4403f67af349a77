"""OpenGL textures with the internal formats used by the simulation.

Texel data read back to the host is a numpy array laid out as
(height, width, channels) with row 0 at v = 0 (bottom), matching the GL
texture origin.

Normalized 8-bit formats store values of an encode range. A range that
spans zero is stored signed-normalized style: code 128 is exactly zero and
codes 1 and 255 are -range and +range. Other ranges map lo..hi onto 0..255.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
from OpenGL.GL import *  # type: ignore

logger = logging.getLogger(__name__)


class TextureFormat(Enum):
    R8 =        'r8'
    RG8 =       'rg8'
    RGBA8 =     'rgba8'
    R16F =      'r16f'
    RG16F =     'rg16f'
    RGBA16F =   'rgba16f'
    R32F =      'r32f'
    RG32F =     'rg32f'
    RGBA32F =   'rgba32f'
    NONE =      'none'


class Filter(Enum):
    NEAREST = 0
    LINEAR =  1


def get_num_channels(internal_format: TextureFormat) -> int:
    """Number of channels of an internal format (0 for NONE)."""
    if internal_format in (TextureFormat.R8, TextureFormat.R16F, TextureFormat.R32F): return 1
    if internal_format in (TextureFormat.RG8, TextureFormat.RG16F, TextureFormat.RG32F): return 2
    if internal_format in (TextureFormat.RGBA8, TextureFormat.RGBA16F, TextureFormat.RGBA32F): return 4
    return 0


def get_internal_format(internal_format: TextureFormat) -> Constant:
    if internal_format == TextureFormat.R8: return GL_R8
    if internal_format == TextureFormat.RG8: return GL_RG8
    if internal_format == TextureFormat.RGBA8: return GL_RGBA8
    if internal_format == TextureFormat.R16F: return GL_R16F
    if internal_format == TextureFormat.RG16F: return GL_RG16F
    if internal_format == TextureFormat.RGBA16F: return GL_RGBA16F
    if internal_format == TextureFormat.R32F: return GL_R32F
    if internal_format == TextureFormat.RG32F: return GL_RG32F
    if internal_format == TextureFormat.RGBA32F: return GL_RGBA32F
    return GL_NONE


def get_format(internal_format: TextureFormat) -> Constant:
    """Pixel format for glTexImage2D / glReadPixels."""
    channels: int = get_num_channels(internal_format)
    if channels == 1: return GL_RED
    if channels == 2: return GL_RG
    if channels == 4: return GL_RGBA
    return GL_NONE


def get_data_type(internal_format: TextureFormat) -> Constant:
    """Pixel transfer type: the raw 8-bit codes, or floats."""
    if internal_format in (TextureFormat.R8, TextureFormat.RG8, TextureFormat.RGBA8): return GL_UNSIGNED_BYTE
    if internal_format == TextureFormat.NONE: return GL_NONE
    return GL_FLOAT


def is_float_format(internal_format: TextureFormat) -> bool:
    return get_data_type(internal_format) == GL_FLOAT


def is_half_float_format(internal_format: TextureFormat) -> bool:
    return internal_format in (TextureFormat.R16F, TextureFormat.RG16F, TextureFormat.RGBA16F)


def get_normalized_format(internal_format: TextureFormat) -> TextureFormat:
    """8-bit normalized format with the same channel layout."""
    channels: int = get_num_channels(internal_format)
    if channels == 1: return TextureFormat.R8
    if channels == 2: return TextureFormat.RG8
    if channels == 4: return TextureFormat.RGBA8
    return TextureFormat.NONE


def get_encoding(encode_range: tuple[float, float]) -> tuple[float, float, float]:
    """(scale, offset, zero code) of an 8-bit encode range.

    A texel stored as s in [0, 1] holds the value s * scale + offset. The
    zero code is the 8-bit code that holds 0.0 (the low end for ranges that
    do not span zero).
    """
    lo, hi = encode_range
    if lo < 0.0 < hi:
        r: float = max(-lo, hi)
        return 255.0 * r / 127.0, -128.0 * r / 127.0, 128.0
    return hi - lo, lo, 0.0


def encode_values(values: np.ndarray, encode_range: tuple[float, float]) -> np.ndarray:
    """Round float values to the nearest 8-bit code of the encode range."""
    lo, hi = encode_range
    if lo < 0.0 < hi:
        r: float = max(-lo, hi)
        codes = np.rint(values / r * 127.0) + 128.0
    else:
        codes = np.rint((values - lo) / (hi - lo) * 255.0)
    return np.clip(np.nan_to_num(codes), 0.0, 255.0).astype(np.uint8)


def decode_values(codes: np.ndarray, encode_range: tuple[float, float]) -> np.ndarray:
    lo, hi = encode_range
    if lo < 0.0 < hi:
        r: float = max(-lo, hi)
        return ((codes.astype(np.float32) - 128.0) / 127.0 * r).astype(np.float32)
    return (codes.astype(np.float32) / 255.0 * (hi - lo) + lo).astype(np.float32)


def pixels_to_array(data, dtype: type[np.generic], shape: tuple[int, int, int]) -> np.ndarray:
    """Copy the result of glReadPixels / glGetTexImage into a (h, w, c) array."""
    if isinstance(data, (bytes, bytearray)):
        return np.frombuffer(data, dtype=dtype).reshape(shape).copy()
    return np.array(data, dtype=dtype).reshape(shape)


class Texture():
    def __init__(self) -> None :
        self.allocated: bool = False
        self.width: int = 0
        self.height: int = 0
        self.internal_format: TextureFormat = TextureFormat.NONE
        self.format: Constant = GL_NONE
        self.data_type: Constant = GL_NONE
        self.channels: int = 0
        self.min_filter: Filter = Filter.LINEAR
        self.mag_filter: Filter = Filter.LINEAR
        self.encode_range: tuple[float, float] = (0.0, 1.0)
        self.tex_id: int = 0

    def allocate(self, width: int, height: int, internal_format: TextureFormat,
                 min_filter: Filter = Filter.LINEAR,
                 mag_filter: Filter = Filter.LINEAR,
                 encode_range: tuple[float, float] = (0.0, 1.0)) -> None :
        """Allocate zeroed texture storage in the current GL context.

        Args:
            width: Texture width in texels
            height: Texture height in texels
            internal_format: Storage format
            min_filter: Minification filter (default: LINEAR)
            mag_filter: Magnification filter (default: LINEAR)
            encode_range: Value range stored by 8-bit formats.
                Ignored by float formats.
        """
        if get_internal_format(internal_format) == GL_NONE:
            raise ValueError(f"Texture: internal format {internal_format} not supported")
        if width <= 0 or height <= 0:
            raise ValueError(f"Texture: invalid size {width}x{height}")
        if encode_range[1] <= encode_range[0]:
            raise ValueError(f"Texture: invalid encode range {encode_range}")
        if self.allocated:
            self.deallocate()

        self.width = width
        self.height = height
        self.internal_format = internal_format
        self.format = get_format(internal_format)
        self.data_type = get_data_type(internal_format)
        self.channels = get_num_channels(internal_format)
        self.min_filter = min_filter
        self.mag_filter = mag_filter
        self.encode_range = encode_range
        self.tex_id = glGenTextures(1)

        glBindTexture(GL_TEXTURE_2D, self.tex_id)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_CLAMP_TO_EDGE)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_CLAMP_TO_EDGE)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_NEAREST if mag_filter == Filter.NEAREST else GL_LINEAR)
        glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_NEAREST if min_filter == Filter.NEAREST else GL_LINEAR)
        glPixelStorei(GL_UNPACK_ALIGNMENT, 1)
        glTexImage2D(GL_TEXTURE_2D, 0, get_internal_format(internal_format), width, height, 0,
                     self.format, self.data_type, self._encode(np.zeros(self.shape, dtype=np.float32)))
        glBindTexture(GL_TEXTURE_2D, 0)

        self.allocated = True

    def deallocate(self) -> None :
        if not self.allocated: return
        self.allocated = False
        self.width = 0
        self.height = 0
        self.internal_format = TextureFormat.NONE
        self.format = GL_NONE
        self.data_type = GL_NONE
        self.channels = 0
        glDeleteTextures(1, [self.tex_id])
        self.tex_id = 0

    def bind(self) -> None :
        glBindTexture(GL_TEXTURE_2D, self.tex_id)

    def unbind(self) -> None :
        glBindTexture(GL_TEXTURE_2D, 0)

    @property
    def texture(self) -> Texture:
        return self

    @property
    def normalized(self) -> bool:
        """True for 8-bit formats, which quantize on write."""
        return self.allocated and not is_float_format(self.internal_format)

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def encoding(self) -> tuple[float, float, float]:
        """(scale, offset, zero code) the passes decode samples with; identity for float formats."""
        if self.normalized:
            return get_encoding(self.encode_range)
        return 1.0, 0.0, 0.0

    def _encode(self, values: np.ndarray) -> np.ndarray:
        if self.data_type == GL_UNSIGNED_BYTE:
            return encode_values(values, self.encode_range)
        return np.ascontiguousarray(values, dtype=np.float32)

    def _decode(self, data) -> np.ndarray:
        if self.data_type == GL_UNSIGNED_BYTE:
            return decode_values(pixels_to_array(data, np.uint8, self.shape), self.encode_range)
        return pixels_to_array(data, np.float32, self.shape)

    def read(self) -> np.ndarray:
        """Decoded float32 copy of the texel data, shape (height, width, channels)."""
        if not self.allocated:
            raise RuntimeError("Texture: read from unallocated texture")
        glPixelStorei(GL_PACK_ALIGNMENT, 1)
        self.bind()
        data = glGetTexImage(GL_TEXTURE_2D, 0, self.format, self.data_type)
        self.unbind()
        return self._decode(data)

    def write(self, values: np.ndarray) -> None:
        """Upload texel data. Values are broadcast to the texture shape."""
        if not self.allocated:
            raise RuntimeError("Texture: write to unallocated texture")
        values = np.broadcast_to(np.asarray(values, dtype=np.float32), self.shape)
        glPixelStorei(GL_UNPACK_ALIGNMENT, 1)
        self.bind()
        glTexSubImage2D(GL_TEXTURE_2D, 0, 0, 0, self.width, self.height,
                        self.format, self.data_type, self._encode(values))
        self.unbind()

    def clear(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 0.0) -> None:
        if not self.allocated: return
        self.write(np.array((r, g, b, a)[:self.channels], dtype=np.float32))
