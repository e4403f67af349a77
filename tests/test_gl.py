import logging

import numpy as np
import pytest

from liquidfield.gl import Fbo, SwapFbo, Texture, TextureFormat, FeedbackLoopError, Shader
from liquidfield.flow.shaders import Blit, Scale

from conftest import texel_centers

pytestmark = pytest.mark.usefixtures('gl_context')


def allocated(shader: Shader) -> Shader:
    shader.allocate()
    assert shader.allocated
    return shader


def test_texture_allocates_zeroed():
    tex = Texture()
    tex.allocate(16, 8, TextureFormat.RG32F)
    assert tex.allocated
    assert tex.tex_id != 0
    assert tex.shape == (8, 16, 2)
    assert np.all(tex.read() == 0.0)
    tex.deallocate()
    assert tex.tex_id == 0


def test_texture_rejects_bad_allocation():
    with pytest.raises(ValueError):
        Texture().allocate(16, 16, TextureFormat.NONE)
    with pytest.raises(ValueError):
        Texture().allocate(0, 16, TextureFormat.R32F)


def test_write_read_keeps_row_order():
    u, v = texel_centers(8, 4)
    tex = Texture()
    tex.allocate(8, 4, TextureFormat.RG32F)
    tex.write(np.stack((u, v), axis=2))
    values = tex.read()
    assert np.array_equal(values[..., 0], u)
    assert np.array_equal(values[..., 1], v)


def test_normalized_texture_quantizes_in_encode_range():
    tex = Texture()
    tex.allocate(8, 8, TextureFormat.R8, encode_range=(-1.0, 1.0))
    assert tex.normalized
    tex.write(np.float32(0.5))
    assert np.allclose(tex.read(), 0.5, atol=0.5 / 127.0)
    tex.write(np.float32(4.0))
    assert np.all(tex.read() == 1.0)
    tex.write(np.float32(-4.0))
    assert np.all(tex.read() <= -1.0)


def test_signed_8_bit_zero_is_exact():
    fbo = Fbo()
    fbo.allocate(8, 8, TextureFormat.RG8, encode_range=(-8.0, 8.0))
    assert np.all(fbo.read() == 0.0)
    fbo.write(np.float32(3.0))
    fbo.clear()
    assert np.all(fbo.read() == 0.0)


def test_unique_texture_ids():
    a, b = Texture(), Texture()
    a.allocate(8, 8, TextureFormat.R32F)
    b.allocate(8, 8, TextureFormat.R32F)
    assert a.tex_id != b.tex_id


def test_fbo_binding_is_exclusive():
    a, b = Fbo(), Fbo()
    a.allocate(8, 8, TextureFormat.R32F)
    b.allocate(8, 8, TextureFormat.R32F)
    a.begin()
    with pytest.raises(RuntimeError):
        b.begin()
    a.end()
    b.begin()
    assert Fbo.bound() is b
    b.end()
    assert Fbo.bound() is None


def test_unallocated_fbo_cannot_bind():
    with pytest.raises(RuntimeError):
        Fbo().begin()


def test_failed_pass_releases_the_target():
    fbo, other = Fbo(), Fbo()
    fbo.allocate(8, 8, TextureFormat.R32F)
    other.allocate(8, 8, TextureFormat.R32F)
    shader = allocated(Scale())

    with pytest.raises(FeedbackLoopError):
        with fbo:
            shader.use(fbo, 0.5)
    assert Fbo.bound() is None

    with other:
        shader.use(fbo, 0.5)
    assert np.all(other.read() == 0.0)


def test_swap_fbo_roles():
    swap = SwapFbo()
    swap.allocate(8, 8, TextureFormat.R32F)
    first = swap.texture
    assert swap.back_texture is not first
    swap.swap()
    assert swap.back_texture is first
    assert swap.texture is not first

    with swap as target:
        assert target is swap.texture
        assert Fbo.bound() is swap.texture
    assert Fbo.bound() is None


def test_pass_without_target_raises():
    src = Texture()
    src.allocate(8, 8, TextureFormat.R32F)
    with pytest.raises(RuntimeError):
        allocated(Scale()).use(src, 0.5)


def test_unallocated_shader_warns_and_skips(caplog):
    src, dst = Texture(), Fbo()
    src.allocate(8, 8, TextureFormat.R32F)
    src.write(np.float32(1.0))
    dst.allocate(8, 8, TextureFormat.R32F)
    with caplog.at_level(logging.WARNING):
        with dst:
            Scale().use(src, 2.0)
    assert "not allocated" in caplog.text
    assert np.all(dst.read() == 0.0)


class Unshipped(Shader):
    pass


def test_shader_without_program_file_stays_unallocated(caplog):
    shader = Unshipped()
    with caplog.at_level(logging.ERROR):
        shader.allocate()
    assert not shader.allocated
    assert "unshipped.frag" in caplog.text


def test_scale_through_swap_fbo():
    swap = SwapFbo()
    swap.allocate(8, 8, TextureFormat.R32F)
    swap.texture.write(np.float32(2.0))
    shader = allocated(Scale())
    swap.swap()
    with swap:
        shader.use(swap.back_texture, 0.5)
    assert np.allclose(swap.texture.read(), 1.0)


def test_scale_resamples_smaller_source():
    src, dst = Texture(), Fbo()
    src.allocate(8, 8, TextureFormat.RG32F)
    src.write(np.array((2.0, -1.0), dtype=np.float32))
    dst.allocate(16, 16, TextureFormat.RG32F)
    with dst:
        allocated(Scale()).use(src, 0.5)
    assert np.allclose(dst.read(), (1.0, -0.5))


def test_8_bit_decay_reaches_exact_zero():
    swap = SwapFbo()
    swap.allocate(8, 8, TextureFormat.RG8, encode_range=(-1.0, 1.0))
    swap.texture.write(np.array((0.9, -0.05), dtype=np.float32))
    shader = allocated(Scale())
    for _ in range(128):
        swap.swap()
        with swap:
            shader.use(swap.back_texture, 0.948)
    assert np.all(swap.texture.read() == 0.0)


def test_blit_resamples_and_matches_channels():
    src, dst = Texture(), Fbo()
    src.allocate(16, 16, TextureFormat.R32F)
    src.write(np.float32(0.25))
    dst.allocate(8, 8, TextureFormat.RGBA32F)
    with dst:
        allocated(Blit()).use(src)
    values = dst.read()
    assert np.allclose(values[..., 0], 0.25)
    assert np.all(values[..., 1:] == 0.0)


def test_blit_between_encodings():
    u, v = texel_centers(8, 8)
    src, dst = Texture(), Fbo()
    src.allocate(8, 8, TextureFormat.RG32F)
    src.write(np.stack((u - 0.5, v), axis=2))
    dst.allocate(8, 8, TextureFormat.RG8, encode_range=(-1.0, 1.0))
    with dst:
        allocated(Blit()).use(src)
    values = dst.read()
    assert np.allclose(values[..., 0], u - 0.5, atol=1.0 / 127.0)
    assert np.allclose(values[..., 1], v, atol=1.0 / 127.0)
