from __future__ import annotations

import numpy as np
from OpenGL.GL import *  # type: ignore

from liquidfield.gl.Texture import Texture, TextureFormat, Filter, encode_values


class FeedbackLoopError(RuntimeError):
    """A pass tried to sample the texture it is rendering into."""


class Fbo(Texture):
    """Render target. Passes draw into the Fbo bound between begin() and end().

    Use it as a context manager so the binding is released even when a pass
    raises:

        with fbo:
            shader.use(source)
    """

    _bound: Fbo | None = None

    def __init__(self) -> None :
        super(Fbo, self).__init__()
        self.fbo_id = 0

    def allocate(self, width: int, height: int, internal_format: TextureFormat,
                 min_filter: Filter = Filter.LINEAR,
                 mag_filter: Filter = Filter.LINEAR,
                 encode_range: tuple[float, float] = (0.0, 1.0)) -> None :
        super(Fbo, self).allocate(width, height, internal_format, min_filter, mag_filter, encode_range)

        self.fbo_id = glGenFramebuffers(1)
        glBindFramebuffer(GL_FRAMEBUFFER, self.fbo_id)
        glFramebufferTexture2D(GL_FRAMEBUFFER, GL_COLOR_ATTACHMENT0, GL_TEXTURE_2D, self.tex_id, 0)
        status = glCheckFramebufferStatus(GL_FRAMEBUFFER)
        self._restore_binding()

        if status != GL_FRAMEBUFFER_COMPLETE:
            self.deallocate()
            raise RuntimeError(f"Fbo: {internal_format.name} framebuffer incomplete (status {int(status):#x})")

    def deallocate(self) -> None:
        self.end()
        if self.fbo_id:
            glDeleteFramebuffers(1, [self.fbo_id])
            self.fbo_id = 0
        super().deallocate()

    def begin(self) -> None:
        if not self.allocated:
            raise RuntimeError("Fbo: cannot bind an unallocated render target")
        if Fbo._bound is not None and Fbo._bound is not self:
            raise RuntimeError(f"Fbo: target {Fbo._bound.tex_id} is still bound, call end() first")
        glBindFramebuffer(GL_FRAMEBUFFER, self.fbo_id)
        glViewport(0, 0, self.width, self.height)
        Fbo._bound = self

    def end(self) -> None:
        if Fbo._bound is self:
            glBindFramebuffer(GL_FRAMEBUFFER, 0)
            Fbo._bound = None

    def __enter__(self) -> Fbo:
        self.begin()
        return self

    def __exit__(self, *exc_info) -> None:
        self.end()

    @staticmethod
    def bound() -> Fbo | None:
        """The currently bound render target, if any."""
        return Fbo._bound

    @staticmethod
    def _restore_binding() -> None:
        glBindFramebuffer(GL_FRAMEBUFFER, Fbo._bound.fbo_id if Fbo._bound is not None else 0)

    def clear(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 0.0) -> None:
        if not self.allocated: return
        color = np.array((r, g, b, a), dtype=np.float32)
        if self.normalized:
            color = encode_values(color, self.encode_range).astype(np.float32) / 255.0
        glBindFramebuffer(GL_FRAMEBUFFER, self.fbo_id)
        glClearColor(*(float(c) for c in color))
        glClear(GL_COLOR_BUFFER_BIT)
        self._restore_binding()

    def read(self) -> np.ndarray:
        """Decoded float32 copy of the rendered texels, read with glReadPixels."""
        if not self.allocated:
            raise RuntimeError("Fbo: read from unallocated render target")
        glBindFramebuffer(GL_READ_FRAMEBUFFER, self.fbo_id)
        glReadBuffer(GL_COLOR_ATTACHMENT0)
        glPixelStorei(GL_PACK_ALIGNMENT, 1)
        data = glReadPixels(0, 0, self.width, self.height, self.format, self.data_type)
        self._restore_binding()
        return self._decode(data)


class SwapFbo():
    """Ping-pong pair of render targets.

    Two named slots and an explicit toggled index: fbos[swap_state] is the
    current (readable) slot, fbos[not swap_state] the back slot. A pass that
    transforms the field calls swap() first, binds the new current slot and
    reads back_texture:

        swap_fbo.swap()
        with swap_fbo:
            shader.use(swap_fbo.back_texture)
    """

    def __init__(self) -> None :
        self.width: int = 0
        self.height: int = 0
        self.internal_format: TextureFormat = TextureFormat.NONE
        self.fbos: list[Fbo] = [Fbo(), Fbo()]
        self.swap_state: bool = False
        self.allocated: bool = False

    def allocate(self, width: int, height: int, internal_format: TextureFormat,
                 min_filter: Filter = Filter.LINEAR,
                 mag_filter: Filter = Filter.LINEAR,
                 encode_range: tuple[float, float] = (0.0, 1.0)) -> None :
        self.width = width
        self.height = height
        self.internal_format = internal_format
        for fbo in self.fbos:
            fbo.allocate(width, height, internal_format, min_filter, mag_filter, encode_range)
        self.swap_state = False
        self.allocated = self.fbos[0].allocated and self.fbos[1].allocated

    def deallocate(self) -> None:
        for fbo in self.fbos:
            fbo.deallocate()
        self.width = 0
        self.height = 0
        self.internal_format = TextureFormat.NONE
        self.allocated = False

    def swap(self) -> None :
        self.swap_state = not self.swap_state

    @property
    def texture(self) -> Fbo:
        return self.fbos[self.swap_state]

    @property
    def back_texture(self) -> Fbo:
        return self.fbos[not self.swap_state]

    def begin(self) -> None :
        self.fbos[self.swap_state].begin()

    def end(self) -> None :
        self.fbos[self.swap_state].end()

    def __enter__(self) -> Fbo:
        self.begin()
        return self.fbos[self.swap_state]

    def __exit__(self, *exc_info) -> None:
        for fbo in self.fbos:
            fbo.end()

    def clear_all(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 0.0) -> None:
        for fbo in self.fbos:
            fbo.clear(r, g, b, a)
