import inspect
import logging
from pathlib import Path

import numpy as np
from OpenGL.GL import *  # type: ignore
from OpenGL.GL import shaders

from liquidfield.gl.Fbo import Fbo, FeedbackLoopError
from liquidfield.gl.Texture import Texture

logger = logging.getLogger(__name__)

_quad_vao: int = 0
_quad_vbo: int = 0


def draw_quad() -> None :
    """Draw the full-screen quad (triangle strip over NDC [-1, 1]²)."""
    global _quad_vao, _quad_vbo
    if not _quad_vao:
        vertices = np.array((-1.0, -1.0, 1.0, -1.0, -1.0, 1.0, 1.0, 1.0), dtype=np.float32)
        _quad_vao = glGenVertexArrays(1)
        _quad_vbo = glGenBuffers(1)
        glBindVertexArray(_quad_vao)
        glBindBuffer(GL_ARRAY_BUFFER, _quad_vbo)
        glBufferData(GL_ARRAY_BUFFER, vertices.nbytes, vertices, GL_STATIC_DRAW)
        glEnableVertexAttribArray(0)
        glVertexAttribPointer(0, 2, GL_FLOAT, GL_FALSE, 0, None)
        glBindBuffer(GL_ARRAY_BUFFER, 0)
        glBindVertexArray(0)

    glBindVertexArray(_quad_vao)
    glDrawArrays(GL_TRIANGLE_STRIP, 0, 4)
    glBindVertexArray(0)


def release_quad() -> None:
    """Forget the quad buffers; they die with the context that owns them."""
    global _quad_vao, _quad_vbo
    if _quad_vao:
        glDeleteBuffers(1, [_quad_vbo])
        glDeleteVertexArrays(1, [_quad_vao])
    _quad_vao = 0
    _quad_vbo = 0


class Shader():
    """Base class of a full-screen GLSL pass.

    The fragment program lives next to the Python class, named after it in
    lower case (Advect.py -> advect.frag). shaders/common.glsl is inserted
    after its #version line and provides the sample decoding, the output
    encoding for 8-bit targets, the Gaussian falloff and value noise.

    A pass samples its source textures and draws the full-screen quad into
    the bound render target:

        with fbo:
            shader.use(source, ...)

    Sampling the bound target is a feedback loop and raises FeedbackLoopError.
    """

    FRAGMENT_SUFFIX = '.frag'
    COMMON_FILE = Path(__file__).parent / 'shaders' / 'common.glsl'

    GENERIC_VERTEX_SHADER = """#version 330 core

layout(location = 0) in vec2 position;
out vec2 texCoord;

void main() {
    texCoord = position * 0.5 + 0.5;
    gl_Position = vec4(position, 0.0, 1.0);
}
"""

    def __init__(self, shader_name: str = '') -> None:
        self.allocated: bool = False
        self.shader_name: str = shader_name or self.__class__.__name__
        self.shader_program: shaders.ShaderProgram | None = None
        self._uniform_cache: dict[str, int] = {}
        self._units: int = 0

        self.shader_dir = Path(inspect.getfile(self.__class__)).parent
        fragment_path = self.shader_dir / f"{self.shader_name.lower()}{self.FRAGMENT_SUFFIX}"
        self.fragment_file_path: Path | None = fragment_path if fragment_path.exists() else None

    def allocate(self) -> None:
        """Compile and link the program. Safe to call multiple times."""
        if self.allocated:
            return
        self.allocated = self._compile_shaders()

    def deallocate(self) -> None:
        self.allocated = False
        if self.shader_program is not None:
            glDeleteProgram(self.shader_program)
        self.shader_program = None
        self._uniform_cache.clear()

    def _compile_shaders(self) -> bool:
        """Compile the fragment program with the common preamble. Returns True if successful."""
        if self.fragment_file_path is None:
            logger.error(f"{self.shader_name}: no {self.shader_name.lower()}{self.FRAGMENT_SUFFIX} next to the class")
            return False

        fragment_source: str = self.insert_common(self.read_shader_source(self.fragment_file_path))
        try:
            vertex_shader = shaders.compileShader(self.GENERIC_VERTEX_SHADER, GL_VERTEX_SHADER)
            fragment_shader = shaders.compileShader(fragment_source, GL_FRAGMENT_SHADER)
        except shaders.ShaderCompilationError as e:
            logger.error(f"{self.shader_name} SHADER ERROR: {e}")
            return False

        try:
            self.shader_program = shaders.compileProgram(vertex_shader, fragment_shader, validate=False)
        except RuntimeError as e:
            logger.error(f"{self.shader_name} PROGRAM LINKING ERROR: {e}")
            return False

        self._uniform_cache.clear()
        logger.debug(f"{self.shader_name} loaded from {self.fragment_file_path.name}")
        return True

    @staticmethod
    def read_shader_source(path: Path) -> str:
        with open(path, 'r') as file:
            return file.read()

    @classmethod
    def insert_common(cls, source: str) -> str:
        version, _, body = source.partition('\n')
        return f"{version}\n{cls.read_shader_source(cls.COMMON_FILE)}\n{body}"

    # ========== Pass helpers ==========

    def get_uniform_loc(self, name: str) -> int:
        location: int | None = self._uniform_cache.get(name)
        if location is None:
            location = int(glGetUniformLocation(self.shader_program, name))
            self._uniform_cache[name] = location
        return location

    def bind_texture(self, texture: Texture, uniform_name: str) -> None:
        """Bind texture to the next free unit, with its sample decoding (<uniform_name>Codec)."""
        unit: int = self._units
        self._units += 1
        glActiveTexture(int(GL_TEXTURE0) + unit)
        glBindTexture(GL_TEXTURE_2D, texture.tex_id)
        glUniform1i(self.get_uniform_loc(uniform_name), unit)

        scale, offset, _ = texture.encoding
        codec_loc: int = self.get_uniform_loc(f"{uniform_name}Codec")
        if codec_loc != -1:
            glUniform2f(codec_loc, scale, offset)

    def _begin_pass(self, *sources: Texture) -> Fbo | None:
        """Validate the pass inputs, bind the program and return the bound target.

        Returns None (and logs) when the shader or a source is unallocated.
        """
        if not self.allocated or self.shader_program is None:
            logger.warning(f"{self.shader_name} shader not allocated.")
            return None

        target: Fbo | None = Fbo.bound()
        if target is None:
            raise RuntimeError(f"{self.shader_name}: no render target bound")

        for source in sources:
            if not source.allocated:
                logger.warning(f"{self.shader_name} shader: input texture(s) not allocated.")
                return None
            if source.tex_id == target.tex_id:
                raise FeedbackLoopError(
                    f"{self.shader_name}: texture {source.tex_id} is both source and render target"
                )

        glUseProgram(self.shader_program)
        self._units = 0

        scale, offset, zero = target.encoding
        glUniform2f(self.get_uniform_loc("uOutCodec"), scale, offset)
        glUniform1f(self.get_uniform_loc("uOutZero"), zero)
        glUniform1i(self.get_uniform_loc("uOutNormalized"), int(target.normalized))
        return target

    def _end_pass(self) -> None:
        """Draw the quad into the bound target and release the texture units."""
        draw_quad()
        for unit in reversed(range(self._units)):
            glActiveTexture(int(GL_TEXTURE0) + unit)
            glBindTexture(GL_TEXTURE_2D, 0)
        self._units = 0
        glUseProgram(0)
