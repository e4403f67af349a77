"""Offscreen OpenGL context.

The simulation renders into its own framebuffers and never presents, so a
hidden 16x16 GLFW window is enough to own the context. Without a display
server GLFW falls back to its null platform with an EGL context.
"""

from __future__ import annotations

import logging

import glfw
from OpenGL.GL import *  # type: ignore

from liquidfield.gl.Shader import release_quad

logger = logging.getLogger(__name__)

GL_VERSION_MAJOR: int = 3
GL_VERSION_MINOR: int = 3


class HeadlessContext():
    """Hidden GLFW window whose core-profile context is made current on create().

        context = HeadlessContext()
        context.create()
        solver = LiquidSolver()
        ...
        context.destroy()
    """

    def __init__(self, name: str = 'liquidfield') -> None:
        self.name: str = name
        self.window = None
        self.platform: str = ''

    @property
    def active(self) -> bool:
        return self.window is not None

    def create(self) -> None:
        """Create the window and make its context current on this thread.

        Raises:
            RuntimeError: No OpenGL context could be created.
        """
        if self.window is not None:
            glfw.make_context_current(self.window)
            return

        if self._init():
            self.window = self._create_window(egl=False)
            self.platform = 'default'

        if self.window is None and hasattr(glfw, 'PLATFORM_NULL'):
            glfw.terminate()
            glfw.init_hint(glfw.PLATFORM, glfw.PLATFORM_NULL)
            if self._init():
                self.window = self._create_window(egl=True)
                self.platform = 'null/egl'

        if self.window is None:
            glfw.terminate()
            raise RuntimeError("HeadlessContext: failed to create an OpenGL context")

        glfw.make_context_current(self.window)
        version: str = (glGetString(GL_VERSION) or b'').decode(errors='replace')
        renderer: str = (glGetString(GL_RENDERER) or b'').decode(errors='replace')
        logger.info(f"HeadlessContext: {version} on {renderer} ({self.platform} platform)")

    def destroy(self) -> None:
        if self.window is None:
            return
        release_quad()
        glfw.destroy_window(self.window)
        self.window = None
        glfw.terminate()
        logger.info("HeadlessContext: destroyed")

    def __enter__(self) -> HeadlessContext:
        self.create()
        return self

    def __exit__(self, *exc_info) -> None:
        self.destroy()

    @staticmethod
    def _init() -> bool:
        try:
            return bool(glfw.init())
        except glfw.GLFWError as e:
            logger.debug(f"HeadlessContext: glfw init failed: {e}")
            return False

    def _create_window(self, egl: bool):
        glfw.default_window_hints()
        glfw.window_hint(glfw.VISIBLE, glfw.FALSE)
        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, GL_VERSION_MAJOR)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, GL_VERSION_MINOR)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, glfw.TRUE)
        if egl:
            glfw.window_hint(glfw.CONTEXT_CREATION_API, glfw.EGL_CONTEXT_API)
        try:
            window = glfw.create_window(16, 16, self.name, None, None)
        except glfw.GLFWError as e:
            logger.debug(f"HeadlessContext: window creation failed: {e}")
            return None
        return window or None
