import os
import sys

# PyOpenGL binds its platform on first import. Without a display server the
# offscreen context is created through EGL.
if sys.platform.startswith('linux') and not os.environ.get('DISPLAY') and not os.environ.get('WAYLAND_DISPLAY'):
    os.environ.setdefault('PYOPENGL_PLATFORM', 'egl')

from .Shader import Shader, draw_quad
from .Context import HeadlessContext
from .RenderCaps import RenderCaps, UnsupportedTextureError, MIN_TEXTURE_SIZE

# TEXTURE CLASSES
from .Texture import Texture, TextureFormat, Filter
from .Fbo import Fbo, SwapFbo, FeedbackLoopError
