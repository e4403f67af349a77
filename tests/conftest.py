import numpy as np
import pytest

from liquidfield.gl import Fbo, Shader, HeadlessContext
from liquidfield.flow import FlowUtil


@pytest.fixture(scope='session')
def gl_context():
    """One hidden-window OpenGL context for the whole run."""
    context = HeadlessContext('liquidfield-tests')
    try:
        context.create()
    except RuntimeError as e:
        pytest.skip(f"OpenGL unavailable: {e}")
    yield context
    FlowUtil.deallocate()
    context.destroy()


@pytest.fixture(autouse=True)
def no_target_left_bound():
    yield
    assert Fbo.bound() is None, f"render target {Fbo.bound().tex_id} left bound"


@pytest.fixture
def pass_log(monkeypatch):
    """Record (shader name, target, sources) of every pass that runs."""
    log: list[tuple[str, Fbo, tuple]] = []
    begin_pass = Shader._begin_pass

    def recording(self, *sources):
        target = begin_pass(self, *sources)
        if target is not None:
            log.append((self.shader_name, target, sources))
        return target

    monkeypatch.setattr(Shader, '_begin_pass', recording)
    return log


def texel_centers(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """UV coordinates of all texel centers, two (height, width) arrays."""
    u = (np.arange(width, dtype=np.float32) + 0.5) / width
    v = (np.arange(height, dtype=np.float32) + 0.5) / height
    uu, vv = np.meshgrid(u, v)
    return uu, vv


def max_magnitude(values: np.ndarray) -> float:
    return float(np.max(np.linalg.norm(values[..., :2], axis=2)))
