import numpy as np
import pytest

from liquidfield import LiquidSolver, LiquidSolverConfig
from liquidfield.gl import Fbo, Texture, TextureFormat

from conftest import texel_centers

pytestmark = pytest.mark.usefixtures('gl_context')


def copy_target(solver: LiquidSolver) -> Fbo:
    target = Fbo()
    target.allocate(solver.texture_size, solver.texture_size, TextureFormat.RGBA32F)
    return target


def texel(size: int, u: float, v: float) -> tuple[int, int]:
    return min(int(v * size), size - 1), min(int(u * size), size - 1)


def test_end_to_end_single_splat():
    solver = LiquidSolver()
    solver.update((0.5, 0.5), (0.0, 0.0))
    target = copy_target(solver)
    solver.copy_density_to(target)

    values = target.read()
    size = solver.texture_size
    assert values[texel(size, 0.5, 0.5)][3] > 0.05
    assert np.all(values[texel(size, 0.5, 0.5)][:3] > 0.05)
    assert np.all(values[texel(size, 0.02, 0.02)] < 0.01)


def test_output_is_premultiplied_and_bounded():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=32))
    for frame in range(4):
        solver.update((0.3 + 0.1 * frame, 0.5), (0.1, 0.05))
    shaded = solver.shaded_density.read()
    assert np.all(np.isfinite(shaded))
    assert np.all(shaded >= 0.0)
    assert np.all(shaded[..., 3] <= solver.config.alpha_max + 1e-6)
    assert np.all(shaded[..., :3] <= shaded[..., 3:4] + 1e-6)


def test_copy_is_idempotent():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=32))
    solver.update((0.5, 0.5), (0.05, 0.0))
    solver.set_time(1.5)
    first, second = copy_target(solver), copy_target(solver)
    solver.copy_density_to(first)
    solver.copy_density_to(second)
    assert np.array_equal(first.read(), second.read())
    solver.copy_density_to(first)
    assert np.array_equal(first.read(), second.read())


def test_set_time_animates_the_surface():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=32, noise_speed=1.0))
    solver.update((0.5, 0.5), (0.0, 0.0))
    before = solver.shaded_density.read()
    solver.set_time(3.7)
    after = solver.shaded_density.read()
    assert not np.array_equal(before, after)


def test_inactive_pointer_adds_nothing():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=32))
    for _ in range(3):
        solver.update(None, (0.5, 0.5))
    assert np.all(solver.density.read() == 0.0)
    assert np.all(solver.velocity.read() == 0.0)


def test_resting_pointer_splats_density_but_no_force():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=32))
    solver.update((0.5, 0.5), (0.0, 0.0))
    assert solver.density.read().max() > 0.5
    assert np.all(solver.velocity.read() == 0.0)


def test_splat_is_clamped():
    config = LiquidSolverConfig(texture_size=32, splat_gain=50.0, force_strength=50.0,
                                dissipation=1.0, velocity_dissipation=1.0, iterations=1)
    solver = LiquidSolver(config)
    solver.update((0.5, 0.5), (1.0, 0.0))
    assert solver.density.read().max() <= config.density_limit + 1e-5
    assert np.abs(solver.velocity.read()).max() <= config.velocity_limit + 1.0


def test_density_is_conserved_up_to_dissipation():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=64))
    solver.update((0.5, 0.5), (0.0, 0.0))
    mass = float(solver.density.read().sum())
    assert mass > 0.0

    frames = 10
    for _ in range(frames):
        solver.update(None, None)
    expected = mass * solver.config.dissipation ** frames
    assert float(solver.density.read().sum()) == pytest.approx(expected, rel=1e-3)


def test_projection_reduces_divergence():
    size = 128
    solver = LiquidSolver(LiquidSolverConfig(texture_size=size))

    u, v = texel_centers(size, size)
    falloff = np.exp(-((u - 0.5) ** 2 + (v - 0.5) ** 2) / 0.01)
    outward = Texture()
    outward.allocate(size, size, TextureFormat.RG32F)
    outward.write(np.stack(((u - 0.5) * falloff, (v - 0.5) * falloff), axis=2))
    solver.set_velocity(outward)

    before = float(np.linalg.norm(solver.compute_divergence().read()))
    solver.project()
    after = float(np.linalg.norm(solver.compute_divergence().read()))
    assert before > 0.0
    assert after < before


def test_more_iterations_project_better():
    size = 128
    u, v = texel_centers(size, size)
    falloff = np.exp(-((u - 0.5) ** 2 + (v - 0.5) ** 2) / 0.01)
    outward = Texture()
    outward.allocate(size, size, TextureFormat.RG32F)
    outward.write(np.stack(((u - 0.5) * falloff, (v - 0.5) * falloff), axis=2))

    residuals = []
    for iterations in (2, 24):
        solver = LiquidSolver(LiquidSolverConfig(texture_size=size))
        solver.set_velocity(outward)
        solver.project(iterations)
        residuals.append(float(np.linalg.norm(solver.compute_divergence().read())))
    assert residuals[1] < residuals[0]


def test_passes_never_sample_their_target(pass_log):
    solver = LiquidSolver(LiquidSolverConfig(texture_size=16, viscosity=0.5, viscosity_iterations=4))
    target = copy_target(solver)
    for frame in range(3):
        solver.update((0.5, 0.5), (0.1 * frame, 0.05))
        solver.set_time(frame / 60.0)
        solver.copy_density_to(target)

    names = {name for name, _, _ in pass_log}
    assert {'Splat', 'Advect', 'JacobiDiffusion', 'Divergence', 'JacobiPressure',
            'Gradient', 'Noise', 'LiquidRender', 'Blit'} <= names
    for name, target_fbo, sources in pass_log:
        assert all(source is not target_fbo for source in sources), name


def test_viscosity_smooths_velocity():
    def peak(viscosity: float) -> float:
        solver = LiquidSolver(LiquidSolverConfig(texture_size=32, viscosity=viscosity))
        solver.update((0.5, 0.5), (1.0, 0.0))
        return float(np.abs(solver.velocity.read()).max())

    assert peak(1.0) < peak(0.0)


def test_minimum_resolution_runs():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=8))
    target = copy_target(solver)
    for frame in range(3):
        solver.update((0.5, 0.5), (0.1, 0.0))
    solver.copy_density_to(target)
    assert np.all(np.isfinite(target.read()))


def test_texture_size_is_fixed():
    config = LiquidSolverConfig(texture_size=16)
    solver = LiquidSolver(config)
    with pytest.raises(AttributeError):
        config.texture_size = 32
    assert solver.texture_size == 16


def test_reset_and_deallocate():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=16))
    solver.update((0.5, 0.5), (0.1, 0.0))
    solver.reset()
    assert np.all(solver.density.read() == 0.0)
    assert np.all(solver.velocity.read() == 0.0)

    solver.deallocate()
    assert not solver.allocated
    assert not solver.density.allocated
    solver.update((0.5, 0.5), (0.1, 0.0))
    LiquidSolver(LiquidSolverConfig(texture_size=16)).deallocate()


def test_external_velocity_and_density_inputs():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=16))
    source = Texture()
    source.allocate(8, 8, TextureFormat.RG32F)
    source.write(np.array((0.5, 0.25), dtype=np.float32))

    solver.add_velocity(source, 2.0)
    assert np.allclose(solver.velocity.read(), (1.0, 0.5))
    solver.set_velocity(solver.velocity, 0.5)
    assert np.allclose(solver.velocity.read(), (0.5, 0.25))

    solver.add_density(source)
    assert np.allclose(solver.density.read(), 0.5)
    assert solver.shaded_density.read()[..., 3].max() > 0.0


def test_smaller_velocity_input_is_resampled_and_update_runs():
    solver = LiquidSolver(LiquidSolverConfig(texture_size=16))
    source = Texture()
    source.allocate(8, 8, TextureFormat.RG32F)
    source.write(np.array((0.5, 0.25), dtype=np.float32))

    solver.set_velocity(source)
    assert np.allclose(solver.velocity.read(), (0.5, 0.25))
    assert Fbo.bound() is None

    solver.update((0.5, 0.5), (0.1, 0.0))
    assert Fbo.bound() is None
    assert np.all(np.isfinite(solver.velocity.read()))
    assert solver.density.read().max() > 0.0


def test_update_runs_the_configured_pressure_iterations(pass_log):
    config = LiquidSolverConfig(texture_size=16, iterations=5)
    solver = LiquidSolver(config)
    solver.update(None, None)
    assert [name for name, _, _ in pass_log].count('JacobiPressure') == 5

    pass_log.clear()
    config.iterations = 9
    solver.update(None, None)
    assert [name for name, _, _ in pass_log].count('JacobiPressure') == 9
