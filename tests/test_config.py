import math

import pytest

from liquidfield import FluidFieldConfig, LiquidSolverConfig


def test_defaults():
    fluid = FluidFieldConfig()
    assert (fluid.force, fluid.curl, fluid.decay, fluid.radius, fluid.influence) == (1.0, 1.0, 0.948, 0.21, 0.06)

    liquid = LiquidSolverConfig()
    assert liquid.texture_size == 128
    assert liquid.iterations == 12
    assert liquid.dissipation == pytest.approx(0.904)
    assert liquid.base_color == (0.8, 0.85, 0.85)


def test_undeclared_attribute_is_rejected():
    config = FluidFieldConfig()
    with pytest.raises(AttributeError):
        config.viscosity = 1.0


def test_out_of_range_default_warns():
    with pytest.warns(UserWarning):
        FluidFieldConfig(decay=1.2)


def test_watch_and_unwatch():
    config = FluidFieldConfig()
    changes: list[float] = []
    any_changes: list[bool] = []
    unwatch = config.watch(changes.append, 'radius')
    config.watch(lambda: any_changes.append(True))

    config.radius = 0.3
    config.force = 2.0
    unwatch()
    config.radius = 0.4

    assert changes == [0.3]
    assert len(any_changes) == 3

    with pytest.raises(AttributeError):
        config.watch(changes.append, 'missing')


def test_apply_partial():
    config = LiquidSolverConfig()
    applied = config.apply_partial({
        'splat_gain': '7.5',
        'iterations': 20.0,
        'noise_amp': math.nan,
        'alpha_max': math.inf,
        'texture_size': 256,
        'unknown': 1,
        'base_color': [0.1, 0.2, 0.3],
        'highlight_color': [1.0],
        'normal_z': True,
    })
    assert sorted(applied) == ['base_color', 'iterations', 'splat_gain']
    assert config.splat_gain == 7.5
    assert config.iterations == 20 and isinstance(config.iterations, int)
    assert config.noise_amp == 0.1
    assert config.alpha_max == 0.9
    assert config.texture_size == 128
    assert config.base_color == (0.1, 0.2, 0.3)
    assert config.highlight_color == (0.9, 0.9, 0.9)
    assert config.normal_z == 0.3


def test_apply_partial_ignores_non_mappings():
    assert FluidFieldConfig().apply_partial(None) == []
    assert FluidFieldConfig().apply_partial([1, 2]) == []


def test_info_describes_fields():
    info = LiquidSolverConfig().info()
    assert info['texture_size']['fixed'] is True
    assert info['force_radius']['label'] == 'Force Radius'
    assert info['force_radius']['min'] == 0.01
    assert LiquidSolverConfig().info('normal_z')['label'] == 'Normal Z'


def test_snapshot_is_a_copy():
    config = FluidFieldConfig()
    snapshot = config.snapshot()
    config.force = 3.0
    assert snapshot['force'] == 1.0
