import json

import pytest

from liquidfield import Settings, FluidFieldConfig, LiquidSolverConfig


def test_save_load_round_trip(tmp_path):
    settings = Settings(fluid_resolution=64, liquid_enabled=False)
    settings.fluid.decay = 0.9
    settings.liquid.base_color = (0.1, 0.2, 0.3)

    file = tmp_path / "settings.json"
    settings.save(str(file))
    loaded = Settings.load(str(file))

    assert loaded.fluid_resolution == 64
    assert loaded.liquid_enabled is False
    assert isinstance(loaded.fluid, FluidFieldConfig)
    assert isinstance(loaded.liquid, LiquidSolverConfig)
    assert loaded.fluid.decay == 0.9
    assert loaded.liquid.base_color == (0.1, 0.2, 0.3)
    assert Settings.serialize(loaded) == Settings.serialize(settings)


def test_serialize_is_json():
    data = json.loads(json.dumps(Settings.serialize(Settings())))
    assert data['liquid']['texture_size'] == 128
    assert data['liquid']['highlight_color'] == [0.9, 0.9, 0.9]
    assert data['fluid']['radius'] == 0.21


def test_load_ignores_unknown_keys(tmp_path):
    file = tmp_path / "settings.json"
    file.write_text(json.dumps({'fluid_enabled': False, 'legacy': 1, 'fluid': {'curl': 2.0, 'old_key': 3}}))
    loaded = Settings.load(str(file))
    assert loaded.fluid_enabled is False
    assert loaded.fluid.curl == 2.0
    assert loaded.liquid == LiquidSolverConfig()


def test_apply_json():
    settings = Settings()
    applied = settings.apply_json(json.dumps({
        'liquid_enabled': 0,
        'fluid_resolution': 96.0,
        'fluid': {'force': 2.5, 'decay': 'fast'},
        'liquid': {'splat_gain': 3.0, 'texture_size': 64},
        'scene': {'stars': 10},
    }))
    assert sorted(applied) == ['fluid.force', 'fluid_resolution', 'liquid.splat_gain', 'liquid_enabled']
    assert settings.liquid_enabled is False
    assert settings.fluid_resolution == 96
    assert settings.fluid.force == 2.5
    assert settings.fluid.decay == 0.948
    assert settings.liquid.texture_size == 128


def test_apply_json_rejects_invalid_text():
    with pytest.raises(json.JSONDecodeError):
        Settings().apply_json("{not json")
    assert Settings().apply_json("[1, 2]") == []
