"""Tests for settings and parameter records."""

import pytest

from py_climsim.config import (
    EARTH_PARAMS,
    RESOLUTION_PRESETS,
    PhysicsParams,
    Settings,
    with_overrides,
)
from py_climsim.utils.logging import configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.random_seed == 42
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CLIMSIM_RANDOM_SEED", "7")
        monkeypatch.setenv("CLIMSIM_LOG_FORMAT", "plain")
        settings = Settings()
        assert settings.random_seed == 7
        assert settings.log_format == "plain"

    def test_configure_logging(self):
        configure_logging(Settings(log_format="plain", log_level="warning"))
        configure_logging(Settings(log_format="json"))


class TestParams:
    """Test parameter records."""

    def test_with_overrides_copies(self):
        base = PhysicsParams()
        changed = with_overrides(base, ocean_sub_steps=4)
        assert changed.ocean_sub_steps == 4
        assert base.ocean_sub_steps == 10

    def test_unknown_override_rejected(self):
        with pytest.raises(TypeError):
            with_overrides(PhysicsParams(), not_a_field=1)

    def test_earth_defaults(self):
        assert EARTH_PARAMS.obliquity == pytest.approx(23.44)
        assert {"label", "lat", "lon"} <= set(RESOLUTION_PRESETS[0])


def test_module_imports():
    """Test that the config package imports correctly."""
    from py_climsim import config
    assert hasattr(config, 'Settings')
    assert hasattr(config, 'PhysicsParams')
