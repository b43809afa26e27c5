"""Tests for settings loading."""

import pytest

from options_scout.config import ScoutSettings, load_settings
from options_scout.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove SCOUT_ variables that would leak into settings."""
    for name in ("SCOUT_RISK_FREE_RATE", "SCOUT_MIN_SCORE", "SCOUT_SEED", "SCOUT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestScoutSettings:
    """Tests for defaults and validation."""

    def test_defaults(self):
        settings = ScoutSettings()
        assert settings.risk_free_rate == 0.05
        assert settings.min_history_samples == 30
        assert settings.iv_tolerance == 1e-4
        assert settings.iv_max_iterations == 100
        assert settings.min_score == 75.0
        assert settings.result_limit == 50
        assert settings.seed is None
        assert settings.log_level == "INFO"

    def test_environment(self, monkeypatch):
        """SCOUT_ variables override defaults."""
        monkeypatch.setenv("SCOUT_RISK_FREE_RATE", "0.045")
        monkeypatch.setenv("SCOUT_SEED", "7")
        settings = ScoutSettings()
        assert settings.risk_free_rate == 0.045
        assert settings.seed == 7

    def test_log_level_normalized(self):
        assert ScoutSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"risk_free_rate": -0.01},
            {"iv_tolerance": 0},
            {"result_limit": 0},
            {"unusual_activity_probability": 1.5},
            {"log_level": "LOUD"},
            {"min_cost": 100, "max_cost": 50},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ScoutSettings(**kwargs)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_no_file(self):
        assert load_settings().min_score == 75.0

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("risk_free_rate: 0.045\nmin_score: 70\nseed: 42\nlog_level: debug\n")
        settings = load_settings(path)
        assert settings.risk_free_rate == 0.045
        assert settings.min_score == 70
        assert settings.seed == 42
        assert settings.log_level == "DEBUG"

    def test_yaml_beats_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SCOUT_MIN_SCORE", "60")
        path = tmp_path / "scout.yaml"
        path.write_text("min_score: 70\n")
        assert load_settings(path).min_score == 70

    def test_overrides_beat_file(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("seed: 42\n")
        assert load_settings(path, seed=7).seed == 7

    def test_none_overrides_ignored(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("seed: 42\n")
        assert load_settings(path, seed=None).seed == 42

    def test_empty_file(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("")
        assert load_settings(path).risk_free_rate == 0.05

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("min_score: [70\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_settings(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "scout.yaml"
        path.write_text("result_limit: 0\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings(path)
