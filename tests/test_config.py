"""Tests for YAML calculator defaults."""

import pytest

from calc_engine.config import CalculatorConfig, DEFAULT_CONFIG_PATH, config_from_dict, load_config


class TestLoadConfig:
    def test_bundled_defaults_match_dataclasses(self):
        assert DEFAULT_CONFIG_PATH.exists()
        assert load_config() == CalculatorConfig()

    def test_partial_file(self, tmp_path):
        path = tmp_path / "farm.yaml"
        path.write_text("lime:\n  institution: ISU\n  target_ph_aglime: 6.8\n")
        cfg = load_config(path)
        assert cfg.lime.institution == "ISU"
        assert cfg.lime.target_ph_aglime == 6.8
        assert cfg.lime.ecce_percent == 68.8
        assert cfg.sulfur.crop == "Corn"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == CalculatorConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestConfigFromDict:
    def test_unknown_key(self):
        with pytest.raises(ValueError, match="ecce"):
            config_from_dict({"lime": {"ecce": 70}})

    def test_unknown_section(self):
        with pytest.raises(ValueError):
            config_from_dict({"gypsum": {}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            config_from_dict({"acidity": [0.9]})

    def test_override(self):
        cfg = config_from_dict({"acidity": {"neutralizing_power_fraction": 0.9}})
        assert cfg.acidity.neutralizing_power_fraction == 0.9
