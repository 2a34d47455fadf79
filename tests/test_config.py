"""
Tests for configuration loading and logging setup.
"""

import logging

import pytest
import yaml

from moldens.config import EngineConfig, load_config, setup_logging


class TestEngineConfig:
    """Tests for engine configuration."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.bin_width == 0.1
        assert config.chunk_size == 4096
        assert config.combine == "density"

    @pytest.mark.parametrize("kwargs", [
        {"bin_width": 0.0},
        {"chunk_size": 0},
        {"combine": "sum"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_from_dict(self):
        config = EngineConfig.from_dict({"bin_width": 0.25, "combine": "product"})

        assert config.bin_width == 0.25
        assert config.combine == "product"
        assert EngineConfig.from_dict(None) == EngineConfig()

    def test_unknown_keys(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"bin_size": 0.1})

    def test_load_config(self, temp_directory):
        path = temp_directory / "moldens.yaml"
        with open(path, "w") as f:
            yaml.safe_dump({"engine": {"bin_width": 0.05, "chunk_size": 128}}, f)

        config = load_config(path)

        assert config.bin_width == 0.05
        assert config.chunk_size == 128

    def test_load_config_without_section(self, temp_directory):
        path = temp_directory / "empty.yaml"
        path.write_text("")

        assert load_config(path) == EngineConfig()

    def test_setup_logging(self):
        setup_logging(logging.DEBUG)
        logging.getLogger("moldens").debug("logging configured")
