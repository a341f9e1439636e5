"""Unit tests for typed configuration and the key = value loader."""

from pathlib import Path

import pytest


class TestLoadConfig:
    """Test building SamplerConfig from flat values."""

    def test_defaults(self):
        from color_sampler.core.config import load_config

        config = load_config()
        assert config.camera.device == 0
        assert config.camera.resolution == (1920, 1080)
        assert config.camera.open_timeout_s == pytest.approx(10.0)
        assert config.picker.initial_color == "8B4513"
        assert config.calibration.min_reference_level == 32
        assert config.logging.level == "INFO"
        assert config.logging.file is None

    def test_values_are_coerced(self):
        from color_sampler.core.config import load_config

        config = load_config(
            {
                "camera.device": "2",
                "camera.resolution": "1280x720",
                "camera.open_timeout_s": "2.5",
                "picker.initial_color": "#00ff00",
                "calibration.min_reference_level": "16",
                "logging.level": "debug",
                "logging.file": "logs/sampler.log",
            }
        )

        assert config.camera.device == 2
        assert config.camera.resolution == (1280, 720)
        assert config.camera.open_timeout_s == pytest.approx(2.5)
        assert config.picker.initial_color == "00FF00"
        assert config.calibration.min_reference_level == 16
        assert config.logging.level == "debug"
        assert config.logging.file == Path("logs/sampler.log")

    def test_device_path_stays_string(self):
        from color_sampler.core.config import load_config

        assert load_config({"camera_device": "/dev/video2"}).camera.device == "/dev/video2"

    def test_overrides_win_unless_none(self):
        from color_sampler.core.config import load_config

        config = load_config({"log_level": "info", "camera.device": "1"}, {"log_level": "error", "camera.device": None})
        assert config.logging.level == "error"
        assert config.camera.device == 1

    @pytest.mark.parametrize(
        "key, value, attr, expected",
        [
            ("camera.resolution", "wide", ("camera", "resolution"), (1920, 1080)),
            ("camera.resolution", "0x720", ("camera", "resolution"), (1920, 1080)),
            ("camera.open_timeout_s", "soon", ("camera", "open_timeout_s"), 10.0),
            ("calibration.min_reference_level", "dim", ("calibration", "min_reference_level"), 32),
            ("picker.initial_color", "brown", ("picker", "initial_color"), "8B4513"),
        ],
    )
    def test_bad_values_fall_back_with_warning(self, caplog, key, value, attr, expected):
        import logging

        from color_sampler.core.config import load_config

        with caplog.at_level(logging.WARNING):
            config = load_config({key: value})

        section, field = attr
        assert getattr(getattr(config, section), field) == expected
        assert caplog.records

    def test_flatten_round_trip(self):
        from color_sampler.core.config import flatten_config, load_config

        config = load_config({"camera.resolution": "640x480", "picker.initial_color": "ABCDEF"})
        assert load_config(flatten_config(config)) == config


class TestConfigLoader:
    """Test reading and writing config files."""

    def test_missing_file_returns_empty(self, tmp_path):
        from color_sampler.core.config import ConfigLoader

        assert ConfigLoader.load(tmp_path / "missing.txt") == {}

    def test_comments_and_hex_values(self, tmp_path):
        from color_sampler.core.config import ConfigLoader

        path = tmp_path / "sampler.txt"
        path.write_text(
            "# color sampler\n"
            "\n"
            "picker.initial_color = #00FF00  # green\n"
            "camera.device=1\n"
            "not a setting\n",
            encoding="utf-8",
        )

        assert ConfigLoader.load(path) == {
            "picker.initial_color": "#00FF00",
            "camera.device": "1",
        }

    def test_write_then_load(self, tmp_path):
        from color_sampler.core.config import ConfigLoader, flatten_config, load_config, load_config_file

        path = tmp_path / "nested" / "sampler.txt"
        config = load_config({"camera.device": "3", "calibration.min_reference_level": "20"})
        ConfigLoader.write(path, flatten_config(config))

        assert load_config_file(path) == config

    def test_load_config_file_without_path(self):
        from color_sampler.core.config import SamplerConfig, load_config_file

        assert load_config_file(None) == SamplerConfig()

    @pytest.mark.asyncio
    async def test_load_async(self, tmp_path):
        from color_sampler.core.config import ConfigLoader

        path = tmp_path / "sampler.txt"
        path.write_text("logging.level = debug\n", encoding="utf-8")

        assert await ConfigLoader.load_async(path) == {"logging.level": "debug"}
