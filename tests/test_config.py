"""Tests for VocoderConfig and ConfigLoader."""
import pytest
from pathlib import Path

from phase_vocoder import PhaseVocoder
from phase_vocoder.config import (
    ConfigLoader,
    VocoderConfig,
    get_config_loader,
    load_preset,
)
from phase_vocoder.errors import ConfigLoadError, InvalidConfigError


class TestVocoderConfig:
    """Derived values and validation."""

    def test_defaults(self):
        """Test default config values."""
        config = VocoderConfig()
        assert config.channels == 2
        assert config.sample_rate == 44100
        assert config.frame_size == 2048
        assert config.time_res == 4

    def test_derived_values(self):
        """Test sizes derived from the requested frame size."""
        config = VocoderConfig(channels=1, sample_rate=44100, frame_size=1030, time_res=4)
        assert config.effective_frame_size == 1028
        assert config.hop_size == 257
        assert config.bin_count == 1028
        assert config.latency_samples == 2056
        assert config.freq_per_bin == pytest.approx(44100 / 1028)

    @pytest.mark.parametrize("field,value", [
        ("channels", 0),
        ("sample_rate", 0),
        ("time_res", 0),
        ("frame_size", 0),
    ])
    def test_validate_rejects(self, field, value):
        """Test out-of-range values fail validation."""
        config = VocoderConfig(**{field: value})
        with pytest.raises(InvalidConfigError):
            config.validate()

    def test_validate_returns_self(self):
        """Test validate returns the config for chaining."""
        config = VocoderConfig()
        assert config.validate() is config

    def test_dict_round_trip(self):
        """Test to_dict/from_dict preserve the config."""
        config = VocoderConfig(channels=1, sample_rate=16000, frame_size=512, time_res=8)
        assert VocoderConfig.from_dict(config.to_dict()) == config

    def test_from_dict_ignores_unknown_keys(self):
        """Test unknown keys are ignored and defaults fill the rest."""
        config = VocoderConfig.from_dict({"channels": 1, "comment": "mono"})
        assert config.channels == 1
        assert config.frame_size == 2048

    def test_from_dict_bad_value(self):
        """Test non-numeric values raise InvalidConfigError."""
        with pytest.raises(InvalidConfigError):
            VocoderConfig.from_dict({"frame_size": "large"})


class TestConfigLoader:
    """Test suite for ConfigLoader class."""

    def test_default_presets_shipped(self):
        """Test the packaged presets file is found."""
        loader = ConfigLoader()
        assert loader.has_presets()
        names = loader.available_presets()
        assert "default" in names
        assert "speech" in names

    def test_get_preset(self):
        """Test a named preset loads as a VocoderConfig."""
        config = ConfigLoader().get_preset("speech")
        assert config == VocoderConfig(channels=1, sample_rate=16000, frame_size=512, time_res=4)

    def test_preset_builds_engine(self):
        """Test a preset can construct an engine."""
        pv = PhaseVocoder.from_config(ConfigLoader().get_preset("high_resolution"))
        assert pv.frame_size == 4096
        assert pv.hop_size == 512

    def test_unknown_preset(self):
        """Test an unknown preset name raises ConfigLoadError."""
        with pytest.raises(ConfigLoadError):
            ConfigLoader().get_preset("does_not_exist")

    def test_custom_directory(self, temp_dir, temp_yaml_file):
        """Test presets load from a custom directory."""
        temp_yaml_file.write_text(
            "tiny:\n  channels: 1\n  sample_rate: 8000\n  frame_size: 64\n  time_res: 4\n",
            encoding="utf-8",
        )
        loader = ConfigLoader(temp_dir)
        assert loader.config_dir == Path(temp_dir)
        assert loader.available_presets() == ["tiny"]
        assert loader.get_preset("tiny").frame_size == 64

    def test_missing_file(self, temp_dir):
        """Test a directory without presets.yaml."""
        loader = ConfigLoader(temp_dir)
        assert not loader.has_presets()
        assert loader.available_presets() == []
        with pytest.raises(ConfigLoadError):
            loader.load_presets()

    def test_invalid_yaml(self, temp_dir, temp_yaml_file):
        """Test malformed YAML raises ConfigLoadError."""
        temp_yaml_file.write_text("tiny: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigLoader(temp_dir).load_presets()

    def test_non_mapping_yaml(self, temp_dir, temp_yaml_file):
        """Test a YAML list at top level is rejected."""
        temp_yaml_file.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigLoader(temp_dir).load_presets()

    def test_invalid_preset_values(self, temp_dir, temp_yaml_file):
        """Test a preset with invalid values fails validation."""
        temp_yaml_file.write_text("broken:\n  channels: 0\n", encoding="utf-8")
        with pytest.raises(InvalidConfigError):
            ConfigLoader(temp_dir).get_preset("broken")

    def test_caching_and_reload(self, temp_dir, temp_yaml_file):
        """Test presets are cached until reload()."""
        temp_yaml_file.write_text("a:\n  channels: 1\n", encoding="utf-8")
        loader = ConfigLoader(temp_dir)
        first = loader.load_presets()
        assert loader.load_presets() is first

        temp_yaml_file.write_text("b:\n  channels: 2\n", encoding="utf-8")
        assert loader.available_presets() == ["a"]
        loader.reload()
        assert loader.available_presets() == ["b"]

    def test_singleton(self, temp_dir):
        """Test get_config_loader returns a shared instance."""
        default = get_config_loader()
        assert get_config_loader() is default
        custom = get_config_loader(temp_dir)
        assert custom.config_dir == Path(temp_dir)
        # Restore the package default for other tests
        get_config_loader(ConfigLoader().config_dir)

    def test_load_preset_shortcut(self):
        """Test load_preset uses the default loader."""
        get_config_loader(ConfigLoader().config_dir)
        assert load_preset("default") == VocoderConfig()
