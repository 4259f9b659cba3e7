"""
Engine configuration and preset loader.

VocoderConfig holds the four construction parameters of the engine.
ConfigLoader reads named presets from a YAML file with caching, so that
applications can pick a parameter set by name ("speech", "low_latency", ...)
instead of hard-coding transform sizes.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from .errors import ConfigLoadError, InvalidConfigError
from .utils import (
    DEFAULT_CHANNELS,
    DEFAULT_FRAME_SIZE,
    DEFAULT_TIME_RES,
    SAMPLE_RATE,
    effective_frame_size,
    frequency_per_bin,
)

logger = logging.getLogger(__name__)

PRESETS_FILE = "presets.yaml"


@dataclass
class VocoderConfig:
    """
    Construction parameters of a PhaseVocoder.

    Attributes:
        channels: Number of audio channels (>= 1)
        sample_rate: Sample rate in Hz (> 0)
        frame_size: Requested transform length; the engine rounds it down to
                   a multiple of time_res
        time_res: Overlap factor (>= 1)
    """
    channels: int = DEFAULT_CHANNELS
    sample_rate: float = SAMPLE_RATE
    frame_size: int = DEFAULT_FRAME_SIZE
    time_res: int = DEFAULT_TIME_RES

    @property
    def effective_frame_size(self) -> int:
        return effective_frame_size(self.frame_size, self.time_res)

    @property
    def hop_size(self) -> int:
        return self.effective_frame_size // self.time_res

    @property
    def bin_count(self) -> int:
        return self.effective_frame_size

    @property
    def freq_per_bin(self) -> float:
        return frequency_per_bin(self.sample_rate, self.effective_frame_size)

    @property
    def latency_samples(self) -> int:
        """Samples per channel that must be queued before any output appears."""
        return 2 * self.effective_frame_size

    def validate(self) -> "VocoderConfig":
        """
        Check that the engine can run with these values.

        Returns:
            self, for chaining

        Raises:
            InvalidConfigError: If any value is out of range
        """
        if self.channels < 1:
            raise InvalidConfigError(f"channels must be >= 1, got {self.channels}")
        if self.sample_rate <= 0:
            raise InvalidConfigError(f"sample_rate must be > 0, got {self.sample_rate}")
        if self.time_res < 1:
            raise InvalidConfigError(f"time_res must be >= 1, got {self.time_res}")
        if self.frame_size < 1:
            raise InvalidConfigError(f"frame_size must be >= 1, got {self.frame_size}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VocoderConfig":
        """
        Build a config from a mapping, ignoring unknown keys.

        Raises:
            InvalidConfigError: If a value cannot be converted
        """
        try:
            return cls(
                channels=int(data.get("channels", DEFAULT_CHANNELS)),
                sample_rate=float(data.get("sample_rate", SAMPLE_RATE)),
                frame_size=int(data.get("frame_size", DEFAULT_FRAME_SIZE)),
                time_res=int(data.get("time_res", DEFAULT_TIME_RES)),
            )
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(f"Invalid vocoder config {data!r}: {e}") from e


class ConfigLoader:
    """
    Loads vocoder presets from a YAML file with caching.

    The file maps preset names to parameter mappings:

        speech:
          channels: 1
          sample_rate: 16000
          frame_size: 512
          time_res: 4

    Attributes:
        config_dir: Directory holding presets.yaml
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration loader.

        Args:
            config_dir: Directory with presets.yaml.
                       Defaults to the configs directory shipped with the package.
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent / "configs"
        else:
            self.config_dir = Path(config_dir)

        self._cache: Dict[str, Any] = {}

    @property
    def presets_path(self) -> Path:
        return self.config_dir / PRESETS_FILE

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """
        Load a YAML file and return its contents.

        Raises:
            ConfigLoadError: If the file cannot be loaded or parsed
        """
        if not path.exists():
            raise ConfigLoadError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML file {path}: {e}") from e
        except OSError as e:
            raise ConfigLoadError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigLoadError(f"Expected a mapping at the top of {path}")
        return data

    def load_presets(self) -> Dict[str, Dict[str, Any]]:
        """
        Load all presets as raw mappings.

        Raises:
            ConfigLoadError: If the presets file cannot be loaded
        """
        cache_key = "presets"
        if cache_key not in self._cache:
            self._cache[cache_key] = self._load_yaml(self.presets_path)
            logger.debug(f"Loaded presets from {self.presets_path}")
        return self._cache[cache_key]

    def get_preset(self, name: str) -> VocoderConfig:
        """
        Get a preset as a validated VocoderConfig.

        Args:
            name: Preset name (e.g. 'default', 'speech')

        Raises:
            ConfigLoadError: If the preset does not exist
            InvalidConfigError: If the preset holds invalid values
        """
        presets = self.load_presets()
        if name not in presets:
            raise ConfigLoadError(
                f"Unknown preset '{name}'. Available: {', '.join(sorted(presets))}"
            )
        return VocoderConfig.from_dict(presets[name] or {}).validate()

    def available_presets(self) -> List[str]:
        """Sorted preset names, empty if no presets file exists."""
        if not self.has_presets():
            return []
        return sorted(self.load_presets())

    def has_presets(self) -> bool:
        return self.presets_path.exists()

    def reload(self) -> None:
        """Clear the cache so the next access re-reads the file."""
        self._cache.clear()
        logger.info("Configuration cache cleared")


# Module-level singleton for convenience
_default_loader: Optional[ConfigLoader] = None


def get_config_loader(config_dir: Optional[Union[str, Path]] = None) -> ConfigLoader:
    """
    Get the default ConfigLoader instance.

    Creates a singleton on first call. Passing a different config_dir
    replaces the singleton.
    """
    global _default_loader

    if _default_loader is None:
        _default_loader = ConfigLoader(config_dir)
    elif config_dir is not None and Path(config_dir) != _default_loader.config_dir:
        _default_loader = ConfigLoader(config_dir)

    return _default_loader


def load_preset(name: str) -> VocoderConfig:
    """Shortcut for get_config_loader().get_preset(name)."""
    return get_config_loader().get_preset(name)
