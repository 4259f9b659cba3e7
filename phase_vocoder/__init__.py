"""
Streaming Phase Vocoder

Turns an audio stream into overlapping short-time spectra, exposes each
frame to a caller-supplied processor as frequency/amplitude bins, and
resynthesizes a phase-continuous stream from the processed bins.
"""

__version__ = "0.1.0"

from .bins import Bin, BinFrame
from .buffers import SampleQueue
from .config import (
    ConfigLoader,
    VocoderConfig,
    get_config_loader,
    load_preset,
)
from .errors import (
    VocoderError,
    ChannelCountError,
    ChannelLengthError,
    ConfigLoadError,
    InvalidConfigError,
)
from .processing import process_audio, stream_blocks
from .processors import SpectralProcessor, identity_processor
from .transform import FFTTransform, Transform
from .utils import (
    SAMPLE_RATE,
    DEFAULT_FRAME_SIZE,
    DEFAULT_TIME_RES,
    effective_frame_size,
    hann_window,
)
from .vocoder import PhaseVocoder

__all__ = [
    "PhaseVocoder",
    "Bin",
    "BinFrame",
    "SampleQueue",
    "SpectralProcessor",
    "identity_processor",
    "Transform",
    "FFTTransform",
    "process_audio",
    "stream_blocks",
    # Configuration
    "VocoderConfig",
    "ConfigLoader",
    "get_config_loader",
    "load_preset",
    # Errors
    "VocoderError",
    "ChannelCountError",
    "ChannelLengthError",
    "ConfigLoadError",
    "InvalidConfigError",
    # Constants and helpers
    "SAMPLE_RATE",
    "DEFAULT_FRAME_SIZE",
    "DEFAULT_TIME_RES",
    "effective_frame_size",
    "hann_window",
]
