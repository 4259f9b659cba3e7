"""
Utility functions and constants for the phase vocoder.

Provides:
- Default engine parameters
- Frame size rounding rules
- The analysis/synthesis window
- Bin frequency helpers
"""

from typing import Union

import numpy as np


# =============================================================================
# AUDIO CONSTANTS
# =============================================================================

SAMPLE_RATE = 44100  # Hz - CD quality
DEFAULT_CHANNELS = 2
DEFAULT_FRAME_SIZE = 2048  # Transform length, power of 2 for speed
DEFAULT_TIME_RES = 4  # Overlap factor (hop = frame_size / 4)

TWO_PI = 2.0 * np.pi


# =============================================================================
# FRAME GEOMETRY
# =============================================================================

def effective_frame_size(frame_size: int, time_res: int) -> int:
    """
    Round a requested frame size down to a multiple of time_res.

    Falls back to time_res when the rounded size would be zero.

    Args:
        frame_size: Requested transform length
        time_res: Overlap factor

    Returns:
        Frame size actually used by the engine
    """
    size = (int(frame_size) // int(time_res)) * int(time_res)
    if size == 0:
        size = int(time_res)
    return size


def hop_size(frame_size: int, time_res: int) -> int:
    """Samples the analysis window advances per sub-frame."""
    return effective_frame_size(frame_size, time_res) // int(time_res)


def frequency_per_bin(sample_rate: float, frame_size: int) -> float:
    """Width of one transform bin in Hz."""
    return float(sample_rate) / float(frame_size)


def bin_center_frequencies(sample_rate: float, frame_size: int) -> np.ndarray:
    """Nominal center frequency of every bin (0 .. frame_size-1)."""
    return np.arange(frame_size, dtype=np.float64) * frequency_per_bin(sample_rate, frame_size)


def nearest_bin(frequency: float, sample_rate: float, frame_size: int) -> int:
    """Index of the bin whose center frequency is closest to frequency."""
    return int(round(frequency / frequency_per_bin(sample_rate, frame_size)))


# =============================================================================
# WINDOW
# =============================================================================

def hann(x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Raised cosine window evaluated at normalized position x in [0, 1)."""
    return 0.5 - 0.5 * np.cos(TWO_PI * x)


def hann_window(frame_size: int) -> np.ndarray:
    """
    Periodic Hann window of length frame_size.

    Sampled at x = i / frame_size, which is what both the analysis and the
    synthesis stage apply.
    """
    return hann(np.arange(frame_size, dtype=np.float64) / float(frame_size))


def sine_wave(
    frequency: float,
    num_samples: int,
    sample_rate: int = SAMPLE_RATE,
    amplitude: float = 1.0,
    phase: float = 0.0
) -> np.ndarray:
    """Generate a float64 sine tone, mostly useful for tests and demos."""
    t = np.arange(num_samples, dtype=np.float64) / float(sample_rate)
    return amplitude * np.sin(TWO_PI * frequency * t + phase)
