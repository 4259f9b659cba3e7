"""
Fixed-size complex transform used by the engine.

The engine only relies on three members: forward(), inverse() and
roundtrip_gain, the factor by which inverse(forward(x)) scales x. The
synthesis stage divides by roundtrip_gain * time_res, so any transform
with a consistent normalization can be injected.
"""

import logging
from typing import Optional, Protocol

import numpy as np
from scipy import fft as sp_fft

logger = logging.getLogger(__name__)


class Transform(Protocol):
    """Interface of a fixed-size complex forward/inverse transform."""

    size: int
    roundtrip_gain: float

    def forward(self, frame: np.ndarray) -> np.ndarray:
        ...

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        ...


class FFTTransform:
    """
    Unnormalized complex FFT pair backed by scipy.fft.

    forward() applies no scaling and inverse() applies no 1/N scaling either,
    so a round trip multiplies the signal by size.

    Attributes:
        size: Transform length
        roundtrip_gain: Equal to size for this convention
        workers: Passed through to scipy.fft (None = single thread)
    """

    def __init__(self, size: int, workers: Optional[int] = None):
        if size < 1:
            raise ValueError(f"Transform size must be >= 1, got {size}")
        self.size = int(size)
        self.workers = workers
        self.roundtrip_gain = float(self.size)
        logger.debug(f"FFTTransform initialized: size={self.size}")

    def forward(self, frame: np.ndarray) -> np.ndarray:
        """
        Forward transform along the last axis.

        Args:
            frame: Real or complex array whose last axis has length size

        Returns:
            Complex spectrum, same shape as frame
        """
        return sp_fft.fft(frame, n=self.size, axis=-1, norm="backward", workers=self.workers)

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        """Unnormalized inverse transform along the last axis."""
        # norm="forward" puts the 1/N on the forward side, leaving ifft unscaled
        return sp_fft.ifft(spectrum, n=self.size, axis=-1, norm="forward", workers=self.workers)

    def __repr__(self) -> str:
        return f"FFTTransform(size={self.size})"
