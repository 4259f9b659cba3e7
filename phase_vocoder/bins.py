"""
Spectral bins exchanged across the processing boundary.

A Bin is a single (frequency, amplitude) pair. A BinFrame holds one pair per
channel and bin, stored as two float64 arrays so that processors can work
either bin-by-bin or on whole arrays at once.

Example:
    >>> def halve(channels, bins, analysis, synthesis):
    ...     synthesis.frequencies[:] = analysis.frequencies
    ...     synthesis.amplitudes[:] = analysis.amplitudes * 0.5
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

import numpy as np


@dataclass(frozen=True)
class Bin:
    """
    One component of the spectrum.

    Attributes:
        frequency: Estimated true frequency in Hz
        amplitude: Magnitude of the component (not checked to be >= 0)
    """
    frequency: float = 0.0
    amplitude: float = 0.0


class BinFrame:
    """
    A (channels x bins) array of Bin values.

    Attributes:
        frequencies: float64 array of shape (channels, bins), Hz
        amplitudes: float64 array of shape (channels, bins)
    """

    def __init__(self, channels: int, bins: int, read_only: bool = False):
        self.frequencies = np.zeros((channels, bins), dtype=np.float64)
        self.amplitudes = np.zeros((channels, bins), dtype=np.float64)
        if read_only:
            self.freeze()

    @classmethod
    def from_arrays(
        cls,
        frequencies: np.ndarray,
        amplitudes: np.ndarray,
        read_only: bool = False
    ) -> "BinFrame":
        """
        Build a frame around existing arrays (copied to float64).

        Raises:
            ValueError: If the two arrays are not the same 2-D shape
        """
        freqs = np.array(frequencies, dtype=np.float64, ndmin=2)
        amps = np.array(amplitudes, dtype=np.float64, ndmin=2)
        if freqs.shape != amps.shape or freqs.ndim != 2:
            raise ValueError(
                f"frequency/amplitude shapes differ: {freqs.shape} vs {amps.shape}"
            )
        frame = cls.__new__(cls)
        frame.frequencies = freqs
        frame.amplitudes = amps
        if read_only:
            frame.freeze()
        return frame

    @property
    def shape(self) -> Tuple[int, int]:
        return self.frequencies.shape

    @property
    def channels(self) -> int:
        return self.frequencies.shape[0]

    @property
    def bins(self) -> int:
        return self.frequencies.shape[1]

    @property
    def read_only(self) -> bool:
        return not self.frequencies.flags.writeable

    def freeze(self) -> None:
        """Make both arrays non-writeable."""
        self.frequencies.flags.writeable = False
        self.amplitudes.flags.writeable = False

    def __len__(self) -> int:
        return self.channels

    def __getitem__(self, index: Tuple[int, int]) -> Bin:
        channel, bin_index = index
        return Bin(
            float(self.frequencies[channel, bin_index]),
            float(self.amplitudes[channel, bin_index]),
        )

    def __setitem__(self, index: Tuple[int, int], value: Bin) -> None:
        channel, bin_index = index
        self.frequencies[channel, bin_index] = value.frequency
        self.amplitudes[channel, bin_index] = value.amplitude

    def channel(self, channel: int) -> List[Bin]:
        """All bins of one channel as Bin values."""
        return [
            Bin(float(f), float(a))
            for f, a in zip(self.frequencies[channel], self.amplitudes[channel])
        ]

    def __iter__(self) -> Iterator[List[Bin]]:
        for channel in range(self.channels):
            yield self.channel(channel)

    def copy_from(self, other: "BinFrame") -> None:
        """
        Overwrite every bin with the values of another frame.

        This is the identity mapping: analysis -> synthesis unchanged.
        """
        self.frequencies[...] = other.frequencies
        self.amplitudes[...] = other.amplitudes

    def copy(self) -> "BinFrame":
        """Writable deep copy, safe to keep after a processor call returns."""
        return BinFrame.from_arrays(self.frequencies, self.amplitudes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinFrame):
            return NotImplemented
        return (
            np.array_equal(self.frequencies, other.frequencies)
            and np.array_equal(self.amplitudes, other.amplitudes)
        )

    def __repr__(self) -> str:
        flag = ", read_only" if self.read_only else ""
        return f"BinFrame(channels={self.channels}, bins={self.bins}{flag})"
