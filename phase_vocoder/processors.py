"""
Spectral processor call contract.

A processor is any callable taking (channels, bins, analysis, synthesis).
It reads the read-only analysis frame and fills the synthesis frame in place.
Both frames are only valid for the duration of the call; use
BinFrame.copy() to keep data around.
"""

from typing import Protocol

from .bins import BinFrame


class SpectralProcessor(Protocol):
    """Callable invoked once per analysis sub-frame."""

    def __call__(
        self,
        channels: int,
        bins: int,
        analysis: BinFrame,
        synthesis: BinFrame
    ) -> None:
        ...


def identity_processor(channels: int, bins: int, analysis: BinFrame, synthesis: BinFrame) -> None:
    """Copy analysis bins to synthesis bins unchanged (passthrough)."""
    synthesis.copy_from(analysis)
