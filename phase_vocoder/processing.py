"""
Offline convenience functions.

Run a whole in-memory buffer through a PhaseVocoder in blocks, flush the
engine, and return output aligned sample-for-sample with the input.
"""

import logging
from typing import Iterable, Iterator, Optional

import numpy as np

from .config import VocoderConfig
from .processors import SpectralProcessor, identity_processor
from .utils import DEFAULT_FRAME_SIZE, DEFAULT_TIME_RES, SAMPLE_RATE
from .vocoder import PhaseVocoder

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 4096


def _as_channels(audio: np.ndarray) -> np.ndarray:
    """(n,) -> (1, n); (n, channels) -> (channels, n)."""
    if audio.ndim == 1:
        return audio[np.newaxis, :]
    if audio.ndim == 2:
        return audio.T
    raise ValueError(f"Expected mono (n,) or multichannel (n, channels) audio, got shape {audio.shape}")


def stream_blocks(
    vocoder: PhaseVocoder,
    blocks: Iterable[np.ndarray],
    processor: SpectralProcessor = identity_processor
) -> Iterator[np.ndarray]:
    """
    Feed (channels, n) blocks through a vocoder, yielding finished output.

    Each yielded array has shape (channels, m) where m is whatever the engine
    had ready after that block; m may be zero.
    """
    for block in blocks:
        block = np.atleast_2d(np.asarray(block, dtype=np.float64))
        out = np.zeros((vocoder.channels, vocoder.samples_available + block.shape[-1]))
        written = vocoder.process(list(block), list(out), processor)
        yield out[:, :written]


def process_audio(
    audio: np.ndarray,
    processor: SpectralProcessor = identity_processor,
    sample_rate: int = SAMPLE_RATE,
    frame_size: int = DEFAULT_FRAME_SIZE,
    time_res: int = DEFAULT_TIME_RES,
    config: Optional[VocoderConfig] = None,
    block_size: int = DEFAULT_BLOCK_SIZE
) -> np.ndarray:
    """
    Process a complete buffer through a fresh phase vocoder.

    Args:
        audio: Input audio, mono (n,) or multichannel (n, channels)
        processor: Spectral processor, identity by default
        sample_rate: Sample rate (ignored when config is given)
        frame_size: Transform size (ignored when config is given)
        time_res: Overlap factor (ignored when config is given)
        config: Optional VocoderConfig; its channel count is replaced by the
               channel count of audio
        block_size: Samples per channel fed per process() call

    Returns:
        Processed audio with the same shape and length as the input

    Example:
        >>> def octave_down(channels, bins, analysis, synthesis):
        ...     synthesis.frequencies[:, :bins // 2] = analysis.frequencies[:, ::2] * 0.5
        ...     synthesis.amplitudes[:, :bins // 2] = analysis.amplitudes[:, ::2]
        >>> lower = process_audio(vocal, octave_down, sample_rate=44100)
    """
    audio = np.asarray(audio)
    channels_first = _as_channels(audio.astype(np.float64))
    num_channels, num_samples = channels_first.shape

    if config is None:
        config = VocoderConfig(num_channels, sample_rate, frame_size, time_res)
    else:
        config = VocoderConfig(num_channels, config.sample_rate, config.frame_size, config.time_res)

    vocoder = PhaseVocoder.from_config(config)
    block_size = max(1, int(block_size))
    blocks = (
        channels_first[:, start:start + block_size]
        for start in range(0, num_samples, block_size)
    )

    pieces = list(stream_blocks(vocoder, blocks, processor))
    pieces.append(vocoder.flush(processor))
    result = np.concatenate(pieces, axis=1) if pieces else np.zeros((num_channels, 0))

    logger.debug(
        f"process_audio: {num_samples} samples x {num_channels} channels, "
        f"frame_size={vocoder.frame_size}, time_res={vocoder.time_res}"
    )

    result = result[:, :num_samples]
    if audio.ndim == 1:
        return result[0]
    return result.T
