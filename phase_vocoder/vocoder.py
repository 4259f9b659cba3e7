"""
Streaming Phase Vocoder

Converts a multichannel sample stream into overlapping short-time spectra,
hands every spectral frame to a caller-supplied processor as
frequency/amplitude bins, and resynthesizes a continuous stream from the
processed bins with phase continuity across frames.

Pipeline per sub-frame:
1. Analysis: Hann window -> FFT -> polar -> phase difference -> true frequency
2. Processing: processor(channels, bins, analysis, synthesis)
3. Synthesis: frequency -> accumulated phase -> inverse FFT -> Hann window
   -> overlap-add -> one hop of finished samples per channel

References:
- Stephan Bernsee, "Pitch Shifting Using The Fourier Transform"
- Dolson, "The Phase Vocoder: A Tutorial"
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .bins import BinFrame
from .buffers import SampleQueue
from .config import VocoderConfig
from .errors import ChannelCountError, ChannelLengthError
from .processors import SpectralProcessor
from .transform import FFTTransform, Transform
from .utils import TWO_PI, effective_frame_size, hann_window

logger = logging.getLogger(__name__)


class PhaseVocoder:
    """
    Stateful phase vocoder engine.

    All per-channel state (queues, phase history, overlap-add accumulator)
    persists between process() calls, which is what keeps the phase of the
    resynthesized signal continuous from one call to the next.

    Attributes:
        channels: Number of audio channels
        sample_rate: Sample rate in Hz
        frame_size: Effective transform length (multiple of time_res)
        time_res: Overlap factor; frames advance by frame_size / time_res
        hop_size: frame_size // time_res

    Example:
        >>> from phase_vocoder import PhaseVocoder, identity_processor
        >>> pv = PhaseVocoder(channels=1, sample_rate=44100, frame_size=1024, time_res=4)
        >>> audio = np.zeros(4096)
        >>> out = [np.zeros(4096)]
        >>> written = pv.process([audio], out, identity_processor)
    """

    def __init__(
        self,
        channels: int,
        sample_rate: float,
        frame_size: int,
        time_res: int,
        transform: Optional[Transform] = None
    ):
        """
        Initialize the engine.

        No validation is performed; callers are responsible for sane values.

        Args:
            channels: Number of channels of audio
            sample_rate: Sample rate in Hz
            frame_size: Requested transform size. Rounded down to a multiple
                       of time_res, or to time_res when that would give zero.
            time_res: Number of overlapping frames per frame length
            transform: Optional transform with forward/inverse/roundtrip_gain.
                      Defaults to an unnormalized FFTTransform.
        """
        self.channels = int(channels)
        self.sample_rate = float(sample_rate)
        self.time_res = int(time_res)
        self.frame_size = effective_frame_size(frame_size, self.time_res)
        self.hop_size = self.frame_size // self.time_res

        if self.frame_size != frame_size:
            logger.warning(
                f"Frame size {frame_size} adjusted to {self.frame_size} "
                f"(multiple of time_res={self.time_res})"
            )

        self.transform = transform if transform is not None else FFTTransform(self.frame_size)

        # Constants of the phase <-> frequency conversion
        self._expected = TWO_PI * self.hop_size / self.frame_size
        self._freq_per_bin = self.sample_rate / self.frame_size
        self._bin_index = np.arange(self.frame_size, dtype=np.float64)
        self._window = hann_window(self.frame_size)
        self._synthesis_scale = 1.0 / (self.transform.roundtrip_gain * self.time_res)

        self._in_queues: List[SampleQueue] = []
        self._out_queues: List[SampleQueue] = []
        self._accumulators: List[SampleQueue] = []
        self.reset()

        logger.debug(
            f"PhaseVocoder initialized: channels={self.channels}, "
            f"sample_rate={self.sample_rate}, frame_size={self.frame_size}, "
            f"time_res={self.time_res}"
        )

    @classmethod
    def from_config(cls, config: VocoderConfig, transform: Optional[Transform] = None) -> "PhaseVocoder":
        """Create an engine from a VocoderConfig."""
        return cls(
            channels=config.channels,
            sample_rate=config.sample_rate,
            frame_size=config.frame_size,
            time_res=config.time_res,
            transform=transform,
        )

    # =========================================================================
    # STATE
    # =========================================================================

    def reset(self) -> None:
        """Discard all queued samples and phase history."""
        self.samples_waiting = 0
        self._supplied = 0
        self._drained = 0
        self._in_queues = [SampleQueue(2 * self.frame_size) for _ in range(self.channels)]
        self._out_queues = [SampleQueue(2 * self.frame_size) for _ in range(self.channels)]
        self._accumulators = [SampleQueue(self.frame_size) for _ in range(self.channels)]
        self.last_phase = np.zeros((self.channels, self.frame_size), dtype=np.float64)
        self.sum_phase = np.zeros((self.channels, self.frame_size), dtype=np.float64)

    @property
    def num_channels(self) -> int:
        return self.channels

    @property
    def num_bins(self) -> int:
        return self.frame_size

    @property
    def samples_available(self) -> int:
        """Finished samples per channel waiting to be drained."""
        return len(self._out_queues[0]) if self.channels else 0

    @property
    def pending_samples(self) -> int:
        """Samples per channel supplied but not yet resynthesized."""
        return len(self._in_queues[0]) if self.channels else 0

    # =========================================================================
    # PROCESSING
    # =========================================================================

    def process(
        self,
        inputs: Sequence[np.ndarray],
        outputs: Sequence[np.ndarray],
        processor: SpectralProcessor
    ) -> int:
        """
        Queue new input, run every complete batch, and drain finished output.

        Args:
            inputs: One sequence of new samples per channel, normalized to
                   [-1, 1]. All slices of a call must have the same length
                   (zero is fine).
            outputs: One writable slice per channel. The same number of
                    samples goes to every channel: the available count,
                    capped by the shortest slice. Values are cast to the
                    slice's dtype; anything left over stays queued.
            processor: Called once per sub-frame as
                      processor(channels, bins, analysis, synthesis)

        Returns:
            Number of samples written to each output slice

        Raises:
            ChannelCountError: If inputs/outputs do not hold one slice per channel
            ChannelLengthError: If input slices differ in length
        """
        if len(inputs) != self.channels:
            raise ChannelCountError(
                f"Expected {self.channels} input slices, got {len(inputs)}"
            )
        if len(outputs) != self.channels:
            raise ChannelCountError(
                f"Expected {self.channels} output slices, got {len(outputs)}"
            )

        samples = [np.asarray(chunk, dtype=np.float64).reshape(-1) for chunk in inputs]
        lengths = {len(chunk) for chunk in samples}
        if len(lengths) > 1:
            raise ChannelLengthError(
                f"Input slices must have equal lengths, got {sorted(lengths)}"
            )

        for queue, chunk in zip(self._in_queues, samples):
            queue.push(chunk)
            self.samples_waiting += len(chunk)
        if samples:
            self._supplied += len(samples[0])

        self._run_batches(processor)
        return self._drain(outputs)

    def flush(self, processor: SpectralProcessor) -> np.ndarray:
        """
        Push every supplied sample through the engine and reset it.

        Appends 2 * frame_size zeros per channel so that all real input gets
        resynthesized, then returns the finished samples that correspond to
        supplied input and have not been drained yet.

        Args:
            processor: Same processor used for process()

        Returns:
            Array of shape (channels, n)
        """
        for queue in self._in_queues:
            queue.push_zeros(2 * self.frame_size)
            self.samples_waiting += 2 * self.frame_size
        self._run_batches(processor)

        remaining = self._supplied - self._drained
        tail = np.stack([queue.pop(remaining) for queue in self._out_queues]) \
            if self.channels else np.zeros((0, 0))
        logger.debug(f"Flushed {tail.shape[-1]} samples per channel")
        self.reset()
        return tail

    def _run_batches(self, processor: SpectralProcessor) -> int:
        """Run batches while enough look-ahead is queued. Returns the batch count."""
        threshold = 2 * self.frame_size * self.channels
        batches = 0
        while self.channels and self.samples_waiting >= threshold:
            for _ in range(self.time_res):
                analysis = self._analyze()
                synthesis = BinFrame(self.channels, self.frame_size)
                processor(self.channels, self.frame_size, analysis, synthesis)
                self._synthesize(synthesis)
            self.samples_waiting -= self.frame_size * self.channels
            batches += 1
        if batches:
            logger.debug(f"Processed {batches} batch(es), {self.samples_waiting} samples waiting")
        return batches

    def _drain(self, outputs: Sequence[np.ndarray]) -> int:
        """Move finished samples into the caller's slices, lockstep across channels."""
        if not self.channels:
            return 0
        count = min([len(self._out_queues[0])] + [len(out) for out in outputs])
        for queue, out in zip(self._out_queues, outputs):
            out[:count] = queue.pop(count)
        self._drained += count
        return count

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    def _analyze(self) -> BinFrame:
        """
        Analyze the first frame_size queued samples of every channel.

        Returns:
            Read-only BinFrame of estimated frequencies and amplitudes
        """
        frames = np.stack([queue.peek(self.frame_size) for queue in self._in_queues])
        spectrum = self.transform.forward(frames * self._window)

        amplitude = np.abs(spectrum)
        phase = np.angle(spectrum)

        # Phase difference to the previous frame, minus the expected advance
        deviation = phase - self.last_phase
        self.last_phase = phase
        deviation -= self._bin_index * self._expected

        # Map to +/- pi: qpd = trunc(dev / pi), rounded away to the nearest even
        qpd = np.trunc(deviation / np.pi).astype(np.int64)
        odd = qpd & 1
        qpd = np.where(qpd >= 0, qpd + odd, qpd - odd)
        deviation -= np.pi * qpd

        # Deviation in bins, then true frequency
        deviation = self.time_res * deviation / TWO_PI
        frequency = self._bin_index * self._freq_per_bin + deviation * self._freq_per_bin

        return BinFrame.from_arrays(frequency, amplitude * 2.0, read_only=True)

    # =========================================================================
    # SYNTHESIS
    # =========================================================================

    def _synthesize(self, synthesis: BinFrame) -> None:
        """Resynthesize one sub-frame and finalize one hop of output per channel."""
        amplitude = synthesis.amplitudes
        deviation = synthesis.frequencies - self._bin_index * self._freq_per_bin
        deviation /= self._freq_per_bin
        deviation = TWO_PI * deviation / self.time_res
        deviation += self._bin_index * self._expected
        self.sum_phase += deviation

        spectrum = amplitude * np.cos(self.sum_phase) + 1j * (amplitude * np.sin(self.sum_phase))
        frames = self.transform.inverse(spectrum).real
        frames = self._window * frames * self._synthesis_scale

        for chan in range(self.channels):
            accumulator = self._accumulators[chan]
            accumulator.accumulate(frames[chan])
            self._out_queues[chan].push(accumulator.pop(self.hop_size))
            self._in_queues[chan].discard(self.hop_size)
