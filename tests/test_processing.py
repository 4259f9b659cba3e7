"""
Unit tests for the offline helpers

Tests process_audio shape handling, alignment and flushing, and the
stream_blocks generator.
"""

import pytest
import sys
import numpy as np
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from phase_vocoder import PhaseVocoder, VocoderConfig, identity_processor
from phase_vocoder.processing import process_audio, stream_blocks
from phase_vocoder.utils import sine_wave

PASSTHROUGH_GAIN = 0.75


class TestProcessAudio:
    """Tests for whole-buffer processing."""

    def test_mono_shape_and_alignment(self, sample_rate):
        """Test mono output keeps shape and lines up with the input."""
        x = sine_wave(440.0, sample_rate, sample_rate, amplitude=0.5)
        y = process_audio(x, sample_rate=sample_rate, frame_size=1024, time_res=4)

        assert y.shape == x.shape
        settle = 1024 - 256
        np.testing.assert_allclose(y[settle:], PASSTHROUGH_GAIN * x[settle:], atol=1e-6)

    def test_stereo_shape(self, noise):
        """Test (n, channels) input keeps its shape."""
        stereo = np.column_stack([noise[:20000], noise[:20000] * 0.5])
        y = process_audio(stereo, frame_size=512, time_res=4)

        assert y.shape == stereo.shape
        settle = 512 - 128
        np.testing.assert_allclose(y[settle:], PASSTHROUGH_GAIN * stereo[settle:], atol=1e-6)

    def test_uses_config(self, noise):
        """Test a VocoderConfig overrides the keyword parameters."""
        config = VocoderConfig(channels=8, sample_rate=22050, frame_size=256, time_res=4)
        y = process_audio(noise[:5000], config=config)
        assert y.shape == (5000,)
        np.testing.assert_allclose(y[192:], PASSTHROUGH_GAIN * noise[192:5000], atol=1e-6)

    def test_block_size_does_not_change_result(self, noise):
        """Test block size has no effect on the output."""
        a = process_audio(noise[:30000], frame_size=1024, block_size=100)
        b = process_audio(noise[:30000], frame_size=1024, block_size=30000)
        assert np.array_equal(a, b)

    def test_short_input(self):
        """Test input shorter than a frame is still returned in full."""
        x = np.full(10, 0.25)
        y = process_audio(x, frame_size=1024)
        assert y.shape == (10,)

    def test_empty_input(self):
        """Test zero-length input is accepted."""
        y = process_audio(np.zeros(0))
        assert y.shape == (0,)

    def test_rejects_3d_input(self):
        """Test 3-D input raises ValueError."""
        with pytest.raises(ValueError):
            process_audio(np.zeros((4, 2, 2)))

    def test_custom_processor(self, noise):
        """Test a processor that writes nothing yields silence."""
        def mute(channels, bins, analysis, synthesis):
            pass

        y = process_audio(noise[:8000], mute, frame_size=512)
        assert np.all(y == 0.0)


class TestStreamBlocks:
    """Tests for the block generator."""

    def test_totals(self, noise):
        """Test emitted + pending, then emitted + flushed, equal the samples supplied."""
        pv = PhaseVocoder(1, 44100, 512, 4)
        source = noise[:10000]
        blocks = (source[np.newaxis, i:i + 700] for i in range(0, len(source), 700))
        pieces = list(stream_blocks(pv, blocks, identity_processor))

        emitted = sum(piece.shape[1] for piece in pieces)
        assert all(piece.shape[0] == 1 for piece in pieces)
        assert emitted + pv.pending_samples == 10000

        tail = pv.flush(identity_processor)
        assert emitted + tail.shape[1] == 10000

    def test_mono_blocks_promoted(self, noise):
        """Test 1-D blocks are treated as one channel."""
        pv = PhaseVocoder(1, 44100, 256, 4)
        pieces = list(stream_blocks(pv, [noise[:2000]]))
        assert pieces[0].shape[0] == 1
        assert pieces[0].shape[1] > 0
