"""
Pytest fixtures for phase_vocoder tests.
"""
import pytest
import sys
from pathlib import Path
import tempfile
import shutil

import numpy as np

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def sample_rate():
    """Standard sample rate for tests."""
    return 44100


@pytest.fixture
def temp_dir():
    """Create temporary directory for test outputs."""
    tmp = tempfile.mkdtemp()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_yaml_file(temp_dir):
    """Path for a temporary presets.yaml."""
    return Path(temp_dir) / "presets.yaml"


@pytest.fixture
def noise():
    """Two seconds of reproducible white noise in [-0.5, 0.5]."""
    rng = np.random.default_rng(1234)
    return rng.uniform(-0.5, 0.5, 2 * 44100)


@pytest.fixture
def recording_processor():
    """Identity processor that keeps a copy of every analysis frame."""
    class Recorder:
        def __init__(self):
            self.frames = []
            self.calls = []

        def __call__(self, channels, bins, analysis, synthesis):
            self.calls.append((channels, bins, analysis.read_only, synthesis.read_only))
            self.frames.append(analysis.copy())
            synthesis.copy_from(analysis)

    return Recorder()
