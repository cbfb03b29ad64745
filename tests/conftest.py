"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from beatburst.config import BeatburstConfig

# Default sample rate for test audio
TEST_SR = 22050

# Byte spectrum length for the default 2048-point FFT
N_BINS = 1024


class RecordingSink:
    """In-memory render sink that records every registration change."""

    def __init__(self):
        self.drawables = []
        self.added = []
        self.removed = []
        self.viewport = None
        self.draw_calls = 0

    def add_drawable(self, effect):
        self.drawables.append(effect)
        self.added.append(effect)

    def remove_drawable(self, effect):
        assert any(d is effect for d in self.drawables), "drawable removed twice or never added"
        self.drawables = [d for d in self.drawables if d is not effect]
        self.removed.append(effect)

    def set_viewport(self, width, height):
        self.viewport = (width, height)

    def draw(self):
        self.draw_calls += 1


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def config() -> BeatburstConfig:
    """Default config with random idle launches disabled."""
    cfg = BeatburstConfig()
    cfg.ambient_spawn_chance = 0.0
    return cfg


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


def flat_spectrum(level: int = 10, n_bins: int = N_BINS) -> np.ndarray:
    """Spectrum with every bin at the same magnitude."""
    return np.full(n_bins, level, dtype=np.uint8)


def spiked_spectrum(
    band: int,
    level: int = 200,
    base: int = 10,
    num_bands: int = 8,
    n_bins: int = N_BINS,
) -> np.ndarray:
    """Flat spectrum with every bin of one band raised."""
    spectrum = flat_spectrum(base, n_bins)
    width = n_bins // num_bands
    end = n_bins if band == num_bands - 1 else (band + 1) * width
    spectrum[band * width:end] = level
    return spectrum


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def click_track(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a click track at 120 BPM over silence.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    bpm = 120
    samples_per_beat = int(sample_rate * 60 / bpm)
    total_samples = int(sample_rate * duration)

    y = np.zeros(total_samples, dtype=np.float32)

    # Add clicks (short impulses) at each beat
    click_duration = int(sample_rate * 0.01)  # 10ms click
    for beat_start in range(0, total_samples, samples_per_beat):
        click_end = min(beat_start + click_duration, total_samples)
        # Exponential decay click
        click_samples = click_end - beat_start
        decay = np.exp(-np.linspace(0, 5, click_samples))
        y[beat_start:click_end] = 0.8 * decay

    return y, sample_rate


@pytest.fixture
def temp_audio_file(tmp_path, click_track):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = click_track
    audio_path = tmp_path / "clicks.wav"
    sf.write(audio_path, y, sr)
    return audio_path
