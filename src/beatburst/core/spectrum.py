"""
Spectrum sources.

Turns decoded PCM into byte frequency frames with the same semantics as a
browser AnalyserNode's getByteFrequencyData: Blackman window, magnitude
smoothing across calls, decibel conversion, and a linear map of
[min_db, max_db] onto [0, 255].
"""

import logging
from pathlib import Path
from typing import Iterator, Union

import librosa
import numpy as np
from scipy.signal import windows

from beatburst.config import AnalysisConfig

logger = logging.getLogger(__name__)


class SpectrumAnalyser:
    """
    Stateful FFT magnitude analyser.

    Smoothing carries over between calls, so feed it blocks in playback
    order and call reset() when the stream jumps.
    """

    def __init__(
        self,
        fft_size: int = 2048,
        smoothing: float = 0.6,
        min_db: float = -100.0,
        max_db: float = -30.0,
    ):
        if fft_size < 2 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two, got {fft_size}")
        if max_db <= min_db:
            raise ValueError(f"max_db ({max_db}) must exceed min_db ({min_db})")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db
        self.window = windows.blackman(fft_size, sym=False).astype(np.float64)
        self._previous = np.zeros(fft_size // 2)

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "SpectrumAnalyser":
        return cls(
            fft_size=config.fft_size,
            smoothing=config.smoothing,
            min_db=config.min_db,
            max_db=config.max_db,
        )

    @property
    def n_bins(self) -> int:
        return self.fft_size // 2

    def reset(self):
        self._previous = np.zeros(self.n_bins)

    def analyse(self, block: np.ndarray) -> np.ndarray:
        """
        Compute one byte spectrum frame.

        Args:
            block: fft_size mono samples in [-1, 1].

        Returns:
            uint8 array of length fft_size // 2.
        """
        block = np.asarray(block, dtype=np.float64)
        if block.shape != (self.fft_size,):
            raise ValueError(f"Expected {self.fft_size} samples, got shape {block.shape}")

        spectrum = np.fft.rfft(block * self.window)[: self.n_bins]
        magnitude = np.abs(spectrum) / self.fft_size

        smoothed = self.smoothing * self._previous + (1.0 - self.smoothing) * magnitude
        self._previous = smoothed

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(smoothed)

        scaled = (db - self.min_db) * (255.0 / (self.max_db - self.min_db))
        return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)


class FileSpectrumSource:
    """
    Serves spectrum frames for arbitrary playback times of an audio file.

    Decoding happens once up front; frame_at() is cheap enough to call from
    the audio callback.
    """

    def __init__(
        self,
        audio_path: Union[str, Path],
        config: AnalysisConfig | None = None,
    ):
        self.cfg = config or AnalysisConfig()
        self.path = Path(audio_path)

        logger.info(f"Loading audio: {self.path}")
        try:
            self.y, self.sr = librosa.load(self.path, sr=self.cfg.sample_rate, mono=True)
        except Exception as e:
            raise RuntimeError(f"Error loading audio file {self.path}: {e}") from e
        self.duration = librosa.get_duration(y=self.y, sr=self.sr)
        logger.info(f"Loaded {self.duration:.2f}s at {self.sr} Hz")

        self.analyser = SpectrumAnalyser.from_config(self.cfg)

    @property
    def n_bins(self) -> int:
        return self.analyser.n_bins

    def block_at(self, t: float) -> np.ndarray:
        """The fft_size samples ending at time t, zero padded outside the file."""
        size = self.analyser.fft_size
        end = int(round(t * self.sr))
        start = end - size

        block = np.zeros(size, dtype=np.float64)
        src_start = max(0, start)
        src_end = min(len(self.y), end)
        if src_end > src_start:
            block[src_start - start: src_end - start] = self.y[src_start:src_end]
        return block

    def frame_at(self, t: float) -> np.ndarray:
        """Byte spectrum for playback time t (seconds)."""
        return self.analyser.analyse(self.block_at(t))

    def frames(
        self,
        rate: float | None = None,
        max_duration: float | None = None,
    ) -> Iterator[tuple[float, np.ndarray]]:
        """
        Walk the file at a fixed callback rate.

        Args:
            rate: Callbacks per second (defaults to config.analysis_rate).
            max_duration: Stop after this many seconds.

        Yields:
            (time, spectrum) pairs.
        """
        rate = rate or self.cfg.analysis_rate
        duration = self.duration
        if max_duration is not None:
            duration = min(duration, max_duration)

        self.analyser.reset()
        n_frames = int(duration * rate)
        for i in range(n_frames):
            t = i / rate
            yield t, self.frame_at(t)
