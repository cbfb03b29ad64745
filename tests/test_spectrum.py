"""Tests for the spectrum analyser and file source."""

import numpy as np
import pytest

from beatburst.config import AnalysisConfig
from beatburst.core.spectrum import FileSpectrumSource, SpectrumAnalyser


def _bin_sine(bin_index: int, sr: int, n: int = 2048, amplitude: float = 0.5) -> np.ndarray:
    freq = bin_index * sr / n
    t = np.arange(n) / sr
    return amplitude * np.sin(2 * np.pi * freq * t)


class TestSpectrumAnalyser:
    def test_output_shape_and_dtype(self):
        analyser = SpectrumAnalyser()
        frame = analyser.analyse(np.zeros(2048))
        assert frame.shape == (1024,)
        assert frame.dtype == np.uint8

    def test_silence_is_zero(self):
        analyser = SpectrumAnalyser()
        assert not analyser.analyse(np.zeros(2048)).any()

    def test_sine_peaks_at_its_bin(self, sample_rate):
        analyser = SpectrumAnalyser()
        frame = analyser.analyse(_bin_sine(100, sample_rate))
        assert frame[100] == 255
        assert frame[500] < 100

    def test_smoothing_carries_between_calls(self, sample_rate):
        quiet = _bin_sine(100, sample_rate, amplitude=0.0005)

        analyser = SpectrumAnalyser(smoothing=0.6)
        first = int(analyser.analyse(quiet)[100])
        for _ in range(20):
            steady = int(analyser.analyse(quiet)[100])
        assert steady > first

        analyser.reset()
        assert int(analyser.analyse(quiet)[100]) == first

    def test_no_smoothing(self, sample_rate):
        quiet = _bin_sine(100, sample_rate, amplitude=0.0005)
        analyser = SpectrumAnalyser(smoothing=0.0)
        first = analyser.analyse(quiet)
        second = analyser.analyse(quiet)
        np.testing.assert_array_equal(first, second)

    def test_from_config(self):
        analyser = SpectrumAnalyser.from_config(AnalysisConfig(fft_size=512, smoothing=0.2))
        assert analyser.n_bins == 256
        assert analyser.smoothing == 0.2

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            SpectrumAnalyser(fft_size=1000)

    def test_rejects_inverted_db_range(self):
        with pytest.raises(ValueError):
            SpectrumAnalyser(min_db=-30, max_db=-100)

    def test_rejects_wrong_block_length(self):
        with pytest.raises(ValueError):
            SpectrumAnalyser().analyse(np.zeros(1024))


class TestFileSpectrumSource:
    def test_loads_audio(self, temp_audio_file, sample_rate):
        source = FileSpectrumSource(temp_audio_file)
        assert source.sr == sample_rate
        assert source.duration == pytest.approx(2.0, abs=0.01)
        assert source.n_bins == 1024

    def test_block_before_start_is_silent(self, temp_audio_file):
        source = FileSpectrumSource(temp_audio_file)
        assert not source.block_at(0.0).any()
        assert not source.frame_at(0.0).any()

    def test_block_past_end_is_silent(self, temp_audio_file):
        source = FileSpectrumSource(temp_audio_file)
        assert not source.block_at(10.0).any()

    def test_block_includes_click(self, temp_audio_file):
        source = FileSpectrumSource(temp_audio_file)
        block = source.block_at(0.05)
        assert block.shape == (2048,)
        assert np.abs(block).max() > 0.5

    def test_frames_at_fixed_rate(self, temp_audio_file):
        source = FileSpectrumSource(temp_audio_file)
        frames = list(source.frames(rate=30))
        assert len(frames) == 60
        times = [t for t, _ in frames]
        assert times[1] == pytest.approx(1 / 30)
        assert all(f.shape == (1024,) for _, f in frames)

    def test_frames_max_duration(self, temp_audio_file):
        source = FileSpectrumSource(temp_audio_file)
        assert len(list(source.frames(rate=60, max_duration=0.5))) == 30

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuntimeError):
            FileSpectrumSource(tmp_path / "nope.wav")
