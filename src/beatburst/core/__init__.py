"""Spectrum analysis and onset detection."""

from beatburst.core.bands import compute_band_energies
from beatburst.core.detector import OnsetDetector, OnsetEvent

__all__ = ["compute_band_energies", "OnsetDetector", "OnsetEvent"]
