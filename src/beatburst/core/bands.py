"""
Band energy reduction.

Collapses a frequency spectrum into a handful of per-band energies
that the onset detector tracks independently.
"""

import numpy as np


def band_edges(n_bins: int, num_bands: int) -> np.ndarray:
    """
    Compute slice boundaries for splitting n_bins into num_bands bands.

    Bands are equal width; the last band absorbs the remainder.

    Returns:
        Integer array of num_bands + 1 edges, starting at 0 and ending at n_bins.
    """
    if num_bands < 1:
        raise ValueError(f"num_bands must be >= 1, got {num_bands}")
    if n_bins < num_bands:
        raise ValueError(f"Spectrum of length {n_bins} cannot be split into {num_bands} bands")

    width = n_bins // num_bands
    edges = np.arange(num_bands + 1) * width
    edges[-1] = n_bins
    return edges


def compute_band_energies(spectrum, num_bands: int) -> np.ndarray:
    """
    Reduce a spectrum frame to the mean magnitude of each band.

    Args:
        spectrum: 1-D sequence of non-negative magnitudes.
        num_bands: Number of contiguous bands.

    Returns:
        Float array of length num_bands.
    """
    values = np.asarray(spectrum, dtype=np.float64)
    if values.ndim != 1:
        raise ValueError(f"Spectrum must be 1-D, got shape {values.shape}")

    edges = band_edges(len(values), num_bands)
    sums = np.add.reduceat(values, edges[:-1])
    return sums / np.diff(edges)
