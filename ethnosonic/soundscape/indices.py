"""Acoustic indices - Soundscape ecology metrics over a magnitude spectrogram.

Indices:
- ACI, Acoustic Complexity Index (Pieretti et al. 2011)
- NDSI, Normalized Difference Soundscape Index (Kasten et al. 2012)
- H, acoustic entropy (Sueur et al. 2008)
- Peak frequency and spectral centroid of the mean spectrum
"""

import math
from dataclasses import dataclass, asdict

import numpy as np

from ..analysis.spectral import SpectralFrame, bin_frequencies

# NDSI band edges in Hz
ANTHROPHONY_RANGE = (1000.0, 2000.0)
BIOPHONY_RANGE = (2000.0, 8000.0)


@dataclass(frozen=True)
class AcousticIndices:
    """Container for acoustic index results."""

    aci: float  # 0 - inf, higher = more complex
    ndsi: float  # -1 (anthrophony) to 1 (biophony)
    biophony: float  # Mean magnitude per bin-frame in 2-8 kHz
    anthrophony: float  # Mean magnitude per bin-frame in 1-2 kHz
    entropy: float  # 0 - 1
    peak_frequency: float  # Hz
    spectral_centroid: float  # Hz

    def to_dict(self) -> dict:
        return asdict(self)


def acoustic_complexity(spectrogram: np.ndarray) -> float:
    """
    Sum of absolute frame-to-frame differences over the summed intensity.

    Both sums run over frames t >= 1 only. Zero with fewer than two frames
    or no intensity.
    """
    if len(spectrogram) < 2:
        return 0.0
    total_diff = float(np.sum(np.abs(np.diff(spectrogram, axis=0))))
    total_intensity = float(np.sum(spectrogram[1:]))
    if total_intensity <= 0:
        return 0.0
    return total_diff / total_intensity


def _bin_range(low: float, high: float, resolution: float):
    start = int(math.floor(low / resolution))
    stop = int(math.floor(high / resolution))
    return start, stop


def soundscape_index(spectrogram: np.ndarray, sample_rate: int, fft_size: int):
    """
    NDSI with its biophony and anthrophony components.

    Each band's summed magnitude is divided by (band bins x frames); the
    bin count is taken from the nominal band edges even when the upper
    edge lies past the last bin.

    Returns:
        Tuple of (ndsi, biophony, anthrophony)
    """
    n_frames = len(spectrogram)
    if n_frames == 0:
        return 0.0, 0.0, 0.0
    n_bins = spectrogram.shape[1]
    resolution = sample_rate / fft_size

    a_start, a_stop = _bin_range(*ANTHROPHONY_RANGE, resolution)
    b_start, b_stop = _bin_range(*BIOPHONY_RANGE, resolution)

    anthro_energy = float(np.sum(spectrogram[:, a_start:min(a_stop, n_bins)]))
    bio_energy = float(np.sum(spectrogram[:, b_start:min(b_stop, n_bins)]))

    anthro_bins = a_stop - a_start
    bio_bins = b_stop - b_start
    anthrophony = anthro_energy / (anthro_bins * n_frames) if anthro_bins > 0 else 0.0
    biophony = bio_energy / (bio_bins * n_frames) if bio_bins > 0 else 0.0

    total = biophony + anthrophony
    ndsi = (biophony - anthrophony) / total if total > 0 else 0.0
    return ndsi, biophony, anthrophony


def compute_indices(spectrogram: np.ndarray, sample_rate: int, fft_size: int) -> AcousticIndices:
    """
    Compute every acoustic index from a (frames, bins) magnitude spectrogram.

    Args:
        spectrogram: Non-negative magnitudes, one row per frame
        sample_rate: Sample rate in Hz
        fft_size: Transform length used to build the spectrogram

    Returns:
        AcousticIndices
    """
    spectrogram = np.asarray(spectrogram, dtype=np.float64)
    aci = acoustic_complexity(spectrogram)
    ndsi, biophony, anthrophony = soundscape_index(spectrogram, sample_rate, fft_size)

    if len(spectrogram) == 0:
        return AcousticIndices(aci, ndsi, biophony, anthrophony, 0.0, 0.0, 0.0)

    frequencies = bin_frequencies(fft_size, sample_rate)[: spectrogram.shape[1]]
    frames = [SpectralFrame(row, frequencies) for row in spectrogram]
    mean_frame = SpectralFrame(spectrogram.mean(axis=0), frequencies)

    return AcousticIndices(
        aci=aci,
        ndsi=ndsi,
        biophony=biophony,
        anthrophony=anthrophony,
        entropy=float(np.mean([frame.entropy for frame in frames])),
        peak_frequency=mean_frame.peak_frequency,
        spectral_centroid=mean_frame.centroid,
    )
