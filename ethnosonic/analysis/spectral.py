"""Magnitude spectra and derived spectral features."""

from dataclasses import dataclass
from typing import List

import numpy as np

from .frames import FrameSource, get_window


@dataclass(frozen=True)
class FrequencyPeak:
    frequency: float
    amplitude: float


@dataclass(frozen=True)
class SpectralFrame:
    """Magnitude spectrum of one analysis frame."""

    magnitudes: np.ndarray
    frequencies: np.ndarray

    @property
    def centroid(self) -> float:
        return spectral_centroid(self.magnitudes, self.frequencies)

    @property
    def flatness(self) -> float:
        return spectral_flatness(self.magnitudes)

    @property
    def entropy(self) -> float:
        return spectral_entropy(self.magnitudes)

    @property
    def peak_frequency(self) -> float:
        """Frequency of the strongest bin, 0 for a silent frame."""
        if len(self.magnitudes) == 0:
            return 0.0
        peak_bin = int(np.argmax(self.magnitudes))
        if self.magnitudes[peak_bin] <= 0:
            return 0.0
        return float(self.frequencies[peak_bin])

    def band_energy(self, min_freq: float, max_freq: float) -> float:
        return band_energy(self.magnitudes, self.frequencies, min_freq, max_freq)


def bin_frequencies(fft_size: int, sample_rate: int) -> np.ndarray:
    """Frequency of each of the fft_size / 2 bins: k * sample_rate / fft_size."""
    return np.arange(fft_size // 2) * sample_rate / fft_size


def magnitude_spectrum(
    samples: np.ndarray,
    fft_size: int,
    window_type: str = "rectangular",
    normalize: bool = False,
) -> np.ndarray:
    """
    Magnitude of the DFT over the first fft_size / 2 bins.

    bin[k] = |sum_n window(n) * x[n] * exp(-2j*pi*k*n / fft_size)|. Input
    shorter than fft_size is zero-padded. Works on a single frame or on a
    (frames, fft_size) matrix.

    Args:
        samples: Frame samples, not yet windowed
        fft_size: Transform length
        window_type: Window applied before the transform
        normalize: Divide magnitudes by fft_size

    Returns:
        Magnitudes, shape (..., fft_size // 2)
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.shape[-1] > fft_size:
        samples = samples[..., :fft_size]
    windowed = samples * get_window(window_type, samples.shape[-1])
    spectrum = np.abs(np.fft.rfft(windowed, n=fft_size, axis=-1))[..., : fft_size // 2]
    if normalize:
        spectrum = spectrum / fft_size
    return spectrum


def spectrogram(
    samples: np.ndarray,
    sample_rate: int,
    fft_size: int,
    hop_size: int,
    window_type: str = "hann",
    normalize: bool = False,
) -> np.ndarray:
    """
    Magnitude spectrogram, one row per frame.

    Returns:
        Array shaped (n_frames, fft_size // 2)
    """
    source = FrameSource(samples, sample_rate, fft_size, hop_size, window_type)
    frames = source.as_matrix()
    if len(frames) == 0:
        return np.zeros((0, fft_size // 2))
    return magnitude_spectrum(frames, fft_size, "rectangular", normalize=normalize)


def spectral_centroid(magnitudes: np.ndarray, frequencies: np.ndarray) -> float:
    """Magnitude-weighted mean frequency, 0 for an empty spectrum."""
    total = float(np.sum(magnitudes))
    if total == 0:
        return 0.0
    return float(np.sum(magnitudes * frequencies) / total)


def spectral_flatness(magnitudes: np.ndarray) -> float:
    """Geometric over arithmetic mean of the nonzero bins (0 if there are none)."""
    nonzero = magnitudes[magnitudes > 0]
    if len(nonzero) == 0:
        return 0.0
    geometric = np.exp(np.mean(np.log(nonzero)))
    return float(geometric / np.mean(nonzero))


def spectral_entropy(magnitudes: np.ndarray) -> float:
    """Shannon entropy of the normalized spectrum divided by log2(bin count)."""
    total = float(np.sum(magnitudes))
    if total == 0 or len(magnitudes) < 2:
        return 0.0
    p = magnitudes[magnitudes > 0] / total
    entropy = -np.sum(p * np.log2(p))
    return float(entropy / np.log2(len(magnitudes)))


def band_energy(
    magnitudes: np.ndarray,
    frequencies: np.ndarray,
    min_freq: float,
    max_freq: float,
) -> float:
    """Sum of magnitudes whose bin frequency lies in [min_freq, max_freq)."""
    mask = (frequencies >= min_freq) & (frequencies < max_freq)
    return float(np.sum(magnitudes[..., mask]))


def frequency_spectrum(samples: np.ndarray, fft_size: int = 2048) -> np.ndarray:
    """
    Snapshot spectrum of the middle of a buffer, normalized to a peak of 1.

    The slice starting at the buffer midpoint is Hann windowed; a short
    slice near the end is zero-padded.
    """
    middle = len(samples) // 2
    chunk = samples[middle:middle + fft_size]
    if len(chunk) == 0:
        return np.zeros(fft_size // 2)
    window = get_window("hann", fft_size)[: len(chunk)]
    spectrum = np.abs(np.fft.rfft(chunk * window, n=fft_size))[: fft_size // 2]
    peak = spectrum.max()
    return spectrum / (peak or 1.0)


def amplitude_envelope(samples: np.ndarray, points: int = 1000) -> np.ndarray:
    """Block RMS over `points` blocks, normalized to a maximum of 1."""
    block_size = len(samples) // points
    if block_size == 0:
        return np.zeros(0)
    usable = np.asarray(samples[: block_size * points], dtype=np.float64)
    envelope = np.sqrt(np.mean(usable.reshape(points, block_size) ** 2, axis=1))
    peak = envelope.max()
    return envelope / (peak or 1.0)


def detect_frequency_peaks(
    spectrum: np.ndarray,
    fft_size: int,
    sample_rate: int,
    max_peaks: int = 10,
    min_amplitude: float = 0.1,
) -> List[FrequencyPeak]:
    """
    Local maxima of a (peak-normalized) spectrum, strongest first.

    Args:
        spectrum: Magnitudes, e.g. from frequency_spectrum
        fft_size: Transform length the spectrum came from
        sample_rate: Sample rate in Hz
        max_peaks: Maximum number of peaks returned
        min_amplitude: Peaks at or below this are ignored

    Returns:
        List of FrequencyPeak
    """
    if len(spectrum) < 3:
        return []
    centre = spectrum[1:-1]
    is_peak = (centre > spectrum[:-2]) & (centre > spectrum[2:]) & (centre > min_amplitude)
    indices = np.nonzero(is_peak)[0] + 1

    peaks = [
        FrequencyPeak(frequency=i * sample_rate / fft_size, amplitude=float(spectrum[i]))
        for i in indices
    ]
    peaks.sort(key=lambda p: p.amplitude, reverse=True)
    return peaks[:max_peaks]
