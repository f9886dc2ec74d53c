"""Analysis layer - Low-level signal analysis shared by every mode.

This layer holds the DSP primitives:
- Framing, channel selection and window functions
- Autocorrelation pitch estimation
- FFT magnitude spectra and spectral features
- First-order IIR filters
- Tempo estimation
"""

from .frames import (
    Frame,
    FrameSource,
    get_window,
    apply_window,
    rms,
    select_channel,
    frame_count,
    prepare_buffer,
)
from .pitch import PitchEstimate, PitchEstimator, ContourPoint, autocorrelate, pitch_contour
from .spectral import (
    SpectralFrame,
    FrequencyPeak,
    bin_frequencies,
    magnitude_spectrum,
    spectrogram,
    spectral_centroid,
    spectral_flatness,
    spectral_entropy,
    band_energy,
    frequency_spectrum,
    amplitude_envelope,
    detect_frequency_peaks,
)
from .filters import high_pass, low_pass
from .tempo import TempoAnalyzer, TempoInfo

__all__ = [
    "Frame",
    "FrameSource",
    "get_window",
    "apply_window",
    "rms",
    "select_channel",
    "frame_count",
    "prepare_buffer",
    "PitchEstimate",
    "PitchEstimator",
    "ContourPoint",
    "autocorrelate",
    "pitch_contour",
    "SpectralFrame",
    "FrequencyPeak",
    "bin_frequencies",
    "magnitude_spectrum",
    "spectrogram",
    "spectral_centroid",
    "spectral_flatness",
    "spectral_entropy",
    "band_energy",
    "frequency_spectrum",
    "amplitude_envelope",
    "detect_frequency_peaks",
    "high_pass",
    "low_pass",
    "TempoAnalyzer",
    "TempoInfo",
]
