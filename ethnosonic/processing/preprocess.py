"""Signal preprocessing - Clean up field recordings before analysis.

This module provides:
- High-pass filtering (wind and handling rumble)
- Low-pass filtering
- Energy-based spectral gating (steady background noise)
- Peak and RMS normalization to a dB target
- Resampling
- Presets for field recordings, speech, music and ecology surveys
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Union

import numpy as np
import librosa

from ..core import AudioSignal, ConfigurationError
from ..analysis.filters import high_pass, low_pass
from ..analysis.frames import FrameSource, rms

logger = logging.getLogger(__name__)

SOFT_CLIP_LEVEL = 0.95


@dataclass
class PreprocessingConfig:
    """Configuration for signal preprocessing.

    Attributes:
        normalize: Apply normalization as the last step (default: True)
        normalize_method: 'peak' or 'rms' (default: 'peak')
        normalize_target: Target level in dB; RMS normalization aims 15 dB
            lower (default: -3)
        denoise: Apply the spectral gate (default: False)
        denoise_strength: Gate strength 0-1 (default: 0.5)
        high_pass_frequency: High-pass cutoff in Hz, 0 to disable (default: 0)
        low_pass_frequency: Low-pass cutoff in Hz, 0 to disable (default: 0)
        resample_rate: Target sample rate in Hz, 0 to keep (default: 0)
    """

    normalize: bool = True
    normalize_method: str = "peak"
    normalize_target: float = -3.0
    denoise: bool = False
    denoise_strength: float = 0.5
    high_pass_frequency: float = 0.0
    low_pass_frequency: float = 0.0
    resample_rate: int = 0

    def validate(self) -> None:
        if self.normalize_method not in ("peak", "rms"):
            raise ConfigurationError(
                f"normalize_method must be 'peak' or 'rms', got {self.normalize_method!r}"
            )
        if not 0.0 <= self.denoise_strength <= 1.0:
            raise ConfigurationError(
                f"denoise_strength must be in [0, 1], got {self.denoise_strength}"
            )
        if self.high_pass_frequency < 0 or self.low_pass_frequency < 0:
            raise ConfigurationError("Filter cutoffs must be non-negative")
        if self.resample_rate < 0:
            raise ConfigurationError(f"resample_rate must be non-negative, got {self.resample_rate}")


PRESETS: Dict[str, PreprocessingConfig] = {
    "field_recording": PreprocessingConfig(
        normalize_method="peak",
        normalize_target=-3.0,
        denoise=True,
        denoise_strength=0.3,
        high_pass_frequency=80.0,
    ),
    "speech": PreprocessingConfig(
        normalize_method="rms",
        normalize_target=-18.0,
        denoise=True,
        denoise_strength=0.5,
        high_pass_frequency=100.0,
        low_pass_frequency=8000.0,
    ),
    "music": PreprocessingConfig(
        normalize_method="peak",
        normalize_target=-1.0,
        denoise=False,
        denoise_strength=0.0,
        high_pass_frequency=20.0,
    ),
    # Low frequencies stay for species that call below 100 Hz
    "ecology": PreprocessingConfig(
        normalize_method="peak",
        normalize_target=-6.0,
        denoise=True,
        denoise_strength=0.2,
    ),
}


@dataclass
class PreprocessingStats:
    """Levels of the first channel before and after processing."""

    original_peak: float = 0.0
    processed_peak: float = 0.0
    original_rms: float = 0.0
    processed_rms: float = 0.0
    duration: float = 0.0
    sample_rate: int = 0


@dataclass
class PreprocessingResult:
    signal: AudioSignal
    applied_steps: List[str] = field(default_factory=list)
    stats: PreprocessingStats = field(default_factory=PreprocessingStats)


def db_to_linear(db: float) -> float:
    return 10 ** (db / 20)


def linear_to_db(linear: float) -> float:
    return 20 * np.log10(max(linear, 1e-10))


def peak_level(samples: np.ndarray) -> float:
    if len(samples) == 0:
        return 0.0
    return float(np.max(np.abs(samples)))


def normalize_peak(samples: np.ndarray, target_db: float = -3.0) -> np.ndarray:
    """Scale so the absolute peak sits at target_db. Silence is returned unchanged."""
    peak = peak_level(samples)
    if peak == 0:
        return samples.copy()
    return samples * (db_to_linear(target_db) / peak)


def normalize_rms(samples: np.ndarray, target_db: float = -18.0) -> np.ndarray:
    """
    Scale so the RMS level sits at target_db, softly limiting anything past 0.95.

    Above the knee only 10% of the excess is kept, on both polarities.
    """
    level = rms(samples)
    if level == 0:
        return samples.copy()
    scaled = samples * (db_to_linear(target_db) / level)
    return np.where(
        scaled > SOFT_CLIP_LEVEL,
        SOFT_CLIP_LEVEL + (scaled - SOFT_CLIP_LEVEL) * 0.1,
        np.where(
            scaled < -SOFT_CLIP_LEVEL,
            -SOFT_CLIP_LEVEL + (scaled + SOFT_CLIP_LEVEL) * 0.1,
            scaled,
        ),
    )


def spectral_gate(
    samples: np.ndarray,
    sample_rate: int,
    strength: float = 0.5,
    frame_size: int = 2048,
    hop_size: int = 512,
) -> np.ndarray:
    """
    Attenuate frames whose energy is close to the noise floor.

    The noise floor is the 10th-percentile frame energy. Frames below
    floor * (2 + 8 * strength) have their first hop_size samples scaled by
    sqrt(energy / threshold) * (1 - 0.8 * strength).

    Args:
        samples: Mono buffer
        sample_rate: Sample rate in Hz
        strength: Gate strength 0-1
        frame_size: Energy window
        hop_size: Samples between windows (and samples attenuated per window)

    Returns:
        Gated copy of the buffer
    """
    gated = np.array(samples, dtype=np.float64, copy=True)
    frames = FrameSource(gated, sample_rate, frame_size, hop_size, window_type="rectangular")
    if len(frames) == 0:
        return gated

    energies = np.sum(frames.raw_frames() ** 2, axis=1)
    noise_floor = float(np.sort(energies)[int(len(energies) * 0.1)])
    threshold = noise_floor * (2 + strength * 8)
    if threshold <= 0:
        return gated

    gains = np.where(
        energies < threshold,
        np.sqrt(energies / threshold) * (1 - strength * 0.8),
        1.0,
    )
    for index, gain in enumerate(gains):
        if gain != 1.0:
            start = index * hop_size
            gated[start:start + hop_size] *= gain
    return gated


class Preprocessor:
    """Apply a PreprocessingConfig to every channel of a signal.

    Steps run in a fixed order: resample, high-pass, low-pass, denoise,
    normalize.
    """

    def __init__(self, config: Union[PreprocessingConfig, str, None] = None):
        """
        Initialize Preprocessor.

        Args:
            config: A PreprocessingConfig, a preset name, or None for defaults
        """
        if isinstance(config, str):
            if config not in PRESETS:
                raise ConfigurationError(
                    f"Unknown preprocessing preset: {config!r}. Supported: {tuple(PRESETS)}"
                )
            config = replace(PRESETS[config])
        self.config = config or PreprocessingConfig()
        self.config.validate()

    def process(self, signal: AudioSignal) -> PreprocessingResult:
        config = self.config
        steps: List[str] = []
        first = signal.channels[0]
        stats = PreprocessingStats(original_peak=peak_level(first), original_rms=rms(first))

        channels = [np.array(c, dtype=np.float64) for c in signal.channels]
        sample_rate = signal.sample_rate

        if config.resample_rate and config.resample_rate != sample_rate:
            channels = [
                librosa.resample(c, orig_sr=sample_rate, target_sr=config.resample_rate)
                for c in channels
            ]
            sample_rate = config.resample_rate
            steps.append(f"Resampled to {sample_rate} Hz")

        if config.high_pass_frequency > 0:
            channels = [high_pass(c, sample_rate, config.high_pass_frequency) for c in channels]
            steps.append(f"High-pass filter at {config.high_pass_frequency:g} Hz")

        if config.low_pass_frequency > 0:
            channels = [low_pass(c, sample_rate, config.low_pass_frequency) for c in channels]
            steps.append(f"Low-pass filter at {config.low_pass_frequency:g} Hz")

        if config.denoise:
            channels = [spectral_gate(c, sample_rate, config.denoise_strength) for c in channels]
            steps.append(f"Noise reduction ({round(config.denoise_strength * 100)}%)")

        if config.normalize:
            if config.normalize_method == "peak":
                channels = [normalize_peak(c, config.normalize_target) for c in channels]
                steps.append(f"Peak normalized to {config.normalize_target:g} dB")
            else:
                target = config.normalize_target - 15
                channels = [normalize_rms(c, target) for c in channels]
                steps.append(f"RMS normalized to {target:g} dB")

        processed = AudioSignal.from_channels(channels, sample_rate)
        stats.processed_peak = peak_level(processed.channels[0])
        stats.processed_rms = rms(processed.channels[0])
        stats.duration = processed.duration
        stats.sample_rate = processed.sample_rate

        logger.debug("Preprocessing applied: %s", steps)
        return PreprocessingResult(signal=processed, applied_steps=steps, stats=stats)


def preprocess(
    signal: AudioSignal,
    config: Union[PreprocessingConfig, str, None] = None,
) -> PreprocessingResult:
    """Convenience wrapper around Preprocessor(config).process(signal)."""
    return Preprocessor(config).process(signal)
