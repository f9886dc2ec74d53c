"""Bioacoustic frequency bands and temporal loudness profile."""

import math
from dataclasses import dataclass, asdict
from typing import List

import numpy as np

from ..analysis.frames import rms


@dataclass(frozen=True)
class BandDefinition:
    name: str
    label: str
    min_freq: float
    max_freq: float


@dataclass(frozen=True)
class FrequencyBand:
    """Energy share of one band across the whole spectrogram."""

    band: str
    label: str
    min_freq: float
    max_freq: float
    energy: float
    percentage: float  # Share of total spectrogram energy, 0-100

    def to_dict(self) -> dict:
        return asdict(self)


BAND_DEFINITIONS: List[BandDefinition] = [
    BandDefinition("anthrophony", "Anthrophony (Human/Machine)", 0.0, 2000.0),
    BandDefinition("lowBiophony", "Low Biophony (Large animals)", 2000.0, 4000.0),
    BandDefinition("midBiophony", "Mid Biophony (Birds, insects)", 4000.0, 8000.0),
    BandDefinition("highBiophony", "High Biophony (Insects, bats)", 8000.0, 16000.0),
    BandDefinition("ultrasonic", "Ultrasonic", 16000.0, 22050.0),
]


def frequency_bands(
    spectrogram: np.ndarray,
    sample_rate: int,
    fft_size: int,
    definitions: List[BandDefinition] = BAND_DEFINITIONS,
) -> List[FrequencyBand]:
    """
    Summed magnitude per band and its percentage of the total.

    Band bins are [floor(min / resolution), min(floor(max / resolution), fft_size / 2)).

    Args:
        spectrogram: (frames, bins) magnitudes
        sample_rate: Sample rate in Hz
        fft_size: Transform length

    Returns:
        One FrequencyBand per definition, in definition order
    """
    spectrogram = np.asarray(spectrogram, dtype=np.float64)
    resolution = sample_rate / fft_size
    total_energy = float(np.sum(spectrogram))

    bands = []
    for definition in definitions:
        min_bin = int(math.floor(definition.min_freq / resolution))
        max_bin = min(int(math.floor(definition.max_freq / resolution)), fft_size // 2)
        energy = float(np.sum(spectrogram[:, min_bin:max_bin])) if len(spectrogram) else 0.0
        bands.append(
            FrequencyBand(
                band=definition.name,
                label=definition.label,
                min_freq=definition.min_freq,
                max_freq=definition.max_freq,
                energy=energy,
                percentage=energy / total_energy * 100 if total_energy > 0 else 0.0,
            )
        )
    return bands


def temporal_variation(samples: np.ndarray, sample_rate: int) -> List[float]:
    """RMS of each one-second block; the last block may be shorter."""
    n_blocks = int(math.ceil(len(samples) / sample_rate))
    return [
        rms(samples[block * sample_rate:(block + 1) * sample_rate])
        for block in range(n_blocks)
    ]
