"""Soundscape layer - Ecoacoustic indices over a full spectrogram.

- Acoustic complexity, NDSI, entropy, peak frequency, centroid
- Energy split across anthrophony / biophony / ultrasonic bands
- Per-second loudness profile
"""

from .indices import (
    AcousticIndices,
    compute_indices,
    acoustic_complexity,
    soundscape_index,
)
from .bands import (
    FrequencyBand,
    BandDefinition,
    BAND_DEFINITIONS,
    frequency_bands,
    temporal_variation,
)

__all__ = [
    "AcousticIndices",
    "compute_indices",
    "acoustic_complexity",
    "soundscape_index",
    "FrequencyBand",
    "BandDefinition",
    "BAND_DEFINITIONS",
    "frequency_bands",
    "temporal_variation",
]
