"""Processing layer - Signal and note-level conditioning.

This layer prepares audio and refines transcribed notes:
- Quantization (snap onsets to a beat grid)
- Filtering, spectral gating and normalization of field recordings
"""

from .quantize import Quantizer
from .preprocess import (
    Preprocessor,
    PreprocessingConfig,
    PreprocessingResult,
    PreprocessingStats,
    PRESETS,
    preprocess,
    normalize_peak,
    normalize_rms,
    spectral_gate,
    db_to_linear,
    linear_to_db,
)

__all__ = [
    "Quantizer",
    "Preprocessor",
    "PreprocessingConfig",
    "PreprocessingResult",
    "PreprocessingStats",
    "PRESETS",
    "preprocess",
    "normalize_peak",
    "normalize_rms",
    "spectral_gate",
    "db_to_linear",
    "linear_to_db",
]
