"""ethnosonic - Audio analysis for ethnomusicology, ecology and linguistics.

Architecture Layers:
    1. core/          - Signal, note and option types, errors, progress/cancellation
    2. input/         - Audio file decoding (CLI only)
    3. analysis/      - Shared DSP (framing, windows, pitch, spectra, filters, tempo)
    4. processing/    - Onset quantization and field-recording preprocessing
    5. inference/     - Tuning systems, scale membership, scale detection
    6. transcription/ - Note segmentation (monophonic)
    7. soundscape/    - Acoustic indices and frequency bands
    8. microtonal/    - Pitch histograms and cents deviation
    9. linguistics/   - Voice activity, prosody, rhythm, vowel space
"""

__version__ = "0.1.0"

# Core types
from .core import (
    AudioSignal,
    NoteEvent,
    AnalysisOptions,
    AnalysisError,
    InputError,
    ConfigurationError,
    AnalysisCancelled,
    CancellationToken,
)

# Entry points
from .api import (
    analyze_transcription,
    analyze_soundscape,
    analyze_microtonal,
    analyze_linguistics,
)
from .results import (
    TranscriptionResult,
    SoundscapeResult,
    MicrotonalResult,
    LinguisticsResult,
)

# Processing layer
from .processing import Quantizer, Preprocessor, PreprocessingConfig, preprocess

# Inference layer
from .inference import TuningMapper, ScaleDetector

__all__ = [
    # Core
    "AudioSignal",
    "NoteEvent",
    "AnalysisOptions",
    "AnalysisError",
    "InputError",
    "ConfigurationError",
    "AnalysisCancelled",
    "CancellationToken",
    # Entry points
    "analyze_transcription",
    "analyze_soundscape",
    "analyze_microtonal",
    "analyze_linguistics",
    # Results
    "TranscriptionResult",
    "SoundscapeResult",
    "MicrotonalResult",
    "LinguisticsResult",
    # Processing
    "Quantizer",
    "Preprocessor",
    "PreprocessingConfig",
    "preprocess",
    # Inference
    "TuningMapper",
    "ScaleDetector",
]
