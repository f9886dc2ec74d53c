"""Core types and constants for ethnosonic."""

from .note import NoteEvent, midi_to_note_name
from .signal import AudioSignal
from .options import AnalysisOptions
from .errors import AnalysisError, InputError, ConfigurationError, AnalysisCancelled
from .control import CancellationToken, FrameLoopControl, ProgressCallback
from .constants import (
    PITCH_NAMES,
    DEFAULT_FFT_SIZE,
    DEFAULT_HOP_SIZE,
    DEFAULT_TEMPO,
    DEFAULT_CONFIDENCE,
)

__all__ = [
    "NoteEvent",
    "midi_to_note_name",
    "AudioSignal",
    "AnalysisOptions",
    "AnalysisError",
    "InputError",
    "ConfigurationError",
    "AnalysisCancelled",
    "CancellationToken",
    "FrameLoopControl",
    "ProgressCallback",
    "PITCH_NAMES",
    "DEFAULT_FFT_SIZE",
    "DEFAULT_HOP_SIZE",
    "DEFAULT_TEMPO",
    "DEFAULT_CONFIDENCE",
]
