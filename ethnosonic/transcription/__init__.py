"""Transcription layer - Note-level detection from audio.

This layer converts audio signals into discrete note events:
- Frame-by-frame autocorrelation pitch tracking
- Note boundary detection (open / extend / close)
- Optional onset quantization and scale constraint
"""

from .base import Transcriber
from .monophonic import AutocorrelationTranscriber
from .segmenter import NoteSegmenter, amplitude_to_velocity

__all__ = [
    "Transcriber",
    "AutocorrelationTranscriber",
    "NoteSegmenter",
    "amplitude_to_velocity",
]
