"""Inference layer - Pitch and scale understanding.

This layer maps raw frequencies onto musical structure:
- Frequency <-> MIDI under several tuning systems
- Cents deviation from 12-TET
- Scale membership for constrained transcription
- Scale detection against Western and non-Western templates
"""

from .tuning import (
    TuningMapper,
    SCALE_PATTERNS,
    exact_midi,
    frequency_to_midi,
    midi_to_frequency,
    cents_deviation,
    note_name_to_midi,
    is_note_in_scale,
    round_half_up,
)
from .scales import ScaleDetector, ScaleMatch, ScaleTemplate, SCALE_TEMPLATES

__all__ = [
    # Tuning
    "TuningMapper",
    "SCALE_PATTERNS",
    "exact_midi",
    "frequency_to_midi",
    "midi_to_frequency",
    "cents_deviation",
    "note_name_to_midi",
    "is_note_in_scale",
    "round_half_up",
    # Scales
    "ScaleDetector",
    "ScaleMatch",
    "ScaleTemplate",
    "SCALE_TEMPLATES",
]
