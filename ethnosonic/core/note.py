"""NoteEvent data class - the fundamental unit of musical transcription."""

from dataclasses import dataclass, asdict
from typing import Any, Dict

from .constants import PITCH_NAMES


@dataclass(frozen=True)
class NoteEvent:
    """A committed note produced by the note segmenter."""

    midi: int  # MIDI pitch (21-108)
    start_time: float  # Onset in seconds
    duration: float  # Length in seconds
    velocity: int  # MIDI velocity (0-127)
    confidence: float  # Local pitch confidence of the opening frame (0-1)
    frequency: float  # Detected frequency (Hz) of the opening frame
    pitch_name: str = ""

    def __post_init__(self):
        if not self.pitch_name:
            object.__setattr__(self, "pitch_name", midi_to_note_name(self.midi))

    @property
    def end_time(self) -> float:
        """Offset time in seconds."""
        return self.start_time + self.duration

    @property
    def octave(self) -> int:
        return (self.midi // 12) - 1

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return self.midi % 12

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def midi_to_note_name(midi: int) -> str:
    """Get note name (e.g., 'C4', 'A#3') for a MIDI number."""
    octave = (midi // 12) - 1
    name = PITCH_NAMES[midi % 12]
    return f"{name}{octave}"
