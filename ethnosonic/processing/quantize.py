"""Onset quantization - Snap note start times to a rhythmic grid."""

import math
from dataclasses import replace
from typing import List

from ..core import NoteEvent, ConfigurationError
from ..core.constants import DEFAULT_TEMPO, QUANTIZATION_GRIDS


class Quantizer:
    """Quantize onset times to a beat subdivision grid."""

    def __init__(self, tempo: float = DEFAULT_TEMPO, grid: str = "none"):
        """
        Initialize Quantizer.

        Args:
            tempo: Tempo in BPM
            grid: none/quarter/eighth/sixteenth/thirty-second
        """
        if grid not in QUANTIZATION_GRIDS:
            raise ConfigurationError(
                f"Unsupported quantization: {grid!r}. Supported: {tuple(QUANTIZATION_GRIDS)}"
            )
        if tempo <= 0:
            raise ConfigurationError(f"Tempo must be positive, got {tempo}")
        self.tempo = tempo
        self.grid = grid
        self.subdivisions = QUANTIZATION_GRIDS[grid]

    @property
    def beat_duration(self) -> float:
        """Duration of one beat in seconds."""
        return 60.0 / self.tempo

    @property
    def grid_duration(self) -> float:
        """Duration of one grid unit in seconds (0 when quantization is off)."""
        if self.subdivisions == 0:
            return 0.0
        return self.beat_duration / self.subdivisions

    def snap(self, time: float) -> float:
        """Snap a time to the nearest grid position, halves rounding up."""
        if self.subdivisions == 0:
            return time
        grid = self.grid_duration
        return math.floor(time / grid + 0.5) * grid

    def quantize(self, notes: List[NoteEvent]) -> List[NoteEvent]:
        """
        Snap note onsets to the grid, keeping each note's duration.

        Args:
            notes: List of notes to quantize

        Returns:
            List of quantized notes
        """
        return [replace(note, start_time=self.snap(note.start_time)) for note in notes]
