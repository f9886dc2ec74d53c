"""Frequency <-> MIDI mapping under different tuning systems."""

import math
import re
from typing import Dict, List, Tuple

from ..core import InputError, ConfigurationError, midi_to_note_name, PITCH_NAMES
from ..core.constants import PIANO_MIN, PIANO_MAX, REFERENCE_FREQUENCY, TUNING_SYSTEMS

_NOTE_NAME = re.compile(r"^([A-G]#?)(-?\d+)$")


def round_half_up(value: float) -> int:
    """Round .5 upward, independent of Python's banker's rounding."""
    return int(math.floor(value + 0.5))


def exact_midi(frequency: float, reference: float = REFERENCE_FREQUENCY) -> float:
    """Fractional MIDI number: 12 * log2(f / ref) + 69."""
    if frequency <= 0:
        raise InputError(f"Frequency must be positive, got {frequency}")
    return 12 * math.log2(frequency / reference) + 69


def frequency_to_midi(
    frequency: float,
    reference: float = REFERENCE_FREQUENCY,
    tuning_system: str = "equal",
) -> int:
    """
    Convert a frequency to a MIDI note under a tuning system.

    'just', 'pythagorean' and 'meantone' currently give the same answer as
    'equal'. 'quarter_tone' rounds on a 24-step grid and then snaps to the
    nearest even value. The result is clamped to the piano range [21, 108].

    Args:
        frequency: Frequency in Hz
        reference: Frequency of A4 (MIDI 69)
        tuning_system: equal/just/pythagorean/meantone/quarter_tone

    Returns:
        MIDI note number
    """
    if tuning_system not in TUNING_SYSTEMS:
        raise ConfigurationError(
            f"Unsupported tuning_system: {tuning_system!r}. Supported: {TUNING_SYSTEMS}"
        )

    exact = exact_midi(frequency, reference)

    if tuning_system == "quarter_tone":
        # Nearest quarter tone on a 24-step grid, then back to an even step
        quarter = round_half_up(24 * math.log2(frequency / reference) + 69)
        midi = round_half_up(quarter / 2) * 2
    else:
        # just / pythagorean / meantone follow equal temperament
        midi = round_half_up(exact)

    return max(PIANO_MIN, min(PIANO_MAX, midi))


def midi_to_frequency(midi: float, reference: float = REFERENCE_FREQUENCY) -> float:
    """Convert a MIDI note to Hz: ref * 2^((m - 69) / 12)."""
    return reference * (2 ** ((midi - 69) / 12.0))


def cents_deviation(
    frequency: float,
    reference: float = REFERENCE_FREQUENCY,
) -> Tuple[int, float, str]:
    """
    Deviation from the nearest 12-TET note.

    Returns:
        Tuple of (nearest MIDI, cents in [-50, 50], note name)
    """
    exact = exact_midi(frequency, reference)
    nearest = round_half_up(exact)
    cents = (exact - nearest) * 100
    return nearest, cents, midi_to_note_name(nearest)


def note_name_to_midi(name: str) -> int:
    """Parse 'C4' / 'A#3' style names; malformed names map to middle C."""
    match = _NOTE_NAME.match(name.strip())
    if not match:
        return 60
    pitch, octave = match.groups()
    return (int(octave) + 1) * 12 + PITCH_NAMES.index(pitch)


# Semitone offsets from the scale root
SCALE_PATTERNS: Dict[str, List[int]] = {
    "chromatic": list(range(12)),
    "major": [0, 2, 4, 5, 7, 9, 11],
    "minor": [0, 2, 3, 5, 7, 8, 10],
    "pentatonic_major": [0, 2, 4, 7, 9],
    "pentatonic_minor": [0, 3, 5, 7, 10],
    "dorian": [0, 2, 3, 5, 7, 9, 10],
    "phrygian": [0, 1, 3, 5, 7, 8, 10],
    "lydian": [0, 2, 4, 6, 7, 9, 11],
    "mixolydian": [0, 2, 4, 5, 7, 9, 10],
    "aeolian": [0, 2, 3, 5, 7, 8, 10],
    "blues": [0, 3, 5, 6, 7, 10],
    "harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
    "melodic_minor": [0, 2, 3, 5, 7, 9, 11],
}


def is_note_in_scale(midi: int, scale_type: str, root: int = 60) -> bool:
    """
    Check whether a MIDI note belongs to a scale transposed to `root`.

    Unknown scale names accept every note.
    """
    pattern = SCALE_PATTERNS.get(scale_type)
    if pattern is None:
        return True
    return (midi - root) % 12 in pattern


class TuningMapper:
    """Bundles a reference frequency and tuning system for repeated lookups."""

    def __init__(
        self,
        reference_frequency: float = REFERENCE_FREQUENCY,
        tuning_system: str = "equal",
    ):
        if reference_frequency <= 0:
            raise ConfigurationError(
                f"reference_frequency must be positive, got {reference_frequency}"
            )
        if tuning_system not in TUNING_SYSTEMS:
            raise ConfigurationError(
                f"Unsupported tuning_system: {tuning_system!r}. Supported: {TUNING_SYSTEMS}"
            )
        self.reference_frequency = reference_frequency
        self.tuning_system = tuning_system

    def to_midi(self, frequency: float) -> int:
        return frequency_to_midi(frequency, self.reference_frequency, self.tuning_system)

    def to_frequency(self, midi: float) -> float:
        return midi_to_frequency(midi, self.reference_frequency)

    def cents(self, frequency: float) -> Tuple[int, float, str]:
        return cents_deviation(frequency, self.reference_frequency)
