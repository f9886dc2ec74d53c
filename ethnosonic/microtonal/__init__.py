"""Microtonal layer - Pitch histograms and cents deviation.

Scale matching itself lives in ethnosonic.inference.scales.
"""

from .histogram import (
    PitchHistogramEntry,
    detect_frame_pitches,
    build_histogram,
    dominant_pitches,
    average_cents_deviation,
    microtonal_content,
)

__all__ = [
    "PitchHistogramEntry",
    "detect_frame_pitches",
    "build_histogram",
    "dominant_pitches",
    "average_cents_deviation",
    "microtonal_content",
]
