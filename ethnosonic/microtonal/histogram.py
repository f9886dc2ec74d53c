"""Pitch histograms - Distribution of detected pitches and their 12-TET deviation.

Every voiced frame contributes one count to the bucket of its frequency
rounded to the nearest Hz. Buckets carry the nearest equal-tempered note
and the deviation from it in cents, which is what makes non-Western and
microtonal tunings visible.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

import numpy as np

from ..core import FrameLoopControl
from ..core.constants import REFERENCE_FREQUENCY
from ..analysis.frames import FrameSource
from ..analysis.pitch import PitchEstimator
from ..inference.tuning import cents_deviation, round_half_up

logger = logging.getLogger(__name__)

# Deviation beyond which a pitch counts as microtonal
MICROTONAL_CENTS = 10.0


@dataclass(frozen=True)
class PitchHistogramEntry:
    """One 1 Hz histogram bucket."""

    frequency: float
    midi_note: int
    note_name: str
    cents: float  # Deviation from the nearest 12-TET note
    count: int
    percentage: float  # Share of all voiced frames, 0-100

    def to_dict(self) -> dict:
        return asdict(self)


def detect_frame_pitches(
    samples: np.ndarray,
    sample_rate: int,
    frame_size: int = 4096,
    hop_size: int = 2048,
    frequency_min: float = 80.0,
    frequency_max: float = 2000.0,
    control: Optional[FrameLoopControl] = None,
) -> List[float]:
    """
    Periodic pitch of every unwindowed frame, skipping unvoiced frames.

    Args:
        samples: Mono buffer
        sample_rate: Sample rate in Hz
        frame_size: Samples per frame
        hop_size: Samples between frames
        frequency_min: Lowest pitch searched
        frequency_max: Highest pitch searched
        control: Progress / cancellation hooks

    Returns:
        Detected frequencies in frame order
    """
    control = control or FrameLoopControl()
    frames = FrameSource(samples, sample_rate, frame_size, hop_size, window_type="rectangular")
    estimator = PitchEstimator(sample_rate, frequency_min, frequency_max)

    total = len(frames)
    logger.debug("Pitch histogram over %d frames", total)

    pitches = []
    for index, frame in enumerate(frames):
        control.tick(index)
        if index and index % control.yield_every == 0:
            control.report(90 * index / total)
        estimate = estimator.estimate_periodic(frame.samples, rms_floor=0.01, periodicity=0.5)
        if estimate.voiced:
            pitches.append(estimate.frequency)
    return pitches


def build_histogram(
    pitches: Iterable[float],
    reference: float = REFERENCE_FREQUENCY,
) -> List[PitchHistogramEntry]:
    """Bucket frequencies at 1 Hz and describe each bucket, sorted by frequency."""
    counts: Dict[int, int] = {}
    for pitch in pitches:
        bucket = round_half_up(pitch)
        counts[bucket] = counts.get(bucket, 0) + 1

    total = sum(counts.values())
    histogram = []
    for frequency in sorted(counts):
        nearest, cents, name = cents_deviation(frequency, reference)
        histogram.append(
            PitchHistogramEntry(
                frequency=float(frequency),
                midi_note=nearest,
                note_name=name,
                cents=cents,
                count=counts[frequency],
                percentage=counts[frequency] / total * 100,
            )
        )
    return histogram


def dominant_pitches(histogram: List[PitchHistogramEntry]) -> List[PitchHistogramEntry]:
    """Most frequent entries: the top 10% of buckets, at least 5."""
    by_count = sorted(histogram, key=lambda entry: entry.count, reverse=True)
    return by_count[: max(5, int(len(histogram) * 0.1))]


def average_cents_deviation(histogram: List[PitchHistogramEntry]) -> float:
    """Count-weighted mean of |cents|, 0 for an empty histogram."""
    total = sum(entry.count for entry in histogram)
    if total == 0:
        return 0.0
    return sum(abs(entry.cents) * entry.count for entry in histogram) / total


def microtonal_content(histogram: List[PitchHistogramEntry]) -> float:
    """Percentage of counts deviating more than 10 cents from 12-TET."""
    total = sum(entry.count for entry in histogram)
    if total == 0:
        return 0.0
    microtonal = sum(
        entry.count for entry in histogram if abs(entry.cents) > MICROTONAL_CENTS
    )
    return microtonal / total * 100
