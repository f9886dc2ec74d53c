"""Scale detection - Match dominant pitches against cents-based scale templates.

Templates cover Western and non-Western tuning traditions:
- Western major / minor (12-TET)
- Javanese pelog and slendro
- Arabic maqam rast (neutral third and seventh)
- Japanese hirajoshi
- Papua New Guinea Highlands and Melanesian pentatonic
"""

import math
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleTemplate:
    """A known scale as cents above its tonic."""

    name: str
    intervals: List[int]
    cultural_context: str


@dataclass(frozen=True)
class ScaleMatch:
    """Best matching scale for a set of dominant pitches."""

    detected_scale: str
    confidence: float  # Fraction of matched intervals, 0.0 - 1.0
    interval_pattern: List[float]  # Detected intervals in cents, sorted
    cultural_context: str

    def to_dict(self) -> dict:
        return asdict(self)


SCALE_TEMPLATES: List[ScaleTemplate] = [
    ScaleTemplate(
        "Western Major",
        [0, 200, 400, 500, 700, 900, 1100],
        "Western classical and popular music",
    ),
    ScaleTemplate(
        "Western Minor",
        [0, 200, 300, 500, 700, 800, 1000],
        "Western classical and popular music",
    ),
    ScaleTemplate(
        "Pelog (Javanese)",
        [0, 120, 270, 540, 670, 785, 920],
        "Javanese gamelan music",
    ),
    ScaleTemplate(
        "Slendro (Javanese)",
        [0, 240, 480, 720, 960],
        "Javanese gamelan music",
    ),
    ScaleTemplate(
        "Arabic Maqam Rast",
        [0, 200, 350, 500, 700, 900, 1050],
        "Middle Eastern classical music",
    ),
    ScaleTemplate(
        "Hirajoshi (Japanese)",
        [0, 200, 300, 700, 800],
        "Japanese traditional music",
    ),
    ScaleTemplate(
        "PNG Highlands",
        [0, 150, 350, 550, 700, 900],
        "Papua New Guinea Highlands singing",
    ),
    ScaleTemplate(
        "Melanesian Pentatonic",
        [0, 200, 450, 700, 950],
        "Melanesian traditional music",
    ),
]


class ScaleDetector:
    """Identify the scale implied by a set of dominant frequencies.

    Each dominant frequency is expressed in cents above the lowest one
    (folded into one octave) and compared with every template. A detected
    interval matches when it lies strictly within `tolerance` cents of any
    template interval.
    """

    MIN_PITCHES = 3

    def __init__(
        self,
        templates: Optional[Sequence[ScaleTemplate]] = None,
        tolerance: float = 30.0,
        min_confidence: float = 0.5,
    ):
        """
        Initialize ScaleDetector.

        Args:
            templates: Scale templates to score (default: SCALE_TEMPLATES)
            tolerance: Match window in cents
            min_confidence: Scores at or below this are not reported
        """
        self.templates = list(templates) if templates is not None else list(SCALE_TEMPLATES)
        self.tolerance = tolerance
        self.min_confidence = min_confidence

    @staticmethod
    def interval_pattern(frequencies: Sequence[float]) -> List[float]:
        """Sorted cents above the lowest frequency, modulo one octave."""
        if not frequencies:
            return []
        lowest = min(frequencies)
        return sorted((1200 * math.log2(f / lowest)) % 1200 for f in frequencies)

    def score(self, intervals: Sequence[float], template: ScaleTemplate) -> float:
        """matches / max(detected count, template size)."""
        matches = sum(
            1
            for interval in intervals
            if any(abs(interval - known) < self.tolerance for known in template.intervals)
        )
        return matches / max(len(intervals), len(template.intervals))

    def detect(self, frequencies: Sequence[float]) -> Optional[ScaleMatch]:
        """
        Detect the best matching scale.

        Args:
            frequencies: Dominant pitch frequencies in Hz

        Returns:
            ScaleMatch, or None with fewer than 3 pitches or no template above
            min_confidence
        """
        if len(frequencies) < self.MIN_PITCHES:
            logger.debug("Scale detection skipped: %d dominant pitches", len(frequencies))
            return None

        intervals = self.interval_pattern(frequencies)

        best_template, best_score = None, 0.0
        for template in self.templates:
            template_score = self.score(intervals, template)
            if template_score > best_score:
                best_template, best_score = template, template_score

        if best_template is None or best_score <= self.min_confidence:
            return None

        return ScaleMatch(
            detected_scale=best_template.name,
            confidence=best_score,
            interval_pattern=intervals,
            cultural_context=best_template.cultural_context,
        )
