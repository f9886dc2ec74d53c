"""Note segmentation - Turn per-frame pitch decisions into committed notes.

The segmenter is a two-state machine. It is either Idle or holds exactly one
open note. Each analysis frame either extends the open note (same MIDI),
replaces it (different MIDI), or closes it (silence, gate, rejected pitch).
Notes are only emitted when they close, and only if they reached the
minimum duration.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..core import NoteEvent
from ..core.constants import DEFAULT_CONFIDENCE, MIDI_MAX, MIDI_MIN
from ..processing.quantize import Quantizer

logger = logging.getLogger(__name__)


def amplitude_to_velocity(
    amplitude: float,
    scale: bool = False,
    velocity_min: int = MIDI_MIN,
    velocity_max: int = MIDI_MAX,
) -> int:
    """floor(amplitude * 254) capped at 127, optionally clamped to a range."""
    velocity = max(MIDI_MIN, min(MIDI_MAX, int(math.floor(amplitude * 127 * 2))))
    if scale:
        velocity = max(velocity_min, min(velocity_max, velocity))
    return velocity


@dataclass
class _OpenNote:
    """Mutable note-in-progress; frozen into a NoteEvent when it closes."""

    midi: int
    start_time: float
    velocity: int
    frequency: float
    confidence: float
    duration: float = 0.0

    def freeze(self) -> NoteEvent:
        return NoteEvent(
            midi=self.midi,
            start_time=self.start_time,
            duration=self.duration,
            velocity=self.velocity,
            confidence=self.confidence,
            frequency=self.frequency,
        )


class NoteSegmenter:
    """Frame-by-frame note boundary detector.

    Feed frames in time order with accept() / reject(), then call finish().
    """

    def __init__(
        self,
        min_note_duration: float = 0.1,
        quantizer: Optional[Quantizer] = None,
        velocity_scaling: bool = False,
        velocity_min: int = MIDI_MIN,
        velocity_max: int = MIDI_MAX,
    ):
        """
        Initialize NoteSegmenter.

        Args:
            min_note_duration: Notes shorter than this are discarded on close
            quantizer: Snaps onset times; None leaves them untouched
            velocity_scaling: Clamp velocities to [velocity_min, velocity_max]
            velocity_min: Lower velocity bound when scaling
            velocity_max: Upper velocity bound when scaling
        """
        self.min_note_duration = min_note_duration
        self.quantizer = quantizer or Quantizer(grid="none")
        self.velocity_scaling = velocity_scaling
        self.velocity_min = velocity_min
        self.velocity_max = velocity_max

        self.notes: List[NoteEvent] = []
        self._open: Optional[_OpenNote] = None
        self._confidence_sum = 0.0
        self._accepted_frames = 0

    @property
    def is_active(self) -> bool:
        return self._open is not None

    @property
    def accepted_frames(self) -> int:
        return self._accepted_frames

    @property
    def confidence(self) -> float:
        """Mean local confidence of accepted frames, 0.7 if none were accepted."""
        if self._accepted_frames == 0:
            return DEFAULT_CONFIDENCE
        return self._confidence_sum / self._accepted_frames

    def accept(
        self,
        time: float,
        midi: int,
        frequency: float,
        amplitude: float,
        confidence: float,
    ) -> None:
        """
        Record a frame whose pitch passed every acceptance check.

        Args:
            time: Frame start time in seconds
            midi: MIDI note of the frame
            frequency: Detected frequency in Hz
            amplitude: Frame RMS
            confidence: Local pitch confidence
        """
        start = self.quantizer.snap(time)
        velocity = amplitude_to_velocity(
            amplitude, self.velocity_scaling, self.velocity_min, self.velocity_max
        )

        if self._open is not None and self._open.midi == midi:
            self._open.duration = start - self._open.start_time
            self._open.velocity = max(self._open.velocity, velocity)
        else:
            self.close()
            self._open = _OpenNote(
                midi=midi,
                start_time=start,
                velocity=velocity,
                frequency=frequency,
                confidence=confidence,
            )

        self._confidence_sum += confidence
        self._accepted_frames += 1

    def reject(self) -> None:
        """Record a silent, gated, unpitched or out-of-range frame."""
        self.close()

    def close(self) -> None:
        """Emit the open note if it is long enough and return to Idle."""
        note, self._open = self._open, None
        if note is None:
            return
        if note.duration >= self.min_note_duration:
            self.notes.append(note.freeze())
        else:
            logger.debug(
                "Dropped %s at %.3fs: %.3fs is shorter than %.3fs",
                note.midi, note.start_time, note.duration, self.min_note_duration,
            )

    def finish(self) -> List[NoteEvent]:
        """Flush the open note and return all committed notes."""
        self.close()
        return list(self.notes)
