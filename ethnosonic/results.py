"""Result records returned by the analysis entry points."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .core import NoteEvent
from .soundscape import AcousticIndices, FrequencyBand
from .microtonal import PitchHistogramEntry
from .inference import ScaleMatch
from .linguistics import ProsodyResult, RhythmResult, VoiceActivitySegment, VowelSpaceAnalysis


@dataclass
class TranscriptionResult:
    """Notes plus whole-recording metadata."""

    notes: List[NoteEvent]
    duration: float
    sample_rate: int
    confidence: float  # Mean accepted-frame confidence, 0.7 when nothing was accepted
    detected_tempo: Optional[float] = None
    detected_time_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notes": [note.to_dict() for note in self.notes],
            "duration": self.duration,
            "sample_rate": self.sample_rate,
            "confidence": self.confidence,
            "detected_tempo": self.detected_tempo,
            "detected_time_signature": self.detected_time_signature,
        }


@dataclass
class SoundscapeResult:
    indices: AcousticIndices
    frequency_bands: List[FrequencyBand]
    temporal_variation: List[float]
    spectrogram: np.ndarray  # (frames, fft_size // 2)
    duration: float
    sample_rate: int

    def to_dict(self, include_spectrogram: bool = False) -> Dict[str, Any]:
        data = {
            "indices": self.indices.to_dict(),
            "frequency_bands": [band.to_dict() for band in self.frequency_bands],
            "temporal_variation": list(self.temporal_variation),
            "duration": self.duration,
            "sample_rate": self.sample_rate,
        }
        if include_spectrogram:
            data["spectrogram"] = self.spectrogram.tolist()
        return data


@dataclass
class MicrotonalResult:
    pitch_histogram: List[PitchHistogramEntry]
    dominant_pitches: List[PitchHistogramEntry]
    scale_analysis: Optional[ScaleMatch]
    microtonal_content: float  # Percent of counts more than 10 cents off 12-TET
    average_cents_deviation: float
    total_notes: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pitch_histogram": [entry.to_dict() for entry in self.pitch_histogram],
            "dominant_pitches": [entry.to_dict() for entry in self.dominant_pitches],
            "scale_analysis": self.scale_analysis.to_dict() if self.scale_analysis else None,
            "microtonal_content": self.microtonal_content,
            "average_cents_deviation": self.average_cents_deviation,
            "total_notes": self.total_notes,
        }


@dataclass
class LinguisticsResult:
    prosody: ProsodyResult
    rhythm: RhythmResult
    voice_activity: List[VoiceActivitySegment] = field(default_factory=list)
    vowel_space: VowelSpaceAnalysis = field(default_factory=VowelSpaceAnalysis)
    duration: float = 0.0
    sample_rate: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prosody": self.prosody.to_dict(),
            "rhythm": self.rhythm.to_dict(),
            "voice_activity": [segment.to_dict() for segment in self.voice_activity],
            "vowel_space": self.vowel_space.to_dict(),
            "duration": self.duration,
            "sample_rate": self.sample_rate,
        }
