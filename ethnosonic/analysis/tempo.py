"""Tempo estimation from note onsets and from audio."""

import math
import numpy as np
import librosa
from typing import Dict, Optional, Sequence, Tuple
from dataclasses import dataclass

from ..core.constants import DEFAULT_TEMPO


@dataclass
class TempoInfo:
    """Container for tempo analysis results."""

    bpm: float
    interval: Optional[float] = None  # Modal inter-onset interval in seconds
    interval_count: int = 0  # Intervals that survived filtering


class TempoAnalyzer:
    """Estimate tempo from inter-onset intervals or from raw audio."""

    MIN_INTERVAL = 0.05
    MAX_INTERVAL = 2.0
    BUCKET_SIZE = 0.01  # 10ms histogram buckets
    MIN_BPM = 40
    MAX_BPM = 240

    def __init__(self, hop_length: int = 512, default_tempo: float = DEFAULT_TEMPO):
        self.hop_length = hop_length
        self.default_tempo = default_tempo

    def from_onsets(self, onsets: Sequence[float]) -> TempoInfo:
        """
        Estimate tempo from note start times.

        Intervals outside (0.05, 2.0) seconds are dropped, the rest are
        bucketed at 10ms and the modal bucket is converted to BPM, then
        folded by octaves into [40, 240].

        Args:
            onsets: Note start times in seconds, in note order

        Returns:
            TempoInfo (default tempo when there is too little data)
        """
        if len(onsets) < 4:
            return TempoInfo(bpm=self.default_tempo)

        intervals = [
            b - a
            for a, b in zip(onsets[:-1], onsets[1:])
            if self.MIN_INTERVAL < b - a < self.MAX_INTERVAL
        ]
        if len(intervals) < 2:
            return TempoInfo(bpm=self.default_tempo, interval_count=len(intervals))

        histogram: Dict[int, int] = {}
        for interval in intervals:
            bucket = math.floor(interval / self.BUCKET_SIZE + 0.5)
            histogram[bucket] = histogram.get(bucket, 0) + 1

        # First bucket reaching the highest count wins ties
        modal_bucket, max_count = None, 0
        for bucket, count in histogram.items():
            if count > max_count:
                modal_bucket, max_count = bucket, count

        interval = modal_bucket * self.BUCKET_SIZE
        bpm = float(math.floor(60.0 / interval + 0.5))
        return TempoInfo(
            bpm=self.fold_bpm(bpm),
            interval=interval,
            interval_count=len(intervals),
        )

    def fold_bpm(self, bpm: float) -> float:
        """Double or halve until the tempo lies in [40, 240]."""
        if bpm <= 0:
            return self.default_tempo
        while bpm < self.MIN_BPM:
            bpm *= 2
        while bpm > self.MAX_BPM:
            bpm /= 2
        return bpm

    def detect(self, audio: np.ndarray, sr: int) -> Tuple[float, np.ndarray]:
        """
        Detect tempo and beat positions from audio with librosa's beat tracker.

        Args:
            audio: Audio array
            sr: Sample rate

        Returns:
            Tuple of (tempo in BPM, beat times in seconds)
        """
        tempo, beats = librosa.beat.beat_track(
            y=np.asarray(audio, dtype=np.float32),
            sr=sr,
            hop_length=self.hop_length,
        )

        beat_times = librosa.frames_to_time(beats, sr=sr, hop_length=self.hop_length)

        # Handle tempo as array (newer librosa versions)
        if isinstance(tempo, np.ndarray):
            tempo = float(tempo[0]) if len(tempo) > 0 else self.default_tempo

        if not tempo or tempo <= 0:
            tempo = self.default_tempo

        return float(tempo), beat_times
