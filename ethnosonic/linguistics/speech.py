"""Speech analysis - Voice activity, prosody, rhythm and vowel space.

Aimed at language documentation fieldwork: everything here works on a
single mono recording without a language model.
"""

import logging
import math
from dataclasses import dataclass, asdict, field
from typing import List, Optional, Tuple

import numpy as np

from ..core import FrameLoopControl
from ..analysis.frames import FrameSource
from ..analysis.pitch import PitchEstimator
from ..analysis.spectral import magnitude_spectrum

logger = logging.getLogger(__name__)

# Typical adult male minimum to child maximum
PITCH_MIN = 75.0
PITCH_MAX = 500.0
VAD_THRESHOLD = 0.02
MIN_SPEECH_SEGMENT = 0.05
MIN_PAUSE_SEGMENT = 0.1
SYLLABLES_PER_SECOND = 4
FORMANT_FRAME_SIZE = 2048
MAX_FORMANT_SEGMENTS = 20


@dataclass
class VoiceActivitySegment:
    start_time: float
    end_time: float
    duration: float
    is_speech: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PitchPoint:
    time: float
    frequency: float


@dataclass
class ProsodyResult:
    """Fundamental frequency statistics over voiced frames."""

    pitch_contour: List[PitchPoint] = field(default_factory=list)
    average_pitch: float = 0.0
    pitch_range: Tuple[float, float] = (0.0, 0.0)  # (min, max) in Hz
    pitch_variability: float = 0.0  # Population standard deviation

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RhythmResult:
    speech_rate: float = 0.0  # Estimated syllables per second
    pause_count: int = 0
    average_pause_duration: float = 0.0
    total_speech_duration: float = 0.0
    total_pause_duration: float = 0.0
    rhythm_ratio: float = 0.0  # Speech time / total time

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FormantResult:
    time: float
    f1: float  # Vowel height
    f2: float  # Vowel backness
    f3: float  # Lip rounding


@dataclass
class VowelSpaceAnalysis:
    formants: List[FormantResult] = field(default_factory=list)
    vowel_space_area: float = 0.0
    average_f1: float = 0.0
    average_f2: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


def detect_voice_activity(
    samples: np.ndarray,
    sample_rate: int,
    threshold: float = VAD_THRESHOLD,
    control: Optional[FrameLoopControl] = None,
) -> List[VoiceActivitySegment]:
    """
    Split a recording into alternating speech and pause segments.

    Frames are 25 ms long with a 10 ms hop; a frame is speech when its RMS
    exceeds `threshold`. Leading silence opens no segment. Speech segments
    shorter than 50 ms and pauses shorter than 100 ms are dropped. The last
    segment runs to the end of the buffer.

    Args:
        samples: Mono buffer
        sample_rate: Sample rate in Hz
        threshold: RMS above which a frame is speech
        control: Progress / cancellation hooks

    Returns:
        Segments in time order
    """
    control = control or FrameLoopControl()
    frame_size = int(sample_rate * 0.025)
    hop_size = int(sample_rate * 0.010)
    if frame_size == 0 or hop_size == 0:
        return []

    frames = FrameSource(samples, sample_rate, frame_size, hop_size, window_type="rectangular")
    raw = frames.raw_frames()
    levels = np.sqrt(np.mean(np.square(raw), axis=1)) if len(raw) else np.zeros(0)

    segments: List[VoiceActivitySegment] = []
    current: Optional[VoiceActivitySegment] = None

    for index, level in enumerate(levels):
        control.tick(index)
        is_speech = bool(level > threshold)
        time = index * hop_size / sample_rate

        if current is None:
            if is_speech:
                current = VoiceActivitySegment(time, time, 0.0, True)
            continue
        if is_speech == current.is_speech:
            continue

        current.end_time = time
        current.duration = time - current.start_time
        minimum = MIN_SPEECH_SEGMENT if current.is_speech else MIN_PAUSE_SEGMENT
        if current.duration > minimum:
            segments.append(current)
        current = VoiceActivitySegment(time, time, 0.0, is_speech)

    if current is not None:
        current.end_time = len(samples) / sample_rate
        current.duration = current.end_time - current.start_time
        if current.duration > MIN_SPEECH_SEGMENT:
            segments.append(current)

    logger.debug("VAD: %d frames, %d segments", len(levels), len(segments))
    return segments


def analyze_prosody(
    samples: np.ndarray,
    sample_rate: int,
    frame_size: int = 2048,
    hop_size: int = 512,
    frequency_min: float = PITCH_MIN,
    frequency_max: float = PITCH_MAX,
    control: Optional[FrameLoopControl] = None,
) -> ProsodyResult:
    """
    Track F0 over unwindowed frames and summarize it.

    Returns:
        ProsodyResult, all zeros when no frame is voiced
    """
    control = control or FrameLoopControl()
    frames = FrameSource(samples, sample_rate, frame_size, hop_size, window_type="rectangular")
    estimator = PitchEstimator(sample_rate, frequency_min, frequency_max)

    contour = []
    for index, frame in enumerate(frames):
        control.tick(index)
        estimate = estimator.estimate_periodic(frame.samples, rms_floor=0.01, periodicity=0.3)
        if estimate.voiced and frequency_min <= estimate.frequency <= frequency_max:
            contour.append(PitchPoint(frame.timestamp, estimate.frequency))

    if not contour:
        return ProsodyResult()

    pitches = np.array([point.frequency for point in contour])
    return ProsodyResult(
        pitch_contour=contour,
        average_pitch=float(np.mean(pitches)),
        pitch_range=(float(np.min(pitches)), float(np.max(pitches))),
        pitch_variability=float(np.std(pitches)),
    )


def analyze_rhythm(segments: List[VoiceActivitySegment]) -> RhythmResult:
    """Speech rate and pause statistics from VAD segments."""
    speech = [s for s in segments if s.is_speech]
    pauses = [s for s in segments if not s.is_speech]

    speech_duration = sum(s.duration for s in speech)
    pause_duration = sum(s.duration for s in pauses)
    total = speech_duration + pause_duration

    return RhythmResult(
        speech_rate=speech_duration * SYLLABLES_PER_SECOND / total if total > 0 else 0.0,
        pause_count=len(pauses),
        average_pause_duration=pause_duration / len(pauses) if pauses else 0.0,
        total_speech_duration=speech_duration,
        total_pause_duration=pause_duration,
        rhythm_ratio=speech_duration / total if total > 0 else 0.0,
    )


def find_formant_peaks(spectrum: np.ndarray, sample_rate: int) -> List[float]:
    """
    Three strongest local maxima between 200 Hz and 4 kHz, in frequency order.

    Args:
        spectrum: Magnitudes of a len(spectrum) * 2 point transform
        sample_rate: Sample rate in Hz

    Returns:
        Up to three peak frequencies in Hz
    """
    fft_size = len(spectrum) * 2
    min_bin = int(math.floor(200 * fft_size / sample_rate))
    max_bin = int(math.floor(4000 * fft_size / sample_rate))
    stop = min(max_bin, len(spectrum) - 1)

    peaks = [
        (i, spectrum[i])
        for i in range(min_bin + 1, stop)
        if spectrum[i] > spectrum[i - 1] and spectrum[i] > spectrum[i + 1]
    ]
    strongest = sorted(peaks, key=lambda peak: peak[1], reverse=True)[:3]
    return [i * sample_rate / fft_size for i, _ in sorted(strongest)]


def analyze_vowel_space(
    samples: np.ndarray,
    sample_rate: int,
    segments: List[VoiceActivitySegment],
) -> VowelSpaceAnalysis:
    """
    Estimate F1-F3 at the midpoint of the first 20 speech segments.

    The vowel space area is the F1 x F2 bounding box, reported once at
    least three formant sets are available.
    """
    formants = []
    for segment in [s for s in segments if s.is_speech][:MAX_FORMANT_SEGMENTS]:
        start = int(math.floor(segment.start_time * sample_rate))
        middle = start + int(math.floor(segment.duration * sample_rate / 2))
        if middle + FORMANT_FRAME_SIZE >= len(samples):
            continue

        frame = samples[middle:middle + FORMANT_FRAME_SIZE]
        spectrum = magnitude_spectrum(frame, FORMANT_FRAME_SIZE, window_type="hann")
        peaks = find_formant_peaks(spectrum, sample_rate)
        if len(peaks) >= 3:
            formants.append(
                FormantResult(
                    time=segment.start_time + segment.duration / 2,
                    f1=peaks[0],
                    f2=peaks[1],
                    f3=peaks[2],
                )
            )

    if not formants:
        return VowelSpaceAnalysis()

    f1 = [f.f1 for f in formants]
    f2 = [f.f2 for f in formants]
    area = (max(f1) - min(f1)) * (max(f2) - min(f2)) if len(formants) >= 3 else 0.0
    return VowelSpaceAnalysis(
        formants=formants,
        vowel_space_area=area,
        average_f1=sum(f1) / len(f1),
        average_f2=sum(f2) / len(f2),
    )
