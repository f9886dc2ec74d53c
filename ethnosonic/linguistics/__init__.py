"""Linguistics layer - Speech features for language documentation.

- Voice activity detection (speech / pause segments)
- Prosody (F0 contour and statistics)
- Rhythm (speech rate, pauses)
- Vowel space (spectral-peak formant estimates)
"""

from .speech import (
    VoiceActivitySegment,
    PitchPoint,
    ProsodyResult,
    RhythmResult,
    FormantResult,
    VowelSpaceAnalysis,
    detect_voice_activity,
    analyze_prosody,
    analyze_rhythm,
    analyze_vowel_space,
    find_formant_peaks,
)

__all__ = [
    "VoiceActivitySegment",
    "PitchPoint",
    "ProsodyResult",
    "RhythmResult",
    "FormantResult",
    "VowelSpaceAnalysis",
    "detect_voice_activity",
    "analyze_prosody",
    "analyze_rhythm",
    "analyze_vowel_space",
    "find_formant_peaks",
]
