"""Analysis entry points.

Each function is a synchronous, pure function of its inputs: options are
validated once, the requested channel is selected, and the frame loop runs
with optional progress reporting and cooperative cancellation.
"""

import logging
from typing import Any, Mapping, Optional, Union

import numpy as np

from .core import (
    AnalysisOptions,
    AudioSignal,
    CancellationToken,
    FrameLoopControl,
    ProgressCallback,
)
from .analysis.frames import FrameSource, prepare_buffer
from .analysis.spectral import magnitude_spectrum
from .analysis.tempo import TempoAnalyzer
from .inference.scales import ScaleDetector
from .microtonal import (
    average_cents_deviation,
    build_histogram,
    detect_frame_pitches,
    dominant_pitches,
    microtonal_content,
)
from .linguistics import (
    analyze_prosody,
    analyze_rhythm,
    analyze_vowel_space,
    detect_voice_activity,
)
from .results import (
    LinguisticsResult,
    MicrotonalResult,
    SoundscapeResult,
    TranscriptionResult,
)
from .soundscape import compute_indices, frequency_bands, temporal_variation
from .transcription import AutocorrelationTranscriber

logger = logging.getLogger(__name__)

OptionsLike = Union[AnalysisOptions, Mapping[str, Any], None]


def analyze_transcription(
    signal: AudioSignal,
    options: OptionsLike = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> TranscriptionResult:
    """
    Transcribe a monophonic recording into note events.

    Args:
        signal: Decoded audio
        options: AnalysisOptions, a mapping of option keys, or None for defaults
        progress: Called with a percentage at coarse milestones
        cancel_token: Polled between frames; raises AnalysisCancelled when set

    Returns:
        TranscriptionResult

    Raises:
        InputError: Empty, non-finite or too-short signal, missing channel
        ConfigurationError: Invalid options
        AnalysisCancelled: The token was cancelled mid-analysis
    """
    opts = AnalysisOptions.coerce(options, AnalysisOptions.for_transcription())
    control = FrameLoopControl(progress, cancel_token)
    control.check()
    control.report(0)

    samples = prepare_buffer(
        signal, opts.channel_selection, opts.fft_size, opts.max_processing_duration
    )
    control.report(10)

    segmenter = AutocorrelationTranscriber(opts).segment(samples, signal.sample_rate, control)
    notes = segmenter.notes
    control.report(90)

    detected_tempo = None
    if opts.enable_tempo_detection:
        detected_tempo = TempoAnalyzer().from_onsets([n.start_time for n in notes]).bpm

    result = TranscriptionResult(
        notes=notes,
        duration=signal.duration,
        sample_rate=signal.sample_rate,
        confidence=segmenter.confidence,
        detected_tempo=detected_tempo,
        detected_time_signature=opts.target_time_signature,
    )
    control.report(100)

    logger.info(
        "Transcription: %d notes from %d accepted frames (confidence %.2f)",
        len(notes), segmenter.accepted_frames, result.confidence,
    )
    return result


def analyze_soundscape(
    signal: AudioSignal,
    options: OptionsLike = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> SoundscapeResult:
    """
    Compute ecoacoustic indices, band energies and loudness over time.

    The spectrogram is Hann windowed by default and normalized by fft_size.
    """
    opts = AnalysisOptions.coerce(options, AnalysisOptions.for_soundscape())
    control = FrameLoopControl(progress, cancel_token)
    control.check()

    sr = signal.sample_rate
    samples = prepare_buffer(
        signal, opts.channel_selection, opts.fft_size, opts.max_processing_duration
    )
    control.report(10)

    frames = FrameSource(samples, sr, opts.fft_size, opts.effective_hop_size, "rectangular")
    raw = frames.raw_frames()
    logger.debug("Soundscape spectrogram over %d frames", len(raw))

    rows = []
    for start in range(0, len(raw), control.yield_every):
        control.tick(start)
        rows.append(
            magnitude_spectrum(
                raw[start:start + control.yield_every],
                opts.fft_size,
                opts.window_type,
                normalize=True,
            )
        )
    spectrogram = np.vstack(rows) if rows else np.zeros((0, opts.fft_size // 2))
    control.report(40)

    indices = compute_indices(spectrogram, sr, opts.fft_size)
    control.check()
    control.report(70)

    bands = frequency_bands(spectrogram, sr, opts.fft_size)
    control.report(90)

    variation = temporal_variation(samples, sr)
    control.report(100)

    logger.info(
        "Soundscape: ACI %.3f, NDSI %.3f, peak %.1f Hz",
        indices.aci, indices.ndsi, indices.peak_frequency,
    )
    return SoundscapeResult(
        indices=indices,
        frequency_bands=bands,
        temporal_variation=variation,
        spectrogram=spectrogram,
        duration=signal.duration,
        sample_rate=sr,
    )


def analyze_microtonal(
    signal: AudioSignal,
    options: OptionsLike = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> MicrotonalResult:
    """Build a 1 Hz pitch histogram and match its dominant pitches to scales."""
    opts = AnalysisOptions.coerce(options, AnalysisOptions.for_microtonal())
    control = FrameLoopControl(progress, cancel_token)
    control.check()

    samples = prepare_buffer(
        signal, opts.channel_selection, opts.fft_size, opts.max_processing_duration
    )
    control.report(0)

    pitches = detect_frame_pitches(
        samples,
        signal.sample_rate,
        frame_size=opts.fft_size,
        hop_size=opts.effective_hop_size,
        frequency_min=opts.frequency_min,
        frequency_max=opts.frequency_max,
        control=control,
    )

    histogram = build_histogram(pitches, opts.reference_frequency)
    dominant = dominant_pitches(histogram)
    scale = ScaleDetector().detect([entry.frequency for entry in dominant])

    result = MicrotonalResult(
        pitch_histogram=histogram,
        dominant_pitches=dominant,
        scale_analysis=scale,
        microtonal_content=microtonal_content(histogram),
        average_cents_deviation=average_cents_deviation(histogram),
        total_notes=len(pitches),
    )
    control.report(100)

    logger.info(
        "Microtonal: %d voiced frames in %d buckets, scale %s",
        result.total_notes, len(histogram), scale.detected_scale if scale else "none",
    )
    return result


def analyze_linguistics(
    signal: AudioSignal,
    options: OptionsLike = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> LinguisticsResult:
    """Voice activity, prosody, rhythm and vowel space of a speech recording."""
    opts = AnalysisOptions.coerce(options, AnalysisOptions.for_linguistics())
    control = FrameLoopControl(progress, cancel_token)
    control.check()

    sr = signal.sample_rate
    samples = prepare_buffer(
        signal, opts.channel_selection, opts.fft_size, opts.max_processing_duration
    )
    control.report(10)

    voice_activity = detect_voice_activity(samples, sr, control=control)
    control.report(30)

    prosody = analyze_prosody(
        samples,
        sr,
        frame_size=opts.fft_size,
        hop_size=opts.effective_hop_size,
        frequency_min=opts.frequency_min,
        frequency_max=opts.frequency_max,
        control=control,
    )
    control.report(50)

    rhythm = analyze_rhythm(voice_activity)
    control.report(70)

    vowel_space = analyze_vowel_space(samples, sr, voice_activity)
    control.report(90)
    control.report(100)

    logger.info(
        "Linguistics: %d VAD segments, %d voiced frames, %d formant sets",
        len(voice_activity), len(prosody.pitch_contour), len(vowel_space.formants),
    )
    return LinguisticsResult(
        prosody=prosody,
        rhythm=rhythm,
        voice_activity=voice_activity,
        vowel_space=vowel_space,
        duration=signal.duration,
        sample_rate=sr,
    )
