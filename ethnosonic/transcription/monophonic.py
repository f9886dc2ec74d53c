"""Monophonic transcription using autocorrelation pitch detection."""

import logging
from typing import List, Optional

import numpy as np

from .base import Transcriber
from .segmenter import NoteSegmenter
from ..core import AnalysisOptions, NoteEvent, FrameLoopControl
from ..analysis.frames import FrameSource, rms
from ..analysis.filters import high_pass, low_pass
from ..analysis.pitch import PitchEstimator
from ..inference.tuning import TuningMapper, is_note_in_scale
from ..processing.quantize import Quantizer

logger = logging.getLogger(__name__)


class AutocorrelationTranscriber(Transcriber):
    """Transcribes a single melody line frame by frame.

    Each windowed frame is measured (RMS), pitched by autocorrelation,
    mapped to MIDI and fed to a NoteSegmenter.
    """

    def __init__(self, options: Optional[AnalysisOptions] = None):
        """
        Initialize AutocorrelationTranscriber.

        Args:
            options: Analysis options; validated here
        """
        self.options = options or AnalysisOptions.for_transcription()
        self.options.validate()
        self.tuning = TuningMapper(
            self.options.reference_frequency, self.options.tuning_system
        )

    def filter(self, audio: np.ndarray, sr: int) -> np.ndarray:
        """Apply the optional high-pass and low-pass filters."""
        opts = self.options
        if opts.enable_high_pass_filter:
            audio = high_pass(audio, sr, opts.high_pass_frequency)
        if opts.enable_low_pass_filter:
            audio = low_pass(audio, sr, opts.low_pass_frequency)
        return audio

    def transcribe(
        self,
        audio: np.ndarray,
        sr: int,
        control: Optional[FrameLoopControl] = None,
    ) -> List[NoteEvent]:
        return self.segment(audio, sr, control).finish()

    def segment(
        self,
        audio: np.ndarray,
        sr: int,
        control: Optional[FrameLoopControl] = None,
    ) -> NoteSegmenter:
        """
        Run the frame loop and return the flushed segmenter.

        The segmenter carries both the committed notes and the mean
        confidence of accepted frames.

        Args:
            audio: Mono audio, already channel-selected and truncated
            sr: Sample rate
            control: Progress / cancellation hooks

        Returns:
            NoteSegmenter after finish()
        """
        opts = self.options
        control = control or FrameLoopControl()

        audio = self.filter(audio, sr)
        frames = FrameSource(
            audio, sr, opts.fft_size, opts.effective_hop_size, opts.window_type
        )
        estimator = PitchEstimator(
            sr, opts.frequency_min, opts.frequency_max, opts.confidence_threshold
        )
        segmenter = NoteSegmenter(
            min_note_duration=opts.min_note_duration,
            quantizer=Quantizer(opts.target_tempo, opts.quantization),
            velocity_scaling=opts.enable_velocity_scaling,
            velocity_min=opts.velocity_min,
            velocity_max=opts.velocity_max,
        )

        total = len(frames)
        logger.debug(
            "Transcribing %d frames (fft=%d, hop=%d, window=%s)",
            total, opts.fft_size, frames.hop_size, opts.window_type,
        )

        for index, frame in enumerate(frames):
            control.tick(index)
            if index and index % control.yield_every == 0:
                control.report(10 + 80 * index / total)

            amplitude = rms(frame.samples)

            if opts.enable_noise_gate and amplitude < opts.noise_gate_threshold:
                segmenter.reject()
                continue

            estimate = estimator.estimate(frame.samples)
            midi = self._accepted_midi(amplitude, estimate.frequency)
            if midi is None:
                segmenter.reject()
                continue

            segmenter.accept(
                time=frame.timestamp,
                midi=midi,
                frequency=estimate.frequency,
                amplitude=amplitude,
                confidence=estimate.confidence,
            )

        segmenter.finish()
        return segmenter

    def _accepted_midi(self, amplitude: float, frequency: Optional[float]) -> Optional[int]:
        """MIDI note for a frame that passes every check, otherwise None."""
        opts = self.options
        if amplitude < opts.threshold or frequency is None:
            return None
        if not opts.frequency_min <= frequency <= opts.frequency_max:
            return None

        midi = self.tuning.to_midi(frequency)
        if not opts.midi_min_note <= midi <= opts.midi_max_note:
            return None
        if opts.enable_scale_constrain and not is_note_in_scale(
            midi, opts.scale_type, opts.scale_root
        ):
            return None
        return midi
