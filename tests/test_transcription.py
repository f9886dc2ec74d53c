"""Tests for note segmentation and monophonic transcription."""

import numpy as np
import pytest

from ethnosonic import (
    AudioSignal,
    AnalysisOptions,
    analyze_transcription,
    InputError,
    ConfigurationError,
    AnalysisCancelled,
    CancellationToken,
)
from ethnosonic.processing import Quantizer
from ethnosonic.transcription import (
    AutocorrelationTranscriber,
    NoteSegmenter,
    amplitude_to_velocity,
)

from generate_test_audio import (
    generate_sine_wave,
    generate_note_sequence,
    generate_white_noise,
    generate_silence,
)


class TestVelocity:
    """Tests for amplitude to velocity mapping."""

    def test_linear_mapping(self):
        assert amplitude_to_velocity(0.0) == 0
        assert amplitude_to_velocity(0.25) == 63
        assert amplitude_to_velocity(0.9) == 127

    def test_scaling_clamps(self):
        assert amplitude_to_velocity(0.01, scale=True, velocity_min=20, velocity_max=100) == 20
        assert amplitude_to_velocity(0.9, scale=True, velocity_min=20, velocity_max=100) == 100


class TestNoteSegmenter:
    """Tests for the open / extend / close state machine."""

    def feed(self, segmenter, midi, times, amplitude=0.2, confidence=0.9):
        for t in times:
            segmenter.accept(t, midi, 440.0, amplitude, confidence)

    def test_default_confidence(self):
        segmenter = NoteSegmenter()
        assert segmenter.finish() == []
        assert segmenter.confidence == 0.7

    def test_extend_then_close(self):
        segmenter = NoteSegmenter(min_note_duration=0.1)
        self.feed(segmenter, 69, [0.0, 0.1, 0.2, 0.3])
        segmenter.reject()
        notes = segmenter.finish()
        assert len(notes) == 1
        assert notes[0].start_time == 0.0
        assert notes[0].duration == pytest.approx(0.3)
        assert not segmenter.is_active

    def test_new_note_starts_with_zero_duration(self):
        """A single accepted frame never reaches a positive minimum."""
        segmenter = NoteSegmenter(min_note_duration=0.05)
        self.feed(segmenter, 69, [0.0])
        assert segmenter.finish() == []

    def test_zero_minimum_keeps_single_frames(self):
        segmenter = NoteSegmenter(min_note_duration=0.0)
        self.feed(segmenter, 69, [0.0])
        notes = segmenter.finish()
        assert len(notes) == 1
        assert notes[0].duration == 0.0

    def test_pitch_change_replaces_note(self):
        segmenter = NoteSegmenter(min_note_duration=0.1)
        self.feed(segmenter, 60, [0.0, 0.1, 0.2])
        self.feed(segmenter, 62, [0.3, 0.4, 0.5])
        notes = segmenter.finish()
        assert [n.midi for n in notes] == [60, 62]
        assert notes[1].start_time == 0.3

    def test_short_notes_are_dropped(self):
        segmenter = NoteSegmenter(min_note_duration=0.5)
        self.feed(segmenter, 60, [0.0, 0.1])
        self.feed(segmenter, 62, [0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8])
        notes = segmenter.finish()
        assert [n.midi for n in notes] == [62]

    def test_velocity_is_max_over_frames(self):
        segmenter = NoteSegmenter(min_note_duration=0.0)
        segmenter.accept(0.0, 60, 261.6, 0.1, 0.9)
        segmenter.accept(0.1, 60, 261.6, 0.3, 0.9)
        segmenter.accept(0.2, 60, 261.6, 0.2, 0.9)
        assert segmenter.finish()[0].velocity == amplitude_to_velocity(0.3)

    def test_confidence_is_mean_of_accepted_frames(self):
        segmenter = NoteSegmenter()
        segmenter.accept(0.0, 60, 261.6, 0.2, 0.8)
        segmenter.reject()
        segmenter.accept(0.1, 60, 261.6, 0.2, 1.0)
        assert segmenter.accepted_frames == 2
        assert segmenter.confidence == pytest.approx(0.9)

    def test_quantized_onsets(self):
        segmenter = NoteSegmenter(min_note_duration=0.0, quantizer=Quantizer(120, "quarter"))
        self.feed(segmenter, 60, [0.26, 0.4, 0.8])
        notes = segmenter.finish()
        assert notes[0].start_time == 0.5
        assert notes[0].duration == pytest.approx(0.5)


class TestTranscription:
    """End-to-end transcription of synthetic signals."""

    @pytest.fixture
    def sample_rate(self):
        return 44100

    def signal(self, audio, sr):
        return AudioSignal.from_array(audio, sr)

    def assert_well_formed(self, result, options=AnalysisOptions()):
        starts = [n.start_time for n in result.notes]
        assert starts == sorted(starts)
        for note in result.notes:
            assert options.midi_min_note <= note.midi <= options.midi_max_note
            assert note.duration >= options.min_note_duration
            assert 0 <= note.velocity <= 127
            assert 0.0 <= note.confidence <= 1.0
        for a, b in zip(result.notes, result.notes[1:]):
            assert a.end_time <= b.start_time + 1e-9

    def test_single_a4(self, sample_rate):
        """A steady 2s A4 gives one long note."""
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(self.signal(audio, sample_rate))

        assert len(result.notes) == 1, f"Expected 1 note, got {len(result.notes)}"
        note = result.notes[0]
        assert note.midi == 69
        assert note.pitch_name == "A4"
        assert note.start_time == 0.0
        assert note.duration > 1.8
        assert abs(note.frequency - 440.0) < 5.0
        assert 50 <= note.velocity <= 56
        assert result.confidence > 0.8
        assert result.duration == 2.0
        assert result.sample_rate == sample_rate
        assert result.detected_time_signature == "4/4"
        self.assert_well_formed(result)

    def test_two_notes(self, sample_rate):
        """A4 then A5 gives two notes split within one hop of 1.0s."""
        audio = generate_note_sequence([440.0, 880.0], [1.0, 1.0], sample_rate)
        result = analyze_transcription(self.signal(audio, sample_rate))

        assert [n.midi for n in result.notes] == [69, 81]
        assert abs(result.notes[1].start_time - 1.0) <= 512 / sample_rate
        self.assert_well_formed(result)

    def test_silence(self, sample_rate):
        result = analyze_transcription(self.signal(generate_silence(2.0, sample_rate), sample_rate))
        assert result.notes == []
        assert result.confidence == 0.7

    def test_low_level_noise(self, sample_rate):
        """Noise far below the RMS threshold gives no notes."""
        audio = generate_white_noise(2.0, sample_rate, amplitude=0.005)
        result = analyze_transcription(self.signal(audio, sample_rate))
        assert len(result.notes) == 0, f"Expected 0 notes, got {len(result.notes)}"

    def test_scale_constraint_rejects_off_scale_notes(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        in_scale = analyze_transcription(
            self.signal(audio, sample_rate),
            {"enableScaleConstrain": True, "scaleType": "major", "scaleRoot": 60},
        )
        off_scale = analyze_transcription(
            self.signal(audio, sample_rate),
            {"enableScaleConstrain": True, "scaleType": "blues", "scaleRoot": 60},
        )
        assert [n.midi for n in in_scale.notes] == [69]
        assert off_scale.notes == []
        assert off_scale.confidence == 0.7

    def test_midi_range(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(self.signal(audio, sample_rate), {"midiMaxNote": 60})
        assert result.notes == []

    def test_noise_gate(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(
            self.signal(audio, sample_rate),
            {"enableNoiseGate": True, "noiseGateThreshold": 0.5},
        )
        assert result.notes == []

    def test_filters_keep_the_melody(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(
            self.signal(audio, sample_rate),
            {"enableHighPassFilter": True, "highPassFrequency": 80.0},
        )
        assert [n.midi for n in result.notes] == [69]

    def test_quarter_tone_tuning(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(
            self.signal(audio, sample_rate), {"tuningSystem": "quarter_tone"}
        )
        assert all(n.midi % 2 == 0 for n in result.notes)

    def test_quantized_onsets(self, sample_rate):
        audio = generate_note_sequence([440.0, 880.0], [1.0, 1.0], sample_rate)
        result = analyze_transcription(
            self.signal(audio, sample_rate), {"quantization": "quarter", "targetTempo": 120}
        )
        assert result.notes
        for note in result.notes:
            assert note.start_time / 0.5 == pytest.approx(round(note.start_time / 0.5))

    def test_tempo_detection_defaults_with_few_notes(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(
            self.signal(audio, sample_rate), {"enableTempoDetection": True}
        )
        assert result.detected_tempo == 120.0

    def test_tempo_not_reported_when_disabled(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        assert analyze_transcription(self.signal(audio, sample_rate)).detected_tempo is None

    def test_max_processing_duration(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(
            self.signal(audio, sample_rate), {"maxProcessingDuration": 1.0}
        )
        assert len(result.notes) == 1
        assert result.notes[0].end_time < 1.0
        assert result.duration == 2.0

    def test_fast_mode(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_transcription(self.signal(audio, sample_rate), {"enableFastMode": True})
        assert [n.midi for n in result.notes] == [69]

    def test_stereo_channel_selection(self, sample_rate):
        left = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        right = generate_sine_wave(880.0, 2.0, sample_rate, 0.5)
        signal = AudioSignal.from_array(np.vstack([left, right]), sample_rate)
        assert [n.midi for n in analyze_transcription(signal, {"channelSelection": "left"}).notes] == [69]
        assert [n.midi for n in analyze_transcription(signal, {"channelSelection": "right"}).notes] == [81]

    def test_right_channel_of_mono_signal(self, sample_rate):
        audio = generate_sine_wave(440.0, 1.0, sample_rate, 0.5)
        with pytest.raises(InputError):
            analyze_transcription(self.signal(audio, sample_rate), {"channelSelection": "right"})

    def test_signal_shorter_than_frame(self, sample_rate):
        with pytest.raises(InputError):
            analyze_transcription(self.signal(np.zeros(1000), sample_rate))

    def test_invalid_options(self, sample_rate):
        audio = generate_sine_wave(440.0, 1.0, sample_rate, 0.5)
        with pytest.raises(ConfigurationError):
            analyze_transcription(self.signal(audio, sample_rate), {"fftSize": 1000})
        with pytest.raises(ConfigurationError):
            analyze_transcription(self.signal(audio, sample_rate), {"noSuchOption": 1})

    @pytest.mark.parametrize(
        "options",
        [{"threshold": "0.1"}, {"fftSize": 2048.0}, {"hopSize": 512.5}, {"frequencyMin": None}],
    )
    def test_wrongly_typed_options(self, sample_rate, options):
        audio = generate_sine_wave(440.0, 1.0, sample_rate, 0.5)
        with pytest.raises(ConfigurationError):
            analyze_transcription(self.signal(audio, sample_rate), options)

    def test_progress_milestones(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        seen = []
        analyze_transcription(self.signal(audio, sample_rate), progress=seen.append)
        assert seen[0] == 0.0
        assert seen[-1] == 100.0
        assert seen == sorted(seen)

    def test_cancel_before_start(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelled):
            analyze_transcription(self.signal(audio, sample_rate), cancel_token=token)

    def test_cancel_during_frame_loop(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        token = CancellationToken()

        def cancel_after_setup(percent):
            if percent >= 10:
                token.cancel()

        with pytest.raises(AnalysisCancelled):
            analyze_transcription(
                self.signal(audio, sample_rate),
                progress=cancel_after_setup,
                cancel_token=token,
            )

    def test_to_dict(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        data = analyze_transcription(self.signal(audio, sample_rate)).to_dict()
        assert data["notes"][0]["midi"] == 69
        assert data["confidence"] > 0.8
        assert data["detected_tempo"] is None

    def test_transcriber_directly(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5).astype(np.float64)
        notes = AutocorrelationTranscriber().transcribe(audio, sample_rate)
        assert [n.midi for n in notes] == [69]
