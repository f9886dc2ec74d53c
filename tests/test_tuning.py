"""Tests for tuning systems, scale membership, scale detection and quantization."""

import math

import numpy as np
import pytest

from ethnosonic.core import NoteEvent, InputError, ConfigurationError
from ethnosonic.inference import (
    TuningMapper,
    ScaleDetector,
    frequency_to_midi,
    midi_to_frequency,
    cents_deviation,
    note_name_to_midi,
    is_note_in_scale,
)
from ethnosonic.processing import Quantizer

from generate_test_audio import equal_tempered, cents_scale


class TestFrequencyToMidi:
    """Tests for frequency to MIDI mapping."""

    def test_reference_pitches(self):
        assert frequency_to_midi(440.0) == 69  # A4
        assert frequency_to_midi(261.63) == 60  # C4 (approx)
        assert frequency_to_midi(880.0) == 81  # A5

    def test_clamped_to_piano_range(self):
        assert frequency_to_midi(10.0) == 21
        assert frequency_to_midi(20000.0) == 108

    def test_custom_reference(self):
        assert frequency_to_midi(432.0, reference=432.0) == 69

    def test_quarter_tone_snaps_to_even(self):
        """A4 sits exactly on a quarter-tone boundary and rounds up to 70."""
        assert frequency_to_midi(440.0, tuning_system="quarter_tone") == 70

    @pytest.mark.parametrize("system", ["just", "pythagorean", "meantone"])
    def test_alternative_systems_follow_equal(self, system):
        for freq in [55.0, 123.4, 261.63, 452.0, 1000.0, 3520.0]:
            assert frequency_to_midi(freq, tuning_system=system) == frequency_to_midi(freq)

    def test_round_trip(self):
        for midi in range(21, 109):
            assert frequency_to_midi(midi_to_frequency(midi)) == midi

    def test_invalid_frequency(self):
        with pytest.raises(InputError):
            frequency_to_midi(0.0)

    def test_unknown_system(self):
        with pytest.raises(ConfigurationError):
            frequency_to_midi(440.0, tuning_system="werckmeister")


class TestCents:
    """Tests for cents deviation and note names."""

    def test_exact_note(self):
        nearest, cents, name = cents_deviation(440.0)
        assert nearest == 69
        assert cents == pytest.approx(0.0)
        assert name == "A4"

    def test_sharp_note(self):
        nearest, cents, _ = cents_deviation(445.0)
        assert nearest == 69
        assert cents == pytest.approx(1200 * math.log2(445.0 / 440.0), abs=1e-6)

    def test_note_name_to_midi(self):
        assert note_name_to_midi("C4") == 60
        assert note_name_to_midi("A#3") == 58
        assert note_name_to_midi("not a note") == 60


class TestScaleMembership:
    """Tests for scale-constrained note acceptance."""

    def test_c_major(self):
        assert is_note_in_scale(62, "major", 60)
        assert not is_note_in_scale(61, "major", 60)

    def test_transposed_root(self):
        assert is_note_in_scale(61, "major", 61)
        assert is_note_in_scale(66, "blues", 60)

    def test_unknown_scale_accepts_everything(self):
        assert all(is_note_in_scale(m, "bohlen-pierce") for m in range(21, 109))


class TestTuningMapper:
    """Tests for the TuningMapper helper."""

    def test_mapping(self):
        mapper = TuningMapper(442.0)
        assert mapper.to_midi(442.0) == 69
        assert mapper.to_frequency(69) == 442.0
        assert mapper.cents(442.0)[0] == 69

    def test_invalid_arguments(self):
        with pytest.raises(ConfigurationError):
            TuningMapper(0.0)
        with pytest.raises(ConfigurationError):
            TuningMapper(440.0, "werckmeister")


class TestScaleDetector:
    """Tests for template-based scale detection."""

    def test_western_major(self):
        freqs = equal_tempered(261.63, [0, 2, 4, 5, 7, 9, 11])
        match = ScaleDetector().detect(freqs)
        assert match is not None
        assert match.detected_scale == "Western Major"
        assert match.confidence == pytest.approx(1.0)

    def test_slendro(self):
        freqs = cents_scale(293.66, [0, 240, 480, 720, 960])
        match = ScaleDetector().detect(freqs)
        assert match.detected_scale == "Slendro (Javanese)"
        assert match.cultural_context == "Javanese gamelan music"

    def test_interval_pattern_folds_octaves(self):
        pattern = ScaleDetector.interval_pattern([220.0, 440.0, 330.0])
        assert pattern == pytest.approx([0.0, 0.0, 701.955], abs=1e-3)

    def test_too_few_pitches(self):
        assert ScaleDetector().detect([440.0, 660.0]) is None

    def test_no_confident_match(self):
        """Clustered semitone-fraction steps match no template above 0.5."""
        freqs = cents_scale(440.0, [0, 50, 100])
        assert ScaleDetector().detect(freqs) is None

    def test_to_dict(self):
        freqs = equal_tempered(261.63, [0, 2, 4, 5, 7, 9, 11])
        data = ScaleDetector().detect(freqs).to_dict()
        assert data["detected_scale"] == "Western Major"
        assert len(data["interval_pattern"]) == 7


class TestQuantizer:
    """Tests for onset quantization."""

    def test_grid_duration(self):
        assert Quantizer(120, "quarter").grid_duration == 0.5
        assert Quantizer(120, "sixteenth").grid_duration == 0.125
        assert Quantizer(120, "none").grid_duration == 0.0

    def test_snap_rounds_half_up(self):
        quantizer = Quantizer(120, "sixteenth")
        assert quantizer.snap(0.48) == 0.5
        assert quantizer.snap(0.0625) == 0.125

    def test_none_is_identity(self):
        assert Quantizer(120, "none").snap(0.1234) == 0.1234

    @pytest.mark.parametrize("grid", ["none", "quarter", "eighth", "sixteenth", "thirty-second"])
    def test_idempotent(self, grid):
        quantizer = Quantizer(97.0, grid)
        for t in np.random.default_rng(3).uniform(0, 30, 200):
            once = quantizer.snap(float(t))
            assert quantizer.snap(once) == once

    def test_quantize_keeps_duration(self):
        notes = [NoteEvent(60, 0.49, 0.3, 80, 0.9, 261.6)]
        quantized = Quantizer(120, "quarter").quantize(notes)
        assert quantized[0].start_time == 0.5
        assert quantized[0].duration == 0.3

    def test_invalid_grid(self):
        with pytest.raises(ConfigurationError):
            Quantizer(120, "triplet")
