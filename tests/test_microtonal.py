"""Tests for pitch histograms, cents deviation and microtonal analysis."""

import numpy as np
import pytest

from ethnosonic import AudioSignal, analyze_microtonal, InputError
from ethnosonic.microtonal import (
    build_histogram,
    dominant_pitches,
    average_cents_deviation,
    microtonal_content,
    detect_frame_pitches,
)

from generate_test_audio import generate_sine_wave, generate_silence


def is_subharmonic(freq: float, fundamental: float, max_divisor: int = 6) -> bool:
    return any(abs(freq * k - fundamental) / fundamental < 0.02 for k in range(1, max_divisor + 1))


class TestHistogram:
    """Tests for 1 Hz pitch bucketing."""

    def test_buckets_round_to_nearest_hz(self):
        histogram = build_histogram([440.2, 439.7, 440.4, 466.0])
        assert [e.frequency for e in histogram] == [440.0, 466.0]
        assert [e.count for e in histogram] == [3, 1]
        assert [e.percentage for e in histogram] == pytest.approx([75.0, 25.0])

    def test_entry_describes_nearest_note(self):
        entry = build_histogram([440.0])[0]
        assert entry.midi_note == 69
        assert entry.note_name == "A4"
        assert entry.cents == pytest.approx(0.0)

    def test_half_hz_rounds_up(self):
        assert build_histogram([220.5])[0].frequency == 221.0

    def test_empty(self):
        assert build_histogram([]) == []
        assert average_cents_deviation([]) == 0.0
        assert microtonal_content([]) == 0.0

    def test_microtonal_content(self):
        """452 Hz is about 47 cents sharp of A4."""
        histogram = build_histogram([440.0, 452.0])
        assert histogram[1].cents == pytest.approx(46.6, abs=0.1)
        assert microtonal_content(histogram) == pytest.approx(50.0)

    def test_average_cents_is_count_weighted(self):
        histogram = build_histogram([440.0, 440.0, 440.0, 452.0])
        expected = abs(histogram[1].cents) / 4
        assert average_cents_deviation(histogram) == pytest.approx(expected)

    def test_dominant_pitches(self):
        pitches = []
        for i, freq in enumerate(range(200, 212)):
            pitches.extend([float(freq)] * (i + 1))
        dominant = dominant_pitches(build_histogram(pitches))
        assert len(dominant) == 5
        assert [e.frequency for e in dominant] == [211.0, 210.0, 209.0, 208.0, 207.0]


class TestFramePitches:
    """Tests for the unwindowed frame pitch tracker."""

    @pytest.fixture
    def sample_rate(self):
        return 44100

    def test_silence_has_no_pitches(self, sample_rate):
        assert detect_frame_pitches(generate_silence(1.0, sample_rate), sample_rate) == []

    def test_tone(self, sample_rate):
        audio = generate_sine_wave(440.0, 1.0, sample_rate, 0.5)
        pitches = detect_frame_pitches(audio, sample_rate)
        # 1 + (44100 - 4096) // 2048 frames, all voiced
        assert len(pitches) == 20
        assert all(is_subharmonic(p, 440.0) for p in pitches)


class TestAnalyzeMicrotonal:
    """End-to-end microtonal analysis."""

    @pytest.fixture
    def sample_rate(self):
        return 44100

    def test_tone(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        result = analyze_microtonal(AudioSignal.from_array(audio, sample_rate))

        assert result.total_notes == 42
        assert sum(e.count for e in result.pitch_histogram) == result.total_notes
        assert sum(e.percentage for e in result.pitch_histogram) == pytest.approx(100.0)
        assert all(is_subharmonic(e.frequency, 440.0) for e in result.pitch_histogram)
        assert 0.0 <= result.microtonal_content <= 100.0

    def test_silence(self, sample_rate):
        result = analyze_microtonal(AudioSignal.from_array(generate_silence(2.0, sample_rate), sample_rate))
        assert result.total_notes == 0
        assert result.pitch_histogram == []
        assert result.scale_analysis is None
        assert result.microtonal_content == 0.0

    def test_too_short(self, sample_rate):
        with pytest.raises(InputError):
            analyze_microtonal(AudioSignal.from_array(np.zeros(3000), sample_rate))

    def test_progress_reaches_100(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        seen = []
        analyze_microtonal(AudioSignal.from_array(audio, sample_rate), progress=seen.append)
        assert seen[0] == 0.0
        assert seen[-1] == 100.0

    def test_to_dict(self, sample_rate):
        audio = generate_sine_wave(440.0, 2.0, sample_rate, 0.5)
        data = analyze_microtonal(AudioSignal.from_array(audio, sample_rate)).to_dict()
        assert data["total_notes"] == 42
        assert "pitch_histogram" in data
