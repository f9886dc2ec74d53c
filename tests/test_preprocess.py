"""Tests for field-recording preprocessing."""

import numpy as np
import pytest

from ethnosonic import AudioSignal, ConfigurationError
from ethnosonic.analysis import rms
from ethnosonic.processing import (
    Preprocessor,
    PreprocessingConfig,
    PRESETS,
    preprocess,
    normalize_peak,
    normalize_rms,
    spectral_gate,
    db_to_linear,
    linear_to_db,
)

from generate_test_audio import generate_sine_wave, generate_white_noise


class TestLevels:
    """Tests for dB conversion and normalization."""

    def test_db_conversion(self):
        assert db_to_linear(0.0) == 1.0
        assert db_to_linear(-20.0) == pytest.approx(0.1)
        assert linear_to_db(1.0) == 0.0
        assert linear_to_db(0.0) == pytest.approx(-200.0)

    def test_peak_normalization(self):
        audio = np.array([0.1, -0.25, 0.2])
        normalized = normalize_peak(audio, -6.0)
        assert np.max(np.abs(normalized)) == pytest.approx(db_to_linear(-6.0))

    def test_rms_normalization(self):
        audio = generate_sine_wave(440.0, 1.0, 44100, 0.1).astype(np.float64)
        normalized = normalize_rms(audio, -20.0)
        assert rms(normalized) == pytest.approx(0.1, rel=1e-3)

    def test_rms_soft_clip(self):
        """Anything past 0.95 keeps only 10% of the excess."""
        audio = np.array([1.0, -1.0, 1.0, -1.0])
        normalized = normalize_rms(audio, 0.0)
        assert np.allclose(normalized, [0.955, -0.955, 0.955, -0.955])

    def test_silence_unchanged(self):
        silence = np.zeros(100)
        assert np.array_equal(normalize_peak(silence), silence)
        assert np.array_equal(normalize_rms(silence), silence)


class TestSpectralGate:
    """Tests for the energy-based noise gate."""

    @pytest.fixture
    def sample_rate(self):
        return 16000

    def test_attenuates_noise_floor_only(self, sample_rate):
        noise = generate_white_noise(1.0, sample_rate, 0.01).astype(np.float64)
        tone = generate_sine_wave(440.0, 1.0, sample_rate, 0.5).astype(np.float64)
        audio = np.concatenate([noise, tone])

        gated = spectral_gate(audio, sample_rate, strength=0.5)

        assert rms(gated[:8000]) < 0.5 * rms(audio[:8000])
        assert np.array_equal(gated[sample_rate:], audio[sample_rate:])

    def test_input_untouched(self, sample_rate):
        audio = generate_white_noise(1.0, sample_rate, 0.01).astype(np.float64)
        original = audio.copy()
        spectral_gate(audio, sample_rate)
        assert np.array_equal(audio, original)

    def test_short_buffer(self, sample_rate):
        audio = np.ones(100)
        assert np.array_equal(spectral_gate(audio, sample_rate), audio)


class TestPreprocessor:
    """Tests for preset handling and the processing chain."""

    @pytest.fixture
    def signal(self):
        sr = 16000
        audio = generate_sine_wave(440.0, 1.0, sr, 0.2) + generate_white_noise(1.0, sr, 0.01)
        return AudioSignal.from_array(audio, sr)

    def test_presets_exist(self):
        assert set(PRESETS) == {"field_recording", "speech", "music", "ecology"}
        for config in PRESETS.values():
            config.validate()

    def test_speech_preset_steps(self, signal):
        result = Preprocessor("speech").process(signal)
        assert result.applied_steps == [
            "High-pass filter at 100 Hz",
            "Low-pass filter at 8000 Hz",
            "Noise reduction (50%)",
            "RMS normalized to -33 dB",
        ]

    def test_default_peak_normalization(self, signal):
        result = preprocess(signal)
        assert result.applied_steps == ["Peak normalized to -3 dB"]
        assert result.stats.processed_peak == pytest.approx(db_to_linear(-3.0))
        assert result.stats.original_peak == pytest.approx(np.max(np.abs(signal.channels[0])))

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            Preprocessor("underwater")

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            Preprocessor(PreprocessingConfig(normalize_method="lufs"))
        with pytest.raises(ConfigurationError):
            Preprocessor(PreprocessingConfig(denoise_strength=2.0))

    def test_preset_is_not_shared(self):
        preprocessor = Preprocessor("music")
        preprocessor.config.normalize_target = -12.0
        assert PRESETS["music"].normalize_target == -1.0

    def test_resample(self, signal):
        config = PreprocessingConfig(normalize=False, resample_rate=8000)
        result = preprocess(signal, config)
        assert result.signal.sample_rate == 8000
        assert result.signal.n_samples == 8000
        assert result.applied_steps == ["Resampled to 8000 Hz"]

    def test_stereo_channels_processed(self):
        sr = 16000
        left = generate_sine_wave(440.0, 1.0, sr, 0.2)
        right = generate_sine_wave(660.0, 1.0, sr, 0.4)
        signal = AudioSignal.from_array(np.vstack([left, right]), sr)
        result = preprocess(signal, PreprocessingConfig(normalize_target=0.0))
        assert result.signal.n_channels == 2
        for channel in result.signal.channels:
            assert np.max(np.abs(channel)) == pytest.approx(1.0)

    def test_original_signal_untouched(self, signal):
        before = signal.channels[0].copy()
        preprocess(signal, "field_recording")
        assert np.array_equal(signal.channels[0], before)
