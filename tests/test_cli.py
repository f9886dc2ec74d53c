"""Tests for the command-line interface."""

import json

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from ethnosonic.cli import app

from generate_test_audio import generate_sine_wave, generate_bursts

runner = CliRunner()


@pytest.fixture
def a4_wav(tmp_path):
    path = tmp_path / "a4.wav"
    sf.write(str(path), generate_sine_wave(440.0, 2.0, 44100, 0.5), 44100)
    return path


@pytest.fixture
def speech_wav(tmp_path):
    path = tmp_path / "bursts.wav"
    audio = generate_bursts(
        [("silence", 0.5), ("tone", 0.5), ("silence", 0.5), ("tone", 0.5), ("silence", 0.5)]
    )
    sf.write(str(path), audio, 16000)
    return path


class TestTranscribeCommand:
    """Tests for `ethnosonic transcribe`."""

    def test_json_to_stdout(self, a4_wav):
        result = runner.invoke(app, ["transcribe", str(a4_wav), "--json"])
        assert result.exit_code == 0, result.output
        assert '"midi": 69' in result.output

    def test_output_file(self, a4_wav, tmp_path):
        out = tmp_path / "notes.json"
        result = runner.invoke(app, ["transcribe", str(a4_wav), "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert [n["midi"] for n in data["notes"]] == [69]
        assert data["input"] == str(a4_wav)
        assert "transcribe" in data["timings"]["stages"]

    def test_table_output(self, a4_wav):
        result = runner.invoke(app, ["transcribe", str(a4_wav)])
        assert result.exit_code == 0, result.output
        assert "Detected 1 notes" in result.output
        assert "A4" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["transcribe", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        result = runner.invoke(app, ["transcribe", str(path)])
        assert result.exit_code == 1
        assert "Unsupported format" in result.output

    def test_invalid_option(self, a4_wav):
        result = runner.invoke(app, ["transcribe", str(a4_wav), "--fft-size", "1000"])
        assert result.exit_code == 1
        assert "fft_size" in result.output

    def test_preset(self, a4_wav):
        result = runner.invoke(app, ["transcribe", str(a4_wav), "--preset", "music"])
        assert result.exit_code == 0, result.output
        assert "Peak normalized" in result.output


class TestOtherCommands:
    """Tests for the soundscape, microtonal, linguistics and info commands."""

    def test_soundscape(self, a4_wav, tmp_path):
        out = tmp_path / "soundscape.json"
        result = runner.invoke(app, ["soundscape", str(a4_wav), "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert -1.0 <= data["indices"]["ndsi"] <= 1.0
        assert len(data["frequency_bands"]) == 5
        assert "spectrogram" not in data

    def test_soundscape_table(self, a4_wav):
        result = runner.invoke(app, ["soundscape", str(a4_wav)])
        assert result.exit_code == 0, result.output
        assert "NDSI" in result.output

    def test_microtonal(self, a4_wav, tmp_path):
        out = tmp_path / "microtonal.json"
        result = runner.invoke(app, ["microtonal", str(a4_wav), "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["total_notes"] == 42

    def test_linguistics(self, speech_wav, tmp_path):
        out = tmp_path / "speech.json"
        result = runner.invoke(app, ["linguistics", str(speech_wav), "-o", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert [s["is_speech"] for s in data["voice_activity"]] == [True, False, True, False]
        assert data["rhythm"]["pause_count"] == 2

    def test_info(self, a4_wav):
        result = runner.invoke(app, ["info", str(a4_wav)])
        assert result.exit_code == 0, result.output
        assert "Sample rate: 44100 Hz" in result.output
        assert "Channels: 1" in result.output
        assert "Format: WAV (PCM_16)" in result.output
