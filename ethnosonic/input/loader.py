"""Audio file loading for the command-line interface."""

import logging
import numpy as np
import librosa
import soundfile as sf
from pathlib import Path
from typing import Optional

from ..core import AudioSignal, InputError

logger = logging.getLogger(__name__)


class AudioLoader:
    """Decodes audio files into AudioSignal values.

    The analysis functions never touch the filesystem; this adapter is the
    only place where a container format is decoded.
    """

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".aiff", ".aif"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        mono: bool = False,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate; None keeps the file's native rate
            mono: Downmix to a single channel if True
            normalize: Peak-normalize every channel to [-1, 1] if True
        """
        self.target_sr = target_sr
        self.mono = mono
        self.normalize = normalize

    def load(self, path: str) -> AudioSignal:
        """
        Load an audio file.

        Args:
            path: Path to audio file

        Returns:
            AudioSignal with one array per channel

        Raises:
            InputError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise InputError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        # librosa returns (samples,) for mono and (channels, samples) otherwise
        audio, sr = librosa.load(str(path), sr=self.target_sr, mono=self.mono)
        logger.debug("Loaded %s: shape %s at %d Hz", path.name, audio.shape, sr)

        if self.normalize:
            audio = self._normalize(audio)

        return AudioSignal.from_array(audio, sr)

    def probe(self, path: str) -> dict:
        """
        Read container metadata without decoding the samples.

        Args:
            path: Path to audio file

        Returns:
            Dict with format, subtype, sample_rate, channels and frames.
            Formats libsndfile cannot open report only what librosa can tell.
        """
        path = Path(path)
        try:
            meta = sf.info(str(path))
        except RuntimeError:
            logger.debug("libsndfile cannot open %s, falling back to librosa", path.name)
            return {
                "format": path.suffix.lstrip(".").upper(),
                "subtype": None,
                "sample_rate": librosa.get_samplerate(str(path)),
                "channels": None,
                "frames": None,
            }
        return {
            "format": meta.format,
            "subtype": meta.subtype,
            "sample_rate": meta.samplerate,
            "channels": meta.channels,
            "frames": meta.frames,
        }

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max() if audio.size else 0.0
        if peak > 0:
            audio = audio / peak
        return audio
