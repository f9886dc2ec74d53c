"""Decoded audio as an immutable value."""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .errors import InputError


@dataclass(frozen=True)
class AudioSignal:
    """Per-channel PCM samples plus sample rate.

    Channel arrays are copied on construction and marked read-only, so
    analysis code can borrow them without worrying about the caller's
    buffers changing underneath it.
    """

    channels: Tuple[np.ndarray, ...]
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate is None or self.sample_rate <= 0:
            raise InputError(f"Sample rate must be positive, got {self.sample_rate}")
        if len(self.channels) == 0:
            raise InputError("Signal has no channels")

        frozen = []
        length = None
        for channel in self.channels:
            data = np.array(channel, dtype=np.float64, copy=True)
            if data.ndim != 1:
                raise InputError(f"Each channel must be 1-D, got shape {data.shape}")
            if length is None:
                length = len(data)
            elif len(data) != length:
                raise InputError("All channels must have the same number of samples")
            data.setflags(write=False)
            frozen.append(data)

        object.__setattr__(self, "channels", tuple(frozen))
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def from_array(cls, audio: np.ndarray, sample_rate: int) -> "AudioSignal":
        """
        Build a signal from a numpy array.

        Args:
            audio: 1-D mono array or 2-D array shaped (channels, samples)
            sample_rate: Sample rate in Hz

        Returns:
            AudioSignal
        """
        audio = np.asarray(audio)
        if audio.ndim == 1:
            return cls(channels=(audio,), sample_rate=sample_rate)
        if audio.ndim == 2:
            return cls(channels=tuple(audio), sample_rate=sample_rate)
        raise InputError(f"Expected a 1-D or 2-D array, got shape {audio.shape}")

    @classmethod
    def from_channels(cls, channels: Sequence[np.ndarray], sample_rate: int) -> "AudioSignal":
        return cls(channels=tuple(channels), sample_rate=sample_rate)

    @property
    def n_channels(self) -> int:
        return len(self.channels)

    @property
    def n_samples(self) -> int:
        return len(self.channels[0])

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.n_samples / self.sample_rate
