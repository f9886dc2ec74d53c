"""Frame decomposition, channel selection and window functions."""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np
import librosa
from scipy.signal import get_window as scipy_get_window

from ..core import AudioSignal, InputError, ConfigurationError
from ..core.constants import WINDOW_TYPES

logger = logging.getLogger(__name__)

# scipy's name for each supported window
_SCIPY_WINDOWS = {
    "rectangular": "boxcar",
    "hann": "hann",
    "hamming": "hamming",
    "blackman": "blackman",
}


@dataclass(frozen=True)
class Frame:
    """A windowed slice of samples."""

    samples: np.ndarray
    offset: int  # Index of the first sample in the source buffer
    sample_rate: int

    @property
    def timestamp(self) -> float:
        """Start time in seconds."""
        return self.offset / self.sample_rate


def get_window(window_type: str, length: int) -> np.ndarray:
    """
    Symmetric window weights.

    Hann, Hamming and Blackman use N-1 in the denominator (symmetric form),
    rectangular is all ones.

    Args:
        window_type: rectangular/hann/hamming/blackman
        length: Number of samples

    Returns:
        Array of weights
    """
    if window_type not in WINDOW_TYPES:
        raise ConfigurationError(
            f"Unsupported window_type: {window_type!r}. Supported: {WINDOW_TYPES}"
        )
    return scipy_get_window(_SCIPY_WINDOWS[window_type], length, fftbins=False)


def apply_window(samples: np.ndarray, window_type: str) -> np.ndarray:
    """Multiply samples (1-D, or 2-D frames along the last axis) by a window."""
    return samples * get_window(window_type, samples.shape[-1])


def rms(samples: np.ndarray) -> float:
    """Root mean square amplitude, 0 for an empty buffer."""
    if len(samples) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples))))


def select_channel(signal: AudioSignal, selection: str) -> np.ndarray:
    """
    Reduce a signal to the single buffer the analysis runs on.

    'both' currently behaves exactly like 'left'.

    Args:
        signal: Decoded audio
        selection: left/right/mix/both

    Returns:
        1-D float array (read-only view for left/right/both)
    """
    if selection in ("left", "both"):
        return signal.channels[0]
    if selection == "right":
        if signal.n_channels < 2:
            raise InputError("channel_selection='right' requires a stereo signal")
        return signal.channels[1]
    if selection == "mix":
        if signal.n_channels < 2:
            return signal.channels[0]
        return (signal.channels[0] + signal.channels[1]) / 2.0
    raise ConfigurationError(f"Unsupported channel_selection: {selection!r}")


def frame_count(n_samples: int, frame_size: int, hop_size: int) -> int:
    """Number of whole frames; a trailing partial frame is dropped."""
    if n_samples < frame_size:
        return 0
    return 1 + (n_samples - frame_size) // hop_size


class FrameSource:
    """Restartable sequence of overlapping windowed frames.

    Iterating twice yields the same frames; nothing is consumed.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        frame_size: int,
        hop_size: int,
        window_type: str = "hann",
    ):
        """
        Initialize FrameSource.

        Args:
            samples: Mono sample buffer
            sample_rate: Sample rate in Hz
            frame_size: Samples per frame
            hop_size: Samples between frame starts
            window_type: Window applied to each frame
        """
        if hop_size <= 0:
            raise ConfigurationError(f"hop_size must be positive, got {hop_size}")
        self.samples = np.asarray(samples, dtype=np.float64)
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.hop_size = hop_size
        self.window_type = window_type
        self.window = get_window(window_type, frame_size)

    def __len__(self) -> int:
        return frame_count(len(self.samples), self.frame_size, self.hop_size)

    def __iter__(self) -> Iterator[Frame]:
        raw = self.raw_frames()
        for index in range(len(raw)):
            yield Frame(
                samples=raw[index] * self.window,
                offset=index * self.hop_size,
                sample_rate=self.sample_rate,
            )

    def raw_frames(self) -> np.ndarray:
        """Unwindowed frames as a (n_frames, frame_size) strided view."""
        if len(self) == 0:
            return np.empty((0, self.frame_size))
        return librosa.util.frame(
            np.ascontiguousarray(self.samples),
            frame_length=self.frame_size,
            hop_length=self.hop_size,
            axis=0,
        )

    def as_matrix(self) -> np.ndarray:
        """Windowed frames as a (n_frames, frame_size) array."""
        return self.raw_frames() * self.window

    def timestamps(self) -> np.ndarray:
        """Start time of every frame in seconds."""
        return np.arange(len(self)) * self.hop_size / self.sample_rate


def prepare_buffer(
    signal: AudioSignal,
    channel_selection: str,
    frame_size: int,
    max_duration: Optional[float] = None,
) -> np.ndarray:
    """
    Select a channel, apply the duration cap and check the buffer is analyzable.

    Raises:
        InputError: Empty signal, non-finite samples, or frame_size longer than the buffer
    """
    if signal.n_samples == 0:
        raise InputError("Signal is empty")

    samples = select_channel(signal, channel_selection)

    if max_duration is not None:
        max_samples = int(signal.sample_rate * max_duration)
        if max_samples < len(samples):
            logger.debug("Truncating buffer from %d to %d samples", len(samples), max_samples)
            samples = samples[:max_samples]

    if not np.all(np.isfinite(samples)):
        raise InputError("Signal contains NaN or infinite samples")
    if frame_size > len(samples):
        raise InputError(
            f"Frame size {frame_size} is larger than the signal ({len(samples)} samples)"
        )
    return samples
