"""Autocorrelation pitch estimation."""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import librosa

from ..core import ConfigurationError
from .frames import rms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PitchEstimate:
    """Result of one pitch estimation.

    frequency is None when the frame has no usable periodicity.
    """

    frequency: Optional[float]
    correlation: float = 0.0
    zero_lag_correlation: float = 0.0

    @property
    def voiced(self) -> bool:
        return self.frequency is not None

    @property
    def confidence(self) -> float:
        """Local confidence, min(1, r(bestLag) / r(0))."""
        if self.frequency is None or self.zero_lag_correlation <= 0:
            return 0.0
        return min(1.0, self.correlation / self.zero_lag_correlation)


@dataclass(frozen=True)
class ContourPoint:
    time: float
    frequency: float
    confidence: float


def autocorrelate(samples: np.ndarray, max_lag: int) -> np.ndarray:
    """
    Linear autocorrelation r(lag) = sum x[i] * x[i + lag] for lag in [0, max_lag].

    Computed through an FFT; lags past the end of the buffer are zero.
    """
    size = max_lag + 1
    r = librosa.autocorrelate(np.asarray(samples, dtype=np.float64), max_size=size)
    if len(r) < size:
        r = np.pad(r, (0, size - len(r)))
    return r


class PitchEstimator:
    """Fundamental frequency from the lag of maximum self-similarity."""

    def __init__(
        self,
        sample_rate: int,
        frequency_min: float = 50.0,
        frequency_max: float = 2000.0,
        confidence_threshold: float = 0.7,
    ):
        """
        Initialize PitchEstimator.

        Args:
            sample_rate: Sample rate in Hz
            frequency_min: Lowest detectable pitch (sets the longest lag)
            frequency_max: Highest detectable pitch (sets the shortest lag)
            confidence_threshold: Minimum r(bestLag) / r(0) to accept a pitch
        """
        if frequency_min <= 0 or frequency_min >= frequency_max:
            raise ConfigurationError(
                f"Invalid pitch range [{frequency_min}, {frequency_max}]"
            )
        self.sample_rate = sample_rate
        self.frequency_min = frequency_min
        self.frequency_max = frequency_max
        self.confidence_threshold = confidence_threshold
        self.min_lag = int(np.floor(sample_rate / frequency_max))
        self.max_lag = int(np.floor(sample_rate / frequency_min))

    def estimate(self, samples: np.ndarray) -> PitchEstimate:
        """
        Estimate pitch of a (windowed) frame.

        Searches lag in [min_lag, max_lag) for the largest positive r(lag).
        Rejects the frame when no positive peak exists or the peak is below
        r(0) * confidence_threshold.

        Returns:
            PitchEstimate, with frequency None on rejection
        """
        r = autocorrelate(samples, self.max_lag)
        zero_lag = float(r[0])

        search = r[self.min_lag:self.max_lag]
        if len(search) == 0:
            return PitchEstimate(None, 0.0, zero_lag)

        best_index = int(np.argmax(search))
        best_correlation = float(search[best_index])
        best_lag = self.min_lag + best_index

        if best_correlation <= 0 or best_lag == 0:
            return PitchEstimate(None, 0.0, zero_lag)
        if best_correlation < zero_lag * self.confidence_threshold:
            return PitchEstimate(None, best_correlation, zero_lag)

        return PitchEstimate(
            frequency=self.sample_rate / best_lag,
            correlation=best_correlation,
            zero_lag_correlation=zero_lag,
        )

    def estimate_periodic(
        self,
        samples: np.ndarray,
        rms_floor: float = 0.01,
        periodicity: float = 0.5,
    ) -> PitchEstimate:
        """
        Estimate pitch with the length-normalized autocorrelation.

        Each lag is divided by the number of overlapping samples, the search
        covers [min_lag, max_lag] inclusive, and the peak must exceed
        periodicity * rms^2. Used for histogram and speech analysis where
        frames are not windowed.

        Args:
            samples: Frame samples
            rms_floor: Frames quieter than this are unvoiced
            periodicity: Required peak relative to the frame's mean power

        Returns:
            PitchEstimate, with frequency None on rejection
        """
        n = len(samples)
        level = rms(samples)
        if level < rms_floor:
            return PitchEstimate(None)

        max_lag = min(self.max_lag, n - 1)
        if max_lag < self.min_lag:
            return PitchEstimate(None)

        r = autocorrelate(samples, max_lag)
        lags = np.arange(self.min_lag, max_lag + 1)
        normalized = r[self.min_lag:max_lag + 1] / (n - lags)

        best_index = int(np.argmax(normalized))
        best_correlation = float(normalized[best_index])
        best_lag = int(lags[best_index])

        if best_correlation <= 0 or best_lag == 0:
            return PitchEstimate(None)
        if best_correlation < periodicity * level * level:
            return PitchEstimate(None, best_correlation, level * level)

        return PitchEstimate(
            frequency=self.sample_rate / best_lag,
            correlation=best_correlation,
            zero_lag_correlation=level * level,
        )


def pitch_contour(
    samples: np.ndarray,
    sample_rate: int,
    points: int = 200,
) -> List[ContourPoint]:
    """
    Coarse pitch contour for visualization.

    Splits the buffer into `points` blocks and runs an unwindowed
    autocorrelation (50-1000 Hz) on each block louder than 0.01 RMS.
    Unvoiced blocks are reported with frequency 0.

    Returns:
        One ContourPoint per block
    """
    block_size = len(samples) // points
    if block_size == 0:
        return []

    min_period = sample_rate // 1000
    max_period = sample_rate // 50
    contour = []

    for i in range(points):
        start = i * block_size
        segment = samples[start:start + block_size]
        time = start / sample_rate

        best_offset = -1
        max_correlation = 0.0
        if rms(segment) > 0.01:
            upper = min(max_period, len(segment))
            if upper > min_period:
                r = autocorrelate(segment, upper - 1)[min_period:upper]
                index = int(np.argmax(r))
                if r[index] > 0:
                    max_correlation = float(r[index])
                    best_offset = min_period + index

        if best_offset > 0 and max_correlation > 0.1:
            contour.append(ContourPoint(time, sample_rate / best_offset, max_correlation))
        else:
            contour.append(ContourPoint(time, 0.0, 0.0))

    return contour
