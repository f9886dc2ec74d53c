"""First-order IIR filters used before framing."""

import numpy as np
from scipy.signal import lfilter

from ..core import ConfigurationError


def _rc_dt(sample_rate: int, cutoff: float):
    """RC time constant and sample period for a cutoff frequency."""
    if cutoff <= 0:
        raise ConfigurationError(f"Filter cutoff must be positive, got {cutoff}")
    rc = 1.0 / (2 * np.pi * cutoff)
    dt = 1.0 / sample_rate
    return rc, dt


def high_pass(samples: np.ndarray, sample_rate: int, cutoff: float) -> np.ndarray:
    """
    RC high-pass: y[i] = a * (y[i-1] + x[i] - x[i-1]), with y[0] = x[0].

    Returns a new array; the input is left untouched.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) == 0:
        return samples.copy()
    rc, dt = _rc_dt(sample_rate, cutoff)
    alpha = rc / (rc + dt)
    # Initial state makes the first output equal the first input
    zi = [samples[0] * (1 - alpha)]
    filtered, _ = lfilter([alpha, -alpha], [1.0, -alpha], samples, zi=zi)
    return filtered


def low_pass(samples: np.ndarray, sample_rate: int, cutoff: float) -> np.ndarray:
    """
    RC low-pass: y[i] = y[i-1] + a * (x[i] - y[i-1]), with y[0] = x[0].

    Returns a new array; the input is left untouched.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if len(samples) == 0:
        return samples.copy()
    rc, dt = _rc_dt(sample_rate, cutoff)
    alpha = dt / (rc + dt)
    zi = [samples[0] * (1 - alpha)]
    filtered, _ = lfilter([alpha], [1.0, -(1 - alpha)], samples, zi=zi)
    return filtered
