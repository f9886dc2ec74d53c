"""Input layer - Decoding audio files into AudioSignal values."""

from .loader import AudioLoader

__all__ = ["AudioLoader"]
