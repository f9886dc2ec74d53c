"""Base classes for transcription."""

from abc import ABC, abstractmethod
from typing import List, Optional
import numpy as np

from ..core import NoteEvent, FrameLoopControl


class Transcriber(ABC):
    """Abstract base class for audio transcription."""

    @abstractmethod
    def transcribe(
        self,
        audio: np.ndarray,
        sr: int,
        control: Optional[FrameLoopControl] = None,
    ) -> List[NoteEvent]:
        """
        Transcribe audio to notes.

        Args:
            audio: Audio array (mono)
            sr: Sample rate
            control: Progress / cancellation hooks for the frame loop

        Returns:
            List of detected notes
        """
        pass
