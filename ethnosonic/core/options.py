"""Analysis options - every tunable recognized by the analysis entry points."""

import math
import numbers
import re
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Union

from .constants import (
    CHANNEL_SELECTIONS,
    DEFAULT_FFT_SIZE,
    DEFAULT_HOP_SIZE,
    DEFAULT_TEMPO,
    DEFAULT_TIME_SIGNATURE,
    MIDI_MAX,
    MIDI_MIN,
    PIANO_MAX,
    PIANO_MIN,
    QUANTIZATION_GRIDS,
    REFERENCE_FREQUENCY,
    SUPPORTED_FFT_SIZES,
    TUNING_SYSTEMS,
    WINDOW_TYPES,
)
from .errors import ConfigurationError

_INTEGER_FIELDS = (
    "fft_size",
    "hop_size",
    "midi_min_note",
    "midi_max_note",
    "velocity_min",
    "velocity_max",
    "scale_root",
)
_REAL_FIELDS = (
    "threshold",
    "min_note_duration",
    "smoothing",
    "frequency_min",
    "frequency_max",
    "confidence_threshold",
    "pitch_smoothing",
    "noise_gate_threshold",
    "high_pass_frequency",
    "low_pass_frequency",
    "target_tempo",
    "reference_frequency",
    "microtone_sensitivity",
    "max_processing_duration",
)
# None is a meaningful value for these
_OPTIONAL_FIELDS = ("hop_size", "max_processing_duration")


@dataclass(frozen=True)
class AnalysisOptions:
    """Configuration for one analysis call.

    Detection:
        threshold: Minimum frame RMS for a frame to carry a note (default: 0.05)
        min_note_duration: Shortest note that is emitted, in seconds (default: 0.1)
        smoothing: Pitch smoothing factor, accepted but not consumed (default: 0.8)

    Frequency:
        frequency_min / frequency_max: Pitch search range in Hz (default: 50-2000)
        confidence_threshold: Minimum r(lag)/r(0) for a pitch (default: 0.7)
        pitch_smoothing, enable_octave_correction: accepted but not consumed

    Transform:
        fft_size: Frame length, one of 1024/2048/4096/8192 (default: 2048)
        hop_size: Samples between frames, None means fft_size // 4 (default: 512)
        window_type: rectangular/hann/hamming/blackman (default: hann)
        channel_selection: left/right/mix/both (default: mix)

    Filtering:
        enable_noise_gate, noise_gate_threshold: Close notes on quiet frames
        enable_high_pass_filter, high_pass_frequency: First-order IIR high-pass
        enable_low_pass_filter, low_pass_frequency: First-order IIR low-pass

    MIDI:
        midi_min_note / midi_max_note: Accepted MIDI range (default: 21-108)
        quantization: none/quarter/eighth/sixteenth/thirty-second
        enable_velocity_scaling, velocity_min, velocity_max: Velocity clamp

    Tempo:
        enable_tempo_detection: Estimate BPM from note onsets
        target_tempo: Tempo used by the quantization grid (default: 120)
        enable_time_signature_detection, target_time_signature: passed through

    Tuning:
        tuning_system: equal/just/pythagorean/meantone/quarter_tone
        reference_frequency: A4 in Hz (default: 440)
        enable_scale_constrain, scale_type, scale_root: Reject off-scale notes
        enable_microtone_detection, microtone_sensitivity: accepted but not consumed

    Performance:
        max_processing_duration: Seconds of audio to analyze (None = all)
        enable_fast_mode: Double the hop size
    """

    # Detection
    threshold: float = 0.05
    min_note_duration: float = 0.1
    smoothing: float = 0.8

    # Frequency
    frequency_min: float = 50.0
    frequency_max: float = 2000.0
    confidence_threshold: float = 0.7
    pitch_smoothing: float = 0.5
    enable_octave_correction: bool = True

    # Transform
    fft_size: int = DEFAULT_FFT_SIZE
    hop_size: Optional[int] = DEFAULT_HOP_SIZE
    window_type: str = "hann"
    channel_selection: str = "mix"

    # Filtering
    enable_noise_gate: bool = False
    noise_gate_threshold: float = 0.02
    enable_high_pass_filter: bool = False
    high_pass_frequency: float = 80.0
    enable_low_pass_filter: bool = False
    low_pass_frequency: float = 2000.0

    # MIDI
    midi_min_note: int = PIANO_MIN
    midi_max_note: int = PIANO_MAX
    quantization: str = "none"
    enable_velocity_scaling: bool = False
    velocity_min: int = MIDI_MIN
    velocity_max: int = MIDI_MAX

    # Tempo
    enable_tempo_detection: bool = False
    target_tempo: float = DEFAULT_TEMPO
    enable_time_signature_detection: bool = False
    target_time_signature: Optional[str] = DEFAULT_TIME_SIGNATURE

    # Tuning
    tuning_system: str = "equal"
    reference_frequency: float = REFERENCE_FREQUENCY
    enable_scale_constrain: bool = False
    scale_type: str = "chromatic"
    scale_root: int = 60
    enable_microtone_detection: bool = False
    microtone_sensitivity: float = 0.3

    # Performance
    max_processing_duration: Optional[float] = None
    enable_fast_mode: bool = False

    @property
    def effective_hop_size(self) -> int:
        """Hop size after defaulting and fast mode."""
        hop = self.hop_size if self.hop_size else self.fft_size // 4
        if self.enable_fast_mode:
            hop *= 2
        return int(hop)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AnalysisOptions":
        """
        Build options from a mapping of camelCase or snake_case keys.

        Args:
            values: e.g. {"fftSize": 4096, "minNoteDuration": 0.2}

        Raises:
            ConfigurationError: If a key is not a recognized option
        """
        return cls(**_parse_mapping(values))

    @classmethod
    def coerce(
        cls,
        options: Union["AnalysisOptions", Mapping[str, Any], None],
        default: Optional["AnalysisOptions"] = None,
    ) -> "AnalysisOptions":
        """Normalize whatever a caller passed into a validated AnalysisOptions."""
        if options is None:
            resolved = default if default is not None else cls()
        elif isinstance(options, AnalysisOptions):
            resolved = options
        elif isinstance(options, Mapping):
            # Mapping keys override the mode preset, not the global defaults
            base = default if default is not None else cls()
            resolved = replace(base, **_parse_mapping(options))
        else:
            raise ConfigurationError(
                f"Options must be AnalysisOptions or a mapping, got {type(options).__name__}"
            )
        resolved.validate()
        return resolved

    # ------------------------------------------------------------------
    # Mode presets
    # ------------------------------------------------------------------

    @classmethod
    def for_transcription(cls) -> "AnalysisOptions":
        return cls()

    @classmethod
    def for_soundscape(cls) -> "AnalysisOptions":
        return cls(fft_size=2048, hop_size=1024, window_type="hann", channel_selection="left")

    @classmethod
    def for_microtonal(cls) -> "AnalysisOptions":
        return cls(
            fft_size=4096,
            hop_size=2048,
            window_type="rectangular",
            channel_selection="left",
            frequency_min=80.0,
            frequency_max=2000.0,
        )

    @classmethod
    def for_linguistics(cls) -> "AnalysisOptions":
        return cls(
            fft_size=2048,
            hop_size=512,
            window_type="rectangular",
            channel_selection="left",
            frequency_min=75.0,
            frequency_max=500.0,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check every option once, raising ConfigurationError on the first problem."""
        self._check_types()
        if self.fft_size not in SUPPORTED_FFT_SIZES:
            raise ConfigurationError(
                f"Unsupported fft_size: {self.fft_size}. Supported: {SUPPORTED_FFT_SIZES}"
            )
        if self.hop_size is not None and self.hop_size <= 0:
            raise ConfigurationError(f"hop_size must be positive, got {self.hop_size}")
        if self.window_type not in WINDOW_TYPES:
            raise ConfigurationError(
                f"Unsupported window_type: {self.window_type!r}. Supported: {WINDOW_TYPES}"
            )
        if self.channel_selection not in CHANNEL_SELECTIONS:
            raise ConfigurationError(
                f"Unsupported channel_selection: {self.channel_selection!r}. "
                f"Supported: {CHANNEL_SELECTIONS}"
            )
        if self.tuning_system not in TUNING_SYSTEMS:
            raise ConfigurationError(
                f"Unsupported tuning_system: {self.tuning_system!r}. Supported: {TUNING_SYSTEMS}"
            )
        if self.quantization not in QUANTIZATION_GRIDS:
            raise ConfigurationError(
                f"Unsupported quantization: {self.quantization!r}. "
                f"Supported: {tuple(QUANTIZATION_GRIDS)}"
            )

        if self.frequency_min <= 0:
            raise ConfigurationError(f"frequency_min must be positive, got {self.frequency_min}")
        if self.frequency_min >= self.frequency_max:
            raise ConfigurationError(
                f"frequency_min ({self.frequency_min}) must be below "
                f"frequency_max ({self.frequency_max})"
            )
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if self.threshold < 0:
            raise ConfigurationError(f"threshold must be non-negative, got {self.threshold}")
        if self.min_note_duration < 0:
            raise ConfigurationError(
                f"min_note_duration must be non-negative, got {self.min_note_duration}"
            )

        if not MIDI_MIN <= self.midi_min_note <= self.midi_max_note <= MIDI_MAX:
            raise ConfigurationError(
                f"Invalid MIDI range [{self.midi_min_note}, {self.midi_max_note}]"
            )
        if not MIDI_MIN <= self.velocity_min <= self.velocity_max <= MIDI_MAX:
            raise ConfigurationError(
                f"Invalid velocity range [{self.velocity_min}, {self.velocity_max}]"
            )
        if not MIDI_MIN <= self.scale_root <= MIDI_MAX:
            raise ConfigurationError(f"scale_root must be a MIDI note, got {self.scale_root}")

        if self.target_tempo <= 0:
            raise ConfigurationError(f"target_tempo must be positive, got {self.target_tempo}")
        if self.reference_frequency <= 0:
            raise ConfigurationError(
                f"reference_frequency must be positive, got {self.reference_frequency}"
            )
        if self.enable_high_pass_filter and self.high_pass_frequency <= 0:
            raise ConfigurationError("high_pass_frequency must be positive")
        if self.enable_low_pass_filter and self.low_pass_frequency <= 0:
            raise ConfigurationError("low_pass_frequency must be positive")
        if self.max_processing_duration is not None and self.max_processing_duration <= 0:
            raise ConfigurationError(
                f"max_processing_duration must be positive, got {self.max_processing_duration}"
            )

    def _check_types(self) -> None:
        for name in _INTEGER_FIELDS:
            value = getattr(self, name)
            if value is None and name in _OPTIONAL_FIELDS:
                continue
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(
                    f"{name} must be an integer, got {type(value).__name__} {value!r}"
                )
        for name in _REAL_FIELDS:
            value = getattr(self, name)
            if value is None and name in _OPTIONAL_FIELDS:
                continue
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(
                    f"{name} must be a number, got {type(value).__name__} {value!r}"
                )
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")


def _to_snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _parse_mapping(values: Mapping[str, Any]) -> dict:
    known = {f.name for f in fields(AnalysisOptions)}
    kwargs = {}
    for key, value in values.items():
        name = _to_snake_case(key)
        if name not in known:
            raise ConfigurationError(f"Unknown analysis option: {key!r}")
        kwargs[name] = value
    return kwargs
