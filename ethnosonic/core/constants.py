"""Global constants for ethnosonic."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio processing defaults
DEFAULT_FFT_SIZE = 2048
DEFAULT_HOP_SIZE = 512
SUPPORTED_FFT_SIZES = (1024, 2048, 4096, 8192)
WINDOW_TYPES = ("rectangular", "hann", "hamming", "blackman")
CHANNEL_SELECTIONS = ("left", "right", "mix", "both")

# Musical defaults
DEFAULT_TEMPO = 120.0
DEFAULT_TIME_SIGNATURE = "4/4"
REFERENCE_FREQUENCY = 440.0
TUNING_SYSTEMS = ("equal", "just", "pythagorean", "meantone", "quarter_tone")

# Grid subdivisions per beat
QUANTIZATION_GRIDS = {
    "none": 0,
    "quarter": 1,
    "eighth": 2,
    "sixteenth": 4,
    "thirty-second": 8,
}

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
PIANO_MIN = 21  # A0
PIANO_MAX = 108  # C8

# Returned as transcription confidence when no frame was accepted
DEFAULT_CONFIDENCE = 0.7

# Frames processed between cooperative yields
YIELD_EVERY_FRAMES = 256
