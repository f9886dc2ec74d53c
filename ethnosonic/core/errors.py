"""Exception types raised by the analysis engine."""


class AnalysisError(Exception):
    """Base class for every error raised by ethnosonic."""


class InputError(AnalysisError, ValueError):
    """The supplied signal cannot be analyzed (empty, too short, bad sample rate)."""


class ConfigurationError(AnalysisError, ValueError):
    """An analysis option is malformed or unsupported."""


class AnalysisCancelled(AnalysisError):
    """The caller cancelled the analysis; partial results were discarded."""
