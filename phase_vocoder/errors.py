"""Exceptions raised by the phase vocoder."""


class VocoderError(Exception):
    """Base error for the phase vocoder package."""
    pass


class ChannelCountError(VocoderError, ValueError):
    """Raised when the number of input/output slices differs from the channel count."""
    pass


class ChannelLengthError(VocoderError, ValueError):
    """Raised when the input slices of one call have different lengths."""
    pass


class ConfigLoadError(VocoderError):
    """Raised when configuration loading fails."""
    pass


class InvalidConfigError(VocoderError, ValueError):
    """Raised when a configuration holds values the engine cannot run with."""
    pass
