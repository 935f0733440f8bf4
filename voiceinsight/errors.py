"""Exceptions raised by the voice insight engine."""


class VoiceInsightError(Exception):
    """Base class for engine errors."""


class DecodeError(VoiceInsightError):
    """Input could not be decoded into audio samples."""


class DeviceUnavailableError(VoiceInsightError):
    """A live input device could not be acquired."""


class InsufficientDataError(VoiceInsightError):
    """Buffer is shorter than one analysis frame.

    Analyzers do not raise this on their own; they return empty series and
    the aggregator and scorer fall back to neutral defaults.
    """
