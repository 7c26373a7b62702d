"""Domain error types."""

from __future__ import annotations


class ScribeError(Exception):
    """Base class for every error raised by the transcription pipeline."""


class NotFoundError(ScribeError):
    """Raised when a required input file does not exist."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MediaNotFoundError(NotFoundError):
    """Raised when the media file handed to the pipeline is missing."""


class SourceNotFoundError(NotFoundError):
    """Raised when the normalizer's source media is missing."""


class AudioNotFoundError(NotFoundError):
    """Raised when the recognition engine's audio input is missing."""


class ModelUnavailableError(ScribeError):
    """Raised when a whisper model is not downloaded (or is zero-length) on local storage."""

    def __init__(self, message: str, model: object | None = None) -> None:
        super().__init__(message)
        self.model = model


class NoAudioStreamError(ScribeError):
    """Raised when a media file contains no decodable audio track."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class OperationCancelledError(ScribeError):
    """Raised when a cooperative cancellation request is observed."""


class TransientIOError(ScribeError):
    """Raised on network or filesystem failure during download or conversion."""


class EngineFailureError(ScribeError):
    """Raised when the inference engine fails to load a model or decode audio."""
