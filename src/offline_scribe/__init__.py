"""offline-scribe -- local media transcription with whisper.cpp."""

__version__ = '0.1.0'
