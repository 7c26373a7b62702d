"""Normalized audio format shared by the normalizer, engine and recorder."""

SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_WIDTH = 2  # bytes per sample, pcm_s16le
