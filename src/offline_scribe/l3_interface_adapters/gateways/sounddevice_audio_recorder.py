"""Gateway: sounddevice microphone recorder — implements AudioRecorder port."""

from __future__ import annotations

import logging
import queue
import threading
import uuid
import wave
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import sounddevice as sd

from offline_scribe.l1_entities.recording import AudioRecordingConfig, AudioRecordingSession

log = logging.getLogger('scribe.recorder')

_TICK_SECONDS = 0.1
_BLOCK_SECONDS = 0.1


class SounddeviceAudioRecorder:
    """Wraps sounddevice.InputStream and writes int16 PCM straight to a WAV file.

    The PortAudio callback only enqueues; a writer thread drains the queue into the
    file and an optional ticker thread reports elapsed time every 100 ms.
    """

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = Path(output_dir)
        self._stream: sd.InputStream | None = None
        self._writer: wave.Wave_write | None = None
        self._session: AudioRecordingSession | None = None
        self._queue: queue.Queue[np.ndarray] = queue.Queue()
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    @property
    def session(self) -> AudioRecordingSession | None:
        return self._session

    def start(
        self,
        config: AudioRecordingConfig | None = None,
        on_elapsed: Callable[[timedelta], None] | None = None,
    ) -> AudioRecordingSession:
        if self.is_recording:
            raise RuntimeError('Already recording')

        config = config or AudioRecordingConfig()
        self._output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self._output_dir / f'recording_{uuid.uuid4().hex}.wav'

        writer = wave.open(str(output_path), 'wb')  # noqa: SIM115 -- closed in _teardown
        writer.setnchannels(config.channels)
        writer.setsampwidth(config.bits_per_sample // 8)
        writer.setframerate(config.sample_rate)

        def _callback(indata, frames, time_info, status):
            if status:
                log.debug('Input stream status: %s', status)
            self._queue.put(indata.copy())

        try:
            stream = sd.InputStream(
                samplerate=config.sample_rate,
                channels=config.channels,
                dtype='int16',
                blocksize=int(config.sample_rate * _BLOCK_SECONDS),
                callback=_callback,
            )
            stream.start()
        except Exception:
            writer.close()
            output_path.unlink(missing_ok=True)
            raise

        self._writer = writer
        self._stream = stream
        self._stop_event.clear()
        self._session = AudioRecordingSession(
            session_id=uuid.uuid4().hex,
            started_at=datetime.now(),
            output_file_path=str(output_path),
        )

        self._threads = [threading.Thread(target=self._drain, name='scribe-recorder-writer', daemon=True)]
        if on_elapsed is not None:
            self._threads.append(
                threading.Thread(target=self._tick, args=(on_elapsed,), name='scribe-recorder-ticker', daemon=True)
            )
        for thread in self._threads:
            thread.start()

        log.info('Recording started → %s', output_path)
        return self._session

    def stop(self) -> str:
        if not self.is_recording or self._session is None:
            raise RuntimeError('Not recording')

        self._teardown()
        self._session = self._session.stop()
        path = self._session.output_file_path
        log.info('Recording stopped after %.1fs → %s', self._session.duration.total_seconds(), path)
        return path

    def cancel(self) -> None:
        if not self.is_recording:
            return

        self._teardown()
        path = self._session.output_file_path if self._session is not None else None
        self._session = None
        if path is not None:
            try:
                Path(path).unlink(missing_ok=True)
            except OSError:
                log.warning('Failed to delete cancelled recording: %s', path, exc_info=True)
        log.info('Recording cancelled')

    def _teardown(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        self._stop_event.set()
        for thread in self._threads:
            thread.join()
        self._threads = []
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def _drain(self) -> None:
        while not self._stop_event.is_set() or not self._queue.empty():
            try:
                chunk = self._queue.get(timeout=_TICK_SECONDS)
            except queue.Empty:
                continue
            self._writer.writeframes(chunk.tobytes())

    def _tick(self, on_elapsed: Callable[[timedelta], None]) -> None:
        while not self._stop_event.wait(_TICK_SECONDS):
            if self._session is not None:
                on_elapsed(self._session.duration)
