"""Gateway: ffmpeg subprocess normalizer — implements MediaNormalizer port."""

from __future__ import annotations

import enum
import logging
import re
import shutil
import subprocess  # noqa: S404 -- intentional: shells out to ffmpeg with a fixed arg list, not shell=True
import sys
import tempfile
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import imageio_ffmpeg

from offline_scribe.l1_entities.audio_constants import CHANNELS, SAMPLE_RATE
from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import (
    NoAudioStreamError,
    OperationCancelledError,
    SourceNotFoundError,
    TransientIOError,
)

log = logging.getLogger('scribe.media')

FFMPEG_EXECUTABLE = 'ffmpeg.exe' if sys.platform == 'win32' else 'ffmpeg'

_PROBE_TIMEOUT = 30  # seconds
_TERMINATE_GRACE = 5  # seconds
_STDERR_TAIL = 2000  # characters

_DURATION_RE = re.compile(r'Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)')
_AUDIO_STREAM_RE = re.compile(r'^\s*Stream #\d+:\d+.*?:\s*Audio:', re.MULTILINE)


class InitState(enum.Enum):
    NOT_INITIALIZED = 'not_initialized'
    INITIALIZING = 'initializing'
    READY = 'ready'


@dataclass(frozen=True)
class MediaProbe:
    duration: float | None  # seconds; None when ffmpeg reports N/A
    has_audio: bool


def parse_probe_output(stderr: str) -> MediaProbe:
    """Extract duration and audio-stream presence from ``ffmpeg -i`` banner output."""
    duration = None
    match = _DURATION_RE.search(stderr)
    if match:
        hours, minutes, seconds = match.groups()
        duration = int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    return MediaProbe(duration=duration, has_audio=bool(_AUDIO_STREAM_RE.search(stderr)))


def parse_progress_line(line: str, total_seconds: float | None) -> float | None:
    """Map one ``-progress`` key=value line to a completion ratio, or None."""
    key, sep, value = line.strip().partition('=')
    if not sep:
        return None
    if key == 'progress' and value == 'end':
        return 1.0
    if not total_seconds or total_seconds <= 0:
        return None
    # out_time_ms is microseconds too (long-standing ffmpeg misnomer).
    if key in ('out_time_us', 'out_time_ms'):
        try:
            processed = int(value) / 1_000_000
        except ValueError:
            return None
        return min(max(processed / total_seconds, 0.0), 1.0)
    return None


class FfmpegMediaNormalizer:
    """Converts any ffmpeg-decodable media into a pcm_s16le WAV under ``temp_dir``.

    The ffmpeg binary is resolved once by ``initialize()``: ``<ffmpeg_dir>/ffmpeg``,
    then ``ffmpeg`` on PATH, then the build shipped with imageio-ffmpeg (copied into
    ``ffmpeg_dir``). Concurrent callers wait on the same in-flight initialization.
    """

    def __init__(self, ffmpeg_dir: Path, temp_dir: Path) -> None:
        self._ffmpeg_dir = Path(ffmpeg_dir)
        self._temp_dir = Path(temp_dir)
        self._ffmpeg_dir.mkdir(parents=True, exist_ok=True)
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        self._init_lock = threading.Lock()
        self._state = InitState.NOT_INITIALIZED
        self._ffmpeg: str | None = None

    @property
    def state(self) -> InitState:
        return self._state

    @property
    def ffmpeg_path(self) -> str | None:
        return self._ffmpeg

    def initialize(
        self,
        on_progress: Callable[[str], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        if self._state is InitState.READY:
            return
        with self._init_lock:
            if self._state is InitState.READY:
                return
            check_cancelled(cancel_token)
            self._state = InitState.INITIALIZING
            try:
                self._ffmpeg = self._locate_or_provision(on_progress)
            except BaseException:
                self._state = InitState.NOT_INITIALIZED
                raise
            self._state = InitState.READY
            log.info('Using ffmpeg at %s', self._ffmpeg)

    def extract_audio(
        self,
        source_path: str,
        target_sample_rate: int = SAMPLE_RATE,
        target_channels: int = CHANNELS,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        source_path = str(source_path)
        if not Path(source_path).exists():
            raise SourceNotFoundError(f'Source media file not found: {source_path}', path=source_path)

        self.initialize(cancel_token=cancel_token)

        output_path = self._temp_dir / f'{uuid.uuid4().hex}.wav'
        log.info(
            'Extracting audio from %s to %s (%dHz, %dch)',
            source_path,
            output_path,
            target_sample_rate,
            target_channels,
        )

        try:
            check_cancelled(cancel_token)
            probe = self._probe(source_path)
            if not probe.has_audio:
                raise NoAudioStreamError(f'No audio streams found in the media file: {source_path}', path=source_path)
            self._convert(
                source_path,
                output_path,
                target_sample_rate,
                target_channels,
                probe.duration,
                on_progress,
                cancel_token,
            )
        except OperationCancelledError:
            log.info('Audio extraction cancelled: %s', source_path)
            _discard(output_path)
            raise
        except BaseException:
            log.error('Failed to extract audio from %s', source_path, exc_info=True)
            _discard(output_path)
            raise

        log.info('Audio extraction completed: %s', output_path)
        return str(output_path)

    def _locate_or_provision(self, on_progress: Callable[[str], None] | None) -> str:
        bundled = self._ffmpeg_dir / FFMPEG_EXECUTABLE
        if bundled.exists():
            return str(bundled)

        on_path = shutil.which('ffmpeg')
        if on_path is not None:
            return on_path

        log.info('ffmpeg not found. Provisioning into %s', self._ffmpeg_dir)
        if on_progress is not None:
            on_progress('Provisioning ffmpeg...')
        try:
            shutil.copy2(imageio_ffmpeg.get_ffmpeg_exe(), bundled)
        except (RuntimeError, OSError) as exc:
            _discard(bundled)
            raise TransientIOError(f'Could not provision ffmpeg into {self._ffmpeg_dir}: {exc}') from exc
        if on_progress is not None:
            on_progress('ffmpeg ready')
        return str(bundled)

    def _probe(self, source_path: str) -> MediaProbe:
        # ffmpeg exits non-zero without an output file; only the banner matters here.
        cmd = [self._require_ffmpeg(), '-hide_banner', '-nostdin', '-i', source_path]
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=_PROBE_TIMEOUT)  # noqa: S603
        except subprocess.TimeoutExpired as exc:
            raise TransientIOError(f'ffmpeg timed out after {_PROBE_TIMEOUT}s probing: {source_path}') from exc
        except OSError as exc:
            raise TransientIOError(f'Failed to launch ffmpeg: {exc}') from exc
        probe = parse_probe_output(result.stderr.decode('utf-8', errors='replace'))
        log.debug('Probed %s: duration=%s has_audio=%s', source_path, probe.duration, probe.has_audio)
        return probe

    def _convert(
        self,
        source_path: str,
        output_path: Path,
        sample_rate: int,
        channels: int,
        total_seconds: float | None,
        on_progress: Callable[[float], None] | None,
        cancel_token: CancellationToken | None,
    ) -> None:
        cmd = [
            self._require_ffmpeg(),
            '-hide_banner',
            '-nostdin',
            '-y',
            '-i',
            source_path,
            '-vn',
            '-ar',
            str(sample_rate),
            '-ac',
            str(channels),
            '-c:a',
            'pcm_s16le',
            '-progress',
            'pipe:1',
            '-nostats',
            '-loglevel',
            'error',
            str(output_path),
        ]

        with tempfile.TemporaryFile() as stderr_buf:
            try:
                proc = subprocess.Popen(  # noqa: S603
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_buf,
                    text=True,
                )
            except OSError as exc:
                raise TransientIOError(f'Failed to launch ffmpeg: {exc}') from exc

            try:
                for line in proc.stdout:
                    if cancel_token is not None and cancel_token.is_cancelled:
                        _terminate(proc)
                        raise OperationCancelledError('Audio extraction was cancelled')
                    ratio = parse_progress_line(line, total_seconds)
                    if ratio is not None and on_progress is not None:
                        on_progress(ratio)
                returncode = proc.wait()
            finally:
                if proc.poll() is None:
                    _terminate(proc)
                proc.stdout.close()

            if returncode != 0:
                stderr_buf.seek(0)
                stderr = stderr_buf.read().decode('utf-8', errors='replace').strip()
                raise TransientIOError(
                    f'ffmpeg exited with code {returncode} for: {source_path}\n{stderr[-_STDERR_TAIL:]}'
                )

    def _require_ffmpeg(self) -> str:
        if self._ffmpeg is None:
            raise RuntimeError('Normalizer not initialized. Call initialize() first.')
        return self._ffmpeg


def _terminate(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=_TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        log.warning('Failed to delete partial output: %s', path, exc_info=True)
