"""Gateway: whisper.cpp models hosted on HuggingFace — implements ModelRepository port."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

import httpx
from huggingface_hub import hf_hub_url

from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import ModelUnavailableError, OperationCancelledError, TransientIOError
from offline_scribe.l1_entities.model_catalog import MODEL_CATALOG, ModelSize
from offline_scribe.l1_entities.model_descriptor import ModelDescriptor

log = logging.getLogger('scribe.models')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
DEFAULT_CHUNK_SIZE = 8192
DEFAULT_TIMEOUT = 60.0  # seconds, per network operation
PARTIAL_SUFFIX = '.part'


def download_url(file_name: str) -> str:
    """``https://huggingface.co/ggerganov/whisper.cpp/resolve/main/<file_name>``"""
    return hf_hub_url(repo_id=WHISPER_CPP_REPO, filename=file_name)


class _KeyedLocks:
    """One lock per key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[object, threading.Lock] = {}

    def get(self, key: object) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())


class HfModelRepository:
    """Owns ``<root>/Models``. Availability is always read from disk, never cached.

    ``acquire`` and ``remove`` for the same model are serialized by a per-model lock
    so two writers never interleave on one artifact path. Downloads stream into a
    ``.part`` sibling that is renamed onto the artifact path only once complete.
    """

    def __init__(
        self,
        models_dir: Path,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._models_dir = Path(models_dir)
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._transport = transport
        self._locks = _KeyedLocks()
        self._models_dir.mkdir(parents=True, exist_ok=True)

    @property
    def models_dir(self) -> Path:
        return self._models_dir

    def local_path(self, size: ModelSize) -> Path:
        return self._models_dir / MODEL_CATALOG[size].file_name

    def list_all(self) -> list[ModelDescriptor]:
        return [self._describe(size) for size in MODEL_CATALOG]

    def get(self, size: ModelSize) -> ModelDescriptor:
        return self._describe(size)

    def resolve_local_path(self, size: ModelSize) -> str:
        path = self.local_path(size)
        if not _is_present(path):
            raise ModelUnavailableError(
                f'Model {size.value} is not available locally. Download it first.',
                model=size,
            )
        return str(path)

    def acquire(
        self,
        size: ModelSize,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        check_cancelled(cancel_token)
        local_path = self.local_path(size)
        partial_path = _partial_path(local_path)
        url = download_url(MODEL_CATALOG[size].file_name)

        with self._locks.get(size):
            check_cancelled(cancel_token)
            log.info('Starting download of %s from %s', size.value, url)
            try:
                self._stream_to_file(url, partial_path, on_progress, cancel_token)
                _promote(partial_path, local_path)
            except OperationCancelledError:
                log.info('Download of %s cancelled', size.value)
                _delete_partial(partial_path)
                raise
            except BaseException:
                log.error('Failed to download %s', size.value, exc_info=True)
                _delete_partial(partial_path)
                raise
            log.info('Successfully downloaded %s to %s', size.value, local_path)

    def remove(self, size: ModelSize) -> None:
        path = self.local_path(size)
        with self._locks.get(size):
            if path.exists():
                path.unlink()
                log.info('Deleted model %s from %s', size.value, path)
            _delete_partial(_partial_path(path))

    def _describe(self, size: ModelSize) -> ModelDescriptor:
        metadata = MODEL_CATALOG[size]
        path = self.local_path(size)
        available = _is_present(path)
        return ModelDescriptor(
            size=size,
            name=metadata.display_name,
            description=metadata.description,
            size_in_bytes=metadata.estimated_bytes,
            is_available_locally=available,
            local_file_path=str(path) if available else None,
        )

    def _stream_to_file(
        self,
        url: str,
        local_path: Path,
        on_progress: Callable[[float], None] | None,
        cancel_token: CancellationToken | None,
    ) -> None:
        try:
            with (
                httpx.Client(timeout=self._timeout, follow_redirects=True, transport=self._transport) as client,
                client.stream('GET', url) as response,
            ):
                response.raise_for_status()
                total = _content_length(response)
                written = 0
                with local_path.open('wb') as fh:
                    for chunk in response.iter_bytes(self._chunk_size):
                        fh.write(chunk)
                        written += len(chunk)
                        # Content-Length only drives progress, never correctness.
                        if on_progress is not None and total:
                            on_progress(min(written / total, 1.0))
                        check_cancelled(cancel_token)
        except httpx.HTTPError as exc:
            raise TransientIOError(f'Download failed for {url}: {exc}') from exc
        except OSError as exc:
            raise TransientIOError(f'Could not write model file {local_path}: {exc}') from exc


def _is_present(path: Path) -> bool:
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def _partial_path(path: Path) -> Path:
    return path.with_name(path.name + PARTIAL_SUFFIX)


def _promote(partial_path: Path, local_path: Path) -> None:
    try:
        os.replace(partial_path, local_path)
    except OSError as exc:
        raise TransientIOError(f'Could not move model file into place at {local_path}: {exc}') from exc


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get('content-length')
    if raw is None:
        return None
    try:
        total = int(raw)
    except ValueError:
        return None
    return total if total > 0 else None


def _delete_partial(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        log.warning('Failed to delete partial download: %s', path, exc_info=True)
