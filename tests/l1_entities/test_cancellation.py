"""Tests for the cancellation token and error taxonomy."""

from __future__ import annotations

import threading

import pytest

from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import (
    AudioNotFoundError,
    EngineFailureError,
    MediaNotFoundError,
    ModelUnavailableError,
    NoAudioStreamError,
    NotFoundError,
    OperationCancelledError,
    ScribeError,
    SourceNotFoundError,
    TransientIOError,
)
from offline_scribe.l1_entities.model_catalog import ModelSize


class TestCancellationToken:
    def test_starts_uncancelled(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.raise_if_cancelled()

    def test_cancel_is_sticky(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.is_cancelled
        with pytest.raises(OperationCancelledError):
            token.raise_if_cancelled()

    def test_visible_across_threads(self):
        token = CancellationToken()
        t = threading.Thread(target=token.cancel)
        t.start()
        t.join()
        assert token.is_cancelled

    def test_check_cancelled_none_never_raises(self):
        check_cancelled(None)

    def test_check_cancelled_raises_when_set(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            check_cancelled(token)


class TestErrors:
    @pytest.mark.parametrize(
        'cls',
        [
            MediaNotFoundError,
            SourceNotFoundError,
            AudioNotFoundError,
            ModelUnavailableError,
            NoAudioStreamError,
            OperationCancelledError,
            TransientIOError,
            EngineFailureError,
        ],
    )
    def test_all_derive_from_scribe_error(self, cls):
        assert issubclass(cls, ScribeError)

    def test_not_found_variants_carry_path(self):
        for cls in (MediaNotFoundError, SourceNotFoundError, AudioNotFoundError):
            err = cls('missing', path='/x.mp4')
            assert isinstance(err, NotFoundError)
            assert err.path == '/x.mp4'
            assert str(err) == 'missing'

    def test_model_unavailable_carries_model(self):
        err = ModelUnavailableError('nope', model=ModelSize.SMALL)
        assert err.model is ModelSize.SMALL
