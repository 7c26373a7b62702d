"""CLI entry point for offline-scribe."""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import TypeVar

import click

from offline_scribe import __version__
from offline_scribe.l1_entities.cancellation import CancellationToken
from offline_scribe.l1_entities.errors import OperationCancelledError, ScribeError
from offline_scribe.l1_entities.language import LanguageOption, all_languages, find_language
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcript import format_wall_time
from offline_scribe.l1_entities.transcription import TranscriptionOptions
from offline_scribe.l2_use_cases.ports.config_loader import ConfigLoader

T = TypeVar('T')

_MODEL_CHOICE = click.Choice([m.value for m in ModelSize])
EXIT_CANCELLED = 130


def _build_container(config_path: str | None, debug_log: bool):
    from offline_scribe.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from offline_scribe.l4_frameworks_and_drivers.config import (  # noqa: PLC0415 -- deferred: not needed for --help
        build_app_config,
    )
    from offline_scribe.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: pywhispercpp not loaded on --help
        DependencyContainer,
    )

    try:
        loader: ConfigLoader = YamlConfigLoader()
        raw = loader.load_raw(config_path)
        config = build_app_config(raw)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if debug_log:
        from offline_scribe.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: only with --debug-log
            setup_file_logging,
        )

        setup_file_logging(config.root_dir)

    return DependencyContainer(config)


def _container(ctx: click.Context):
    if 'container' not in ctx.obj:
        ctx.obj['container'] = _build_container(ctx.obj['config_path'], ctx.obj['debug_log'])
    return ctx.obj['container']


def _guarded(work: Callable[[], T]) -> T:
    """Run *work*, turning pipeline errors into exit codes instead of tracebacks."""
    try:
        return work()
    except OperationCancelledError:
        click.echo('Cancelled.', err=True)
        sys.exit(EXIT_CANCELLED)
    except ScribeError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)


def _validate_language(ctx, param, value: str | None) -> LanguageOption | None:
    if value is None:
        return None
    option = find_language(value)
    if option is None:
        raise click.BadParameter(f'unsupported language code {value!r} (see `offline-scribe languages`)')
    return option


def _emit_result(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + '\n', encoding='utf-8')
        click.echo(f'Saved: {output}', err=True)
    else:
        click.echo(text)


@click.group()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to YAML config file.',
)
@click.option('--debug-log', is_flag=True, help='Write a debug log into the storage directory.')
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path, debug_log):
    """offline-scribe -- transcribe media locally with whisper.cpp, no cloud involved."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['debug_log'] = debug_log


@cli.group()
def models():
    """Manage locally stored whisper models."""


@models.command('list')
@click.pass_context
def models_list(ctx):
    """Show every known model and whether it is downloaded."""
    container = _container(ctx)
    click.echo(f'{"MODEL":<10} {"NAME":<10} {"SIZE":>10}  {"LOCAL":<6} DESCRIPTION')
    for d in container.model_repository.list_all():
        local = 'yes' if d.is_available_locally else 'no'
        click.echo(f'{d.size.value:<10} {d.name:<10} {d.formatted_size:>10}  {local:<6} {d.description}')


@models.command('download')
@click.argument('name', type=_MODEL_CHOICE)
@click.pass_context
def models_download(ctx, name):
    """Download a model from HuggingFace (Ctrl-C cancels and removes the partial file)."""
    from offline_scribe.l4_frameworks_and_drivers.transcription_runner import (  # noqa: PLC0415 -- deferred: runner only needed for this command
        download_model,
    )
    from offline_scribe.l4_frameworks_and_drivers.workers.cancellable import (  # noqa: PLC0415 -- deferred: worker pool only for long-running commands
        run_cancellable,
    )

    container = _container(ctx)
    token = CancellationToken()
    model = ModelSize(name)
    _guarded(lambda: run_cancellable(lambda: download_model(container.model_repository, model, token), token))


@models.command('remove')
@click.argument('name', type=_MODEL_CHOICE)
@click.pass_context
def models_remove(ctx, name):
    """Delete a downloaded model (no-op if absent)."""
    container = _container(ctx)
    model = ModelSize(name)
    container.model_repository.remove(model)
    click.echo(f'Removed {model.value}.', err=True)


def _transcription_options(func):
    func = click.option('-o', '--output', default=None, type=click.Path(dir_okay=False), help='Write text here.')(func)
    func = click.option('--segments', is_flag=True, help='Prefix each line with its start time.')(func)
    func = click.option(
        '-l',
        '--language',
        default=None,
        callback=_validate_language,
        help="ISO language code, or 'auto' to detect.",
    )(func)
    func = click.option('-m', '--model', default=None, type=_MODEL_CHOICE, help='Model to use.')(func)
    return func


def _require_model(container, model: str | None) -> ModelSize:
    model_size = ModelSize(model) if model else container.config.transcription.model
    if not container.transcribe_media.check_model_ready(model_size):
        click.echo(
            f'Error: model {model_size.value} is not downloaded. Run `offline-scribe models download {model_size.value}`.',
            err=True,
        )
        sys.exit(1)
    return model_size


def _run_pipeline(
    container,
    media_path: str,
    model_size: ModelSize,
    language: LanguageOption | None,
    segments: bool,
):
    from offline_scribe.l4_frameworks_and_drivers.transcription_runner import (  # noqa: PLC0415 -- deferred: runner only needed for transcription
        transcribe_file,
    )
    from offline_scribe.l4_frameworks_and_drivers.workers.cancellable import (  # noqa: PLC0415 -- deferred: worker pool only for long-running commands
        run_cancellable,
    )

    tc = container.config.transcription
    include_segments = segments or tc.include_segments
    # an explicit -l auto overrides a configured language
    code = tc.language if language is None else language.whisper_language_code
    options = TranscriptionOptions(language=code or None, include_segments=include_segments)

    use_case = container.transcribe_media
    token = CancellationToken()
    result = _guarded(
        lambda: run_cancellable(
            lambda: transcribe_file(use_case, container.media_normalizer, media_path, model_size, options, token),
            token,
        )
    )
    click.echo(f'Done in {result.processing_duration.total_seconds():.1f}s.', err=True)
    return result, include_segments


@cli.command()
@click.argument('media', type=click.Path(exists=True, dir_okay=False))
@_transcription_options
@click.pass_context
def transcribe(ctx, media, model, language, segments, output):
    """Transcribe an audio or video file."""
    from offline_scribe.l4_frameworks_and_drivers.transcription_runner import (  # noqa: PLC0415 -- deferred: runner only needed for transcription
        render_output,
    )

    container = _container(ctx)
    model_size = _require_model(container, model)
    result, include_segments = _run_pipeline(container, media, model_size, language, segments)
    _emit_result(render_output(result, include_segments), output)


@cli.command()
@_transcription_options
@click.pass_context
def record(ctx, model, language, segments, output):
    """Record from the microphone until Enter is pressed, then transcribe."""
    from offline_scribe.l4_frameworks_and_drivers.transcription_runner import (  # noqa: PLC0415 -- deferred: runner only needed for transcription
        render_output,
    )

    container = _container(ctx)
    model_size = _require_model(container, model)
    recorder = container.build_recorder()

    def _on_elapsed(elapsed: timedelta) -> None:
        click.echo(f'\rRecording {format_wall_time(elapsed.total_seconds())}', err=True, nl=False)

    recorder.start(on_elapsed=_on_elapsed)
    click.echo('Recording... press Enter to stop.', err=True)
    try:
        sys.stdin.readline()
    except KeyboardInterrupt:
        recorder.cancel()
        click.echo('\nRecording cancelled.', err=True)
        sys.exit(EXIT_CANCELLED)

    recording_path = recorder.stop()
    click.echo('', err=True)
    try:
        result, include_segments = _run_pipeline(container, recording_path, model_size, language, segments)
    finally:
        Path(recording_path).unlink(missing_ok=True)
    _emit_result(render_output(result, include_segments), output)


@cli.command()
def languages():
    """List supported language codes."""
    for option in all_languages():
        click.echo(f'{option.code or "auto":<5} {option.display_name}')
