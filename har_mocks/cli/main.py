#!/usr/bin/env python3
"""
Command-line interface for har-mocks.

Pipeline stages, normally run in this order:

    har-mocks merge      # fold a recording session (<har>.new) into the archive
    har-mocks extract    # write one mock per operation, then rebuild the registry
    har-mocks check      # list operations whose mock is missing or stale
    har-mocks validate   # compare mocks with the live server (read-only)

Standalone REST check:

    har-mocks check-shape --url-fragment api.example.com/v1 --live-url https://...
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import httpx
import typer

from har_mocks.cli.logger import CLILogger
from har_mocks.clients.graphql import GraphQLClient
from har_mocks.clients.rest import RestClient
from har_mocks.config.base import settings
from har_mocks.exceptions import HarMocksError
from har_mocks.schemas.operations import REGISTRY_INDEX_FILENAME, DriftResult, DriftStatus
from har_mocks.services.archive import load_archive
from har_mocks.services.generator import MockGeneratorService
from har_mocks.services.merger import ArchiveMergeService
from har_mocks.services.registry import RegistryBuilder, load_registry
from har_mocks.services.shape_check import ShapeCheckService
from har_mocks.services.validator import DriftValidator, summarize

app = typer.Typer(
    name='har-mocks',
    help='Extract, validate and merge GraphQL mocks recorded in HAR files',
    add_completion=False,
)

_STATUS_COLORS = {
    DriftStatus.OK: typer.colors.GREEN,
    DriftStatus.DRIFT: typer.colors.YELLOW,
    DriftStatus.ERROR: typer.colors.RED,
    DriftStatus.REMOVED: typer.colors.MAGENTA,
}


def _fail(message: str) -> typer.Exit:
    typer.secho(f'Error: {message}', fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')


@app.command()
def extract(
    har: Path | None = typer.Option(None, '--har', help='HAR archive (default: HAR_MOCKS_HAR_PATH)'),
    mocks_dir: Path | None = typer.Option(None, '--mocks-dir', help='Output directory (default: HAR_MOCKS_MOCKS_DIR)'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Generate mock artifacts from the HAR archive and rebuild the registry."""
    _configure_logging(verbose)
    asyncio.run(_extract_async(har or settings.HAR_PATH, mocks_dir or settings.MOCKS_DIR, verbose))


async def _extract_async(har: Path, mocks_dir: Path, verbose: bool) -> None:
    logger = CLILogger(verbose=verbose, stage='extract')
    try:
        archive = load_archive(har)
        written = await MockGeneratorService(logger).generate(archive, mocks_dir)
        registry = await RegistryBuilder(logger).rebuild(mocks_dir)
    except HarMocksError as e:
        raise _fail(str(e)) from e

    typer.secho(f'Extracted {written} operation(s) from {har}', fg=typer.colors.GREEN)
    typer.echo(f'Registry: {len(registry)} operation(s) in {mocks_dir / REGISTRY_INDEX_FILENAME}')
    for name in registry.list_mocks():
        typer.echo(f'  - {name}')


@app.command()
def registry(
    mocks_dir: Path | None = typer.Option(None, '--mocks-dir', help='Mocks directory (default: HAR_MOCKS_MOCKS_DIR)'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Rebuild the registry index from the mock artifacts on disk."""
    _configure_logging(verbose)
    asyncio.run(_registry_async(mocks_dir or settings.MOCKS_DIR, verbose))


async def _registry_async(mocks_dir: Path, verbose: bool) -> None:
    try:
        rebuilt = await RegistryBuilder(CLILogger(verbose=verbose, stage='registry')).rebuild(mocks_dir)
    except HarMocksError as e:
        raise _fail(str(e)) from e

    typer.secho(f'Registry rebuilt with {len(rebuilt)} operation(s)', fg=typer.colors.GREEN)


@app.command()
def check(
    har: Path | None = typer.Option(None, '--har', help='HAR archive (default: HAR_MOCKS_HAR_PATH)'),
    mocks_dir: Path | None = typer.Option(None, '--mocks-dir', help='Mocks directory (default: HAR_MOCKS_MOCKS_DIR)'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Report operations whose mock is missing or whose recorded schema changed."""
    _configure_logging(verbose)
    asyncio.run(_check_async(har or settings.HAR_PATH, mocks_dir or settings.MOCKS_DIR, verbose))


async def _check_async(har: Path, mocks_dir: Path, verbose: bool) -> None:
    service = MockGeneratorService(CLILogger(verbose=verbose, stage='check'))
    try:
        archive = load_archive(har)
        report = await service.check_staleness(archive, mocks_dir)
    except HarMocksError as e:
        raise _fail(str(e)) from e

    if report.up_to_date:
        typer.secho('All operations up to date', fg=typer.colors.GREEN)
        return

    if report.missing:
        typer.secho(f'Missing mock files: {", ".join(report.missing)}', fg=typer.colors.YELLOW)
    if report.changed:
        typer.secho(f'Schema changes detected: {", ".join(report.changed)}', fg=typer.colors.YELLOW)
    typer.echo('Re-record the affected operations, then run: har-mocks extract')
    raise typer.Exit(1)


@app.command()
def validate(
    har: Path | None = typer.Option(None, '--har', help='HAR archive (default: HAR_MOCKS_HAR_PATH)'),
    mocks_dir: Path | None = typer.Option(None, '--mocks-dir', help='Mocks directory (default: HAR_MOCKS_MOCKS_DIR)'),
    endpoint: str | None = typer.Option(None, '--endpoint', help='Live GraphQL endpoint (default: HAR_MOCKS_GRAPHQL_ENDPOINT)'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Compare stored mocks with the live server. Read-only; exits 1 on any drift."""
    _configure_logging(verbose)
    asyncio.run(
        _validate_async(
            har or settings.HAR_PATH,
            mocks_dir or settings.MOCKS_DIR,
            endpoint or settings.GRAPHQL_ENDPOINT,
            verbose,
        )
    )


async def _validate_async(har: Path, mocks_dir: Path, endpoint: str, verbose: bool) -> None:
    logger = CLILogger(verbose=verbose, stage='validate')
    typer.echo(f'HAR file: {har}')
    typer.echo(f'GraphQL endpoint: {endpoint}')

    index_path = mocks_dir / REGISTRY_INDEX_FILENAME
    try:
        archive = load_archive(har)
        mocks = load_registry(index_path)
    except FileNotFoundError as e:
        raise _fail(f'Registry not found: {index_path}. Run: har-mocks extract') from e
    except HarMocksError as e:
        raise _fail(str(e)) from e

    validator = DriftValidator(
        logger,
        call_timeout=settings.LIVE_TIMEOUT_SECONDS,
        pass_timeout=settings.VALIDATION_TIMEOUT_SECONDS,
    )
    async with GraphQLClient(endpoint, timeout=settings.LIVE_TIMEOUT_SECONDS) as client:
        results = await validator.validate(archive, mocks.get_mock, client)

    _print_report(results)


def _print_report(results: list[DriftResult]) -> None:
    for result in results:
        typer.secho(f'{result.status:<8} {result.operation_name}: {result.message}', fg=_STATUS_COLORS[result.status])
        for field in result.added_fields:
            typer.echo(f'           + {field}')
        for field in result.removed_fields:
            typer.echo(f'           - {field}')

    summary = summarize(results)
    typer.echo('')
    typer.echo('VALIDATION SUMMARY')
    typer.echo(f'  OK:      {summary.ok}')
    typer.echo(f'  DRIFT:   {summary.drift}')
    typer.echo(f'  ERROR:   {summary.error}')
    typer.echo(f'  REMOVED: {summary.removed}')

    if not summary.requires_action:
        typer.secho('All mocks are up to date!', fg=typer.colors.GREEN)
        return

    if summary.drift:
        typer.echo('Schema drift detected. Re-record the operations, then run: har-mocks merge && har-mocks extract')
    if summary.error:
        typer.echo('Server errors detected. Check the server is healthy before re-recording mocks.')
    if summary.removed:
        typer.echo('Operations may have been removed. Verify API changes and update tests accordingly.')
    raise typer.Exit(1)


@app.command(name='check-shape')
def check_shape(
    url_fragment: str = typer.Option(..., '--url-fragment', help='Substring identifying the recorded REST exchange'),
    live_url: str = typer.Option(..., '--live-url', help='URL to fetch live for comparison'),
    har: Path | None = typer.Option(None, '--har', help='HAR archive (default: HAR_MOCKS_HAR_PATH)'),
    report_only: bool = typer.Option(False, '--report-only', help='Exit 0 even when the shape changed'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Compare the JSON shape of a recorded REST response with the live endpoint."""
    _configure_logging(verbose)
    asyncio.run(_check_shape_async(har or settings.HAR_PATH, url_fragment, live_url, report_only, verbose))


async def _check_shape_async(har: Path, url_fragment: str, live_url: str, report_only: bool, verbose: bool) -> None:
    service = ShapeCheckService(CLILogger(verbose=verbose, stage='check-shape'))
    try:
        archive = load_archive(har)
        async with RestClient(timeout=settings.LIVE_TIMEOUT_SECONDS) as client:
            result = await service.check(archive, url_fragment, live_url, client)
    except HarMocksError as e:
        raise _fail(str(e)) from e
    except httpx.HTTPError as e:
        raise _fail(f'Live request failed: {str(e) or type(e).__name__}') from e

    if not result.changed:
        typer.secho('JSON structure unchanged. No HAR update needed.', fg=typer.colors.GREEN)
        return

    typer.secho('JSON structure changed - HAR update recommended.', fg=typer.colors.YELLOW)
    for path in result.added:
        typer.echo(f'  + {path}')
    for path in result.removed:
        typer.echo(f'  - {path}')
    if not report_only:
        raise typer.Exit(1)


@app.command()
def merge(
    har: Path | None = typer.Option(None, '--har', help='Stored HAR archive (default: HAR_MOCKS_HAR_PATH)'),
    new: Path | None = typer.Option(None, '--new', help='Recorded session to merge (default: <har>.new)'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Verbose output'),
) -> None:
    """Merge a newly recorded session into the stored archive."""
    _configure_logging(verbose)
    existing = har or settings.HAR_PATH
    new_path = new or existing.with_name(existing.name + '.new')
    asyncio.run(_merge_async(existing, new_path, verbose))


async def _merge_async(existing: Path, new_path: Path, verbose: bool) -> None:
    try:
        result = await ArchiveMergeService(CLILogger(verbose=verbose, stage='merge')).merge_files(existing, new_path)
    except HarMocksError as e:
        raise _fail(str(e)) from e

    if result.status == 'no_new_archive':
        typer.echo('No new operations captured (no recording session found)')
        return
    if result.status == 'no_operations':
        typer.echo('Recording session contained no GraphQL operations; archive unchanged')
        return

    typer.secho(f'HAR file updated: {existing} ({len(result.archive.entries)} entries)', fg=typer.colors.GREEN)
    for name in result.added:
        typer.echo(f'  + {name} (new)')
    for name in result.updated:
        typer.echo(f'  ~ {name} (updated)')
    typer.echo('Next: har-mocks extract')


def main() -> None:
    app()


if __name__ == '__main__':
    main()
