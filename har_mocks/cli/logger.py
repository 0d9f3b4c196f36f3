"""
CLI logger adapter - implements LoggerProtocol for command-line usage.

Pipeline services report progress through LoggerProtocol; this adapter prints
it prefixed with the pipeline stage that produced it, so interleaved output
from `merge` and `extract` in one CI log stays attributable.
"""

from __future__ import annotations

import typer


class CLILogger:
    """
    Logger implementation for CLI (implements LoggerProtocol from protocols).

    Info goes to stdout and only in verbose mode; warnings and errors always
    go to stderr.
    """

    def __init__(self, verbose: bool = False, stage: str | None = None) -> None:
        """
        Initialize CLI logger.

        Args:
            verbose: If True, show info messages. If False, only warnings/errors.
            stage: Pipeline stage shown in front of every message (e.g. 'extract')
        """
        self.verbose = verbose
        self.stage = stage

    def _format(self, level: str, message: str) -> str:
        if self.stage:
            return f'[{level}] {self.stage}: {message}'
        return f'[{level}] {message}'

    async def info(self, message: str) -> None:
        if self.verbose:
            typer.echo(self._format('INFO', message))

    async def warning(self, message: str) -> None:
        typer.secho(self._format('WARNING', message), fg=typer.colors.YELLOW, err=True)

    async def error(self, message: str) -> None:
        typer.secho(self._format('ERROR', message), fg=typer.colors.RED, err=True)
