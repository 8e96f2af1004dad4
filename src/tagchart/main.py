"""Process entrypoint: runs the CLI and maps failures onto exit codes."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    SUCCESS = 0
    ANALYSIS_ERROR = 1  # also: cycles found by ``tagchart cycles``
    CONFIG_ERROR = 2
    INPUT_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run ``tagchart`` and return its exit status; never raises."""

    try:
        from tagchart.cli import run_cli

        status: object = run_cli(argv)
    except SystemExit as exc:
        status = exc.code
    except BaseException as exc:  # noqa: BLE001 - process boundary
        code = _classify(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"error: {str(exc).strip() or type(exc).__name__}", file=sys.stderr)
        return int(code)
    return _as_exit_status(status)


def _as_exit_status(status: object) -> int:
    if status is None:
        return int(ExitCode.SUCCESS)
    if isinstance(status, int):
        try:
            return int(ExitCode(status))
        except ValueError:
            return int(ExitCode.INTERNAL_ERROR)
    message = str(status).strip()
    if message:
        print(message, file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _classify(exc: BaseException) -> ExitCode:
    from tagchart.config import ConfigLoadError, ConfigValidationError
    from tagchart.errors import AnalysisError
    from tagchart.io.records import RecordsLoadError

    routes: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
        ((ConfigLoadError, ConfigValidationError), ExitCode.CONFIG_ERROR),
        ((RecordsLoadError, FileNotFoundError, PermissionError), ExitCode.INPUT_ERROR),
        ((AnalysisError,), ExitCode.ANALYSIS_ERROR),
    )
    for link in _causes(exc):
        for kinds, code in routes:
            if isinstance(link, kinds):
                return code
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` then its explicit or implicit causes, stopping on a loop."""

    visited: set[int] = set()
    link: BaseException | None = exc
    while link is not None and id(link) not in visited:
        visited.add(id(link))
        yield link
        if link.__cause__ is not None:
            link = link.__cause__
        elif not link.__suppress_context__:
            link = link.__context__
        else:
            link = None


__all__ = ["ExitCode", "cli_entrypoint"]
