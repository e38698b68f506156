from __future__ import annotations

import logging
import sys
from enum import Enum
from pathlib import Path

import click
import typer
from rich.console import Console
from rich.markup import escape

from logview.core.config import Config, dump_config, load_config
from logview.core.errors import LogviewError
from logview.core.logging_setup import setup_logging
from logview.core.poll_loop import PollLoop
from logview.core.tail_reader import TailReader

app = typer.Typer(add_completion=False, context_settings={"help_option_names": ["-h", "--help"]})
console = Console()
logger = logging.getLogger(__name__)


class HighlightMode(str, Enum):
    line = "line"
    keyword = "keyword"
    # aliases of keyword
    default = "default"
    level = "level"


def build_config(
    config_path: Path | None = None,
    lines: int | None = None,
    interval: int | None = None,
    mode: HighlightMode | None = None,
    linenumber: bool = False,
) -> Config:
    cfg = Config()
    if config_path is not None:
        cfg = load_config(config_path, base=cfg)
    return cfg.with_overrides(
        tail_line_count=lines,
        poll_interval_ms=interval,
        highlight_whole_line=None if mode is None else mode == HighlightMode.line,
        show_line_number=True if linenumber else None,
    )


def _fail(exc: LogviewError):
    console.print(escape(str(exc)), style="bold red", highlight=False, soft_wrap=True)
    raise typer.Exit(exc.exit_code)


@app.command(epilog="Run with --dump-config to print the effective configuration in config-file format.")
def tail(
    file: Path | None = typer.Argument(None, help="Log file to follow.", show_default=False),
    config: Path | None = typer.Option(None, "--config", "-c", help="Load config from file."),
    lines: int | None = typer.Option(None, "--lines", "-n", help="Lines of last to show (default 20)."),
    mode: HighlightMode | None = typer.Option(None, "--mode", "-m", help="Highlight mode: line/keyword."),
    linenumber: bool = typer.Option(False, "--linenumber", "-l", help="Show line number."),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Interval of detecting new content, in milliseconds (default 10)."
    ),
    show_config: bool = typer.Option(False, "--dump-config", help="Print the effective config and exit."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Diagnostics log level (stderr)."),
    log_file: str | None = typer.Option(None, "--log-file", help="Also write diagnostics to this file."),
):
    """Show the tail of a log file and follow it, highlighting log levels."""
    if file is None and not show_config:
        raise typer.BadParameter("exactly one log file is required", param_hint="FILE")

    setup_logging(log_level, log_file)

    try:
        cfg = build_config(config, lines=lines, interval=interval, mode=mode, linenumber=linenumber)
    except LogviewError as exc:
        logger.error("config rejected: %s", exc)
        _fail(exc)

    if show_config:
        print(dump_config(cfg), end="")
        return

    console.rule("logview")
    loop = PollLoop(TailReader(file, cfg.max_line_length), cfg)
    try:
        loop.run()
    except LogviewError as exc:
        logger.error("tail stopped: %s", exc)
        _fail(exc)
    except KeyboardInterrupt:
        console.print("interrupted", highlight=False)
        raise typer.Exit(1)


def main():
    # Usage errors go to stdout like every other fatal diagnostic.
    try:
        code = app(standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stdout)
        code = exc.exit_code
    except click.exceptions.Abort:
        console.print("Aborted!", highlight=False)
        code = 1
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
