"""CLI entrypoint for rxec — typer app with `run` and `template` commands."""

import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
import typer

from rxec.config.domain.config import RunConfig
from rxec.config.infrastructure.file_loader import FileConfigLoader
from rxec.config.infrastructure.observer import StructlogConfigObserver
from rxec.config.infrastructure.template import write_template
from rxec.core.errors import RxecError
from rxec.execution.application.scheduler import Scheduler
from rxec.execution.domain.observer import ExecutionObserver
from rxec.execution.domain.queue import TaskQueue
from rxec.execution.domain.summary import ExecutionSummary
from rxec.execution.infrastructure.composite_observer import CompositeExecutionObserver
from rxec.execution.infrastructure.file_sink import (
    FileResultSink,
    create_output_directory,
)
from rxec.execution.infrastructure.observer import StructlogExecutionObserver
from rxec.execution.infrastructure.progress_observer import ProgressExecutionObserver
from rxec.execution.infrastructure.subprocess_harness import SubprocessHarness

app = typer.Typer(
    add_completion=False,
    help="Run one command against a list of argument variants, repeatedly and concurrently.",
)

_DEFAULT_CONFIG = Path("rxec.toml")


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _split_variants(raw: list[str] | None) -> list[str] | None:
    """Flatten repeated/comma-separated ``-a`` values: ``-a x,y -a z`` → x, y, z."""
    if raw is None:
        return None
    return [part for value in raw for part in value.split(",")]


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_WHITE = "\033[97m"


def _rule(width: int = 60, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _print_summary(config: RunConfig, summary: ExecutionSummary) -> None:
    status_color = _GREEN if summary.all_succeeded else _RED
    typer.echo("")
    _rule(color=_CYAN)
    typer.echo(f"{_CYAN}{_BOLD}  rxec  ·  {config.command}{_RESET}")
    _rule(color=_CYAN)

    rows: list[tuple[str, str]] = [
        ("Output", str(summary.output_dir)),
        ("Total runs", str(summary.total_runs)),
        ("Succeeded", f"{status_color}{summary.succeeded}{_RESET}"),
        ("Exited non-zero", str(summary.exited_nonzero)),
        ("Timed out", str(summary.timed_out)),
        ("Failed to start", str(summary.spawn_failed)),
        ("Output lost", str(summary.capture_failed)),
        ("Store failures", str(summary.store_failures)),
        ("Elapsed", _format_elapsed(elapsed_seconds=summary.elapsed_seconds)),
    ]
    label_w = max(len(label) for label, _ in rows)
    for label, value in rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {_WHITE}{value}{_RESET}")
    _rule(color=_CYAN)


def _build_observer(log_format: str) -> ExecutionObserver:
    observers: list[ExecutionObserver] = [StructlogExecutionObserver()]
    if log_format != "json":
        observers.append(ProgressExecutionObserver(disabled=not sys.stderr.isatty()))
    return CompositeExecutionObserver(observers=observers)


def execute(config: RunConfig, observer: ExecutionObserver) -> ExecutionSummary | None:
    """Run everything *config* describes. Returns None when there is nothing to run.

    The output directory is only created once there is at least one run.

    Raises:
        OutputDirectoryError: if the output directory cannot be created.
    """
    queue = TaskQueue.build(
        command=config.command,
        base_args=config.base_args,
        variants=config.args,
        repeat_count=config.number,
    )
    if queue.is_empty():
        return None

    output_dir = create_output_directory(
        base=Path.cwd(),
        prefix=config.output_prefix,
        now=datetime.now(),
    )
    policy = config.policy
    scheduler = Scheduler(
        queue=queue,
        policy=policy,
        harness=SubprocessHarness(
            cwd=config.cwd,
            timeout_seconds=config.timeout,
            post_run_delay=policy.pacing_delay,
        ),
        sink=FileResultSink(output_dir=output_dir, observer=observer),
        observer=observer,
        command=config.command,
        output_dir=output_dir,
    )
    return asyncio.run(scheduler.run())


@app.command(context_settings={"allow_interspersed_args": False})
def run(
    cmd: list[str] | None = typer.Argument(
        None,
        help="The command to run followed by arguments shared by every run.",
    ),
    args: list[str] | None = typer.Option(
        None,
        "--args",
        "-a",
        help="Comma-separated argument variants; each forms one run. Default: one run with no extra argument.",
    ),
    cwd: Path | None = typer.Option(
        None, "--cwd", "-c", help="Working directory for the command."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", help="Per-run timeout in seconds."
    ),
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds to wait between runs. Only applies without --parallel.",
    ),
    parallel: int | None = typer.Option(
        None,
        "--parallel",
        "-p",
        help="Runs in flight at once; 0 runs everything at once. Default: serial.",
    ),
    number: int | None = typer.Option(
        None, "--number", "-n", help="How many times to run each variant."
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output directory prefix. Default: the command name.",
    ),
    config_path: Path = typer.Option(
        _DEFAULT_CONFIG,
        "--config",
        help="Config file (.toml, .yaml or .yml). Command-line options take precedence.",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Run CMD once per argument variant and repetition, saving each run's stdout."""
    _configure_structlog(log_format=log_format)

    try:
        overrides: dict[str, Any] = {
            "cmd": cmd or None,
            "args": _split_variants(args),
            "cwd": cwd,
            "timeout": timeout,
            "interval": interval,
            "parallel": parallel,
            "number": number,
            "output": output,
        }
        loader = FileConfigLoader(observer=StructlogConfigObserver())
        config = loader.load(path=config_path, overrides=overrides)

        summary = execute(config=config, observer=_build_observer(log_format))
    except KeyboardInterrupt:
        typer.echo("Run interrupted.")
        sys.exit(1)
    except RxecError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)

    if summary is None:
        typer.echo("Nothing to run: no argument variants configured.")
        return

    _print_summary(config=config, summary=summary)
    if not summary.all_succeeded:
        raise typer.Exit(code=1)


@app.command()
def template(
    path: Path = typer.Argument(
        _DEFAULT_CONFIG,
        help="Where to write the template; the extension picks TOML or YAML.",
    ),
) -> None:
    """Write a commented config template."""
    _configure_structlog(log_format="console")
    try:
        write_template(path=path, observer=StructlogConfigObserver())
    except RxecError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except OSError as exc:
        typer.echo(f"Failed to write template {path}: {exc}")
        sys.exit(1)
    typer.echo(f"Template written to {path}")


if __name__ == "__main__":
    app()
