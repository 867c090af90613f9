"""
yrfs_metrics.main
------------
AUTHOR: carter-vin

CLI entrypoint

Key contract:
- `yrfs-metrics oneshot --path P` collects one snapshot, exit 1 on failure
- `yrfs-metrics run --path P` keeps collecting until Ctrl+C
- `yrfs-metrics version` prints version & runtime env
"""

from __future__ import annotations

import platform
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from yrfs_metrics import __version__
from yrfs_metrics.config import MetricsConfig
from yrfs_metrics.emit import EmitTargets, emit_outcome
from yrfs_metrics.logging import EventLogger
from yrfs_metrics.metrics import MetricsYRFS

app = typer.Typer(
    add_completion=False,
    help="yrfs-metrics: usage metrics for YRFS project-quota volumes",
)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    Root command behavior.

    No subcommand -> print a short hint and exit 0
    """
    if ctx.invoked_subcommand is None:
        typer.echo("No command provided. Try: yrfs-metrics --help")


@app.command()
def version() -> None:
    """
    Print tool version & runtime env
    """
    typer.echo(f"yrfs-metrics v{__version__}")
    typer.echo(f"python={sys.version.split()[0]}")
    typer.echo(f"os={platform.system()} {platform.release()}")
    typer.echo(f"machine={platform.machine()}")
    typer.echo(f"utc_now={datetime.now(timezone.utc).isoformat()}")


def _build_provider(
    path: str,
    quota_path: Optional[str],
    logger: EventLogger,
    *,
    quota_info_glob: Optional[str],
    nice: Optional[int],
    find_binary: Optional[str],
) -> MetricsYRFS:
    if not path:
        raise typer.BadParameter("--path must not be empty")

    try:
        config = MetricsConfig.from_env().with_overrides(
            quota_info_glob=quota_info_glob,
            quota_nice=nice,
            find_binary=find_binary,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    # Quota table is usually keyed by the mount path itself
    return MetricsYRFS(quota_path or path, path, config=config, logger=logger)


def _collect_once(provider: MetricsYRFS, targets: EmitTargets, logger: EventLogger) -> bool:
    """
    Collect and spool one outcome; False when collection failed

    Failed outcomes are spooled as well, with their partial snapshot.
    """
    outcome = provider.get_metrics()

    def _on_spool_error(e: Exception, spool: Path) -> None:
        logger.emit(
            "spool_write_failed",
            spool_path=str(spool),
            error_type=type(e).__name__,
            message=str(e),
        )

    rotation_info = emit_outcome(
        outcome,
        targets,
        extra={"path": provider.path, "quota_path": provider.quota_path},
        on_spool_error=_on_spool_error,
    )
    if rotation_info is not None:
        logger.emit("spool_rotated", spool_path=str(targets.spool_path), **rotation_info)
    return outcome.ok


PATH_OPTION = typer.Option(..., "--path", help="Volume mount path (statvfs and find).")
QUOTA_PATH_OPTION = typer.Option(None, "--quota-path", help="Key in the project quota table; defaults to --path.")
SPOOL_OPTION = typer.Option("spool/volume_metrics.jsonl", help="Path to JSONL spool file for snapshots.")
SPOOL_MAX_OPTION = typer.Option(None, help="Rotate the spool once it reaches this many bytes.")
NO_STDOUT_OPTION = typer.Option(False, "--no-stdout", help="Disable printing the snapshot JSON to stdout.")
GLOB_OPTION = typer.Option(None, help="Quota info file glob (env: YRFS_QUOTA_INFO_GLOB).")
NICE_OPTION = typer.Option(None, help="nice level for quota reads (env: YRFS_QUOTA_NICE).")
FIND_OPTION = typer.Option(None, help="find binary (env: YRFS_FIND_BINARY).")


@app.command("oneshot")
def oneshot(
    path: str = PATH_OPTION,
    quota_path: Optional[str] = QUOTA_PATH_OPTION,
    spool_path: str = SPOOL_OPTION,
    spool_max_bytes: Optional[int] = SPOOL_MAX_OPTION,
    no_stdout: bool = NO_STDOUT_OPTION,
    quota_info_glob: Optional[str] = GLOB_OPTION,
    nice: Optional[int] = NICE_OPTION,
    find_binary: Optional[str] = FIND_OPTION,
) -> None:
    """
    Collect a single snapshot and exit

    Failure semantics:
    - probe failure -> probe_failed event, partial record spooled, exit code 1
    - spool failure -> spool_write_failed event, exception propagates
    """
    logger = EventLogger(tool_version=__version__, mode="oneshot")

    # bad options raise before any event, so start/shutdown always pair up
    provider = _build_provider(
        path,
        quota_path,
        logger,
        quota_info_glob=quota_info_glob,
        nice=nice,
        find_binary=find_binary,
    )
    targets = EmitTargets(
        spool_path=Path(spool_path),
        emit_stdout=not no_stdout,
        spool_max_bytes=spool_max_bytes,
    )

    logger.emit("metrics_start", path=path, spool_path=spool_path)
    try:
        if not _collect_once(provider, targets, logger):
            raise typer.Exit(code=1)
    finally:
        logger.emit("metrics_shutdown")


@app.command("run")
def run(
    path: str = PATH_OPTION,
    quota_path: Optional[str] = QUOTA_PATH_OPTION,
    interval: int = typer.Option(60, help="Seconds between snapshots.", min=1),
    spool_path: str = SPOOL_OPTION,
    spool_max_bytes: Optional[int] = SPOOL_MAX_OPTION,
    no_stdout: bool = NO_STDOUT_OPTION,
    quota_info_glob: Optional[str] = GLOB_OPTION,
    nice: Optional[int] = NICE_OPTION,
    find_binary: Optional[str] = FIND_OPTION,
) -> None:
    """
    Collect snapshots at a fixed interval.
    """
    logger = EventLogger(tool_version=__version__, mode="run")

    provider = _build_provider(
        path,
        quota_path,
        logger,
        quota_info_glob=quota_info_glob,
        nice=nice,
        find_binary=find_binary,
    )
    targets = EmitTargets(
        spool_path=Path(spool_path),
        emit_stdout=not no_stdout,
        spool_max_bytes=spool_max_bytes,
    )

    logger.emit("metrics_start", path=path, spool_path=spool_path, interval_s=interval)
    try:
        while True:
            start = time.monotonic()
            try:
                _collect_once(provider, targets, logger)
            except OSError:
                # spool_write_failed already emitted; keep running
                pass

            elapsed = time.monotonic() - start
            time.sleep(max(0.0, interval - elapsed))

    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        pass

    finally:
        logger.emit("metrics_shutdown")


if __name__ == "__main__":
    app()
