"""
yrfs_metrics.emit

AUTHOR: carter-vin

OUTPUT:
- JSON Lines spool, one line per collection attempt
- failed attempts are spooled too: partial snapshot + error_type/error
- size-based rotation: volume_metrics.jsonl -> volume_metrics.1.jsonl -> ...

Consumers filter on "ok" to tell full snapshots from partial ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from yrfs_metrics.metrics import MetricsOutcome
from yrfs_metrics.model import dumps_compact


DEFAULT_SPOOL_FILE = Path("spool") / "volume_metrics.jsonl"


@dataclass(frozen=True)
class EmitTargets:
    spool_path: Path = DEFAULT_SPOOL_FILE
    emit_stdout: bool = True
    spool_max_bytes: int | None = None
    spool_rotate_count: int = 3


def outcome_record(outcome: MetricsOutcome, **extra: Any) -> dict[str, Any]:
    """
    Flatten an outcome into one spool record

    Fields a failed probe never filled stay null; error is null on success.
    """
    error = outcome.error
    return {
        **outcome.metrics.to_dict(),
        **extra,
        "ok": outcome.ok,
        "error_type": type(error).__name__ if error is not None else None,
        "error": str(error) if error is not None else None,
    }


def rotation_paths(spool_path: Path, count: int) -> list[Path]:
    """
    [name.1.jsonl, ..., name.<count>.jsonl], newest first
    """
    return [
        spool_path.with_name(f"{spool_path.stem}.{index}{spool_path.suffix}")
        for index in range(1, count + 1)
    ]


def maybe_rotate_spool(targets: EmitTargets) -> dict[str, Any] | None:
    """
    Shift rotated files up by one and move the live spool to .1

    Only when the live spool is at or over spool_max_bytes; returns
    rotation info for the spool_rotated event, else None.
    """
    if not targets.spool_max_bytes or targets.spool_rotate_count < 1:
        return None

    try:
        prior_size = targets.spool_path.stat().st_size
    except FileNotFoundError:
        return None
    if prior_size < targets.spool_max_bytes:
        return None

    paths = rotation_paths(targets.spool_path, targets.spool_rotate_count)
    paths[-1].unlink(missing_ok=True)
    for src, dst in zip(reversed(paths[:-1]), reversed(paths[1:])):
        if src.exists():
            src.replace(dst)
    targets.spool_path.replace(paths[0])

    return {"rotated_to": str(paths[0]), "prior_size_bytes": prior_size}


def emit_outcome(
    outcome: MetricsOutcome,
    targets: EmitTargets,
    *,
    extra: Optional[dict[str, Any]] = None,
    on_spool_error: Optional[Callable[[Exception, Path], None]] = None,
) -> dict[str, Any] | None:
    """
    Write one outcome record to stdout (optional) and the spool

    Spool IO errors go to on_spool_error, then propagate.
    """
    line = dumps_compact(outcome_record(outcome, **(extra or {})))

    if targets.emit_stdout:
        print(line)

    try:
        rotation_info = maybe_rotate_spool(targets)
        targets.spool_path.parent.mkdir(parents=True, exist_ok=True)
        with targets.spool_path.open(mode="a", encoding="utf-8", newline="\n") as f:
            f.write(line + "\n")
            f.flush()
    except OSError as e:
        if on_spool_error is not None:
            on_spool_error(e, targets.spool_path)
        raise

    return rotation_info
