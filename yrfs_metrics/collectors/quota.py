"""
yrfs_metrics.collectors.quota
AUTHOR: carter-vin

Project quota usage reader

The YRFS quota pseudo-file has one line per project path:
    <path> <magnitude> <unit> ...
Magnitude and unit are read with two separate commands (fields 2 and 3).

Design goals:
- Parsing isolated from process spawning (QuotaSource is swappable)
- Exact result: float only as an intermediate, rounded to an integer string
- Fail whole call on any step; never return a partial value
"""

from __future__ import annotations

import math
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol

from yrfs_metrics.config import DEFAULT_QUOTA_INFO_GLOB, DEFAULT_QUOTA_NICE
from yrfs_metrics.errors import QuotaReadError
from yrfs_metrics.quantity import BINARY_SI, Quantity

MAGNITUDE_FIELD = 2
UNIT_FIELD = 3

UNIT_SCALE = {
    "KiB": 1024,
    "MiB": 1024**2,
    "GiB": 1024**3,
    "TiB": 1024**4,
}

# key is the first field; exact match so /mnt/pv-1 never picks up /mnt/pv-10
CMD_TEMPLATE = "nice -n {nice} cat {glob} | awk -v p={path} '$1 == p {{print ${field}}}'"


class QuotaSource(Protocol):
    def read_magnitude(self, path: str) -> str: ...

    def read_unit(self, path: str) -> str: ...


@dataclass(frozen=True)
class QuotaSample:
    """
    Parsed quota value
    - magnitude: non-negative number in `unit`
    - unit: KiB/MiB/GiB/TiB, anything else means bytes
    """

    magnitude: float
    unit: Optional[str] = None

    def __post_init__(self) -> None:
        if self.magnitude < 0:
            raise ValueError(f"quota magnitude must be non-negative, got {self.magnitude}")

    def to_bytes(self) -> float:
        return self.magnitude * UNIT_SCALE.get(self.unit or "", 1)


class ProcQuotaSource:
    """
    Reads /proc/fs/yrfs/*/project_quota_info through a shell pipeline
    """

    def __init__(self, *, quota_info_glob: str = DEFAULT_QUOTA_INFO_GLOB, nice: int = DEFAULT_QUOTA_NICE) -> None:
        self.quota_info_glob = quota_info_glob
        self.nice = nice

    def command(self, path: str, field: int) -> str:
        # glob stays unquoted so the shell expands it
        return CMD_TEMPLATE.format(
            nice=int(self.nice),
            glob=self.quota_info_glob,
            path=shlex.quote(path),
            field=int(field),
        )

    def _read_field(self, path: str, field: int, what: str) -> str:
        cmdline = self.command(path, field)
        try:
            proc = subprocess.run(
                ["/bin/sh", "-c", cmdline],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as e:
            raise QuotaReadError(f"failed command ({cmdline}) on path {path}, with error {e}") from e

        out = proc.stdout.decode("utf-8", errors="replace")
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        # exit status is awk's; a missing quota file only shows up on stderr
        if proc.returncode != 0 or err:
            raise QuotaReadError(
                f"failed command ({cmdline}) on path {path}, exit status {proc.returncode}, stderr: {err}"
            )

        tokens = out.split()
        if not tokens:
            raise QuotaReadError(f"failed to get pvUsage {what} from {self.quota_info_glob}, command: {cmdline}")
        return tokens[0]

    def read_magnitude(self, path: str) -> str:
        return self._read_field(path, MAGNITUDE_FIELD, "value")

    def read_unit(self, path: str) -> str:
        return self._read_field(path, UNIT_FIELD, "unit")


def parse_magnitude(token: str, path: str) -> float:
    try:
        magnitude = float(token)
    except ValueError:
        raise QuotaReadError(f"failed to convert quota value on path {path}, string: {token!r}") from None
    # float() accepts "nan"/"inf"; neither is a usage value
    if not math.isfinite(magnitude) or magnitude < 0:
        raise QuotaReadError(f"invalid quota value on path {path}, string: {token!r}")
    return magnitude


def disk_usage(path: str, source: Optional[QuotaSource] = None) -> Quantity:
    """
    Used bytes of the project quota keyed by path

    Raises QuotaReadError on any failure
    """
    if source is None:
        source = ProcQuotaSource()

    used_string = source.read_magnitude(path)

    if used_string not in ("", "0"):
        magnitude = parse_magnitude(used_string, path)
        unit = source.read_unit(path)
        sample = QuotaSample(magnitude=magnitude, unit=unit)
        used_string = "%.0f" % sample.to_bytes()
    elif used_string == "":
        used_string = "0"

    try:
        used = Quantity.parse(used_string)
    except ValueError as e:
        raise QuotaReadError(f"failed to parse 'pvUsed' output {used_string!r} on path {path} due to error {e}") from e

    return used.with_format(BINARY_SI)
