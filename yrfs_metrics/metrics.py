"""
yrfs_metrics.metrics
AUTHOR: carter-vin

Metrics aggregator for YRFS volumes

Pipeline (strict order, stop at first failure):
1) disk_usage(quota_path)  -> used
2) find_inodes(path)       -> inodes_used
3) fs_info(path)           -> available, capacity, inodes, inodes_free

statvfs usage / inodes_used are computed but not reported; quota accounting
and the tree walk are authoritative for consumption.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from yrfs_metrics import __version__
from yrfs_metrics.collectors.base import run_probe
from yrfs_metrics.collectors.fsinfo import FsInfo, fs_info
from yrfs_metrics.collectors.inodes import find_inodes
from yrfs_metrics.collectors.quota import ProcQuotaSource, QuotaSource, disk_usage
from yrfs_metrics.config import MetricsConfig
from yrfs_metrics.errors import (
    FsInfoFailedError,
    InodeApproximationError,
    NoPathDefinedError,
    QuotaReadError,
    VolumeMetricsError,
)
from yrfs_metrics.logging import EventLogger
from yrfs_metrics.model import VolumeMetrics
from yrfs_metrics.quantity import Quantity


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MetricsOutcome:
    """
    Aggregation result
    - metrics: always present; partial when error is set
    - error: first failing step, None on success
    """

    metrics: VolumeMetrics
    error: Optional[VolumeMetricsError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> VolumeMetrics:
        if self.error is not None:
            raise self.error
        return self.metrics


@dataclass(frozen=True)
class _Step:
    name: str
    run: Callable[[], Any]
    fields: Callable[[Any], dict[str, Quantity]]
    wrap: Callable[[Exception], VolumeMetricsError]


def _wrap_as(error_cls: type[VolumeMetricsError]) -> Callable[[Exception], VolumeMetricsError]:
    def wrap(e: Exception) -> VolumeMetricsError:
        if isinstance(e, error_cls):
            return e
        wrapped = error_cls(str(e))
        wrapped.__cause__ = e
        return wrapped

    return wrap


def _fs_info_failed(e: Exception) -> VolumeMetricsError:
    return FsInfoFailedError(e)


def _fs_info_fields(info: FsInfo) -> dict[str, Quantity]:
    return {
        "available": Quantity.from_int(info.available),
        "capacity": Quantity.from_int(info.capacity),
        "inodes": Quantity.from_int(info.inodes),
        "inodes_free": Quantity.from_int(info.inodes_free),
    }


class MetricsYRFS:
    """
    Metrics provider for one YRFS-backed volume

    quota_path: key used in the project quota table
    path: mount point used for statvfs and the tree walk
    """

    def __init__(
        self,
        quota_path: str,
        path: str,
        *,
        config: Optional[MetricsConfig] = None,
        quota_source: Optional[QuotaSource] = None,
        logger: Optional[EventLogger] = None,
        clock: Callable[[], datetime] = utc_now,
        usage_probe: Callable[[str, QuotaSource], Quantity] = disk_usage,
        inode_probe: Callable[[str, str], int] = find_inodes,
        fs_info_probe: Callable[[str], FsInfo] = fs_info,
    ) -> None:
        self.quota_path = quota_path
        self.path = path
        self.config = config or MetricsConfig()
        self.quota_source = quota_source or ProcQuotaSource(
            quota_info_glob=self.config.quota_info_glob,
            nice=self.config.quota_nice,
        )
        # every event from this provider names its volume
        self.logger = (logger or EventLogger(tool_version=__version__)).bind(
            path=path,
            quota_path=quota_path,
        )
        self._clock = clock
        self._usage_probe = usage_probe
        self._inode_probe = inode_probe
        self._fs_info_probe = fs_info_probe

    def _steps(self) -> list[_Step]:
        return [
            _Step(
                name="disk_usage",
                run=lambda: self._usage_probe(self.quota_path, self.quota_source),
                fields=lambda used: {"used": used},
                wrap=_wrap_as(QuotaReadError),
            ),
            _Step(
                name="find_inodes",
                run=lambda: self._inode_probe(self.path, self.config.find_binary),
                fields=lambda count: {"inodes_used": Quantity.from_int(count)},
                wrap=_wrap_as(InodeApproximationError),
            ),
            _Step(
                name="fs_info",
                run=lambda: self._fs_info_probe(self.path),
                fields=_fs_info_fields,
                wrap=_fs_info_failed,
            ),
        ]

    def get_metrics(self) -> MetricsOutcome:
        """
        Collect one snapshot

        Never raises for probe failures; the error is logged and returned
        together with whatever fields were filled before it.
        """
        metrics = VolumeMetrics(time=self._clock())
        if not self.path:
            return MetricsOutcome(metrics=metrics, error=NoPathDefinedError())

        for step in self._steps():
            out = run_probe(step.name, step.run)
            if not out.ok:
                error = step.wrap(out.error)
                self.logger.emit(
                    "probe_failed",
                    probe=step.name,
                    error_type=type(error).__name__,
                    message=str(error),
                )
                return MetricsOutcome(metrics=metrics, error=error)
            metrics = replace(metrics, **step.fields(out.value))

        self.logger.emit(
            "metrics_collected",
            used_bytes=metrics.used.as_int(),
            used_human=metrics.used.human(),
            inodes_used=metrics.inodes_used.as_int(),
        )
        return MetricsOutcome(metrics=metrics)


def get_metrics(quota_path: str, path: str, **kwargs: Any) -> MetricsOutcome:
    return MetricsYRFS(quota_path, path, **kwargs).get_metrics()
