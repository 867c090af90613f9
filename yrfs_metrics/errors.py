"""
yrfs_metrics.errors
AUTHOR: carter-vin

Failure taxonomy for metrics collection

Every probe failure maps to exactly one of these; callers treat any of them
as "metrics unavailable this cycle".
"""

from __future__ import annotations


class VolumeMetricsError(Exception):
    """Base class for all collection failures."""


class NoPathDefinedError(VolumeMetricsError):
    def __init__(self) -> None:
        super().__init__("no path defined")


class QuotaReadError(VolumeMetricsError):
    """Project quota source could not be read or parsed."""


class InodeApproximationError(VolumeMetricsError):
    """Tree walk could not produce an inode count."""


class FsInfoFailedError(VolumeMetricsError):
    """
    statvfs failed for the volume path

    cause: the OSError raised by statvfs
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"failed to get FsInfo due to error {cause}")
        self.cause = cause
