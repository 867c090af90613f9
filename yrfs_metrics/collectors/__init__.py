"""yrfs_metrics.collectors package exports."""

from yrfs_metrics.collectors.fsinfo import FsInfo, fs_info
from yrfs_metrics.collectors.inodes import find_inodes
from yrfs_metrics.collectors.quota import ProcQuotaSource, QuotaSample, disk_usage

__all__ = [
    "FsInfo",
    "ProcQuotaSource",
    "QuotaSample",
    "disk_usage",
    "find_inodes",
    "fs_info",
]
