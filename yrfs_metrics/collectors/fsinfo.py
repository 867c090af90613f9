"""
yrfs_metrics.collectors.fsinfo
AUTHOR: carter-vin

Filesystem statistics probe
- single os.statvfs call, pure arithmetic otherwise
- stdlib only
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class FsInfo:
    available: int
    capacity: int
    usage: int
    inodes: int
    inodes_free: int
    inodes_used: int


def fs_info(path: str) -> FsInfo:
    """
    Block and inode totals for the filesystem that path resides upon

    OSError from statvfs propagates unchanged
    """
    st = os.statvfs(path)

    # Block counts are in fragment-size units
    bsize = st.f_frsize or st.f_bsize

    inodes = st.f_files
    inodes_free = st.f_ffree

    return FsInfo(
        available=st.f_bavail * bsize,
        capacity=st.f_blocks * bsize,
        usage=(st.f_blocks - st.f_bfree) * bsize,
        inodes=inodes,
        inodes_free=inodes_free,
        inodes_used=inodes - inodes_free,
    )
