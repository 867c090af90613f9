"""
Contract tests for the statvfs probe arithmetic
"""

import os
from types import SimpleNamespace

import pytest

from yrfs_metrics.collectors.fsinfo import fs_info


def _fake_statvfs(**overrides):
    values = dict(
        f_bsize=4096,
        f_frsize=4096,
        f_blocks=1000,
        f_bfree=300,
        f_bavail=250,
        f_files=500,
        f_ffree=120,
    )
    values.update(overrides)
    return lambda path: SimpleNamespace(**values)


def test_fs_info_block_and_inode_math(monkeypatch) -> None:
    """
    available/capacity/usage scale by block size; inodes_used = files - ffree
    """
    monkeypatch.setattr(os, "statvfs", _fake_statvfs())

    info = fs_info("/mnt/pv")

    assert info.available == 250 * 4096
    assert info.capacity == 1000 * 4096
    assert info.usage == 700 * 4096
    assert info.inodes == 500
    assert info.inodes_free == 120
    assert info.inodes_used == 380
    assert info.available <= info.capacity


def test_fs_info_falls_back_to_bsize(monkeypatch) -> None:
    monkeypatch.setattr(os, "statvfs", _fake_statvfs(f_frsize=0, f_bsize=512))

    assert fs_info("/mnt/pv").capacity == 1000 * 512


def test_fs_info_real_path_invariants(tmp_path) -> None:
    info = fs_info(str(tmp_path))

    assert 0 <= info.available <= info.capacity
    assert info.inodes_used == info.inodes - info.inodes_free


def test_fs_info_error_propagates(tmp_path) -> None:
    """
    statvfs errors surface unchanged
    """
    with pytest.raises(FileNotFoundError):
        fs_info(str(tmp_path / "missing"))
