"""
yrfs_metrics.collectors.inodes
AUTHOR: carter-vin

Inode usage approximation

Equivalent of `find <path> -xdev -printf '.' | wc -c`:
- one byte per visited entry (root included)
- does not cross into other mounted filesystems
- counts entries, not raw inode allocation; close enough for volume usage
"""

from __future__ import annotations

import subprocess
import tempfile
from typing import BinaryIO

from yrfs_metrics.config import DEFAULT_FIND_BINARY
from yrfs_metrics.errors import InodeApproximationError

CHUNK_SIZE = 64 * 1024


class ByteCounter:
    """
    Write sink that only counts bytes
    """

    def __init__(self) -> None:
        self.bytes_written = 0

    def write(self, data: bytes) -> int:
        self.bytes_written += len(data)
        return len(data)


def find_command(path: str, find_binary: str = DEFAULT_FIND_BINARY) -> list[str]:
    return [find_binary, path, "-xdev", "-printf", "."]


def _drain(stream: BinaryIO, sink: ByteCounter) -> None:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            return
        sink.write(chunk)


def find_inodes(path: str, find_binary: str = DEFAULT_FIND_BINARY) -> int:
    """
    Count files and directories under path on the same device

    Raises InodeApproximationError on empty path, spawn failure or non-zero exit
    """
    if not path:
        raise InodeApproximationError("invalid directory")

    args = find_command(path, find_binary)
    counter = ByteCounter()

    # stderr goes to a file so a chatty find cannot block on a full pipe
    with tempfile.TemporaryFile() as stderr:
        try:
            proc = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=stderr)
        except OSError as e:
            raise InodeApproximationError(f"failed to exec cmd {args} - {e}") from e

        with proc:
            assert proc.stdout is not None
            _drain(proc.stdout, counter)
            returncode = proc.wait()

        if returncode != 0:
            stderr.seek(0)
            diagnostics = stderr.read().decode("utf-8", errors="replace").strip()
            raise InodeApproximationError(
                f"cmd {args} failed. stderr: {diagnostics}; exit status {returncode}"
            )

    return counter.bytes_written
