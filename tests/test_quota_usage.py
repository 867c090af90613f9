"""
Contract tests for the project quota usage reader
"""

from pathlib import Path

import pytest

from yrfs_metrics.collectors.quota import ProcQuotaSource, QuotaSample, disk_usage
from yrfs_metrics.errors import QuotaReadError
from yrfs_metrics.quantity import BINARY_SI


class FakeQuotaSource:
    """
    Returns fixed tokens and records every read
    """

    def __init__(self, magnitude: str, unit: str = "", *, fail_unit: bool = False) -> None:
        self.magnitude = magnitude
        self.unit = unit
        self.fail_unit = fail_unit
        self.calls: list[tuple[str, str]] = []

    def read_magnitude(self, path: str) -> str:
        self.calls.append(("magnitude", path))
        return self.magnitude

    def read_unit(self, path: str) -> str:
        self.calls.append(("unit", path))
        if self.fail_unit:
            raise QuotaReadError(f"failed to get pvUsage unit on path {path}")
        return self.unit


@pytest.mark.parametrize(
    ("magnitude", "unit", "expected"),
    [
        ("5", "MiB", 5 * 1024 * 1024),
        ("3", "KiB", 3 * 1024),
        ("2", "GiB", 2 * 1024**3),
        ("1", "TiB", 1024**4),
        ("1.5", "GiB", 1610612736),
        ("4096", "B", 4096),
        ("4096", "bytes", 4096),
    ],
)
def test_unit_table_is_exact(magnitude: str, unit: str, expected: int) -> None:
    """
    Known units scale by powers of 1024; anything else is already bytes
    """
    used = disk_usage("/mnt/pv", FakeQuotaSource(magnitude, unit))

    assert used.as_int() == expected
    assert used.format == BINARY_SI


@pytest.mark.parametrize("magnitude", ["0", ""])
def test_zero_magnitude_skips_unit_read(magnitude: str) -> None:
    """
    "0" or empty magnitude never triggers the unit read
    """
    source = FakeQuotaSource(magnitude, "GiB")

    used = disk_usage("/mnt/pv", source)

    assert used.is_zero()
    assert used.format == BINARY_SI
    assert source.calls == [("magnitude", "/mnt/pv")]


def test_unparseable_magnitude_fails_before_unit_read() -> None:
    source = FakeQuotaSource("lots", "GiB")

    with pytest.raises(QuotaReadError, match="/mnt/pv"):
        disk_usage("/mnt/pv", source)

    assert source.calls == [("magnitude", "/mnt/pv")]


@pytest.mark.parametrize("magnitude", ["-1", "nan", "inf"])
def test_non_usage_magnitudes_rejected(magnitude: str) -> None:
    with pytest.raises(QuotaReadError):
        disk_usage("/mnt/pv", FakeQuotaSource(magnitude, "GiB"))


def test_unit_read_failure_fails_whole_call() -> None:
    with pytest.raises(QuotaReadError, match="unit"):
        disk_usage("/mnt/pv", FakeQuotaSource("7", fail_unit=True))


def test_quota_sample_rejects_negative_magnitude() -> None:
    with pytest.raises(ValueError):
        QuotaSample(magnitude=-1.0, unit="KiB")


def _write_quota_info(root: Path, content: str) -> str:
    device_dir = root / "yrfs0"
    device_dir.mkdir()
    (device_dir / "project_quota_info").write_text(content, encoding="utf-8")
    return str(root / "*" / "project_quota_info")


def test_proc_source_reads_fields_from_quota_table(tmp_path: Path) -> None:
    """
    Shell pipeline picks field 2 (magnitude) and field 3 (unit) for the path
    """
    glob = _write_quota_info(
        tmp_path,
        "/mnt/pv-other 9 TiB\n/mnt/pv-a 2 GiB\n",
    )
    source = ProcQuotaSource(quota_info_glob=glob)

    assert source.read_magnitude("/mnt/pv-a") == "2"
    assert source.read_unit("/mnt/pv-a") == "GiB"
    assert disk_usage("/mnt/pv-a", source).as_int() == 2 * 1024**3


def test_proc_source_empty_output_is_failure(tmp_path: Path) -> None:
    """
    Path missing from the quota table -> empty output -> QuotaReadError
    """
    glob = _write_quota_info(tmp_path, "/mnt/pv-other 9 TiB\n")
    source = ProcQuotaSource(quota_info_glob=glob)

    with pytest.raises(QuotaReadError, match="failed to get pvUsage value"):
        source.read_magnitude("/mnt/pv-a")


def test_proc_source_quotes_path() -> None:
    source = ProcQuotaSource(quota_info_glob="/proc/fs/yrfs/*/project_quota_info", nice=19)

    cmd = source.command("/mnt/pv a; rm -rf /", 2)

    assert cmd == (
        "nice -n 19 cat /proc/fs/yrfs/*/project_quota_info"
        " | awk -v p='/mnt/pv a; rm -rf /' '$1 == p {print $2}'"
    )


def test_proc_source_matches_key_exactly(tmp_path: Path) -> None:
    """
    /mnt/pv-1 must not pick up the row of /mnt/pv-10
    """
    glob = _write_quota_info(
        tmp_path,
        "/mnt/pv-10 9 TiB\n/mnt/pv-1 2 GiB\n/data/mnt/pv-1 5 MiB\n",
    )
    source = ProcQuotaSource(quota_info_glob=glob)

    assert disk_usage("/mnt/pv-1", source).as_int() == 2147483648
    assert disk_usage("/mnt/pv-10", source).as_int() == 9 * 1024**4


def test_proc_source_missing_quota_file_is_read_failure(tmp_path: Path) -> None:
    """
    cat's error text must not be mistaken for a magnitude
    """
    source = ProcQuotaSource(quota_info_glob=str(tmp_path / "*" / "project_quota_info"))

    with pytest.raises(QuotaReadError, match="failed command") as excinfo:
        source.read_magnitude("/mnt/pv-a")

    assert "failed to convert" not in str(excinfo.value)
