"""Test the CSV and HTML exports."""

from datetime import datetime
from unittest.mock import patch

import time_machine
from syrupy import SnapshotAssertion

from aiomacbattery.export import (
    CSV_HEADER,
    health_class,
    report_filename,
    rows_to_csv,
    rows_to_html,
)
from aiomacbattery.model import DeviceBatteryRow

from .conftest import TEST_TZ


def test_csv_export(rows: list[DeviceBatteryRow], snapshot: SnapshotAssertion) -> None:
    """Test the CSV columns of all rows."""
    assert rows_to_csv(rows, TEST_TZ).splitlines() == snapshot


def test_csv_export_empty() -> None:
    """Test that an empty fleet still has the header."""
    assert rows_to_csv([], TEST_TZ) == ",".join(CSV_HEADER) + "\n"


def test_health_class() -> None:
    """Test the badge classes."""
    assert health_class(100) == "health-good"
    assert health_class(90) == "health-good"
    assert health_class(89) == "health-warning"
    assert health_class(70) == "health-warning"
    assert health_class(69) == "health-danger"
    assert health_class(None) == ""


def test_html_export(rows: list[DeviceBatteryRow]) -> None:
    """Test the static HTML report."""
    html = rows_to_html(
        rows, TEST_TZ, generated_at=datetime(2025, 10, 2, 9, 30, tzinfo=TEST_TZ)
    )
    assert html.startswith("<!DOCTYPE html>")
    assert '<span class="health-badge health-warning">85%</span>' in html
    assert '<span class="health-badge health-warning">72%</span>' in html
    assert '<span class="health-badge health-good">100%</span>' in html
    assert '<span class="pill pill-yes">Yes</span>' in html
    assert '<span class="pill pill-no">No</span>' in html
    assert "<td>MBP, Lab</td>" in html
    assert "4,200" in html
    assert "<td>70-79</td><td class=\"text-right\">1</td>" in html
    assert '<div class="kpi-value">4</div>' in html
    assert '<div class="kpi-value">85.7%</div>' in html
    assert "Report created on 2025-10-02 09:30" in html


def test_html_escapes_values(rows: list[DeviceBatteryRow]) -> None:
    """Test that device data cannot inject markup."""
    rows[0].device_name = "<script>alert(1)</script>"
    rows[0].condition = "Bad & worse"
    html = rows_to_html(
        rows, TEST_TZ, generated_at=datetime(2025, 10, 2, tzinfo=TEST_TZ)
    )
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "Bad &amp; worse" in html


def test_report_filename() -> None:
    """Test the report file names."""
    now = datetime(2025, 10, 1, 7, 5, 9, tzinfo=TEST_TZ)
    assert report_filename("csv", now) == "battery_health_2025-10-01_070509.csv"


@time_machine.travel(datetime(2025, 10, 1, 7, 5, 9, tzinfo=TEST_TZ), tick=False)
def test_report_filename_defaults_to_local_now() -> None:
    """Test that the file name uses the local time."""
    with patch("aiomacbattery.export.tzlocal.get_localzone", return_value=TEST_TZ):
        assert report_filename("html") == "battery_health_2025-10-01_070509.html"
