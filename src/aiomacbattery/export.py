"""CSV and HTML projections of the battery rows."""

import csv
import io
from collections.abc import Sequence
from datetime import datetime, tzinfo
from html import escape

import tzlocal

from .const import HEALTH_GOOD, HEALTH_WARNING
from .fleet import health_histogram, summarize
from .model import DeviceBatteryRow

CSV_HEADER = (
    "Device",
    "User",
    "Health%",
    "Cycles",
    "Full_mAh",
    "Design_mAh",
    "Current_mAh",
    "Charging",
    "Ext_Power",
    "Min_Left",
    "mV",
    "Condition",
    "Updated",
)
DASH = "—"
FILENAME_FMT = "battery_health_%Y-%m-%d_%H%M%S"
TIMESTAMP_FMT = "%Y-%m-%d %H:%M"


def report_filename(extension: str, now: datetime | None = None) -> str:
    """Return the file name of a report written now."""
    now = now or datetime.now(tz=tzlocal.get_localzone())
    return f"{now.strftime(FILENAME_FMT)}.{extension}"


def format_timestamp(value: datetime, tz: tzinfo | None = None) -> str:
    """Format a timestamp in the given (default: local) time zone."""
    return value.astimezone(tz or tzlocal.get_localzone()).strftime(TIMESTAMP_FMT)


def _text(value: object | None) -> str:
    return "" if value is None else str(value)


def _yes_no(value: bool | None) -> str:
    if value is None:
        return ""
    return "Yes" if value else "No"


def csv_fields(row: DeviceBatteryRow, tz: tzinfo | None = None) -> list[str]:
    """Return the CSV columns of one row."""
    return [
        row.device_name,
        _text(row.user_principal_name),
        _text(row.health_percent),
        _text(row.cycle_count),
        _text(row.full_charge_capacity),
        _text(row.design_capacity),
        _text(row.current_capacity),
        _yes_no(row.is_charging),
        _yes_no(row.external_power_connected),
        _text(row.time_remaining),
        _text(row.voltage),
        _text(row.condition),
        format_timestamp(row.last_update, tz),
    ]


def rows_to_csv(rows: Sequence[DeviceBatteryRow], tz: tzinfo | None = None) -> str:
    """Return the rows as CSV with a header line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(csv_fields(row, tz))
    return buffer.getvalue()


def health_class(health: int | None) -> str:
    """Return the CSS class of a health badge."""
    if health is None:
        return ""
    if health >= HEALTH_GOOD:
        return "health-good"
    if health >= HEALTH_WARNING:
        return "health-warning"
    return "health-danger"


def _number(value: int | None) -> str:
    return DASH if value is None else f"{value:,}"


def _pill(value: bool | None) -> str:
    if value is None:
        return DASH
    css = "pill-yes" if value else "pill-no"
    return f'<span class="pill {css}">{_yes_no(value)}</span>'


def _html_row(row: DeviceBatteryRow, tz: tzinfo | None) -> str:
    if row.health_percent is None:
        health = DASH
    else:
        health = (
            f'<span class="health-badge {health_class(row.health_percent)}">'
            f"{row.health_percent}%</span>"
        )
    cells = [
        f"<td>{escape(row.device_name)}</td>",
        f"<td>{escape(row.user_principal_name or DASH)}</td>",
        f'<td class="text-right">{health}</td>',
        f'<td class="text-right">{_text(row.cycle_count) or DASH}</td>',
        f'<td class="text-right">{_number(row.full_charge_capacity)}</td>',
        f'<td class="text-right">{_number(row.design_capacity)}</td>',
        f'<td class="text-right">{_number(row.current_capacity)}</td>',
        f'<td class="text-center">{_pill(row.is_charging)}</td>',
        f'<td class="text-center">{_pill(row.external_power_connected)}</td>',
        f'<td class="text-right">{_text(row.time_remaining) or DASH}</td>',
        f'<td class="text-right">{_number(row.voltage)}</td>',
        f"<td>{escape(_text(row.condition) or DASH)}</td>",
        f"<td>{escape(format_timestamp(row.last_update, tz))}</td>",
    ]
    return "<tr>" + "".join(cells) + "</tr>"


_STYLE = """
body { font-family: -apple-system, Helvetica, Arial, sans-serif; margin: 24px; }
table { border-collapse: collapse; width: 100%; font-size: 13px; }
th, td { border: 1px solid #ddd; padding: 6px 8px; }
th { background: #f5f5f7; text-align: left; }
.text-right { text-align: right; }
.text-center { text-align: center; }
.kpis { display: flex; gap: 12px; margin-bottom: 16px; }
.kpi { flex: 1; padding: 12px; border-radius: 12px; background: #eef8ee; }
.kpi-value { font-size: 24px; font-weight: bold; }
.health-badge, .pill { padding: 2px 8px; border-radius: 999px; }
.health-good, .pill-yes { background: #d4f5d4; }
.health-warning { background: #fff1c2; }
.health-danger, .pill-no { background: #fbd5d5; }
.summary { margin-top: 16px; color: #666; }
"""


def rows_to_html(
    rows: Sequence[DeviceBatteryRow],
    tz: tzinfo | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Return a static HTML report of the rows."""
    generated_at = generated_at or datetime.now(tz=tz or tzlocal.get_localzone())
    summary = summarize(rows)
    average = (
        DASH if summary.average_health is None else f"{summary.average_health:.1f}%"
    )
    kpis = (
        ("Devices", str(summary.device_count)),
        ("Avg Health", average),
        ("≥1000 Cycles", str(summary.over_cycle_threshold)),
        ("On External Power", str(summary.on_external_power)),
    )
    kpi_html = "".join(
        f'<div class="kpi"><div>{escape(title)}</div>'
        f'<div class="kpi-value">{escape(value)}</div></div>'
        for title, value in kpis
    )
    histogram_html = "".join(
        f"<tr><td>{escape(band)}</td><td class=\"text-right\">{count}</td></tr>"
        for band, count in health_histogram(rows).items()
    )
    header_html = "".join(
        f"<th>{escape(title)}</th>"
        for title in (
            "Device",
            "User",
            "Health%",
            "Cycles",
            "Full mAh",
            "Design mAh",
            "Current mAh",
            "Charging",
            "Ext Pwr",
            "Min Left",
            "mV",
            "Condition",
            "Updated",
        )
    )
    body_html = "\n".join(_html_row(row, tz) for row in rows)
    created = escape(format_timestamp(generated_at, tz))
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        "<title>macOS Battery Health Report</title>\n"
        f"<style>{_STYLE}</style>\n</head>\n<body>\n"
        "<h1>macOS Battery Health</h1>\n"
        f'<div class="kpis">{kpi_html}</div>\n'
        "<h2>Health distribution</h2>\n"
        f"<table><thead><tr><th>Health band</th><th>Devices</th></tr></thead>"
        f"<tbody>{histogram_html}</tbody></table>\n"
        "<h2>Devices</h2>\n"
        f"<table><thead><tr>{header_html}</tr></thead>\n<tbody>\n{body_html}\n"
        "</tbody></table>\n"
        f'<div class="summary">Generated by aiomacbattery • '
        f"{summary.device_count} devices • Report created on {created}</div>\n"
        "</body>\n</html>\n"
    )
