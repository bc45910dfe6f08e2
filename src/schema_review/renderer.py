"""
Markdown rendering of a schema change report
"""

from email.utils import formatdate

from .models import ReportItem, SchemaChangeReport

BYTE_UNITS = ["B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]

HEADER = (
    "# Revefi detected schema changes!\n"
    "Potentially breaking schema changes were detected for the following tables:\n"
)


def format_bytes(byte_count: float) -> str:
    """Human-readable size on a 1024-based ladder, e.g. 1536 -> '1.50 KB'"""
    value = float(byte_count)
    unit_index = 0
    while value >= 1024 and unit_index < len(BYTE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.2f} {BYTE_UNITS[unit_index]}"


def format_timestamp(epoch_seconds: float) -> str:
    """Epoch seconds as an RFC 1123 UTC string"""
    return formatdate(epoch_seconds, usegmt=True)


def format_count(count: int) -> str:
    return f"{count:,}"


def format_seconds(seconds: float) -> str:
    return str(int(seconds)) if float(seconds).is_integer() else str(seconds)


def _render_item(item: ReportItem) -> str:
    telemetry = item.table_telemetry
    lines = [
        f"### `{item.full_table_name.short_name}`",
        item.change_description,
        f"* Filename: `{item.filename}`",
        f"* Full Table Name: `{item.full_table_name.qualified_name}`",
        f"* Most Recent Update: {format_timestamp(telemetry.most_recent_update_timestamp)}",
        f"* Inserted Row Count: {format_count(telemetry.inserted_row_count)}",
        f"* Total Row Count: {format_count(telemetry.total_row_count)}",
        f"* Total Bytes Processed: {format_bytes(telemetry.total_bytes_processed)}",
        f"* Load Duration Seconds: {format_seconds(telemetry.load_duration_seconds)}",
        f"* Downstream Object Count: {telemetry.downstream_object_count}",
        f"* See more details on [Revefi]({item.dashboard_link})",
    ]
    return "\n".join(lines) + "\n"


def render_report(report: SchemaChangeReport) -> str:
    """Render the report as a pull request comment"""
    return HEADER + "".join(_render_item(item) for item in report)
