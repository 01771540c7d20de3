"""CSV exporters for donation reports."""

import csv
import io
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from donation_reports.config import OutputConfig
from donation_reports.models.report import GroupTotal, Report, ReportFilter, SectionSelection
from donation_reports.utils.date_utils import date_to_iso
from donation_reports.utils.decimal_utils import format_amount
from donation_reports.utils.logging_config import get_logger
from donation_reports.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

DETAILED_HEADERS = [
    "Date", "Donor Name", "Email", "Amount", "Currency",
    "Category", "Purpose", "Description", "Public", "Anonymous",
]


class EmptyReportError(Exception):
    """Exception raised when exporting a report with no donations."""

    def __init__(self, message: str = "No donations to export"):
        super().__init__(message)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _to_csv_text(rows: Sequence[Sequence[str]]) -> str:
    """Join rows into CSV text with standard quoting."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def render_detailed_csv(report: Report, decimal_places: int = 2) -> str:
    """Render one CSV row per donation in the report.

    Commas, quotes and newlines in free text are quoted and read back
    unchanged. Free text starting with a formula character (=, +, -, @,
    tab, CR, LF, |) is prefixed with a single quote to block spreadsheet
    formula injection, so those values do not read back byte-for-byte.

    Args:
        report: Report whose donations are exported.
        decimal_places: Decimal places for amounts.

    Returns:
        CSV text with a header row.

    Raises:
        EmptyReportError: If the report has no donations.
    """
    if not report.donations:
        raise EmptyReportError()

    rows: list[list[str]] = [DETAILED_HEADERS]
    for donation in report.donations:
        rows.append([
            date_to_iso(donation.donation_date),
            sanitize_for_csv(donation.donor_name) or "",
            sanitize_for_csv(donation.donor_email) or "N/A",
            format_amount(donation.amount, decimal_places),
            donation.currency,
            sanitize_for_csv(donation.category) or "",
            sanitize_for_csv(donation.purpose) or "",
            sanitize_for_csv(donation.description) or "N/A",
            _yes_no(donation.is_public),
            _yes_no(donation.is_anonymous),
        ])
    return _to_csv_text(rows)


def _breakdown_block(
    title: str,
    key_header: str,
    entries: list[tuple[str, GroupTotal]],
    decimal_places: int,
) -> list[list[str]]:
    block: list[list[str]] = [[], [title, ""], [key_header, "Amount", "Count"]]
    for key, total in entries:
        block.append([
            sanitize_for_csv(key) or "",
            format_amount(total.amount, decimal_places),
            str(total.count),
        ])
    return block


def render_summary_csv(
    report: Report,
    sections: Optional[SectionSelection] = None,
    decimal_places: int = 2,
) -> str:
    """Render the summary metrics and selected breakdowns as CSV.

    Blocks are emitted only when selected and non-empty. The yearly block
    additionally requires more than one year in the report.

    Args:
        report: Report to summarize.
        sections: Which breakdowns to include (default: all).
        decimal_places: Decimal places for amounts.

    Returns:
        CSV text.
    """
    sections = sections or SectionSelection()

    rows: list[list[str]] = [
        ["Metric", "Value"],
        ["Total Donations", str(report.count)],
        ["Total Amount", format_amount(report.total_amount, decimal_places)],
        ["Average Amount", format_amount(report.avg_amount, decimal_places)],
    ]
    if report.has_multiple_currencies:
        rows.append(["Currencies", "; ".join(report.currencies)])

    if sections.category and report.by_category:
        rows.extend(_breakdown_block(
            "Category Breakdown", "Category", report.categories_by_amount(), decimal_places
        ))

    if sections.monthly and report.by_month:
        rows.extend(_breakdown_block(
            "Monthly Breakdown", "Month", report.months_ascending(), decimal_places
        ))

    if sections.yearly and len(report.by_year) > 1:
        rows.extend(_breakdown_block(
            "Yearly Breakdown", "Year", report.years_ascending(), decimal_places
        ))

    return _to_csv_text(rows)


def deliver_text_file(path: Path, content: str) -> Path:
    """Write exported text to a UTF-8 file, creating parent directories.

    Args:
        path: Destination file.
        content: Text to write.

    Returns:
        The path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(content)
    return path


def default_export_filename(kind: str, report_filter: Optional[ReportFilter] = None) -> str:
    """Build the default file name for an export.

    Args:
        kind: "detailed" or "summary".
        report_filter: Filter whose date range names the file.

    Returns:
        File name such as "donations-2024-01-01-to-all.csv".
    """
    report_filter = report_filter or ReportFilter()
    start = date_to_iso(report_filter.start_date) if report_filter.start_date else "all"
    end = date_to_iso(report_filter.end_date) if report_filter.end_date else "all"
    prefix = "donation-summary" if kind == "summary" else "donations"
    return f"{prefix}-{start}-to-{end}.csv"


class CSVExporter:
    """Exports donation reports to CSV files.

    Produces:
    - a detailed list with one row per donation
    - a summary with metrics and category/month/year breakdowns
    """

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize CSV exporter.

        Args:
            output_config: Output formatting configuration.
        """
        self.output_config = output_config or OutputConfig()

    def export_detailed(self, path: Path, report: Report) -> Path:
        """Export the detailed donation list.

        Args:
            path: Output CSV path.
            report: Report to export.

        Returns:
            Path to the created file.

        Raises:
            EmptyReportError: If the report has no donations; nothing is written.
        """
        try:
            content = render_detailed_csv(report, self.output_config.decimal_places)
        except EmptyReportError:
            logger.warning(f"Refusing to export empty donation list to {path}")
            raise

        deliver_text_file(path, content)
        logger.info(f"Exported {len(report.donations)} donations to {path}")
        return path

    def export_summary(
        self,
        path: Path,
        report: Report,
        sections: Optional[SectionSelection] = None,
    ) -> Path:
        """Export the report summary.

        Args:
            path: Output CSV path.
            report: Report to export.
            sections: Which breakdowns to include.

        Returns:
            Path to the created file.
        """
        content = render_summary_csv(report, sections, self.output_config.decimal_places)
        deliver_text_file(path, content)
        logger.info(f"Exported report summary to {path}")
        return path
