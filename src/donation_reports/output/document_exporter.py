"""Printable HTML document exporter for donation reports.

The document is a self-contained HTML page with inline styles meant for
the browser's print-to-PDF path. Amounts use one configured currency glyph
regardless of each donation's stored currency; mixed-currency reports get a
visible note instead of being silently coerced.
"""

import tempfile
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from donation_reports.config import DEFAULT_CLOSING_STATEMENT, Config
from donation_reports.models.report import GroupTotal, Report, SectionSelection, Signatory
from donation_reports.utils.date_utils import format_display_date, format_month_key
from donation_reports.utils.decimal_utils import DEFAULT_CURRENCY_SYMBOL, format_currency
from donation_reports.utils.logging_config import LogContext, get_logger
from donation_reports.utils.sanitize import escape_html

logger = get_logger(__name__)


class PrintSurfaceError(Exception):
    """Exception raised when the print surface (browser) cannot be opened."""

    pass


@dataclass(frozen=True)
class DocumentOptions:
    """Presentation settings for the printable document."""

    title: str = "Donation Report"
    header_image: str = "header.png"
    closing_statement: str = DEFAULT_CLOSING_STATEMENT
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    decimal_places: int = 2
    timestamp_format: str = "%Y-%m-%d %H:%M"

    @classmethod
    def from_config(cls, config: Config) -> "DocumentOptions":
        """Build options from the application configuration."""
        return cls(
            title=config.report.title,
            header_image=config.report.header_image,
            closing_statement=config.report.closing_statement,
            currency_symbol=config.output.currency_symbol,
            decimal_places=config.output.decimal_places,
            timestamp_format=config.output.date_format,
        )


_STYLES = """
    body { font-family: Arial, sans-serif; padding: 20px; color: #333; }
    .report-header { width: 100%; border-bottom: 3px solid #0f172a; padding-bottom: 16px; margin-bottom: 24px; }
    .header-banner { width: 100%; height: auto; display: block; }
    h1 { color: #1e40af; border-bottom: 3px solid #fbbf24; padding-bottom: 10px; }
    h2 { color: #1e40af; margin-top: 30px; border-bottom: 1px solid #e5e7eb; padding-bottom: 5px; }
    .summary { background-color: #f3f4f6; padding: 15px; border-radius: 8px; margin: 20px 0; }
    .summary-item { display: flex; justify-content: space-between; padding: 8px 0; border-bottom: 1px solid #d1d5db; }
    .summary-item:last-child { border-bottom: none; }
    .summary-label { font-weight: bold; }
    .currency-note { color: #b45309; font-style: italic; }
    table { width: 100%; border-collapse: collapse; margin: 20px 0; }
    th { background-color: #1e40af; color: white; padding: 12px; text-align: left; }
    td { padding: 10px 12px; border-bottom: 1px solid #e5e7eb; }
    .amount { text-align: right; font-weight: bold; color: #059669; }
    .count { text-align: center; }
    .closing { margin-top: 40px; }
    .signatory { margin-top: 60px; text-align: right; }
    .signature-line { border-top: 1px solid #333; width: 260px; margin: 0 0 6px auto; }
    .signatory-name { font-weight: bold; text-transform: uppercase; }
    @media print { body { padding: 0; } }
"""


class _Formatter:
    def __init__(self, options: DocumentOptions):
        self.options = options

    def money(self, amount: Decimal) -> str:
        return escape_html(format_currency(
            amount, self.options.currency_symbol, self.options.decimal_places
        ))


def _breakdown_table(
    title: str,
    key_header: str,
    entries: list[tuple[str, GroupTotal]],
    fmt: _Formatter,
    key_display: Callable[[str], str] = str,
) -> str:
    rows = "".join(
        f"<tr><td>{escape_html(key_display(key))}</td>"
        f'<td class="amount">{fmt.money(total.amount)}</td>'
        f'<td class="count">{total.count}</td></tr>\n'
        for key, total in entries
    )
    return (
        f"<h2>{escape_html(title)}</h2>\n"
        "<table>\n<thead><tr>"
        f"<th>{escape_html(key_header)}</th>"
        '<th style="text-align: right;">Amount</th>'
        '<th style="text-align: center;">Count</th>'
        "</tr></thead>\n"
        f"<tbody>\n{rows}</tbody>\n</table>\n"
    )


def _detailed_table(report: Report, fmt: _Formatter) -> str:
    rows = []
    for donation in report.donations:
        donor = escape_html(donation.donor_name)
        if donation.is_anonymous:
            donor += " (Anonymous)"
        rows.append(
            f"<tr><td>{escape_html(format_display_date(donation.donation_date))}</td>"
            f"<td>{donor}</td>"
            f"<td>{escape_html(donation.category)}</td>"
            f"<td>{escape_html(donation.purpose)}</td>"
            f'<td class="amount">{fmt.money(donation.amount)}</td></tr>\n'
        )
    return (
        f"<h2>Detailed Donations ({len(report.donations)})</h2>\n"
        "<table>\n<thead><tr><th>Date</th><th>Donor</th><th>Category</th><th>Purpose</th>"
        '<th style="text-align: right;">Amount</th></tr></thead>\n'
        f"<tbody>\n{''.join(rows)}</tbody>\n</table>\n"
    )


def _signatory_block(signatory: Signatory) -> str:
    lines = [
        f'<div class="signatory-name">{escape_html(signatory.name)}</div>',
    ]
    for value in (signatory.title, signatory.organization, signatory.address):
        if value:
            lines.append(f"<div>{escape_html(value)}</div>")
    return (
        '<div class="signatory">\n'
        '<div class="signature-line"></div>\n'
        + "\n".join(lines)
        + "\n</div>\n"
    )


def render_document(
    report: Report,
    signatory: Signatory,
    sections: Optional[SectionSelection] = None,
    options: Optional[DocumentOptions] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render a report as a printable HTML document.

    Sections appear in the same order and sort as the summary CSV:
    category by amount (largest first), then months and years ascending,
    then the detailed list.

    Args:
        report: Report to render.
        signatory: Signature block details.
        sections: Which sections to include (default: all).
        options: Presentation settings.
        generated_at: Timestamp printed in the header (default: now).

    Returns:
        Complete HTML document.
    """
    sections = sections or SectionSelection()
    options = options or DocumentOptions()
    generated_at = generated_at or datetime.now()
    fmt = _Formatter(options)

    parts: list[str] = [
        '<div class="report-header">'
        f'<img class="header-banner" src="{escape_html(options.header_image)}" alt="Report header" />'
        "</div>\n",
        f"<h1>{escape_html(options.title)}</h1>\n",
        f"<p>Generated on: {escape_html(generated_at.strftime(options.timestamp_format))}</p>\n",
        '<div class="summary">\n'
        '<div class="summary-item"><span class="summary-label">Total Donations:</span>'
        f"<span>{report.count}</span></div>\n"
        '<div class="summary-item"><span class="summary-label">Total Amount:</span>'
        f'<span class="amount">{fmt.money(report.total_amount)}</span></div>\n'
        '<div class="summary-item"><span class="summary-label">Average Amount:</span>'
        f'<span class="amount">{fmt.money(report.avg_amount)}</span></div>\n'
        "</div>\n",
    ]

    if report.has_multiple_currencies:
        parts.append(
            '<p class="currency-note">Note: this report combines donations in '
            f"{escape_html(', '.join(report.currencies))}; amounts are summed without conversion.</p>\n"
        )

    if sections.category and report.by_category:
        parts.append(_breakdown_table(
            "Breakdown by Category", "Category", report.categories_by_amount(), fmt
        ))

    if sections.monthly and report.by_month:
        parts.append(_breakdown_table(
            "Monthly Breakdown", "Month", report.months_ascending(), fmt, format_month_key
        ))

    if sections.yearly and len(report.by_year) > 1:
        parts.append(_breakdown_table(
            "Yearly Breakdown", "Year", report.years_ascending(), fmt
        ))

    if sections.detailed and report.donations:
        parts.append(_detailed_table(report, fmt))

    parts.append(f'<div class="closing"><p>{escape_html(options.closing_statement)}</p></div>\n')
    parts.append(_signatory_block(signatory))

    body = "".join(parts)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\" />\n"
        f"<title>{escape_html(options.title)}</title>\n"
        f"<style>{_STYLES}</style>\n</head>\n<body>\n"
        f"{body}"
        "<script>window.onload = () => { window.print(); };</script>\n"
        "</body>\n</html>\n"
    )


class DocumentExporter:
    """Writes the printable report and opens it in a browser for printing."""

    def __init__(
        self,
        options: Optional[DocumentOptions] = None,
        browser: Optional[webbrowser.BaseBrowser] = None,
    ):
        """Initialize document exporter.

        Args:
            options: Presentation settings.
            browser: Browser controller to open the document with
                (default: the system browser).
        """
        self.options = options or DocumentOptions()
        self.browser = browser

    def _resolve_browser(self) -> webbrowser.BaseBrowser:
        if self.browser is not None:
            return self.browser
        try:
            return webbrowser.get()
        except webbrowser.Error as e:
            raise PrintSurfaceError(f"No browser available to print the report: {e}") from e

    def write(
        self,
        path: Path,
        report: Report,
        signatory: Signatory,
        sections: Optional[SectionSelection] = None,
    ) -> Path:
        """Write the HTML document without opening it.

        Args:
            path: Output HTML path.
            report: Report to render.
            signatory: Signature block details.
            sections: Which sections to include.

        Returns:
            Path to the created file.
        """
        content = render_document(report, signatory, sections, self.options)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote donation report document to {path}")
        return path

    def export(
        self,
        report: Report,
        signatory: Signatory,
        sections: Optional[SectionSelection] = None,
        output_path: Optional[Path] = None,
    ) -> Path:
        """Render the document and open it in a browser for printing.

        The browser is resolved before anything is rendered, so a missing
        print surface leaves no partial output behind.

        Args:
            report: Report to render.
            signatory: Signature block details.
            sections: Which sections to include.
            output_path: Where to write the HTML (default: a temp file).

        Returns:
            Path of the opened document.

        Raises:
            PrintSurfaceError: If no browser is available or it refuses to open.
        """
        with LogContext(logger, "document export", donations=report.count):
            browser = self._resolve_browser()

            created_temp = output_path is None
            if output_path is None:
                with tempfile.NamedTemporaryFile(
                    prefix="donation-report-", suffix=".html", delete=False
                ) as tmp:
                    output_path = Path(tmp.name)

            self.write(output_path, report, signatory, sections)

            if not browser.open(output_path.resolve().as_uri(), new=1):
                if created_temp:
                    output_path.unlink(missing_ok=True)
                raise PrintSurfaceError(
                    "Could not open the report for printing; check that pop-ups "
                    "and browser launching are allowed"
                )

        logger.info(f"Opened donation report for printing: {output_path}")
        return output_path
