"""Excel workbook writer for donation reports."""

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from donation_reports.config import OutputConfig
from donation_reports.models.report import GroupTotal, Report, SectionSelection
from donation_reports.utils.date_utils import format_month_key
from donation_reports.utils.decimal_utils import quantize_amount
from donation_reports.utils.logging_config import get_logger
from donation_reports.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)


class ExcelWriter:
    """Writes a donation report to an Excel workbook.

    Generates sheets:
    - Summary (always)
    - By Category, By Month, By Year (per section selection)
    - Donations (detailed list, per section selection)
    """

    SHEET_SUMMARY = "Summary"
    SHEET_CATEGORY = "By Category"
    SHEET_MONTH = "By Month"
    SHEET_YEAR = "By Year"
    SHEET_DONATIONS = "Donations"

    def __init__(self, output_config: Optional[OutputConfig] = None):
        """Initialize Excel writer.

        Args:
            output_config: Output formatting configuration.
        """
        self.output_config = output_config or OutputConfig()

        decimals = "0" * self.output_config.decimal_places
        self.money_format = f"#,##0.{decimals}" if decimals else "#,##0"

        # Style definitions
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="1E40AF", end_color="1E40AF", fill_type="solid"
        )
        self.title_font = Font(bold=True, size=14)
        self.bold = Font(bold=True)
        self.centered = Alignment(horizontal="center")
        self.thin_border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )

    def write(
        self,
        output_path: Path,
        report: Report,
        sections: Optional[SectionSelection] = None,
    ) -> list[str]:
        """Write the report to an Excel workbook.

        Args:
            output_path: Path for output file.
            report: Report to write.
            sections: Which breakdown sheets to include (default: all).

        Returns:
            Names of the sheets written, in order.
        """
        sections = sections or SectionSelection()
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, report)

        if sections.category and report.by_category:
            self._create_breakdown(
                wb, self.SHEET_CATEGORY, "Category", report.categories_by_amount()
            )
        if sections.monthly and report.by_month:
            self._create_breakdown(
                wb, self.SHEET_MONTH, "Month", report.months_ascending(), format_month_key
            )
        if sections.yearly and len(report.by_year) > 1:
            self._create_breakdown(wb, self.SHEET_YEAR, "Year", report.years_ascending())
        if sections.detailed and report.donations:
            self._create_donations(wb, report)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")
        return list(wb.sheetnames)

    def _money(self, amount: Decimal) -> float:
        # openpyxl stores numbers as floats; round first so cells match the CSV
        return float(quantize_amount(amount, self.output_config.decimal_places))

    def _write_header(self, ws: Worksheet, row: int, headers: list[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.border = self.thin_border

    def _create_summary(self, wb: Workbook, report: Report) -> None:
        """Create the Summary sheet with count, total and average."""
        ws = wb.create_sheet(self.SHEET_SUMMARY)

        ws.cell(row=1, column=1, value="DONATION REPORT").font = self.title_font
        self._write_header(ws, 3, ["Metric", "Value"])

        ws.cell(row=4, column=1, value="Total Donations")
        ws.cell(row=4, column=2, value=report.count)
        ws.cell(row=5, column=1, value="Total Amount")
        total_cell = ws.cell(row=5, column=2, value=self._money(report.total_amount))
        total_cell.number_format = self.money_format
        ws.cell(row=6, column=1, value="Average Amount")
        avg_cell = ws.cell(row=6, column=2, value=self._money(report.avg_amount))
        avg_cell.number_format = self.money_format

        if report.has_multiple_currencies:
            ws.cell(row=7, column=1, value="Currencies")
            ws.cell(row=7, column=2, value=", ".join(report.currencies))

        ws.column_dimensions["A"].width = 22
        ws.column_dimensions["B"].width = 20

    def _create_breakdown(
        self,
        wb: Workbook,
        sheet_name: str,
        key_header: str,
        entries: list[tuple[str, GroupTotal]],
        key_display: Callable[[str], str] = str,
    ) -> None:
        """Create a breakdown sheet with a total row."""
        ws = wb.create_sheet(sheet_name)
        self._write_header(ws, 1, [key_header, "Amount", "Count"])

        row = 2
        for key, total in entries:
            ws.cell(row=row, column=1, value=sanitize_for_csv(key_display(key)))
            amount_cell = ws.cell(row=row, column=2, value=self._money(total.amount))
            amount_cell.number_format = self.money_format
            ws.cell(row=row, column=3, value=total.count).alignment = self.centered
            row += 1

        ws.cell(row=row, column=1, value="Total").font = self.bold
        if row > 2:
            sum_cell = ws.cell(row=row, column=2, value=f"=SUM(B2:B{row - 1})")
            sum_cell.number_format = self.money_format
            sum_cell.font = self.bold
            count_cell = ws.cell(row=row, column=3, value=f"=SUM(C2:C{row - 1})")
            count_cell.font = self.bold
            count_cell.alignment = self.centered

        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 18
        ws.column_dimensions["C"].width = 10
        logger.debug(f"Created {sheet_name} sheet with {len(entries)} rows")

    def _create_donations(self, wb: Workbook, report: Report) -> None:
        """Create the detailed Donations sheet."""
        ws = wb.create_sheet(self.SHEET_DONATIONS)
        headers = [
            "Date", "Donor Name", "Email", "Amount", "Currency",
            "Category", "Purpose", "Description", "Public", "Anonymous",
        ]
        self._write_header(ws, 1, headers)

        for row, donation in enumerate(report.donations, 2):
            date_cell = ws.cell(row=row, column=1, value=donation.donation_date)
            date_cell.number_format = "yyyy-mm-dd"
            ws.cell(row=row, column=2, value=sanitize_for_csv(donation.donor_name))
            ws.cell(row=row, column=3, value=sanitize_for_csv(donation.donor_email) or "N/A")
            amount_cell = ws.cell(row=row, column=4, value=self._money(donation.amount))
            amount_cell.number_format = self.money_format
            ws.cell(row=row, column=5, value=donation.currency)
            ws.cell(row=row, column=6, value=sanitize_for_csv(donation.category))
            ws.cell(row=row, column=7, value=sanitize_for_csv(donation.purpose))
            ws.cell(row=row, column=8, value=sanitize_for_csv(donation.description) or "N/A")
            ws.cell(row=row, column=9, value="Yes" if donation.is_public else "No")
            ws.cell(row=row, column=10, value="Yes" if donation.is_anonymous else "No")

        widths = [12, 28, 28, 14, 10, 20, 30, 40, 8, 10]
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        ws.freeze_panes = "A2"
