"""Tests for the Excel workbook writer."""

from datetime import date
from decimal import Decimal
from pathlib import Path

from openpyxl import load_workbook

from donation_reports.models.donation import Donation
from donation_reports.models.report import SectionSelection
from donation_reports.output.excel_writer import ExcelWriter
from donation_reports.processing.report_generator import generate_report


def create_donation(amount: str, category: str, donation_date: date) -> Donation:
    """Helper to create a Donation for testing."""
    return Donation(
        donor_name="Maria Santos",
        amount=Decimal(amount),
        purpose="Test",
        category=category,
        donation_date=donation_date,
    )


def sample_report():
    return generate_report([
        create_donation("100", "Scholarship Fund", date(2024, 3, 1)),
        create_donation("300", "Building Fund", date(2023, 7, 1)),
    ])


class TestExcelWriter:
    """Tests for ExcelWriter."""

    def test_all_sheets(self, tmp_path: Path) -> None:
        """Test every sheet is written for a multi-year report."""
        path = tmp_path / "report.xlsx"

        sheets = ExcelWriter().write(path, sample_report())

        assert sheets == ["Summary", "By Category", "By Month", "By Year", "Donations"]
        assert load_workbook(path).sheetnames == sheets

    def test_summary_values(self, tmp_path: Path) -> None:
        """Test summary metrics cells."""
        path = tmp_path / "report.xlsx"
        ExcelWriter().write(path, sample_report())

        ws = load_workbook(path)["Summary"]

        assert ws["A4"].value == "Total Donations"
        assert ws["B4"].value == 2
        assert ws["B5"].value == 400.0
        assert ws["B6"].value == 200.0

    def test_category_sheet_sorted_with_total(self, tmp_path: Path) -> None:
        """Test category rows are sorted by amount and followed by a total."""
        path = tmp_path / "report.xlsx"
        ExcelWriter().write(path, sample_report())

        ws = load_workbook(path)["By Category"]

        assert ws["A2"].value == "Building Fund"
        assert ws["A3"].value == "Scholarship Fund"
        assert ws["A4"].value == "Total"
        assert ws["B4"].value == "=SUM(B2:B3)"

    def test_sections_respected(self, tmp_path: Path) -> None:
        """Test deselected sections have no sheet."""
        sheets = ExcelWriter().write(
            tmp_path / "report.xlsx",
            sample_report(),
            SectionSelection(monthly=False, detailed=False),
        )

        assert sheets == ["Summary", "By Category", "By Year"]
