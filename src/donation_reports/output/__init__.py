"""Output generation: CSV, printable document, and Excel exports."""

from donation_reports.output.csv_exporter import (
    CSVExporter,
    EmptyReportError,
    render_detailed_csv,
    render_summary_csv,
)
from donation_reports.output.document_exporter import (
    DocumentExporter,
    DocumentOptions,
    PrintSurfaceError,
    render_document,
)
from donation_reports.output.excel_writer import ExcelWriter

__all__ = [
    "CSVExporter",
    "EmptyReportError",
    "render_detailed_csv",
    "render_summary_csv",
    "DocumentExporter",
    "DocumentOptions",
    "PrintSurfaceError",
    "render_document",
    "ExcelWriter",
]
