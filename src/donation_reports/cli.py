"""Command-line interface for donation reports."""

import argparse
import sys
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from donation_reports import __version__
from donation_reports.config import Config, ConfigError, load_config, save_signatory
from donation_reports.models.donation import ALL_CATEGORIES
from donation_reports.models.report import (
    GroupTotal,
    Report,
    ReportFilter,
    SectionSelection,
    Signatory,
)
from donation_reports.processing.archive import find_stale_archive_metadata, migrate_archive_metadata
from donation_reports.processing.goal_progress import compute_goal_progress, select_display_goal
from donation_reports.processing.report_generator import generate_report
from donation_reports.store.base import DonationStore, StoreError
from donation_reports.store.json_store import JSONDonationStore
from donation_reports.utils.date_utils import format_display_date, format_month_key
from donation_reports.utils.decimal_utils import format_currency
from donation_reports.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="donation-reports",
        description="Generate and export donation reports for the alumni association",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --start-date 2024-01-01 --end-date 2024-12-31
  %(prog)s --category "Library Fund" --summary-csv summary.csv
  %(prog)s --donor santos --detailed-csv donations.csv --no-detailed --print
  %(prog)s --check-archive
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Configuration
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to settings.yaml (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Path to the JSON donation store (default: from settings)",
    )

    # Filters
    filter_group = parser.add_argument_group("Filters")
    filter_group.add_argument(
        "--start-date",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Include donations on or after this date (YYYY-MM-DD)",
    )
    filter_group.add_argument(
        "--end-date",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Include donations on or before this date (YYYY-MM-DD)",
    )
    filter_group.add_argument(
        "--category",
        default=None,
        help=f"Only include this category (default: {ALL_CATEGORIES})",
    )
    filter_group.add_argument(
        "--donor",
        default=None,
        help="Only include donors whose name contains this text (case-insensitive)",
    )

    # Sections
    section_group = parser.add_argument_group("Sections")
    section_group.add_argument("--no-category", action="store_true", help="Omit the category breakdown")
    section_group.add_argument("--no-monthly", action="store_true", help="Omit the monthly breakdown")
    section_group.add_argument("--no-yearly", action="store_true", help="Omit the yearly breakdown")
    section_group.add_argument("--no-detailed", action="store_true", help="Omit the detailed donation list")

    # Outputs
    output_group = parser.add_argument_group("Exports")
    output_group.add_argument(
        "--detailed-csv", type=Path, default=None, metavar="FILE",
        help="Export one row per donation to CSV",
    )
    output_group.add_argument(
        "--summary-csv", type=Path, default=None, metavar="FILE",
        help="Export summary metrics and breakdowns to CSV",
    )
    output_group.add_argument(
        "--document", type=Path, default=None, metavar="FILE",
        help="Write the printable HTML report",
    )
    output_group.add_argument(
        "--xlsx", type=Path, default=None, metavar="FILE",
        help="Export the report to an Excel workbook",
    )
    output_group.add_argument(
        "--print",
        action="store_true",
        dest="print_report",
        help="Open the printable report in a browser for printing / saving as PDF",
    )

    # Signatory
    signatory_group = parser.add_argument_group("Signatory")
    signatory_group.add_argument("--signatory-name", default=None, help="Signatory name")
    signatory_group.add_argument("--signatory-title", default=None, help="Signatory position or title")
    signatory_group.add_argument("--signatory-organization", default=None, help="Organization or school")
    signatory_group.add_argument("--signatory-address", default=None, help="Organization address")
    signatory_group.add_argument(
        "--save-signatory",
        action="store_true",
        help="Save the signatory details to settings.yaml",
    )

    # Maintenance
    maintenance_group = parser.add_argument_group("Maintenance")
    maintenance_group.add_argument(
        "--check-archive",
        action="store_true",
        help="Report donations with missing or stale archive metadata",
    )
    maintenance_group.add_argument(
        "--migrate-archive",
        action="store_true",
        help="Re-derive archive metadata for every stale donation",
    )
    maintenance_group.add_argument(
        "--goal-progress",
        action="store_true",
        help="Show progress of public donations toward the current goal",
    )
    maintenance_group.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    maintenance_group.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate configuration files only",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def validate_output_path(path: Path, base_dir: Path | None = None) -> Path:
    """Validate that output path is within allowed directory.

    Prevents path traversal by ensuring the resolved path is within the
    base directory (defaults to current working directory).

    Args:
        path: The path to validate.
        base_dir: Base directory to constrain paths within (default: cwd).

    Returns:
        The resolved, validated path.

    Raises:
        ValueError: If the path escapes the allowed directory.
    """
    if base_dir is None:
        base_dir = Path.cwd()

    resolved_base = base_dir.resolve()
    resolved_path = (base_dir / path).resolve()

    try:
        resolved_path.relative_to(resolved_base)
    except ValueError:
        raise ValueError(
            f"Invalid path: '{path}' escapes the allowed directory. "
            f"Paths must be within '{resolved_base}'"
        ) from None

    return resolved_path


def build_filter(args: argparse.Namespace) -> ReportFilter:
    """Build the report filter from command-line arguments."""
    return ReportFilter(
        start_date=args.start_date,
        end_date=args.end_date,
        category=args.category,
        donor_name=args.donor,
    )


def build_sections(args: argparse.Namespace, defaults: SectionSelection) -> SectionSelection:
    """Apply --no-* flags on top of the configured default sections."""
    return SectionSelection(
        category=defaults.category and not args.no_category,
        monthly=defaults.monthly and not args.no_monthly,
        yearly=defaults.yearly and not args.no_yearly,
        detailed=defaults.detailed and not args.no_detailed,
    )


def build_signatory(args: argparse.Namespace, saved: Signatory) -> Signatory:
    """Overlay command-line signatory values on the saved signatory."""
    overrides = {
        "name": args.signatory_name,
        "title": args.signatory_title,
        "organization": args.signatory_organization,
        "address": args.signatory_address,
    }
    return replace(saved, **{k: v for k, v in overrides.items() if v is not None})


def validate_config(args: argparse.Namespace) -> int:
    """Validate configuration files.

    Args:
        args: Parsed command-line arguments.

    Returns:
        0 if valid, 1 if errors found.
    """
    console.print("[bold]Validating configuration files...[/bold]\n")

    errors = []
    warnings = []

    settings_path = args.config or (args.config_dir / "settings.yaml")
    if settings_path.exists():
        console.print(f"[green]✓[/green] Settings: {settings_path}")
    else:
        warnings.append(f"Settings file not found: {settings_path}")

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
        console.print("\n[green]✓[/green] Configuration loaded successfully")
        console.print(f"  - {len(config.report.categories)} categories")
        console.print(f"  - {len(config.goals)} goals")
        console.print(f"  - Store: {config.store.path}")
        if not config.signatory.name:
            warnings.append("No signatory configured; the printed report will have a blank signature block")
    except (ConfigError, FileNotFoundError) as e:
        errors.append(f"Failed to load configuration: {e}")

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for w in warnings:
            console.print(f"  - {w}")

    if errors:
        console.print("\n[red]Errors:[/red]")
        for err in errors:
            console.print(f"  - {err}")
        return 1

    console.print("\n[green]Configuration is valid.[/green]")
    return 0


def _breakdown_table(
    title: str,
    key_header: str,
    rows: list[tuple[str, GroupTotal]],
    symbol: str,
    key_display: Callable[[str], str] = str,
) -> Table:
    table = Table(title=title)
    table.add_column(key_header)
    table.add_column("Amount", justify="right")
    table.add_column("Count", justify="center")
    for key, total in rows:
        table.add_row(key_display(key), format_currency(total.amount, symbol), str(total.count))
    return table


def display_report(report: Report, sections: SectionSelection, config: Config) -> None:
    """Display the report as rich tables.

    Args:
        report: Report to display.
        sections: Which sections to display.
        config: Application configuration (for the currency symbol).
    """
    symbol = config.output.currency_symbol

    console.print("\n[bold]Donation Report[/bold]")
    console.print(f"  Total donations: {report.count}")
    console.print(f"  Total amount: {format_currency(report.total_amount, symbol)}")
    console.print(f"  Average amount: {format_currency(report.avg_amount, symbol)}")

    if report.has_multiple_currencies:
        console.print(
            f"[yellow]  Note: amounts combine {', '.join(report.currencies)} without conversion[/yellow]"
        )

    if report.is_empty:
        console.print("\n[yellow]No donations match the selected criteria. Try adjusting your filters.[/yellow]")
        return

    if sections.category and report.by_category:
        console.print(_breakdown_table(
            "Breakdown by Category", "Category", report.categories_by_amount(), symbol
        ))
    if sections.monthly and report.by_month:
        console.print(_breakdown_table(
            "Monthly Breakdown", "Month", report.months_ascending(), symbol, format_month_key
        ))
    if sections.yearly and len(report.by_year) > 1:
        console.print(_breakdown_table(
            "Yearly Breakdown", "Year", report.years_ascending(), symbol
        ))

    if sections.detailed:
        table = Table(title=f"Detailed Donations ({len(report.donations)})")
        table.add_column("Date")
        table.add_column("Donor")
        table.add_column("Category")
        table.add_column("Purpose")
        table.add_column("Amount", justify="right")
        for donation in report.donations:
            donor = donation.donor_name
            if donation.is_anonymous:
                donor += " [dim](Anonymous)[/dim]"
            table.add_row(
                format_display_date(donation.donation_date),
                donor,
                donation.category,
                donation.purpose,
                format_currency(donation.amount, symbol),
            )
        console.print(table)


def check_archive_command(store: DonationStore) -> int:
    """Report donations whose archive metadata is missing or stale.

    Returns:
        0 if all archive metadata is consistent, 1 otherwise.
    """
    stale = find_stale_archive_metadata(store.get_all_donations())
    if not stale:
        console.print("[green]Archive metadata is consistent.[/green]")
        return 0

    console.print(f"[yellow]{len(stale)} donation(s) need archive migration:[/yellow]")
    for donation in stale[:10]:
        console.print(
            f"  - {donation.id}: {donation.donation_date.isoformat()} "
            f"(archived as {donation.archive_year}/{donation.archive_month})"
        )
    if len(stale) > 10:
        console.print(f"  ... and {len(stale) - 10} more")
    console.print("Run with --migrate-archive to fix them.")
    return 1


def migrate_archive_command(store: DonationStore, assume_yes: bool = False) -> int:
    """Re-derive archive metadata for all stale donations after confirmation."""
    if not assume_yes:
        response = console.input(
            "[bold]This will update all stale donations with archive metadata. Continue? [y/N]:[/bold] "
        ).strip().lower()
        if response not in ("y", "yes"):
            console.print("[yellow]Migration cancelled[/yellow]")
            return 0

    migrated = migrate_archive_metadata(store)
    console.print(f"[green]Migration completed: {migrated} donation(s) updated[/green]")
    return 0


def goal_progress_command(store: DonationStore, config: Config, today: date | None = None) -> int:
    """Display progress of public donations toward the current goal."""
    goal = select_display_goal(config.goals, today or date.today())
    progress = compute_goal_progress(
        store.get_public_donations(), goal, config.goal_default_amount
    )
    symbol = config.output.currency_symbol
    console.print(f"\n[bold]Donation Goal ({progress.label})[/bold]")
    console.print(f"  Raised: {format_currency(progress.raised, symbol)} from {progress.donation_count} donations")
    console.print(f"  Goal: {format_currency(progress.goal_amount, symbol)}")
    console.print(f"  Progress: {progress.percentage:.1f}%")
    return 0


def run_exports(
    args: argparse.Namespace,
    report: Report,
    sections: SectionSelection,
    signatory: Signatory,
    config: Config,
) -> int:
    """Run the requested exports.

    Returns:
        0 on success, 1 if an export failed.
    """
    from donation_reports.output import (
        CSVExporter,
        DocumentExporter,
        DocumentOptions,
        EmptyReportError,
        ExcelWriter,
        PrintSurfaceError,
    )

    exit_code = 0
    csv_exporter = CSVExporter(config.output)
    document_exporter = DocumentExporter(DocumentOptions.from_config(config))

    try:
        if args.detailed_csv:
            path = validate_output_path(args.detailed_csv)
            try:
                csv_exporter.export_detailed(path, report)
                console.print(f"[green]Detailed CSV written to {path}[/green]")
            except EmptyReportError:
                console.print("[yellow]No donations to export; detailed CSV not written[/yellow]")

        if args.summary_csv:
            path = validate_output_path(args.summary_csv)
            csv_exporter.export_summary(path, report, sections)
            console.print(f"[green]Summary CSV written to {path}[/green]")

        if args.xlsx:
            path = validate_output_path(args.xlsx)
            ExcelWriter(config.output).write(path, report, sections)
            console.print(f"[green]Excel workbook written to {path}[/green]")

        if args.document:
            path = validate_output_path(args.document)
            document_exporter.write(path, report, signatory, sections)
            console.print(f"[green]Printable report written to {path}[/green]")
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.print_report:
        try:
            opened = document_exporter.export(report, signatory, sections)
            console.print(f"[green]Opened report for printing: {opened}[/green]")
        except PrintSurfaceError as e:
            console.print(f"[red]{e}[/red]")
            exit_code = 1

    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (default: sys.argv).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = get_log_level(args.verbose)
    setup_logging(level=log_level, console_output=args.verbose > 0)

    if args.validate_only:
        return validate_config(args)

    try:
        config = load_config(settings_path=args.config, config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("Run with --validate-only to check configuration files.")
        return 1

    # Re-apply logging with configured file (CLI verbosity wins over configured level)
    setup_logging(
        level=log_level if args.verbose else config.logging.level,
        log_file=config.logging.file,
        console_output=args.verbose > 0,
    )

    signatory = build_signatory(args, config.signatory)
    if args.save_signatory:
        settings_path = args.config or (args.config_dir / "settings.yaml")
        save_signatory(settings_path, signatory)
        console.print(f"[green]Signatory saved to {settings_path}[/green]")

    store = JSONDonationStore(args.store or config.store.path)

    try:
        if args.check_archive:
            return check_archive_command(store)
        if args.migrate_archive:
            return migrate_archive_command(store, assume_yes=args.yes)
        if args.goal_progress:
            return goal_progress_command(store, config)

        with console.status("[bold green]Loading donations..."):
            donations = store.get_all_donations()
    except StoreError as e:
        logger.error(f"Donation store failure: {e}")
        console.print(f"[red]Failed to load donations: {e}[/red]")
        console.print("Check the donation store and try again.")
        return 1

    if store.skipped_records:
        console.print(
            f"[yellow]Skipped {len(store.skipped_records)} unreadable donation record(s); "
            "see the log for details[/yellow]"
        )

    if args.category and args.category != ALL_CATEGORIES and args.category not in config.report.categories:
        console.print(f"[yellow]Unknown category '{args.category}'; no donations may match[/yellow]")

    report_filter = build_filter(args)
    sections = build_sections(args, config.report.sections)

    report = generate_report(donations, report_filter)
    logger.info(f"Generated report with {report.count} donations")

    display_report(report, sections, config)

    return run_exports(args, report, sections, signatory, config)


if __name__ == "__main__":
    sys.exit(main())
