"""Donation report generation."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from donation_reports.models.donation import Donation
from donation_reports.models.report import GroupTotal, Report, ReportFilter
from donation_reports.utils.date_utils import month_key, year_key
from donation_reports.utils.logging_config import get_logger

logger = get_logger(__name__)


def filter_donations(
    donations: Iterable[Donation],
    report_filter: Optional[ReportFilter] = None,
) -> list[Donation]:
    """Return the donations matching a filter, preserving input order.

    Args:
        donations: Donation snapshot from the store.
        report_filter: Filter to apply; None keeps everything.

    Returns:
        List of matching donations.
    """
    if report_filter is None:
        return list(donations)
    return [d for d in donations if report_filter.matches(d)]


def _accumulate(groups: dict[str, GroupTotal], key: str, amount: Decimal) -> None:
    groups[key] = groups.get(key, GroupTotal()).add(amount)


def generate_report(
    donations: Iterable[Donation],
    report_filter: Optional[ReportFilter] = None,
) -> Report:
    """Generate a donation report from a donation snapshot.

    Single source of truth for report figures - used by the on-screen
    tables and by every exporter.

    Month and year keys come from donation_date, never from the archive
    fields, so the report reflects the current date even if archive
    metadata is stale.

    Args:
        donations: Donation snapshot (not modified).
        report_filter: Optional filter (date range, category, donor name).

    Returns:
        Report with totals and category/month/year/currency groupings.
    """
    report_filter = report_filter or ReportFilter()
    matching = filter_donations(donations, report_filter)

    total_amount = Decimal("0")
    by_category: dict[str, GroupTotal] = {}
    by_month: dict[str, GroupTotal] = {}
    by_year: dict[str, GroupTotal] = {}
    by_currency: dict[str, GroupTotal] = {}

    # Every donation lands in exactly one key of each grouping
    for donation in matching:
        amount = donation.amount
        total_amount += amount
        _accumulate(by_category, donation.category, amount)
        _accumulate(by_month, month_key(donation.donation_date), amount)
        _accumulate(by_year, year_key(donation.donation_date), amount)
        _accumulate(by_currency, donation.currency, amount)

    count = len(matching)
    avg_amount = total_amount / count if count else Decimal("0")

    logger.debug(
        f"Generated report: {count} donations, total {total_amount}, "
        f"{len(by_category)} categories, {len(by_month)} months"
    )
    if len(by_currency) > 1:
        logger.warning(
            f"Report mixes currencies ({', '.join(sorted(by_currency))}); "
            "totals are summed without conversion"
        )

    return Report(
        count=count,
        total_amount=total_amount,
        avg_amount=avg_amount,
        by_category=by_category,
        by_month=by_month,
        by_year=by_year,
        by_currency=by_currency,
        donations=tuple(matching),
        report_filter=report_filter,
    )
