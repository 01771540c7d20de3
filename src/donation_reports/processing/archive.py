"""Archive metadata consistency checks and migration.

Donations carry archive_month/archive_year copied from donation_date for
indexed lookup. Reports never read these fields; only archive-indexed
store queries do, and those must check consistency first.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from donation_reports.models.donation import Donation
from donation_reports.utils.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from donation_reports.store.base import DonationStore

logger = get_logger(__name__)


class StaleArchiveError(Exception):
    """Exception raised when archive metadata disagrees with donation dates."""

    def __init__(self, stale: list[Donation]):
        """Initialize StaleArchiveError.

        Args:
            stale: Donations whose archive fields are missing or out of date.
        """
        self.stale = stale
        super().__init__(
            f"{len(stale)} donation(s) have missing or stale archive metadata; "
            "run the archive migration before using archive-indexed queries"
        )


def find_stale_archive_metadata(donations: Iterable[Donation]) -> list[Donation]:
    """Find donations whose archive fields are missing or out of sync.

    Args:
        donations: Donations to check.

    Returns:
        Donations needing migration, in input order.
    """
    return [d for d in donations if d.has_stale_archive_metadata]


def require_consistent_archive(donations: Iterable[Donation]) -> None:
    """Raise StaleArchiveError if any donation has stale archive metadata."""
    stale = find_stale_archive_metadata(donations)
    if stale:
        raise StaleArchiveError(stale)


def migrate_archive_metadata(store: "DonationStore") -> int:
    """Re-derive archive metadata for every stale donation in a store.

    Args:
        store: Store to migrate.

    Returns:
        Number of donations updated.

    Raises:
        StoreError: If reading or writing the store fails.
    """
    with LogContext(logger, "archive migration", store=store.name):
        stale = find_stale_archive_metadata(store.get_all_donations())
        for donation in stale:
            # update_donation re-derives the archive fields from donation_date
            store.update_donation(donation.id, {"donation_date": donation.donation_date})
            logger.debug(
                f"Migrated archive metadata for {donation.id}: "
                f"{donation.archive_year}/{donation.archive_month} -> "
                f"{donation.donation_date.year}/{donation.donation_date.month}"
            )

    logger.info(f"Archive migration updated {len(stale)} donation(s)")
    return len(stale)
