"""Abstract donation store interface."""

from abc import ABC, abstractmethod
from typing import Optional

from donation_reports.models.donation import Donation
from donation_reports.processing.archive import require_consistent_archive


class StoreError(Exception):
    """Exception raised when the donation store cannot be read or written."""

    def __init__(self, message: str, location: Optional[str] = None):
        """Initialize StoreError.

        Args:
            message: Error message.
            location: Optional path or URL of the failing store.
        """
        self.location = location
        super().__init__(message)


class DonationNotFoundError(StoreError):
    """Exception raised when a donation id does not exist in the store."""

    def __init__(self, donation_id: str):
        self.donation_id = donation_id
        super().__init__(f"Donation not found: {donation_id}")


# Fields a caller may change through update_donation
UPDATABLE_FIELDS = frozenset({
    "donor_name",
    "donor_email",
    "amount",
    "currency",
    "purpose",
    "category",
    "description",
    "is_public",
    "is_anonymous",
    "donation_date",
})


class DonationStore(ABC):
    """Persistence for donation records.

    Subclasses must implement the read and write primitives. Mutations
    re-derive the archive metadata so it stays in sync with donation_date.
    Failures raise StoreError and are never retried.
    """

    @property
    def name(self) -> str:
        """Return store name for logging."""
        return self.__class__.__name__

    @abstractmethod
    def get_all_donations(self) -> list[Donation]:
        """Return every donation, most recent donation date first.

        Raises:
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    def get_donation(self, donation_id: str) -> Donation:
        """Return a single donation.

        Raises:
            DonationNotFoundError: If the id is unknown.
        """

    @abstractmethod
    def add_donation(self, donation: Donation) -> str:
        """Persist a new donation and return its assigned id."""

    @abstractmethod
    def update_donation(self, donation_id: str, changes: dict[str, object]) -> Donation:
        """Apply field changes to a donation and return the updated record.

        Raises:
            DonationNotFoundError: If the id is unknown.
            ValueError: If a change names a field that cannot be updated.
        """

    @abstractmethod
    def delete_donation(self, donation_id: str) -> None:
        """Remove a donation.

        Raises:
            DonationNotFoundError: If the id is unknown.
        """

    def get_public_donations(self) -> list[Donation]:
        """Return public donations, most recent first."""
        return [d for d in self.get_all_donations() if d.is_public]

    def toggle_visibility(self, donation_id: str, is_public: bool) -> Donation:
        """Mark a donation public or private."""
        return self.update_donation(donation_id, {"is_public": is_public})

    def get_donations_for_period(self, year: int, month: Optional[int] = None) -> list[Donation]:
        """Return donations archived under a year (and optionally a month).

        Uses the precomputed archive fields, so the snapshot is checked for
        stale archive metadata first.

        Raises:
            StaleArchiveError: If any record's archive fields have drifted.
        """
        donations = self.get_all_donations()
        require_consistent_archive(donations)
        return [
            d for d in donations
            if d.archive_year == year and (month is None or d.archive_month == month)
        ]
