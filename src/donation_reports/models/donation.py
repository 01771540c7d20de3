"""Donation data model."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from donation_reports.utils.date_utils import date_to_iso, parse_date
from donation_reports.utils.decimal_utils import parse_amount

# Fixed list of donation categories offered by the donation form
DONATION_CATEGORIES = [
    "Scholarship Fund",
    "Building Fund",
    "Equipment Fund",
    "Library Fund",
    "General Operations",
    "Special Projects",
    "Other",
]

# Filter sentinel meaning "do not filter by category"
ALL_CATEGORIES = "All Categories"

DEFAULT_CURRENCY = "PHP"


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)  # type: ignore[call-overload]


def _optional_datetime(value: object) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class Donation:
    """A single recorded philanthropic contribution.

    Attributes:
        id: Store-assigned identifier (opaque).
        donor_name: Name of the donor as entered.
        amount: Non-negative donation amount.
        purpose: Free-text purpose of the donation.
        category: One of DONATION_CATEGORIES.
        donation_date: Calendar date of the donation.
        donor_email: Optional donor contact email.
        currency: ISO currency code.
        description: Optional longer description.
        is_public: Whether the donation is shown publicly.
        is_anonymous: Whether the donor asked to stay anonymous.
        archive_month: Month (1-12) of donation_date, precomputed for indexed lookup.
        archive_year: Year of donation_date, precomputed for indexed lookup.
        created_at: Store creation timestamp.
        updated_at: Store update timestamp.
    """

    donor_name: str
    amount: Decimal
    purpose: str
    category: str
    donation_date: date

    id: str = ""
    donor_email: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    description: Optional[str] = None
    is_public: bool = True
    is_anonymous: bool = False

    # Archive metadata
    archive_month: Optional[int] = None
    archive_year: Optional[int] = None

    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def has_stale_archive_metadata(self) -> bool:
        """True if the archive fields are missing or disagree with donation_date."""
        return (
            self.archive_month != self.donation_date.month
            or self.archive_year != self.donation_date.year
        )

    def with_archive_metadata(self) -> "Donation":
        """Return a copy with archive_month/archive_year derived from donation_date."""
        return replace(
            self,
            archive_month=self.donation_date.month,
            archive_year=self.donation_date.year,
        )

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Donation":
        """Create a Donation from a stored document.

        Accepts the store's camelCase keys (donorName, donationDate, ...)
        as well as snake_case keys.

        Args:
            data: Dictionary containing donation data.

        Returns:
            A new Donation instance.

        Raises:
            ValueError: If the date or amount is missing or invalid.
        """

        def get(camel: str, snake: str, default: object = None) -> object:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        raw_date = get("donationDate", "donation_date")
        if raw_date is None:
            raise ValueError("Donation is missing a donation date")

        return cls(
            id=str(data.get("id", "")),
            donor_name=str(get("donorName", "donor_name", "")),
            donor_email=_optional_str(get("donorEmail", "donor_email")),
            amount=parse_amount(data.get("amount")),
            currency=str(data.get("currency") or DEFAULT_CURRENCY),
            purpose=str(data.get("purpose", "")),
            category=str(data.get("category", "Other")),
            description=_optional_str(data.get("description")),
            is_public=bool(get("isPublic", "is_public", True)),
            is_anonymous=bool(get("isAnonymous", "is_anonymous", False)),
            donation_date=parse_date(raw_date),  # type: ignore[arg-type]
            archive_month=_optional_int(get("archiveMonth", "archive_month")),
            archive_year=_optional_int(get("archiveYear", "archive_year")),
            created_at=_optional_datetime(get("createdAt", "created_at")),
            updated_at=_optional_datetime(get("updatedAt", "updated_at")),
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to the store's camelCase document shape."""
        data: dict[str, object] = {
            "id": self.id,
            "donorName": self.donor_name,
            "amount": str(self.amount),
            "currency": self.currency,
            "purpose": self.purpose,
            "category": self.category,
            "isPublic": self.is_public,
            "isAnonymous": self.is_anonymous,
            "donationDate": date_to_iso(self.donation_date),
        }
        if self.donor_email:
            data["donorEmail"] = self.donor_email
        if self.description:
            data["description"] = self.description
        if self.archive_month is not None:
            data["archiveMonth"] = self.archive_month
        if self.archive_year is not None:
            data["archiveYear"] = self.archive_year
        if self.created_at:
            data["createdAt"] = self.created_at.isoformat()
        if self.updated_at:
            data["updatedAt"] = self.updated_at.isoformat()
        return data

    def __repr__(self) -> str:
        return (
            f"Donation(id={self.id!r}, donor={self.donor_name!r}, "
            f"amount={self.amount}, date={self.donation_date.isoformat()})"
        )
