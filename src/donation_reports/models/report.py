"""Report data models for donation reporting."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Optional

from donation_reports.models.donation import ALL_CATEGORIES, Donation
from donation_reports.utils.date_utils import is_date_in_range


@dataclass(frozen=True)
class ReportFilter:
    """Query answered by the report generator.

    Attributes:
        start_date: Earliest donation date to include (inclusive).
        end_date: Latest donation date to include (inclusive).
        category: Exact category to include; None or ALL_CATEGORIES means all.
        donor_name: Case-insensitive substring of the donor name.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: Optional[str] = None
    donor_name: Optional[str] = None

    @property
    def filters_category(self) -> bool:
        """Whether a concrete category restriction is set."""
        return bool(self.category) and self.category != ALL_CATEGORIES

    def matches(self, donation: Donation) -> bool:
        """Check whether a donation passes every filter predicate.

        Predicates are applied in order: start date, end date, category,
        donor name.
        """
        if not is_date_in_range(donation.donation_date, self.start_date, self.end_date):
            return False
        if self.filters_category and donation.category != self.category:
            return False
        if self.donor_name and self.donor_name.lower() not in donation.donor_name.lower():
            return False
        return True


@dataclass(frozen=True)
class GroupTotal:
    """Accumulated amount and donation count for one grouping key."""

    amount: Decimal = Decimal("0")
    count: int = 0

    def add(self, amount: Decimal) -> "GroupTotal":
        """Return a new total with one more donation of the given amount."""
        return GroupTotal(amount=self.amount + amount, count=self.count + 1)


@dataclass(frozen=True)
class Report:
    """Immutable aggregate computed from a filtered donation set.

    Groupings keep insertion order of first encounter; presentation code
    sorts explicitly through the helper methods. Groupings are stored as
    read-only mappings, so a Report cannot be changed after construction.
    Reports compare by value but are not hashable.

    Attributes:
        count: Number of donations matching the filter.
        total_amount: Sum of matching donation amounts.
        avg_amount: total_amount / count, or 0 when count is 0.
        by_category: Totals keyed by category name.
        by_month: Totals keyed by YYYY-MM of the donation date.
        by_year: Totals keyed by YYYY of the donation date.
        by_currency: Totals keyed by currency code.
        donations: The matching donations.
        report_filter: Filter the report was generated with.
    """

    count: int = 0
    total_amount: Decimal = Decimal("0")
    avg_amount: Decimal = Decimal("0")
    by_category: Mapping[str, GroupTotal] = field(default_factory=dict)
    by_month: Mapping[str, GroupTotal] = field(default_factory=dict)
    by_year: Mapping[str, GroupTotal] = field(default_factory=dict)
    by_currency: Mapping[str, GroupTotal] = field(default_factory=dict)
    donations: tuple[Donation, ...] = ()
    report_filter: ReportFilter = field(default_factory=ReportFilter, compare=False)

    def __post_init__(self) -> None:
        for name in ("by_category", "by_month", "by_year", "by_currency"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(self, "donations", tuple(self.donations))

    @property
    def is_empty(self) -> bool:
        """True when no donation matched the filter."""
        return self.count == 0

    @property
    def currencies(self) -> list[str]:
        """Sorted currency codes present in the report."""
        return sorted(self.by_currency)

    @property
    def has_multiple_currencies(self) -> bool:
        """True when amounts in different currencies were summed together."""
        return len(self.by_currency) > 1

    def categories_by_amount(self) -> list[tuple[str, GroupTotal]]:
        """Category totals sorted by amount, largest first."""
        return sorted(self.by_category.items(), key=lambda item: item[1].amount, reverse=True)

    def months_ascending(self) -> list[tuple[str, GroupTotal]]:
        """Monthly totals in chronological order."""
        return sorted(self.by_month.items())

    def years_ascending(self) -> list[tuple[str, GroupTotal]]:
        """Yearly totals in chronological order."""
        return sorted(self.by_year.items())


@dataclass(frozen=True)
class SectionSelection:
    """Which report sections are rendered or exported.

    Purely a presentation filter; never alters Report contents.
    """

    category: bool = True
    monthly: bool = True
    yearly: bool = True
    detailed: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "SectionSelection":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            category=bool(data.get("category", True)),
            monthly=bool(data.get("monthly", True)),
            yearly=bool(data.get("yearly", True)),
            detailed=bool(data.get("detailed", True)),
        )


@dataclass(frozen=True)
class Signatory:
    """Person whose signature block closes the printed report."""

    name: str = ""
    title: str = ""
    organization: str = ""
    address: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Signatory":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            name=str(data.get("name", "") or ""),
            title=str(data.get("title", "") or ""),
            organization=str(data.get("organization", "") or ""),
            address=str(data.get("address", "") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        """Serialize for persistence."""
        return {
            "name": self.name,
            "title": self.title,
            "organization": self.organization,
            "address": self.address,
        }
