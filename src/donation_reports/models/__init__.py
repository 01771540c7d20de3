"""Data models for donations, reports, and fundraising goals."""

from donation_reports.models.donation import (
    ALL_CATEGORIES,
    DONATION_CATEGORIES,
    Donation,
)
from donation_reports.models.goal import DonationGoal, GoalType
from donation_reports.models.report import (
    GroupTotal,
    Report,
    ReportFilter,
    SectionSelection,
    Signatory,
)

__all__ = [
    "ALL_CATEGORIES",
    "DONATION_CATEGORIES",
    "Donation",
    "DonationGoal",
    "GoalType",
    "GroupTotal",
    "Report",
    "ReportFilter",
    "SectionSelection",
    "Signatory",
]
