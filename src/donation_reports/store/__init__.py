"""Donation persistence."""

from donation_reports.store.base import DonationNotFoundError, DonationStore, StoreError
from donation_reports.store.json_store import JSONDonationStore

__all__ = [
    "DonationNotFoundError",
    "DonationStore",
    "JSONDonationStore",
    "StoreError",
]
