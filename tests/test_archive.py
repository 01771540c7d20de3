"""Tests for archive metadata checks and migration."""

import json
from pathlib import Path

import pytest

from donation_reports.processing.archive import (
    StaleArchiveError,
    find_stale_archive_metadata,
    migrate_archive_metadata,
    require_consistent_archive,
)
from donation_reports.store.json_store import JSONDonationStore


def record(donation_id: str, donation_date: str, **archive: int) -> dict[str, object]:
    """Helper to build a raw store record."""
    data: dict[str, object] = {
        "id": donation_id,
        "donorName": "Maria Santos",
        "amount": "100",
        "purpose": "Test",
        "category": "Other",
        "donationDate": donation_date,
    }
    data.update(archive)
    return data


@pytest.fixture
def stale_store(tmp_path: Path) -> JSONDonationStore:
    """Store with one consistent, one missing and one stale record."""
    path = tmp_path / "donations.json"
    path.write_text(json.dumps({"donations": [
        record("ok", "2024-03-01", archiveMonth=3, archiveYear=2024),
        record("missing", "2024-04-01"),
        record("stale", "2024-05-01", archiveMonth=1, archiveYear=2023),
    ]}), encoding="utf-8")
    return JSONDonationStore(path)


class TestFindStale:
    """Tests for stale metadata detection."""

    def test_missing_and_mismatched_detected(self, stale_store: JSONDonationStore) -> None:
        stale = find_stale_archive_metadata(stale_store.get_all_donations())
        assert {d.id for d in stale} == {"missing", "stale"}

    def test_require_consistent_raises(self, stale_store: JSONDonationStore) -> None:
        with pytest.raises(StaleArchiveError) as exc_info:
            require_consistent_archive(stale_store.get_all_donations())
        assert len(exc_info.value.stale) == 2


class TestMigrateArchive:
    """Tests for migrate_archive_metadata."""

    def test_migration_fixes_all_stale(self, stale_store: JSONDonationStore) -> None:
        """Test migration updates only stale records and clears the drift."""
        migrated = migrate_archive_metadata(stale_store)

        assert migrated == 2
        donations = stale_store.get_all_donations()
        assert find_stale_archive_metadata(donations) == []
        fixed = stale_store.get_donation("stale")
        assert (fixed.archive_year, fixed.archive_month) == (2024, 5)

    def test_migration_is_idempotent(self, stale_store: JSONDonationStore) -> None:
        migrate_archive_metadata(stale_store)
        assert migrate_archive_metadata(stale_store) == 0

    def test_period_lookup_after_migration(self, stale_store: JSONDonationStore) -> None:
        """Test archive-indexed queries work once migrated."""
        migrate_archive_metadata(stale_store)
        assert [d.id for d in stale_store.get_donations_for_period(2024, 5)] == ["stale"]
