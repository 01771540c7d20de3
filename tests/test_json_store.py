"""Tests for the JSON donation store."""

import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from donation_reports.models.donation import Donation
from donation_reports.processing.archive import StaleArchiveError
from donation_reports.store.base import DonationNotFoundError, StoreError
from donation_reports.store.json_store import JSONDonationStore


def create_donation(
    amount: str = "100",
    donation_date: date = date(2024, 3, 1),
    donor_name: str = "Maria Santos",
    **kwargs: object,
) -> Donation:
    """Helper to create a Donation for testing."""
    return Donation(
        donor_name=donor_name,
        amount=Decimal(amount),
        purpose="Scholarship",
        category="Scholarship Fund",
        donation_date=donation_date,
        **kwargs,  # type: ignore[arg-type]
    )


def write_store(path: Path, documents: list[object]) -> None:
    """Write raw store documents."""
    path.write_text(json.dumps({"donations": documents}), encoding="utf-8")


@pytest.fixture
def store(tmp_path: Path) -> JSONDonationStore:
    return JSONDonationStore(tmp_path / "donations.json")


class TestReading:
    """Tests for loading donations."""

    def test_missing_file_is_empty(self, store: JSONDonationStore) -> None:
        assert store.get_all_donations() == []

    def test_sorted_most_recent_first(self, tmp_path: Path) -> None:
        """Test donations are returned by descending donation date."""
        path = tmp_path / "donations.json"
        write_store(path, [
            {"id": "old", "donorName": "A", "amount": "1", "donationDate": "2023-01-01"},
            {"id": "new", "donorName": "B", "amount": "2", "donationDate": "2024-06-01T00:00:00.000Z"},
        ])

        donations = JSONDonationStore(path).get_all_donations()

        assert [d.id for d in donations] == ["new", "old"]
        assert donations[0].donation_date == date(2024, 6, 1)

    def test_plain_list_accepted(self, tmp_path: Path) -> None:
        """Test a bare list of records is read."""
        path = tmp_path / "donations.json"
        path.write_text(
            json.dumps([{"id": "x", "donorName": "A", "amount": 5, "donationDate": "2024-01-01"}]),
            encoding="utf-8",
        )

        assert [d.id for d in JSONDonationStore(path).get_all_donations()] == ["x"]

    def test_unreadable_records_skipped_and_preserved(self, tmp_path: Path) -> None:
        """Test bad records are skipped on read but kept on write."""
        path = tmp_path / "donations.json"
        bad = {"id": "bad", "donorName": "B", "amount": "1", "donationDate": "not a date"}
        write_store(path, [
            {"id": "ok", "donorName": "A", "amount": "1", "donationDate": "2024-01-01"},
            bad,
        ])
        store = JSONDonationStore(path)

        donations = store.get_all_donations()
        assert [d.id for d in donations] == ["ok"]
        assert store.skipped_records == [bad]

        store.delete_donation("ok")
        saved = json.loads(path.read_text(encoding="utf-8"))["donations"]
        assert saved == [bad]

    def test_non_object_records_skipped_and_preserved(self, tmp_path: Path) -> None:
        """Test records that are not JSON objects are skipped, not fatal."""
        path = tmp_path / "donations.json"
        write_store(path, [
            {"id": "ok", "donorName": "A", "amount": "1", "donationDate": "2024-01-01"},
            "garbage",
            42,
        ])
        store = JSONDonationStore(path)

        donations = store.get_all_donations()
        assert [d.id for d in donations] == ["ok"]
        assert store.skipped_records == ["garbage", 42]

        store.toggle_visibility("ok", False)
        saved = json.loads(path.read_text(encoding="utf-8"))["donations"]
        assert saved[1:] == ["garbage", 42]
        assert saved[0]["isPublic"] is False

    def test_invalid_json_raises_store_error(self, tmp_path: Path) -> None:
        """Test a corrupt file raises StoreError with the location."""
        path = tmp_path / "donations.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError) as exc_info:
            JSONDonationStore(path).get_all_donations()

        assert exc_info.value.location == str(path)


class TestWriting:
    """Tests for add, update and delete."""

    def test_add_assigns_id_and_archive_fields(self, store: JSONDonationStore) -> None:
        """Test a new donation gets an id and archive metadata."""
        donation_id = store.add_donation(create_donation(donation_date=date(2024, 7, 4)))

        stored = store.get_donation(donation_id)
        assert donation_id
        assert stored.archive_month == 7
        assert stored.archive_year == 2024
        assert stored.created_at is not None

    def test_add_duplicate_id_rejected(self, store: JSONDonationStore) -> None:
        store.add_donation(create_donation(id="d1"))
        with pytest.raises(StoreError):
            store.add_donation(create_donation(id="d1"))

    def test_round_trip_fields(self, store: JSONDonationStore) -> None:
        """Test stored fields read back unchanged."""
        original = create_donation(
            "1234.56",
            id="d1",
            donor_email="maria@example.com",
            description="Gift",
            is_public=False,
            is_anonymous=True,
            currency="USD",
        )
        store.add_donation(original)

        stored = store.get_donation("d1")

        assert stored.amount == Decimal("1234.56")
        assert stored.donor_email == "maria@example.com"
        assert stored.description == "Gift"
        assert stored.is_public is False
        assert stored.is_anonymous is True
        assert stored.currency == "USD"

    def test_update_date_resyncs_archive(self, store: JSONDonationStore) -> None:
        """Test changing the date re-derives archive metadata."""
        store.add_donation(create_donation(id="d1", donation_date=date(2024, 1, 15)))

        updated = store.update_donation("d1", {"donation_date": "2024-11-02"})

        assert updated.donation_date == date(2024, 11, 2)
        assert (updated.archive_year, updated.archive_month) == (2024, 11)
        assert updated.updated_at is not None

    def test_update_unknown_field_rejected(self, store: JSONDonationStore) -> None:
        store.add_donation(create_donation(id="d1"))
        with pytest.raises(ValueError):
            store.update_donation("d1", {"archive_month": 3})

    def test_update_missing_id(self, store: JSONDonationStore) -> None:
        with pytest.raises(DonationNotFoundError):
            store.update_donation("nope", {"amount": "5"})

    def test_toggle_visibility(self, store: JSONDonationStore) -> None:
        """Test hiding a donation removes it from the public list."""
        store.add_donation(create_donation(id="d1"))
        store.add_donation(create_donation(id="d2"))

        store.toggle_visibility("d1", False)

        assert [d.id for d in store.get_public_donations()] == ["d2"]

    def test_delete(self, store: JSONDonationStore) -> None:
        store.add_donation(create_donation(id="d1"))
        store.delete_donation("d1")
        with pytest.raises(DonationNotFoundError):
            store.get_donation("d1")

    def test_delete_missing_id(self, store: JSONDonationStore) -> None:
        with pytest.raises(DonationNotFoundError):
            store.delete_donation("nope")


class TestPeriodQueries:
    """Tests for archive-indexed queries."""

    def test_period_lookup(self, store: JSONDonationStore) -> None:
        """Test donations are selected by archived year and month."""
        store.add_donation(create_donation(id="mar", donation_date=date(2024, 3, 5)))
        store.add_donation(create_donation(id="apr", donation_date=date(2024, 4, 5)))
        store.add_donation(create_donation(id="old", donation_date=date(2023, 3, 5)))

        assert {d.id for d in store.get_donations_for_period(2024)} == {"mar", "apr"}
        assert [d.id for d in store.get_donations_for_period(2024, 3)] == ["mar"]

    def test_stale_archive_blocks_period_lookup(self, tmp_path: Path) -> None:
        """Test stale archive fields raise instead of returning wrong results."""
        path = tmp_path / "donations.json"
        write_store(path, [{
            "id": "d1", "donorName": "A", "amount": "1",
            "donationDate": "2024-05-01", "archiveMonth": 4, "archiveYear": 2024,
        }])

        with pytest.raises(StaleArchiveError) as exc_info:
            JSONDonationStore(path).get_donations_for_period(2024, 4)

        assert [d.id for d in exc_info.value.stale] == ["d1"]
