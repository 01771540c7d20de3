"""JSON file donation store."""

import json
import os
import tempfile
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from donation_reports.models.donation import Donation
from donation_reports.store.base import (
    UPDATABLE_FIELDS,
    DonationNotFoundError,
    DonationStore,
    StoreError,
)
from donation_reports.utils.date_utils import parse_date
from donation_reports.utils.decimal_utils import parse_amount
from donation_reports.utils.logging_config import get_logger

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JSONDonationStore(DonationStore):
    """Stores donations in a single JSON document on disk.

    File layout::

        {"donations": [{"id": "...", "donorName": "...", ...}, ...]}

    Records that cannot be parsed (not an object, bad date or amount) are
    skipped on read, logged, and listed in skipped_records; they are written
    back untouched so no data is lost.
    """

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: Path of the JSON file. A missing file is an empty store.
        """
        self.path = Path(path)
        self.skipped_records: list[object] = []

    def _read_documents(self) -> list[object]:
        if not self.path.exists():
            logger.info(f"Donation store not found at {self.path}, starting empty")
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Invalid JSON in donation store: {e}", str(self.path)) from e
        except OSError as e:
            raise StoreError(f"Cannot read donation store: {e}", str(self.path)) from e

        if isinstance(content, list):
            documents = content
        elif isinstance(content, dict):
            documents = content.get("donations") or []
        else:
            raise StoreError(
                f"Donation store must hold an object or list, got {type(content).__name__}",
                str(self.path),
            )

        if not isinstance(documents, list):
            raise StoreError("'donations' must be a list", str(self.path))
        return documents

    def _write_documents(self, documents: list[object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"donations": documents}, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StoreError(f"Cannot write donation store: {e}", str(self.path)) from e

    def _load(self) -> tuple[list[Donation], list[object]]:
        """Parse the store into donations plus the raw records that failed."""
        donations: list[Donation] = []
        skipped: list[object] = []
        for document in self._read_documents():
            if not isinstance(document, dict):
                logger.warning(
                    f"Skipping donation record that is not an object: {type(document).__name__}"
                )
                skipped.append(document)
                continue
            try:
                donations.append(Donation.from_dict(document))
            except (ValueError, TypeError, KeyError) as e:
                logger.warning(f"Skipping unreadable donation record {document.get('id', '?')}: {e}")
                skipped.append(document)
        return donations, skipped

    def _save(self, donations: list[Donation], skipped: list[object]) -> None:
        self._write_documents([d.to_dict() for d in donations] + skipped)

    def get_all_donations(self) -> list[Donation]:
        donations, self.skipped_records = self._load()
        logger.debug(f"Loaded {len(donations)} donations from {self.path}")
        return sorted(donations, key=lambda d: d.donation_date, reverse=True)

    def get_donation(self, donation_id: str) -> Donation:
        donations, _ = self._load()
        for donation in donations:
            if donation.id == donation_id:
                return donation
        raise DonationNotFoundError(donation_id)

    def add_donation(self, donation: Donation) -> str:
        donations, skipped = self._load()
        new_donation = replace(
            donation,
            id=donation.id or uuid.uuid4().hex,
            created_at=_now(),
        ).with_archive_metadata()

        if any(d.id == new_donation.id for d in donations):
            raise StoreError(f"Donation id already exists: {new_donation.id}", str(self.path))

        donations.append(new_donation)
        self._save(donations, skipped)
        logger.info(f"Added donation {new_donation.id}")
        return new_donation.id

    def update_donation(self, donation_id: str, changes: dict[str, object]) -> Donation:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        normalized = dict(changes)
        if "amount" in normalized:
            normalized["amount"] = parse_amount(normalized["amount"])
        if "donation_date" in normalized:
            normalized["donation_date"] = parse_date(normalized["donation_date"])  # type: ignore[arg-type]

        donations, skipped = self._load()
        for i, donation in enumerate(donations):
            if donation.id == donation_id:
                updated = replace(donation, **normalized, updated_at=_now())  # type: ignore[arg-type]
                donations[i] = updated.with_archive_metadata()
                self._save(donations, skipped)
                logger.info(f"Updated donation {donation_id}: {', '.join(sorted(changes))}")
                return donations[i]

        raise DonationNotFoundError(donation_id)

    def delete_donation(self, donation_id: str) -> None:
        donations, skipped = self._load()
        remaining = [d for d in donations if d.id != donation_id]
        if len(remaining) == len(donations):
            raise DonationNotFoundError(donation_id)
        self._save(remaining, skipped)
        logger.info(f"Deleted donation {donation_id}")
