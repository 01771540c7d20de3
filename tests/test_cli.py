"""Tests for the command-line interface."""

import csv
import io
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from donation_reports.cli import (
    build_sections,
    build_signatory,
    create_parser,
    main,
    validate_output_path,
)
from donation_reports.models.report import SectionSelection, Signatory


def write_store(path: Path) -> Path:
    """Write a small donation store."""
    path.write_text(json.dumps({"donations": [
        {
            "id": "a", "donorName": "Ana Cruz", "amount": "100", "purpose": "Books",
            "category": "Scholarship Fund", "donationDate": "2024-03-01",
            "archiveMonth": 3, "archiveYear": 2024,
        },
        {
            "id": "b", "donorName": "Ben Tan", "amount": "50", "purpose": "Shelves",
            "category": "Library Fund", "donationDate": "2024-03-15",
            "archiveMonth": 1, "archiveYear": 2024,
        },
    ]}), encoding="utf-8")
    return path


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the CLI inside a temporary directory with a store."""
    monkeypatch.chdir(tmp_path)
    write_store(tmp_path / "donations.json")
    return tmp_path


class TestHelpers:
    """Tests for argument helpers."""

    def test_build_sections_applies_flags(self) -> None:
        args = create_parser().parse_args(["--no-monthly", "--no-detailed"])
        sections = build_sections(args, SectionSelection(yearly=False))
        assert sections == SectionSelection(category=True, monthly=False, yearly=False, detailed=False)

    def test_build_signatory_overlays_saved(self) -> None:
        args = create_parser().parse_args(["--signatory-title", "Treasurer"])
        saved = Signatory(name="Ana Cruz", title="President")
        assert build_signatory(args, saved) == Signatory(name="Ana Cruz", title="Treasurer")

    def test_validate_output_path_rejects_traversal(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            validate_output_path(Path("../outside.csv"), base_dir=tmp_path)

    def test_validate_output_path_accepts_subdir(self, tmp_path: Path) -> None:
        resolved = validate_output_path(Path("exports/out.csv"), base_dir=tmp_path)
        assert resolved == (tmp_path / "exports" / "out.csv").resolve()


class TestMain:
    """Tests for main()."""

    def test_category_filtered_detailed_csv(self, workspace: Path) -> None:
        """Test a filtered detailed export holds only matching rows."""
        result = main([
            "--store", "donations.json",
            "--category", "Library Fund",
            "--detailed-csv", "out.csv",
        ])

        assert result == 0
        rows = list(csv.reader(io.StringIO((workspace / "out.csv").read_text(encoding="utf-8"))))
        assert len(rows) == 2
        assert rows[1][1] == "Ben Tan"

    def test_empty_report_skips_detailed_csv(self, workspace: Path) -> None:
        """Test an empty result writes no detailed CSV but still succeeds."""
        result = main([
            "--store", "donations.json",
            "--donor", "nobody",
            "--detailed-csv", "out.csv",
            "--summary-csv", "summary.csv",
        ])

        assert result == 0
        assert not (workspace / "out.csv").exists()
        assert (workspace / "summary.csv").exists()

    def test_document_and_xlsx(self, workspace: Path) -> None:
        result = main([
            "--store", "donations.json",
            "--document", "report.html",
            "--xlsx", "report.xlsx",
        ])

        assert result == 0
        assert "Ana Cruz" in (workspace / "report.html").read_text(encoding="utf-8")
        assert (workspace / "report.xlsx").exists()

    def test_output_outside_cwd_rejected(self, workspace: Path) -> None:
        result = main(["--store", "donations.json", "--summary-csv", "../escape.csv"])
        assert result == 1

    def test_corrupt_store_reports_failure(self, workspace: Path) -> None:
        """Test a store read failure exits non-zero."""
        (workspace / "broken.json").write_text("{", encoding="utf-8")
        assert main(["--store", "broken.json"]) == 1

    def test_print_without_browser_fails(self, workspace: Path) -> None:
        """Test a blocked print surface exits non-zero."""
        browser = MagicMock()
        browser.open.return_value = False
        with patch("donation_reports.output.document_exporter.webbrowser.get", return_value=browser):
            assert main(["--store", "donations.json", "--print"]) == 1

    def test_check_and_migrate_archive(self, workspace: Path) -> None:
        """Test the stale record is reported, then repaired."""
        assert main(["--store", "donations.json", "--check-archive"]) == 1
        assert main(["--store", "donations.json", "--migrate-archive", "--yes"]) == 0
        assert main(["--store", "donations.json", "--check-archive"]) == 0

    def test_goal_progress(self, workspace: Path) -> None:
        assert main(["--store", "donations.json", "--goal-progress"]) == 0

    def test_save_signatory(self, workspace: Path) -> None:
        """Test signatory details are persisted to settings.yaml."""
        result = main([
            "--store", "donations.json",
            "--signatory-name", "Juan dela Cruz",
            "--save-signatory",
        ])

        assert result == 0
        assert "Juan dela Cruz" in (workspace / "config" / "settings.yaml").read_text(encoding="utf-8")

    def test_invalid_config(self, workspace: Path) -> None:
        (workspace / "bad.yaml").write_text("output: [", encoding="utf-8")
        assert main(["--config", "bad.yaml", "--store", "donations.json"]) == 1

    def test_validate_only(self, workspace: Path) -> None:
        assert main(["--validate-only"]) == 0
