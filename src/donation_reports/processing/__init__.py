"""Donation processing: report generation, archive maintenance, goal progress."""

from donation_reports.processing.archive import (
    StaleArchiveError,
    find_stale_archive_metadata,
    migrate_archive_metadata,
    require_consistent_archive,
)
from donation_reports.processing.goal_progress import (
    GoalProgress,
    compute_goal_progress,
    select_display_goal,
)
from donation_reports.processing.report_generator import (
    filter_donations,
    generate_report,
)

__all__ = [
    "StaleArchiveError",
    "find_stale_archive_metadata",
    "migrate_archive_metadata",
    "require_consistent_archive",
    "GoalProgress",
    "compute_goal_progress",
    "select_display_goal",
    "filter_donations",
    "generate_report",
]
