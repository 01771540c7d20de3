"""Tests for fundraising goal selection and progress."""

from datetime import date
from decimal import Decimal

import pytest

from donation_reports.models.donation import Donation
from donation_reports.models.goal import DonationGoal, GoalType
from donation_reports.processing.goal_progress import (
    DEFAULT_GOAL_AMOUNT,
    compute_goal_progress,
    select_display_goal,
)


def create_donation(amount: str, is_public: bool = True) -> Donation:
    """Helper to create a Donation for testing."""
    return Donation(
        donor_name="Maria Santos",
        amount=Decimal(amount),
        purpose="Test",
        category="Other",
        donation_date=date(2024, 3, 1),
        is_public=is_public,
    )


def yearly_goal(amount: str, year: int = 2024, is_active: bool = False) -> DonationGoal:
    return DonationGoal(
        id=f"y{year}", goal_type=GoalType.YEARLY, amount=Decimal(amount),
        year=year, is_active=is_active,
    )


def monthly_goal(amount: str, month: int, year: int = 2024) -> DonationGoal:
    return DonationGoal(
        id=f"m{year}-{month}", goal_type=GoalType.MONTHLY, amount=Decimal(amount),
        year=year, month=month,
    )


class TestSelectDisplayGoal:
    """Tests for select_display_goal."""

    def test_active_goal_wins(self) -> None:
        active = yearly_goal("500", year=2023, is_active=True)
        goals = [monthly_goal("100", 3), active]
        assert select_display_goal(goals, date(2024, 3, 10)) is active

    def test_current_month_before_year(self) -> None:
        month = monthly_goal("100", 3)
        goals = [yearly_goal("1000"), month]
        assert select_display_goal(goals, date(2024, 3, 10)) is month

    def test_falls_back_to_year(self) -> None:
        year = yearly_goal("1000")
        goals = [monthly_goal("100", 1), year]
        assert select_display_goal(goals, date(2024, 3, 10)) is year

    def test_nothing_applies(self) -> None:
        assert select_display_goal([yearly_goal("1000", year=2020)], date(2024, 3, 10)) is None


class TestComputeGoalProgress:
    """Tests for compute_goal_progress."""

    def test_only_public_donations_count(self) -> None:
        """Test private donations are excluded from progress."""
        progress = compute_goal_progress(
            [create_donation("250"), create_donation("750", is_public=False)],
            yearly_goal("1000"),
        )

        assert progress.raised == Decimal("250")
        assert progress.donation_count == 1
        assert progress.percentage == Decimal("25")
        assert progress.label == "2024 goal"

    def test_percentage_capped(self) -> None:
        progress = compute_goal_progress([create_donation("3000")], yearly_goal("1000"))
        assert progress.percentage == Decimal("100")
        assert progress.is_reached

    def test_default_amount_without_goal(self) -> None:
        progress = compute_goal_progress([create_donation("10000")])
        assert progress.goal_amount == DEFAULT_GOAL_AMOUNT
        assert progress.percentage == Decimal("1")

    def test_zero_goal(self) -> None:
        progress = compute_goal_progress([create_donation("10")], default_amount=Decimal("0"))
        assert progress.percentage == Decimal("0")
        assert not progress.is_reached


class TestDonationGoal:
    """Tests for the goal model."""

    def test_monthly_goal_requires_month(self) -> None:
        with pytest.raises(ValueError):
            DonationGoal(id="g", goal_type=GoalType.MONTHLY, amount=Decimal("1"), year=2024)

    def test_yearly_goal_drops_month(self) -> None:
        goal = DonationGoal(
            id="g", goal_type=GoalType.YEARLY, amount=Decimal("1"), year=2024, month=5
        )
        assert goal.month is None

    def test_monthly_label(self) -> None:
        assert monthly_goal("1", 3).label == "Mar 2024 goal"

    def test_from_dict(self) -> None:
        goal = DonationGoal.from_dict(
            {"type": "monthly", "year": 2024, "month": 12, "amount": "150,000", "active": True}
        )
        assert goal.goal_type == GoalType.MONTHLY
        assert goal.amount == Decimal("150000")
        assert goal.is_active
        assert goal.id == "monthly-2024-12"
