"""Fundraising goal selection and progress."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from donation_reports.models.donation import Donation
from donation_reports.models.goal import DonationGoal

# Goal amount used when no goal is configured
DEFAULT_GOAL_AMOUNT = Decimal("1000000")


@dataclass(frozen=True)
class GoalProgress:
    """Progress of public donations toward a goal.

    Attributes:
        raised: Sum of public donation amounts.
        donation_count: Number of public donations counted.
        goal_amount: Target amount.
        percentage: Percent of the goal reached, capped at 100.
        label: Display label of the goal.
    """

    raised: Decimal
    donation_count: int
    goal_amount: Decimal
    percentage: Decimal
    label: str

    @property
    def is_reached(self) -> bool:
        return self.goal_amount > 0 and self.raised >= self.goal_amount


def select_display_goal(goals: Iterable[DonationGoal], today: date) -> Optional[DonationGoal]:
    """Pick the goal to display publicly.

    The first active goal wins; otherwise the goal for the current month,
    then the goal for the current year.

    Args:
        goals: Configured goals.
        today: Reference date for the fallbacks.

    Returns:
        The goal to display, or None if nothing applies.
    """
    goals = list(goals)
    for goal in goals:
        if goal.is_active:
            return goal
    for goal in goals:
        if goal.covers(today.year, today.month):
            return goal
    for goal in goals:
        if goal.covers(today.year):
            return goal
    return None


def compute_goal_progress(
    donations: Iterable[Donation],
    goal: Optional[DonationGoal] = None,
    default_amount: Decimal = DEFAULT_GOAL_AMOUNT,
) -> GoalProgress:
    """Compute progress of public donations toward a goal.

    Args:
        donations: Donation snapshot; only public donations count.
        goal: Goal to measure against, or None to use default_amount.
        default_amount: Fallback goal amount.

    Returns:
        GoalProgress with the percentage capped at 100.
    """
    public = [d for d in donations if d.is_public]
    raised = sum((d.amount for d in public), Decimal("0"))

    goal_amount = goal.amount if goal else default_amount
    label = goal.label if goal else "goal"

    if goal_amount > 0:
        percentage = min(raised / goal_amount * 100, Decimal("100"))
    else:
        percentage = Decimal("0")

    return GoalProgress(
        raised=raised,
        donation_count=len(public),
        goal_amount=goal_amount,
        percentage=percentage,
        label=label,
    )
