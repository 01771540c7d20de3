"""Fundraising goal data model."""

import calendar
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from donation_reports.utils.decimal_utils import parse_amount


class GoalType(Enum):
    """Period a fundraising goal covers."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass
class DonationGoal:
    """A monthly or yearly fundraising target.

    Attributes:
        id: Identifier of the goal.
        goal_type: Monthly or yearly goal.
        amount: Target amount.
        year: Year the goal applies to.
        month: Month (1-12) for monthly goals, None for yearly goals.
        is_active: Whether this goal is the one displayed publicly.
    """

    id: str
    goal_type: GoalType
    amount: Decimal
    year: int
    month: Optional[int] = None
    is_active: bool = False

    def __post_init__(self) -> None:
        if self.goal_type == GoalType.MONTHLY:
            if self.month is None or not 1 <= self.month <= 12:
                raise ValueError(f"Monthly goal {self.id!r} needs a month between 1 and 12")
        else:
            # Yearly goals never carry a month
            self.month = None

    @property
    def label(self) -> str:
        """Display label, e.g. "Mar 2024 goal" or "2024 goal"."""
        if self.goal_type == GoalType.MONTHLY and self.month:
            return f"{calendar.month_abbr[self.month]} {self.year} goal"
        return f"{self.year} goal"

    def covers(self, year: int, month: Optional[int] = None) -> bool:
        """Whether this goal is the goal for the given period."""
        if self.goal_type == GoalType.MONTHLY:
            return self.year == year and self.month == month
        return self.year == year and month is None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "DonationGoal":
        """Create a DonationGoal from a dictionary (e.g., from YAML config)."""
        goal_type_str = str(data.get("type", data.get("goal_type", "yearly")))
        try:
            goal_type = GoalType(goal_type_str)
        except ValueError as e:
            raise ValueError(f"Unknown goal type: {goal_type_str!r}") from e

        month = data.get("month")
        year = int(data["year"])  # type: ignore[call-overload]
        return cls(
            id=str(data.get("id") or f"{goal_type.value}-{year}-{month or 0}"),
            goal_type=goal_type,
            amount=parse_amount(data.get("amount")),
            year=year,
            month=int(month) if month is not None else None,  # type: ignore[call-overload]
            is_active=bool(data.get("active", data.get("is_active", False))),
        )
