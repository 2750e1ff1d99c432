"""Tests for goal progress calculation and the goal service."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import OTHER_USER, USER
from pocketpilot.domain.entities import Goal, GoalMilestone
from pocketpilot.domain.errors import NotFoundError, ValidationError
from pocketpilot.domain.goals import calculate_goal_details, goal_completion_state


def make_goal(target="1000", current="0", target_date=None, is_completed=False):
    return Goal(
        id=1,
        user_id=USER,
        name="Trip",
        target_amount=Decimal(target),
        current_amount=Decimal(current),
        target_date=target_date,
        is_completed=is_completed,
        completed_at=None,
        created_at=datetime(2024, 1, 1),
    )


class TestCalculateGoalDetails:
    def test_progress_and_monthly_requirement(self):
        goal = make_goal("1200", "300", target_date=date(2024, 10, 1))
        details = calculate_goal_details(goal, today=date(2024, 1, 15))

        assert details.percentage == 25.0
        assert details.remaining == Decimal("900")
        assert details.monthly_required == Decimal("100")
        assert details.is_overdue is False

    def test_percentage_capped_at_100(self):
        details = calculate_goal_details(make_goal("500", "750"), today=date(2024, 1, 1))
        assert details.percentage == 100.0
        assert details.remaining == Decimal("0")

    def test_overdue_when_target_date_passed(self):
        goal = make_goal("1000", "100", target_date=date(2024, 1, 1))
        details = calculate_goal_details(goal, today=date(2024, 2, 1))
        assert details.is_overdue is True
        assert details.monthly_required is None

    def test_completed_goal_is_never_overdue(self):
        goal = make_goal("1000", "1000", target_date=date(2024, 1, 1), is_completed=True)
        details = calculate_goal_details(goal, today=date(2024, 2, 1))
        assert details.is_overdue is False

    def test_target_later_this_month(self):
        goal = make_goal("1000", "100", target_date=date(2024, 1, 31))
        details = calculate_goal_details(goal, today=date(2024, 1, 10))
        assert details.monthly_required is None
        assert details.is_overdue is False

    def test_no_target_date(self):
        details = calculate_goal_details(make_goal(), today=date(2024, 1, 1))
        assert details.monthly_required is None
        assert details.is_overdue is False

    def test_milestones(self):
        goal = make_goal("1000", "600")
        milestones = [
            GoalMilestone(1, USER, 1, "Half", 50, False, datetime(2024, 1, 1)),
            GoalMilestone(2, USER, 1, "Most", 75, False, datetime(2024, 1, 1)),
        ]
        details = calculate_goal_details(goal, today=date(2024, 1, 1), milestones=milestones)

        half, most = details.milestones
        assert half.target_amount == Decimal("500")
        assert half.is_reached is True
        assert half.current_progress == 100.0
        assert most.target_amount == Decimal("750")
        assert most.is_reached is False
        assert most.current_progress == 80.0


def test_goal_completion_state():
    today = date(2024, 5, 1)
    assert goal_completion_state(Decimal("10"), Decimal("100"), False, None, today) == (False, None)
    assert goal_completion_state(Decimal("100"), Decimal("100"), False, None, today) == (True, today)
    earlier = date(2024, 4, 1)
    assert goal_completion_state(Decimal("150"), Decimal("100"), True, earlier, today) == (True, earlier)
    assert goal_completion_state(Decimal("50"), Decimal("100"), True, earlier, today) == (False, None)


class TestGoalService:
    def test_create_goal(self, goal_service):
        goal_id = goal_service.create_goal(
            USER, "Emergency fund", Decimal("5000"), category="emergency", default_milestones=True
        )

        details = goal_service.get_goal_details(USER, goal_id)
        assert details.goal.name == "Emergency fund"
        assert details.goal.current_amount == Decimal("0.00")
        assert details.goal.is_completed is False
        assert [m.milestone.target_percentage for m in details.milestones] == [25, 50, 75]

    def test_create_goal_already_reached(self, goal_service):
        goal_id = goal_service.create_goal(
            USER, "Done", Decimal("100"), current_amount=Decimal("100"), today=date(2024, 1, 5)
        )
        goal = goal_service.require_goal(USER, goal_id)
        assert goal.is_completed is True
        assert goal.completed_at == date(2024, 1, 5)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "", "target_amount": Decimal("100")},
            {"name": "x" * 101, "target_amount": Decimal("100")},
            {"name": "Car", "target_amount": Decimal("0")},
            {"name": "Car", "target_amount": Decimal("100"), "current_amount": Decimal("-1")},
            {"name": "Car", "target_amount": Decimal("100"), "category": "yacht"},
        ],
    )
    def test_create_goal_validation(self, goal_service, kwargs):
        with pytest.raises(ValidationError):
            goal_service.create_goal(USER, **kwargs)

    def test_contribution_completes_goal(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"), current_amount=Decimal("400"))

        goal_service.add_contribution(USER, goal_id, Decimal("100"), today=date(2024, 6, 1))

        goal = goal_service.require_goal(USER, goal_id)
        assert goal.current_amount == Decimal("500.00")
        assert goal.is_completed is True
        assert goal.completed_at == date(2024, 6, 1)

    def test_contribution_must_be_positive(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"))
        with pytest.raises(ValidationError):
            goal_service.add_contribution(USER, goal_id, Decimal("0"))

    def test_delete_contribution_reopens_goal(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"), current_amount=Decimal("450"))
        contribution_id = goal_service.add_contribution(USER, goal_id, Decimal("50"))

        goal_service.delete_contribution(USER, contribution_id)

        goal = goal_service.require_goal(USER, goal_id)
        assert goal.current_amount == Decimal("450.00")
        assert goal.is_completed is False
        assert goal.completed_at is None
        assert goal_service.list_contributions(USER, goal_id) == []

    def test_delete_contribution_floors_at_zero(self, goal_service, temp_db):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"))
        contribution_id = goal_service.add_contribution(USER, goal_id, Decimal("80"))
        temp_db.update_goal(USER, goal_id, current_amount=Decimal("30"))

        goal_service.delete_contribution(USER, contribution_id)

        assert goal_service.require_goal(USER, goal_id).current_amount == Decimal("0")

    def test_list_contributions(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"))
        goal_service.add_contribution(USER, goal_id, Decimal("20"), note="first")
        goal_service.add_contribution(USER, goal_id, Decimal("30"), note="second")

        contributions = goal_service.list_contributions(USER, goal_id)
        assert sorted(c.amount for c in contributions) == [Decimal("20.00"), Decimal("30.00")]

    def test_add_milestone_validation(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Bike", Decimal("500"))
        with pytest.raises(ValidationError):
            goal_service.add_milestone(USER, goal_id, "Too far", 101)
        with pytest.raises(ValidationError):
            goal_service.add_milestone(USER, goal_id, " ", 50)

    def test_sharing(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Wedding", Decimal("2000"), current_amount=Decimal("500"))

        token = goal_service.set_sharing(USER, goal_id, True)
        assert token
        assert goal_service.set_sharing(USER, goal_id, True) == token

        shared = goal_service.get_shared_goal(token)
        assert shared["name"] == "Wedding"
        assert shared["percentage"] == 25.0
        assert "user_id" not in shared
        assert "id" not in shared

        goal_service.set_sharing(USER, goal_id, False)
        with pytest.raises(NotFoundError):
            goal_service.get_shared_goal(token)

    def test_other_owner_cannot_see_goal(self, goal_service):
        goal_id = goal_service.create_goal(USER, "Private", Decimal("100"))
        with pytest.raises(NotFoundError):
            goal_service.get_goal_details(OTHER_USER, goal_id)
        with pytest.raises(NotFoundError):
            goal_service.add_contribution(OTHER_USER, goal_id, Decimal("10"))
        assert goal_service.list_goals(OTHER_USER) == []
