# type: ignore
"""
Tests for cron parsing and rotation job registration.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from rotation_service.models.domain import PoolDefinition
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.services.group_selection import GroupSelectionService
from rotation_service.services.scheduler import (
    RotationScheduler,
    _day_of_week,
    build_trigger,
)
from rotation_service.services.task_selection import TaskSelectionService

# Monday
NOW = datetime(2026, 10, 19, 8, 0, 0, tzinfo=timezone.utc)


def _next_fire(expression):
    return build_trigger(expression, "UTC").get_next_fire_time(None, NOW)


# ============================================
# Cron parsing
# ============================================
class TestBuildTrigger:
    def test_six_fields_with_seconds(self):
        assert _next_fire("30 15 9 * * *") == datetime(2026, 10, 19, 9, 15, 30, tzinfo=timezone.utc)

    def test_five_fields(self):
        assert _next_fire("15 9 * * *") == datetime(2026, 10, 19, 9, 15, 0, tzinfo=timezone.utc)

    def test_numeric_sunday_is_zero(self):
        assert _next_fire("0 0 9 * * 0") == datetime(2026, 10, 25, 9, 0, 0, tzinfo=timezone.utc)

    def test_numeric_seven_is_sunday(self):
        assert _next_fire("0 9 * * 7") == datetime(2026, 10, 25, 9, 0, 0, tzinfo=timezone.utc)

    def test_weekday_range(self):
        # Saturday 2026-10-24 is skipped, so Friday then Monday.
        friday = datetime(2026, 10, 23, 10, 0, 0, tzinfo=timezone.utc)
        trigger = build_trigger("0 0 9 * * 1-5", "UTC")
        assert trigger.get_next_fire_time(None, friday) == datetime(
            2026, 10, 26, 9, 0, 0, tzinfo=timezone.utc
        )

    def test_question_mark_means_any(self):
        assert _next_fire("0 0 9 ? * *") == datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)

    def test_descriptors(self):
        assert _next_fire("@daily") == datetime(2026, 10, 20, 0, 0, 0, tzinfo=timezone.utc)
        assert _next_fire("@hourly") == datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)
        assert _next_fire("@weekly") == datetime(2026, 10, 25, 0, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("expression", ["", "* * *", "0 0 0 0 * * * *", "0 0 99 * * *"])
    def test_invalid_expressions(self, expression):
        with pytest.raises(ValueError):
            build_trigger(expression, "UTC")

    @pytest.mark.parametrize(
        "expression", ["0 0 9 * * 0-6", "0 9 * * 0-4", "0 0 9 * * 1-7", "0 0 9 * * */1"]
    )
    def test_sunday_based_ranges_cover_today(self, expression):
        assert _next_fire(expression) == datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)

    def test_range_starting_at_sunday(self):
        saturday = datetime(2026, 10, 24, 10, 0, 0, tzinfo=timezone.utc)
        trigger = build_trigger("0 0 9 * * 0-5", "UTC")
        assert trigger.get_next_fire_time(None, saturday) == datetime(
            2026, 10, 25, 9, 0, 0, tzinfo=timezone.utc
        )

    def test_backwards_weekday_range_rejected(self):
        with pytest.raises(ValueError):
            build_trigger("0 0 9 * * 5-1", "UTC")

    def test_day_of_week_translation(self):
        assert _day_of_week("1-5") == "mon,tue,wed,thu,fri"
        assert _day_of_week("0-2") == "sun,mon,tue"
        assert _day_of_week("0,6,7") == "sun,sat"
        assert _day_of_week("*/2") == "sun,tue,thu,sat"
        assert _day_of_week("MON") == "mon"
        assert _day_of_week("*") == "*"


# ============================================
# Job registration
# ============================================
POOL = {
    "defaultCron": "0 0 9 * * 1-5",
    "teams": {
        "payments": {
            "daily": {"members": ["alice", "bob"], "amount": 1},
            "review": {"cron": "0 0 14 * * mon", "members": ["alice"], "amount": 1},
            "broken": {"cron": "not a cron", "members": ["alice"], "amount": 1},
        }
    },
    "groups": {
        "support": {"cron": "0 0 8 * * mon", "teams": {"payments": {"members": ["bob"], "amount": 1}}},
    },
}


@pytest.fixture
def task_service():
    return MagicMock(spec=TaskSelectionService)


@pytest.fixture
def group_service():
    return MagicMock(spec=GroupSelectionService)


@pytest.fixture
def rotation_scheduler(task_service, group_service):
    pool = PoolRepository(PoolDefinition.model_validate(POOL))
    return RotationScheduler(
        pool_repo=pool,
        task_service=task_service,
        group_service=group_service,
        scheduler=BackgroundScheduler(timezone="UTC"),
    )


class TestRotationScheduler:
    def test_one_job_per_valid_scope(self, rotation_scheduler):
        assert rotation_scheduler.schedule_all() == 3
        ids = {job["id"] for job in rotation_scheduler.list_jobs()}
        assert ids == {"teams:payments:daily", "teams:payments:review", "groups:support"}

    def test_default_cron_used_when_missing(self, rotation_scheduler):
        rotation_scheduler.schedule_all()
        jobs = {job["id"]: job for job in rotation_scheduler.list_jobs()}
        assert jobs["teams:payments:daily"]["cron"] == "0 0 9 * * 1-5"
        assert jobs["teams:payments:review"]["cron"] == "0 0 14 * * mon"
        assert jobs["groups:support"]["kind"] == "groups"

    def test_not_running_until_started(self, rotation_scheduler):
        rotation_scheduler.schedule_all()
        assert rotation_scheduler.running is False
        rotation_scheduler.shutdown()

    def test_run_task_delegates(self, rotation_scheduler, task_service):
        task_service.select_for_task.return_value = {"status": "selected"}
        rotation_scheduler.run_task("payments", "daily")
        task_service.select_for_task.assert_called_once_with("payments", "daily")

    def test_run_group_delegates(self, rotation_scheduler, group_service):
        group_service.select_for_group.return_value = {"status": "selected"}
        rotation_scheduler.run_group("support")
        group_service.select_for_group.assert_called_once_with("support")

    def test_job_failure_is_swallowed(self, rotation_scheduler, task_service, group_service):
        task_service.select_for_task.side_effect = RuntimeError("boom")
        group_service.select_for_group.side_effect = KeyError("support")
        rotation_scheduler.run_task("payments", "daily")
        rotation_scheduler.run_group("support")

    def test_start_and_shutdown(self, rotation_scheduler):
        rotation_scheduler.schedule_all()
        rotation_scheduler.start()
        try:
            assert rotation_scheduler.running is True
            jobs = rotation_scheduler.list_jobs()
            assert all(job["next_run_time"] for job in jobs)
        finally:
            rotation_scheduler.shutdown()
        assert rotation_scheduler.running is False
