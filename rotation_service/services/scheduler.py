# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Rotation scheduler — one cron job per (team, task) and per group.

Jobs run on the APScheduler thread pool and block on the rotation lock held by
the selection services, so at most one rotation runs at a time. Late or
overlapping fires are neither coalesced nor dropped.
"""

from typing import Any, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from rotation_service.core.config import settings
from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import SCHEDULED_JOBS
from rotation_service.models.domain import KIND_GROUPS, KIND_TEAMS
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.services.group_selection import GroupSelectionService
from rotation_service.services.task_selection import TaskSelectionService

logger = get_logger(__name__)

DESCRIPTORS: dict[str, str] = {
    "@yearly": "0 0 0 1 1 *",
    "@annually": "0 0 0 1 1 *",
    "@monthly": "0 0 0 1 * *",
    "@weekly": "0 0 0 * * 0",
    "@daily": "0 0 0 * * *",
    "@midnight": "0 0 0 * * *",
    "@hourly": "0 0 * * * *",
}

# Classic cron numbering: 0 and 7 are Sunday.
WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat", "sun")


def _weekday_number(token: str) -> int:
    token = token.strip().lower()
    if token.isdigit() and int(token) < len(WEEKDAY_NAMES):
        return int(token)
    if token in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(token)
    raise ValueError(f"Invalid day of week: '{token}'")


def _day_of_week(field: str) -> str:
    """
    Expand a classic cron day-of-week field into explicit day names.

    APScheduler counts from Monday, so Sunday-based ranges such as 0-5 would
    read as backwards ranges there:
        "0-5" -> "sun,mon,tue,wed,thu,fri"
    """
    if field == "*":
        return field

    names: list[str] = []
    for part in field.split(","):
        base, _, step = part.partition("/")
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            start, end = base.split("-", 1)
            first, last = _weekday_number(start), _weekday_number(end)
        else:
            first = _weekday_number(base)
            last = 7 if step else first
        if first > last:
            raise ValueError(f"Invalid day of week range: '{part}'")
        if step and not (step.isdigit() and int(step) > 0):
            raise ValueError(f"Invalid day of week step: '{part}'")

        for number in range(first, last + 1, int(step) if step else 1):
            name = WEEKDAY_NAMES[number]
            if name not in names:
                names.append(name)
    return ",".join(names)


def build_trigger(expression: str, timezone: str | None = None) -> CronTrigger:
    """
    Parse a 5-field (min hour dom mon dow) or 6-field (sec min hour dom mon dow)
    cron expression, or an @descriptor. Raises ValueError when malformed.
    """
    expression = (expression or "").strip()
    expression = DESCRIPTORS.get(expression, expression)
    fields = expression.split()
    if len(fields) == 5:
        fields = ["0"] + fields
    if len(fields) != 6:
        raise ValueError(f"Invalid cron expression: '{expression}'")

    second, minute, hour, day, month, day_of_week = (
        "*" if f == "?" else f for f in fields
    )
    return CronTrigger(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_day_of_week(day_of_week),
        timezone=timezone or settings.SCHEDULER_TIMEZONE,
    )


class RotationScheduler:
    """Registers and runs the periodic rotation jobs."""

    def __init__(
        self,
        pool_repo: PoolRepository,
        task_service: TaskSelectionService,
        group_service: GroupSelectionService,
        scheduler: Optional[BackgroundScheduler] = None,
    ) -> None:
        self._pool = pool_repo
        self._tasks = task_service
        self._groups = group_service
        self._scheduler = scheduler or BackgroundScheduler(
            timezone=settings.SCHEDULER_TIMEZONE,
            job_defaults={
                "coalesce": False,
                "max_instances": settings.SCHEDULER_MAX_INSTANCES,
                "misfire_grace_time": None,
            },
        )
        self._jobs: dict[str, dict[str, Any]] = {}

    # ── Registration ──

    def schedule_all(self) -> int:
        """Add one job per configured scope. Returns the number scheduled."""
        definition = self._pool.definition

        logger.info("Scheduling teams section...")
        for team, tasks in definition.teams.items():
            for task, task_def in tasks.items():
                self._add_job(
                    job_id=f"{KIND_TEAMS}:{team}:{task}",
                    cron=self._pool.resolve_cron(task_def.cron),
                    func=self.run_task,
                    args=[team, task],
                    info={"kind": KIND_TEAMS, "team": team, "task": task},
                )

        logger.info("Scheduling groups section...")
        for group, group_def in definition.groups.items():
            self._add_job(
                job_id=f"{KIND_GROUPS}:{group}",
                cron=self._pool.resolve_cron(group_def.cron),
                func=self.run_group,
                args=[group],
                info={"kind": KIND_GROUPS, "group": group},
            )

        SCHEDULED_JOBS.set(len(self._jobs))
        return len(self._jobs)

    def _add_job(self, job_id: str, cron: str, func, args: list, info: dict) -> None:
        try:
            trigger = build_trigger(cron)
        except ValueError as exc:
            logger.error("Error scheduling %s: %s", job_id, exc)
            return
        self._scheduler.add_job(
            func, trigger=trigger, args=args, id=job_id, name=job_id,
            replace_existing=True,
        )
        self._jobs[job_id] = {**info, "cron": cron}
        logger.info("Scheduled %s with cron '%s'", job_id, cron)

    # ── Lifecycle ──

    def start(self) -> None:
        self._scheduler.start()
        logger.info("Scheduler started with %d jobs", len(self._jobs))

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def list_jobs(self) -> list[dict[str, Any]]:
        result = []
        for job in self._scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            result.append({
                "id": job.id,
                **self._jobs.get(job.id, {}),
                "next_run_time": next_run.isoformat() if next_run else None,
            })
        return result

    # ── Job bodies ──

    def run_task(self, team: str, task: str) -> None:
        context = {"job_id": f"{KIND_TEAMS}:{team}:{task}", "team": team, "task": task}
        try:
            result = self._tasks.select_for_task(team, task)
            logger.info("Scheduled rotation done: %s", result["status"], extra=context)
        except Exception:
            logger.exception("Scheduled rotation failed", extra=context)

    def run_group(self, group: str) -> None:
        context = {"job_id": f"{KIND_GROUPS}:{group}", "group": group}
        try:
            result = self._groups.select_for_group(group)
            logger.info("Scheduled rotation done: %s", result["status"], extra=context)
        except Exception:
            logger.exception("Scheduled rotation failed", extra=context)
