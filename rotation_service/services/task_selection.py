# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Task selection — picks the next batch of members for a (team, task).

Nobody is picked twice before the whole pool has been picked once. When fewer
members are left than the quota, the leftovers are kept, the round is reset,
and the remaining slots are filled from the rest of the pool.
"""

import random
import threading
from typing import Any, Optional

from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import (
    MEMBERS_PICKED,
    ROTATIONS_TOTAL,
    SELECTION_RESETS,
)
from rotation_service.models.domain import KIND_TEAMS
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.repositories.rotation_store import RotationStore
from rotation_service.services.notification_client import NotificationClient
from rotation_service.services.rotation import difference, render_template, shuffled

logger = get_logger(__name__)

STATUS_SELECTED = "selected"
STATUS_SKIPPED = "skipped"
STATUS_INSUFFICIENT = "insufficient_pool"

# A pool validated to hold at least `amount` members needs at most one reset.
MAX_ATTEMPTS = 2


class TaskSelectionService:
    """Business logic for per-task rotations."""

    def __init__(
        self,
        pool_repo: PoolRepository,
        store: RotationStore,
        notification_client: NotificationClient,
        lock: threading.Lock,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._pool = pool_repo
        self._store = store
        self._notifications = notification_client
        self._lock = lock
        self._rng = rng

    def select_for_task(self, team: str, task: str) -> dict[str, Any]:
        """Run one rotation round. Raises KeyError for an unknown (team, task)."""
        with self._lock:
            return self._select(team, task)

    def _select(self, team: str, task: str) -> dict[str, Any]:
        task_def = self._pool.get_task(team, task)
        if task_def is None:
            raise KeyError(f"No task '{task}' configured for team '{team}'")

        logger.info("Selecting members: team=%s, task=%s", team, task)
        members = task_def.members
        amount = task_def.amount

        if amount == 0:
            logger.info("No members to select for task %s/%s", team, task)
            return self._result(STATUS_SKIPPED, team, task, [])

        if len(members) < amount:
            logger.warning(
                "Not enough members to select for task %s/%s: pool=%d, amount=%d",
                team, task, len(members), amount,
            )
            return self._result(STATUS_INSUFFICIENT, team, task, [])

        carried: list[str] = []
        for _ in range(MAX_ATTEMPTS):
            taken = self._store.get_task_selection(team, task) + carried
            available = shuffled(difference(members, taken), self._rng)
            picked = carried + available[: amount - len(carried)]

            if len(picked) == amount:
                self._commit(team, task, picked)
                return self._result(STATUS_SELECTED, team, task, picked)

            logger.info(
                "Not enough members left for task %s/%s, resetting round", team, task
            )
            SELECTION_RESETS.labels(kind=KIND_TEAMS).inc()
            carried = picked
            self._store.reset_task_selection(team, task)

        raise RuntimeError(f"Selection for task {team}/{task} did not converge")

    def _commit(self, team: str, task: str, picked: list[str]) -> None:
        task_def = self._pool.get_task(team, task)
        template = self._pool.resolve_message(task_def.message, task)
        for member in picked:
            logger.info("[%s] :: %s selected member %s", team, task, member)
            self._store.add_to_task_selection(team, task, member)
            self._notifications.send(task_def.channel, render_template(template, member))
        MEMBERS_PICKED.labels(kind=KIND_TEAMS).inc(len(picked))

    @staticmethod
    def _result(status: str, team: str, task: str, members: list[str]) -> dict[str, Any]:
        ROTATIONS_TOTAL.labels(kind=KIND_TEAMS, status=status).inc()
        return {"status": status, "team": team, "task": task, "members": members}
