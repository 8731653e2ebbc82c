# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Manual replacement — swap an already-picked member for a fresh one.
"""

import random
import threading
from typing import Optional

from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import REPLACEMENTS_TOTAL
from rotation_service.models.domain import KIND_TEAMS, NOBODY, VALID_KINDS
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.repositories.rotation_store import RotationStore
from rotation_service.services.rotation import difference, shuffled

logger = get_logger(__name__)


class ReplacementService:
    """Business logic for replacing one selected member."""

    def __init__(
        self,
        pool_repo: PoolRepository,
        store: RotationStore,
        lock: threading.Lock,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._pool = pool_repo
        self._store = store
        self._lock = lock
        self._rng = rng

    def replace(self, kind: str, scope: str, sub_scope: str, username: str) -> str:
        """
        Replace username in the current selection of (scope, sub_scope).
        kind "teams": scope is the team, sub_scope the task.
        kind "groups": scope is the group, sub_scope the team.
        Returns the new member, or "nobody" when there is nothing to replace.
        Raises ValueError for an unknown kind.
        """
        if kind not in VALID_KINDS:
            raise ValueError(f"kind must be one of {VALID_KINDS}")

        with self._lock:
            if kind == KIND_TEAMS:
                current = self._store.get_task_selection(scope, sub_scope)
                pool = self._pool.task_members(scope, sub_scope)
            else:
                current = self._store.get_group_selection(scope, sub_scope)
                pool = self._pool.group_team_members(scope, sub_scope)

            if not current:
                logger.info("No members to replace for %s %s/%s", kind, scope, sub_scope)
                REPLACEMENTS_TOTAL.labels(kind=kind, outcome="nothing_selected").inc()
                return NOBODY

            candidates = difference(pool, current)
            if not candidates:
                logger.info(
                    "Every member of %s %s/%s already selected, drawing from full pool",
                    kind, scope, sub_scope,
                )
                candidates = pool
            if not candidates:
                logger.warning("No pool configured for %s %s/%s", kind, scope, sub_scope)
                REPLACEMENTS_TOTAL.labels(kind=kind, outcome="no_pool").inc()
                return NOBODY

            new_member = shuffled(candidates, self._rng)[0]
            if kind == KIND_TEAMS:
                replaced = self._store.replace_in_task_selection(
                    scope, sub_scope, username, new_member
                )
            else:
                replaced = self._store.replace_in_group_selection(
                    scope, sub_scope, username, new_member
                )

        REPLACEMENTS_TOTAL.labels(kind=kind, outcome="replaced").inc()
        logger.info(
            "Replaced %s with %s in %s %s/%s (%d occurrences)",
            username, new_member, kind, scope, sub_scope, replaced,
        )
        return new_member
