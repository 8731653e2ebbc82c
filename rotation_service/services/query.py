# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Read-only selection queries. No mutation, no persistence.
"""

import threading

from rotation_service.models.domain import (
    KIND_GROUPS,
    KIND_TEAMS,
    VALID_KINDS,
    VALID_VIEWS,
    VIEW_SELECTED,
)
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.repositories.rotation_store import RotationStore
from rotation_service.services.rotation import difference


class QueryService:
    """Answers "who is selected" and "who is still available"."""

    def __init__(
        self,
        pool_repo: PoolRepository,
        store: RotationStore,
        lock: threading.Lock,
    ) -> None:
        self._pool = pool_repo
        self._store = store
        self._lock = lock

    def show(self, view: str, kind: str, scope: str, sub_scope: str) -> list[str]:
        """Raises ValueError for an unknown view or kind."""
        if view not in VALID_VIEWS:
            raise ValueError(f"view must be one of {VALID_VIEWS}")
        if kind not in VALID_KINDS:
            raise ValueError(f"kind must be one of {VALID_KINDS}")

        with self._lock:
            if kind == KIND_TEAMS:
                selected = self._store.get_task_selection(scope, sub_scope)
                pool = self._pool.task_members(scope, sub_scope)
            elif kind == KIND_GROUPS:
                selected = self._store.get_group_selection(scope, sub_scope)
                pool = self._pool.group_team_members(scope, sub_scope)

        if view == VIEW_SELECTED:
            return selected
        return difference(pool, selected)
