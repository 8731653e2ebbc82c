# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Pool definition data access.
Read-only view of configuration.json — teams, tasks, groups, messages, crons.
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from rotation_service.core.logging import get_logger
from rotation_service.models.domain import (
    GroupDefinition,
    PoolDefinition,
    TaskDefinition,
    TeamQuota,
)
from rotation_service.repositories.json_storage import read_document

logger = get_logger(__name__)


def _drop_empty_pools(definition: PoolDefinition) -> PoolDefinition:
    """
    Reject scopes configured with no members at all. Zero-quota scopes stay:
    in a group they mark where the remaining teams stop being picked.
    """
    for team, tasks in definition.teams.items():
        for task in [t for t, d in tasks.items() if not d.members and d.amount > 0]:
            logger.warning("Ignoring task %s/%s: empty member pool", team, task)
            del tasks[task]
    for group, group_def in definition.groups.items():
        for team in [t for t, q in group_def.teams.items() if not q.members and q.amount > 0]:
            logger.warning("Ignoring team %s in group %s: empty member pool", team, group)
            del group_def.teams[team]
    return definition


class PoolRepository:
    """In-memory pool definition, loaded once from disk."""

    def __init__(self, definition: Optional[PoolDefinition] = None) -> None:
        self._definition = definition or PoolDefinition()

    # ── Load ──

    def load(self, path: str | Path) -> PoolDefinition:
        """Load the pool file. Missing or malformed ⇒ empty definition."""
        document = read_document(path)
        if document is None:
            self._definition = PoolDefinition()
            return self._definition
        try:
            definition = PoolDefinition.model_validate(document)
        except ValidationError as exc:
            logger.error("Invalid pool definition in %s: %s", path, exc)
            definition = PoolDefinition()
        self._definition = _drop_empty_pools(definition)
        logger.info(
            "Pool definition loaded: teams=%d, groups=%d",
            len(self._definition.teams),
            len(self._definition.groups),
        )
        return self._definition

    def replace(self, definition: PoolDefinition) -> None:
        self._definition = _drop_empty_pools(definition)

    # ── Read ──

    @property
    def definition(self) -> PoolDefinition:
        return self._definition

    def get_task(self, team: str, task: str) -> Optional[TaskDefinition]:
        return self._definition.teams.get(team, {}).get(task)

    def get_group(self, group: str) -> Optional[GroupDefinition]:
        return self._definition.groups.get(group)

    def get_group_team(self, group: str, team: str) -> Optional[TeamQuota]:
        group_def = self.get_group(group)
        if group_def is None:
            return None
        return group_def.teams.get(team)

    def task_members(self, team: str, task: str) -> list[str]:
        task_def = self.get_task(team, task)
        return list(task_def.members) if task_def else []

    def group_team_members(self, group: str, team: str) -> list[str]:
        quota = self.get_group_team(group, team)
        return list(quota.members) if quota else []

    def resolve_message(self, message: str, scope_name: str) -> str:
        """Own message wins, otherwise the fallback keyed by task/group name."""
        if message:
            return message
        return self._definition.messages.get(scope_name, "")

    def resolve_cron(self, cron: str) -> str:
        if cron:
            return cron
        return self._definition.default_cron

    def count_tasks(self) -> int:
        return sum(len(tasks) for tasks in self._definition.teams.values())

    def count_groups(self) -> int:
        return len(self._definition.groups)

    def summary(self) -> dict:
        """Flat description of every configured scope."""
        return {
            "default_cron": self._definition.default_cron,
            "teams": {
                team: {
                    task: {
                        "members": task_def.members,
                        "amount": task_def.amount,
                        "channel": task_def.channel,
                        "cron": self.resolve_cron(task_def.cron),
                    }
                    for task, task_def in tasks.items()
                }
                for team, tasks in self._definition.teams.items()
            },
            "groups": {
                group: {
                    "teams": {
                        team: {"members": quota.members, "amount": quota.amount}
                        for team, quota in group_def.teams.items()
                    },
                    "channel": group_def.channel,
                    "cron": self.resolve_cron(group_def.cron),
                }
                for group, group_def in self._definition.groups.items()
            },
        }
