# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Rotation store — who was already picked in the current round.

Holds two independent structures, each mirrored to its own JSON file:
    task state   {"teams":  {team: {task: {"members": [...]}}}}
    group state  {"groups": {group: {"teams": {team: [...]}}}}

Every mutation is written through immediately. A failed write is logged and
counted; the in-memory state stays authoritative until the next good write.
No locking here: callers hold the rotation lock.
"""

from pathlib import Path
from typing import Any

from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import PERSISTENCE_FAILURES
from rotation_service.repositories.json_storage import read_document, write_document

logger = get_logger(__name__)


class RotationStore:
    """Per-(team, task) and per-(group, team) selection state."""

    def __init__(self, task_state_path: str | Path, group_state_path: str | Path) -> None:
        self.task_state_path = task_state_path
        self.group_state_path = group_state_path
        self._teams: dict[str, dict[str, dict[str, list[str]]]] = {}
        self._groups: dict[str, dict[str, dict[str, list[str]]]] = {}

    # ── Load / save ──

    def load(self) -> None:
        """Read both state files. Missing or malformed files start empty."""
        task_doc = read_document(self.task_state_path)
        self._teams = _parse_task_state(task_doc)
        group_doc = read_document(self.group_state_path)
        self._groups = _parse_group_state(group_doc)
        logger.info(
            "Selection state loaded: teams=%d, groups=%d",
            len(self._teams), len(self._groups),
        )

    def save_task_state(self) -> bool:
        ok = write_document(self.task_state_path, {"teams": self._teams})
        if not ok:
            PERSISTENCE_FAILURES.labels(store="teams").inc()
        return ok

    def save_group_state(self) -> bool:
        ok = write_document(self.group_state_path, {"groups": self._groups})
        if not ok:
            PERSISTENCE_FAILURES.labels(store="groups").inc()
        return ok

    def flush(self) -> None:
        self.save_task_state()
        self.save_group_state()

    # ── Task selection ──

    def get_task_selection(self, team: str, task: str) -> list[str]:
        entry = self._teams.get(team, {}).get(task)
        return list(entry["members"]) if entry else []

    def add_to_task_selection(self, team: str, task: str, name: str) -> None:
        """Append one name. Duplicates are not filtered."""
        self._task_entry(team, task).append(name)
        self.save_task_state()

    def reset_task_selection(self, team: str, task: str) -> None:
        self._teams.setdefault(team, {})[task] = {"members": []}
        self.save_task_state()

    def replace_in_task_selection(
        self, team: str, task: str, old_name: str, new_name: str
    ) -> int:
        """Overwrite every occurrence of old_name. Returns the count replaced."""
        replaced = _replace_all(self._task_entry(team, task), old_name, new_name)
        self.save_task_state()
        return replaced

    # ── Group selection ──

    def get_group_selection(self, group: str, team: str) -> list[str]:
        return list(self._groups.get(group, {}).get("teams", {}).get(team, []))

    def add_batch_to_group_selection(
        self, group: str, selections: dict[str, list[str]]
    ) -> None:
        """Append every team's picks in one go, then persist once."""
        teams = self._groups.setdefault(group, {"teams": {}})["teams"]
        for team, members in selections.items():
            teams.setdefault(team, []).extend(members)
        self.save_group_state()

    def reset_group_team_selection(self, group: str, team: str) -> None:
        self._groups.setdefault(group, {"teams": {}})["teams"][team] = []
        self.save_group_state()

    def replace_in_group_selection(
        self, group: str, team: str, old_name: str, new_name: str
    ) -> int:
        teams = self._groups.setdefault(group, {"teams": {}})["teams"]
        replaced = _replace_all(teams.setdefault(team, []), old_name, new_name)
        self.save_group_state()
        return replaced

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._teams.clear()
        self._groups.clear()

    @property
    def task_state(self) -> dict[str, Any]:
        """Direct access for tests and health reporting."""
        return self._teams

    @property
    def group_state(self) -> dict[str, Any]:
        return self._groups

    def _task_entry(self, team: str, task: str) -> list[str]:
        tasks = self._teams.setdefault(team, {})
        return tasks.setdefault(task, {"members": []})["members"]


def _replace_all(members: list[str], old_name: str, new_name: str) -> int:
    replaced = 0
    for i, member in enumerate(members):
        if member == old_name:
            members[i] = new_name
            replaced += 1
    return replaced


def _names(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def _parse_task_state(document: Any) -> dict[str, dict[str, dict[str, list[str]]]]:
    if not isinstance(document, dict) or not isinstance(document.get("teams"), dict):
        return {}
    state: dict[str, dict[str, dict[str, list[str]]]] = {}
    for team, tasks in document["teams"].items():
        if not isinstance(tasks, dict):
            continue
        state[team] = {
            task: {"members": _names(entry.get("members"))}
            for task, entry in tasks.items()
            if isinstance(entry, dict)
        }
    return state


def _parse_group_state(document: Any) -> dict[str, dict[str, dict[str, list[str]]]]:
    if not isinstance(document, dict) or not isinstance(document.get("groups"), dict):
        return {}
    state: dict[str, dict[str, dict[str, list[str]]]] = {}
    for group, entry in document["groups"].items():
        teams = entry.get("teams") if isinstance(entry, dict) else None
        if not isinstance(teams, dict):
            teams = {}
        state[group] = {
            "teams": {team: _names(members) for team, members in teams.items()}
        }
    return state
