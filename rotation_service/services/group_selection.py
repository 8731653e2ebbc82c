# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Group selection — picks members from every team of a support group.

All teams are picked in one pass. If one team runs out of members, only that
team's round is reset and the whole pass starts again; nothing is stored until
a pass completes. Then one mention message goes to the group's channel, the
picks are appended to the group state, and the Slack user group is replaced
with exactly the picked members.
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
from rotation_service.models.domain import KIND_GROUPS, GroupDefinition
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.repositories.rotation_store import RotationStore
from rotation_service.services.notification_client import NotificationClient
from rotation_service.services.rotation import (
    build_mentions,
    difference,
    render_template,
    shuffled,
)
from rotation_service.services.task_selection import (
    STATUS_INSUFFICIENT,
    STATUS_SELECTED,
)

logger = get_logger(__name__)


class GroupSelectionService:
    """Business logic for multi-team group rotations."""

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

    def select_for_group(self, group: str) -> dict[str, Any]:
        """Run one group round. Raises KeyError for an unknown group."""
        with self._lock:
            group_def = self._pool.get_group(group)
            if group_def is None:
                raise KeyError(f"No group '{group}' configured")
            return self._select(group, group_def)

    def _select(self, group: str, group_def: GroupDefinition) -> dict[str, Any]:
        logger.info("Selecting members for group %s", group)
        carried: dict[str, list[str]] = {}

        # Each team resets at most once, so one pass per team plus a clean one.
        for _ in range(len(group_def.teams) + 1):
            selections: dict[str, list[str]] = {}
            restart = False

            for team, quota in group_def.teams.items():
                if len(quota.members) < quota.amount:
                    logger.warning(
                        "Not enough members to select for group %s, team %s",
                        group, team,
                    )
                    ROTATIONS_TOTAL.labels(kind=KIND_GROUPS, status=STATUS_INSUFFICIENT).inc()
                    return {
                        "status": STATUS_INSUFFICIENT,
                        "group": group,
                        "team": team,
                        "members": {},
                        "message": "",
                    }

                if quota.amount == 0:
                    # Teams after this one are skipped for this round.
                    logger.info(
                        "No members to select for group %s from team %s, "
                        "skipping remaining teams", group, team,
                    )
                    break

                kept = carried.get(team, [])
                taken = self._store.get_group_selection(group, team) + kept
                available = shuffled(difference(quota.members, taken), self._rng)

                if len(kept) + len(available) < quota.amount:
                    logger.info(
                        "Not enough members left for group %s, team %s, resetting",
                        group, team,
                    )
                    SELECTION_RESETS.labels(kind=KIND_GROUPS).inc()
                    carried[team] = kept + available
                    self._store.reset_group_team_selection(group, team)
                    restart = True
                    break

                selections[team] = kept + available[: quota.amount - len(kept)]

            if not restart:
                return self._commit(group, group_def, selections)

        raise RuntimeError(f"Selection for group {group} did not converge")

    def _commit(
        self,
        group: str,
        group_def: GroupDefinition,
        selections: dict[str, list[str]],
    ) -> dict[str, Any]:
        mentions = build_mentions(selections)
        logger.info("Selected members for group %s :: %s", group, mentions)

        template = self._pool.resolve_message(group_def.message, group)
        message = render_template(template, mentions)
        self._notifications.send(group_def.channel, message)

        self._store.add_batch_to_group_selection(group, selections)

        names = [name for members in selections.values() for name in members]
        self._notifications.sync_group_members(group, names)

        MEMBERS_PICKED.labels(kind=KIND_GROUPS).inc(len(names))
        ROTATIONS_TOTAL.labels(kind=KIND_GROUPS, status=STATUS_SELECTED).inc()
        return {
            "status": STATUS_SELECTED,
            "group": group,
            "members": selections,
            "message": message,
        }
