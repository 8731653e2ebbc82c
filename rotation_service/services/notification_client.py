# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Notification client — outbound chat messages and group sync.
Fire-and-forget: every failure is logged and counted, never raised, never retried.
"""

from rotation_service.core.logging import get_logger
from rotation_service.metrics.prometheus import NOTIFICATIONS_SENT
from rotation_service.services.slack_client import (
    SLACK_ERRORS,
    SlackClient,
    UserNotFoundError,
)

logger = get_logger(__name__)


class NotificationClient:
    """Sends rotation results to Slack."""

    def __init__(self, slack: SlackClient) -> None:
        self._slack = slack

    def send(self, channel: str, text: str) -> bool:
        """Post a message to a channel. Empty channel ⇒ skipped."""
        if not channel:
            logger.info("Channel is empty, skipping message: %s", text)
            NOTIFICATIONS_SENT.labels(operation="post_message", outcome="skipped").inc()
            return False
        try:
            self._slack.post_message(channel, text)
        except SLACK_ERRORS as exc:
            NOTIFICATIONS_SENT.labels(operation="post_message", outcome="failed").inc()
            logger.warning("Message to %s failed: %s", channel, exc)
            return False
        NOTIFICATIONS_SENT.labels(operation="post_message", outcome="sent").inc()
        logger.info("Message sent: channel=%s", channel)
        return True

    def sync_group_members(self, group_name: str, names: list[str]) -> bool:
        """Make the Slack user group named group_name contain exactly names."""
        try:
            groups = self._slack.list_groups()
        except SLACK_ERRORS as exc:
            NOTIFICATIONS_SENT.labels(operation="group_sync", outcome="failed").inc()
            logger.warning("Listing user groups failed: %s", exc)
            return False

        group_id = ""
        for group in groups:
            if group["name"] == group_name:
                group_id = group["id"]
        if not group_id:
            NOTIFICATIONS_SENT.labels(operation="group_sync", outcome="skipped").inc()
            logger.warning("Could not find any group with the name: %s", group_name)
            return False

        try:
            member_ids = self._slack.resolve_user_ids(names)
            self._slack.replace_group_members(group_id, member_ids)
        except UserNotFoundError as exc:
            NOTIFICATIONS_SENT.labels(operation="group_sync", outcome="skipped").inc()
            logger.warning("Group %s not synced: %s", group_name, exc)
            return False
        except SLACK_ERRORS as exc:
            NOTIFICATIONS_SENT.labels(operation="group_sync", outcome="failed").inc()
            logger.warning("Group %s sync failed: %s", group_name, exc)
            return False

        NOTIFICATIONS_SENT.labels(operation="group_sync", outcome="sent").inc()
        logger.info("Group synced: group=%s, members=%d", group_name, len(member_ids))
        return True
