# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Slack Web API client — the chat platform behind notifications.
Thin synchronous wrapper over slack_sdk's WebClient. Raises on failure; callers decide.
"""

from typing import Any, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from rotation_service.core.config import settings

# Transport failures (URLError, timeouts) surface from urllib as OSError.
SLACK_ERRORS: tuple[type[Exception], ...] = (SlackClientError, OSError)


class UserNotFoundError(SlackClientError):
    """A user name could not be mapped to a Slack user id."""

    def __init__(self, name: str) -> None:
        super().__init__(f"user {name} not found")
        self.name = name


class SlackClient:
    """Minimal Slack Web API surface used by the rotation engines."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: Optional[WebClient] = None,
    ) -> None:
        if client is None:
            client = WebClient(
                token=token if token is not None else settings.SLACK_TOKEN,
                base_url=(base_url or settings.SLACK_API_URL).rstrip("/") + "/",
                timeout=int(timeout if timeout is not None else settings.SLACK_TIMEOUT),
            )
        self._client = client

    @property
    def client(self) -> WebClient:
        return self._client

    def post_message(self, channel: str, text: str) -> dict[str, Any]:
        return self._client.chat_postMessage(channel=channel, text=text).data

    def list_groups(self) -> list[dict[str, str]]:
        """Return [{id, name}] for every user group of the workspace."""
        response = self._client.usergroups_list()
        return [
            {"id": g.get("id", ""), "name": g.get("name", "")}
            for g in response.get("usergroups") or []
        ]

    def replace_group_members(self, group_id: str, member_ids: list[str]) -> dict[str, Any]:
        """Replace (not append to) the user group membership."""
        return self._client.usergroups_users_update(usergroup=group_id, users=member_ids).data

    def resolve_user_ids(self, names: list[str]) -> list[str]:
        """Map user names to ids, in order. Raises UserNotFoundError."""
        name_to_id: dict[str, str] = {}
        # Iterating a SlackResponse follows response_metadata.next_cursor.
        for page in self._client.users_list(limit=200):
            for member in page.get("members") or []:
                name_to_id[member.get("name", "")] = member.get("id", "")

        ids: list[str] = []
        for name in names:
            if name not in name_to_id:
                raise UserNotFoundError(name)
            ids.append(name_to_id[name])
        return ids

