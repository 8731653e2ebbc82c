# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — the pool definition as loaded from configuration.json.
Pure data structures, NO FastAPI dependency.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

KIND_TEAMS = "teams"
KIND_GROUPS = "groups"
VALID_KINDS = (KIND_TEAMS, KIND_GROUPS)

VIEW_SELECTED = "selected"
VIEW_AVAILABLE = "available"
VALID_VIEWS = (VIEW_SELECTED, VIEW_AVAILABLE)

NOBODY = "nobody"


def _ordered_members(value: Any) -> list[str]:
    """Normalise a member list to an ordered set (first occurrence wins)."""
    if value is None:
        return []
    seen: dict[str, None] = {}
    for name in value:
        seen.setdefault(name, None)
    return list(seen)


class TaskDefinition(BaseModel):
    """A recurring duty of one team: who is eligible and how many to pick."""
    cron: str = ""
    members: list[str] = Field(default_factory=list)
    message: str = ""
    channel: str = ""
    amount: int = Field(default=0, ge=0)

    @field_validator("members", mode="before")
    @classmethod
    def normalise_members(cls, v: Any) -> list[str]:
        return _ordered_members(v)


class TeamQuota(BaseModel):
    """One team's share of a group rotation."""
    members: list[str] = Field(default_factory=list)
    amount: int = Field(default=0, ge=0)

    @field_validator("members", mode="before")
    @classmethod
    def normalise_members(cls, v: Any) -> list[str]:
        return _ordered_members(v)


class GroupDefinition(BaseModel):
    """A support group drawing members from several teams at once."""
    cron: str = ""
    teams: dict[str, TeamQuota] = Field(default_factory=dict)
    message: str = ""
    channel: str = ""

    @field_validator("teams", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or {}


class PoolDefinition(BaseModel):
    """Top-level document: default cron, fallback messages, teams and groups."""
    model_config = ConfigDict(populate_by_name=True)

    default_cron: str = Field(default="", alias="defaultCron")
    messages: dict[str, str] = Field(default_factory=dict)
    teams: dict[str, dict[str, TaskDefinition]] = Field(default_factory=dict)
    groups: dict[str, GroupDefinition] = Field(default_factory=dict)

    @field_validator("messages", "teams", "groups", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or {}
