# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ── Slash-command Schemas ──

class SlackCommandResponse(BaseModel):
    response_type: str = Field(
        default="in_channel", pattern="^(in_channel|ephemeral)$"
    )
    text: str


# ── Rotation Schemas ──

class TaskRotationResponse(BaseModel):
    status: str
    team: str
    task: str
    members: list[str]


class GroupRotationResponse(BaseModel):
    status: str
    group: str
    team: Optional[str] = None
    members: dict[str, list[str]]
    message: str


# ── Selection Schemas ──

class MembersResponse(BaseModel):
    view: str
    members: list[str]


class ReplaceRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255, description="Member to replace")


class ReplaceResponse(BaseModel):
    replaced: str
    new_member: str
