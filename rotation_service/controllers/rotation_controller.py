# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Pool, rotation, selection and schedule endpoints.
Thin HTTP layer — delegates ALL logic to the rotation services.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from rotation_service.core.dependencies import (
    get_group_service,
    get_pool_repo,
    get_query_service,
    get_replacement_service,
    get_scheduler,
    get_task_service,
)
from rotation_service.models.domain import KIND_GROUPS, KIND_TEAMS, NOBODY
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.schemas.rotation import (
    GroupRotationResponse,
    MembersResponse,
    ReplaceRequest,
    ReplaceResponse,
    TaskRotationResponse,
)
from rotation_service.services.group_selection import GroupSelectionService
from rotation_service.services.query import QueryService
from rotation_service.services.replacement import ReplacementService
from rotation_service.services.scheduler import RotationScheduler
from rotation_service.services.task_selection import TaskSelectionService

router = APIRouter(prefix="/api/v1", tags=["Rotations"])

VIEW_PATTERN = "^(selected|available)$"


# ── Pool ──

@router.get("/pool")
def get_pool(pool_repo: PoolRepository = Depends(get_pool_repo)):
    """Configured teams, tasks and groups."""
    return pool_repo.summary()


# ── Rotations ──

@router.post("/teams/{team}/tasks/{task}/rotate", response_model=TaskRotationResponse)
def rotate_task(
    team: str,
    task: str,
    service: TaskSelectionService = Depends(get_task_service),
):
    """Pick the next members for a task right now."""
    try:
        return service.select_for_task(team, task)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/groups/{group}/rotate", response_model=GroupRotationResponse)
def rotate_group(
    group: str,
    service: GroupSelectionService = Depends(get_group_service),
):
    """Pick the next members for every team of a group right now."""
    try:
        return service.select_for_group(group)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ── Selections ──

@router.get("/teams/{team}/tasks/{task}/members", response_model=MembersResponse)
def get_task_members(
    team: str,
    task: str,
    view: str = Query(default="selected", pattern=VIEW_PATTERN),
    service: QueryService = Depends(get_query_service),
):
    """Members selected in the current round, or still available."""
    return {"view": view, "members": service.show(view, KIND_TEAMS, team, task)}


@router.get("/groups/{group}/teams/{team}/members", response_model=MembersResponse)
def get_group_team_members(
    group: str,
    team: str,
    view: str = Query(default="selected", pattern=VIEW_PATTERN),
    service: QueryService = Depends(get_query_service),
):
    """Members of one group team selected in the current round, or still available."""
    return {"view": view, "members": service.show(view, KIND_GROUPS, group, team)}


@router.post("/teams/{team}/tasks/{task}/replace", response_model=ReplaceResponse)
def replace_task_member(
    team: str,
    task: str,
    payload: ReplaceRequest,
    service: ReplacementService = Depends(get_replacement_service),
):
    """Swap a selected member of a task for a fresh one."""
    new_member = service.replace(KIND_TEAMS, team, task, payload.username)
    if new_member == NOBODY:
        raise HTTPException(status_code=409, detail="Nobody selected to replace")
    return {"replaced": payload.username, "new_member": new_member}


@router.post("/groups/{group}/teams/{team}/replace", response_model=ReplaceResponse)
def replace_group_member(
    group: str,
    team: str,
    payload: ReplaceRequest,
    service: ReplacementService = Depends(get_replacement_service),
):
    """Swap a selected member of a group team for a fresh one."""
    new_member = service.replace(KIND_GROUPS, group, team, payload.username)
    if new_member == NOBODY:
        raise HTTPException(status_code=409, detail="Nobody selected to replace")
    return {"replaced": payload.username, "new_member": new_member}


# ── Schedules ──

@router.get("/schedules")
def list_schedules(scheduler: RotationScheduler = Depends(get_scheduler)):
    """Every scheduled rotation job with its next run time."""
    return scheduler.list_jobs()
