# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

import threading

from rotation_service.core.config import settings
from rotation_service.repositories.pool_repository import PoolRepository
from rotation_service.repositories.rotation_store import RotationStore
from rotation_service.services.group_selection import GroupSelectionService
from rotation_service.services.notification_client import NotificationClient
from rotation_service.services.query import QueryService
from rotation_service.services.replacement import ReplacementService
from rotation_service.services.scheduler import RotationScheduler
from rotation_service.services.slack_client import SlackClient
from rotation_service.services.task_selection import TaskSelectionService

# ── One lock serializes every rotation, replacement and query ──
_rotation_lock = threading.Lock()

# ── Singleton repository instances (loaded at startup) ──
_pool_repo = PoolRepository()
_rotation_store = RotationStore(
    task_state_path=settings.TASK_SELECTION_PATH,
    group_state_path=settings.GROUP_SELECTION_PATH,
)
_slack_client = SlackClient()
_notification_client = NotificationClient(_slack_client)

# ── Service instances (with injected dependencies) ──
_task_service = TaskSelectionService(
    pool_repo=_pool_repo,
    store=_rotation_store,
    notification_client=_notification_client,
    lock=_rotation_lock,
)
_group_service = GroupSelectionService(
    pool_repo=_pool_repo,
    store=_rotation_store,
    notification_client=_notification_client,
    lock=_rotation_lock,
)
_replacement_service = ReplacementService(
    pool_repo=_pool_repo,
    store=_rotation_store,
    lock=_rotation_lock,
)
_query_service = QueryService(
    pool_repo=_pool_repo,
    store=_rotation_store,
    lock=_rotation_lock,
)
_scheduler = RotationScheduler(
    pool_repo=_pool_repo,
    task_service=_task_service,
    group_service=_group_service,
)


# ── FastAPI dependency functions ──
def get_pool_repo() -> PoolRepository:
    return _pool_repo


def get_rotation_store() -> RotationStore:
    return _rotation_store


def get_notification_client() -> NotificationClient:
    return _notification_client


def get_task_service() -> TaskSelectionService:
    return _task_service


def get_group_service() -> GroupSelectionService:
    return _group_service


def get_replacement_service() -> ReplacementService:
    return _replacement_service


def get_query_service() -> QueryService:
    return _query_service


def get_scheduler() -> RotationScheduler:
    return _scheduler
