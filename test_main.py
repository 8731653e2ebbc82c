# type: ignore
"""
Tests for the Rotation Service HTTP surface.
Slash commands, REST rotations, selections, schedules, health and metrics.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from main import app
from rotation_service.core.config import settings
from rotation_service.core.dependencies import (
    get_notification_client,
    get_pool_repo,
    get_rotation_store,
)
from rotation_service.models.domain import PoolDefinition

client = TestClient(app)

pool_repo = get_pool_repo()
store = get_rotation_store()
notifications = get_notification_client()

POOL = {
    "defaultCron": "0 0 9 * * 1-5",
    "messages": {"daily": "Morning {{name}}!"},
    "teams": {
        "payments": {
            "daily": {"members": ["alice", "bob", "carol"], "amount": 2, "channel": "C1"},
        }
    },
    "groups": {
        "support": {
            "channel": "C2",
            "teams": {
                "payments": {"members": ["alice", "bob"], "amount": 1},
                "risk": {"members": ["erin"], "amount": 1},
            },
        }
    },
}


# ============================================
# Fixtures
# ============================================
@pytest.fixture(autouse=True)
def reset_state(tmp_path, monkeypatch):
    """Fresh pool and empty selection state per test; Slack calls stubbed."""
    pool_repo.replace(PoolDefinition.model_validate(POOL))
    store.clear()
    monkeypatch.setattr(store, "task_state_path", tmp_path / "teams.json")
    monkeypatch.setattr(store, "group_state_path", tmp_path / "groups.json")
    monkeypatch.setattr(notifications, "send", MagicMock(return_value=True))
    monkeypatch.setattr(notifications, "sync_group_members", MagicMock(return_value=True))
    yield
    store.clear()


def _slash(path, text):
    return client.post(path, data={"command": path, "text": text})


# ============================================
# Health & Metrics
# ============================================
class TestHealth:
    def test_health_returns_ok(self):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION
        assert data["tasks_count"] == 1
        assert data["groups_count"] == 1

    def test_readiness(self):
        data = client.get("/health/ready").json()
        assert data["status"] == "ready"
        assert data["pool_loaded"] is True
        assert data["scheduler_running"] is False

    def test_readiness_empty_pool(self):
        pool_repo.replace(PoolDefinition())
        assert client.get("/health/ready").json()["pool_loaded"] is False

    def test_request_id_generated_and_propagated(self):
        assert client.get("/health").headers.get("X-Request-ID")
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_metrics_after_rotation(self):
        client.post("/api/v1/teams/payments/tasks/daily/rotate")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "rotation_rounds_total" in response.text
        assert "rotation_members_picked_total" in response.text


# ============================================
# Slash commands
# ============================================
class TestShowCommand:
    def test_show_selected(self):
        store.add_to_task_selection("payments", "daily", "bob")
        response = _slash("/show", "selected teams payments daily")
        assert response.status_code == 200
        assert response.json() == {"response_type": "in_channel", "text": "bob"}

    def test_show_available(self):
        store.add_to_task_selection("payments", "daily", "bob")
        response = _slash("/show", "available teams payments daily")
        assert response.json()["text"] == "alice, carol"

    def test_show_group_team(self):
        store.add_batch_to_group_selection("support", {"payments": ["alice"]})
        assert _slash("/show", "available groups support payments").json()["text"] == "bob"

    def test_show_usage_on_garbage(self):
        data = _slash("/show", "who is on call?").json()
        assert data["response_type"] == "ephemeral"
        assert data["text"].startswith("Usage:")

    def test_show_usage_on_unknown_view(self):
        data = _slash("/show", "pedro teams payments daily").json()
        assert data["response_type"] == "ephemeral"


class TestReplaceCommand:
    def test_replace_nobody_selected(self):
        response = _slash("/replace", "alice teams payments daily")
        assert response.status_code == 200
        assert response.json() == {"response_type": "in_channel", "text": "It's your turn, nobody"}

    def test_replace_selected_member(self):
        store.add_to_task_selection("payments", "daily", "alice")
        store.add_to_task_selection("payments", "daily", "bob")
        text = _slash("/replace", "alice teams payments daily").json()["text"]
        assert text == "It's your turn, carol"
        assert store.get_task_selection("payments", "daily") == ["carol", "bob"]

    def test_replace_group_member(self):
        store.add_batch_to_group_selection("support", {"payments": ["alice"]})
        text = _slash("/replace", "@alice groups support payments").json()["text"]
        assert text == "It's your turn, bob"
        assert store.get_group_selection("support", "payments") == ["bob"]

    def test_replace_usage_on_garbage(self):
        data = _slash("/replace", "").json()
        assert data["response_type"] == "ephemeral"


# ============================================
# REST rotations
# ============================================
class TestRotations:
    def test_rotate_task(self):
        response = client.post("/api/v1/teams/payments/tasks/daily/rotate")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "selected"
        assert len(data["members"]) == 2
        assert notifications.send.call_count == 2

    def test_rotate_unknown_task(self):
        response = client.post("/api/v1/teams/payments/tasks/weekly/rotate")
        assert response.status_code == 404

    def test_rotate_group(self):
        response = client.post("/api/v1/groups/support/rotate")
        assert response.status_code == 200
        data = response.json()
        assert data["members"]["risk"] == ["erin"]
        assert data["members"]["payments"][0] in {"alice", "bob"}
        notifications.sync_group_members.assert_called_once()

    def test_rotate_unknown_group(self):
        assert client.post("/api/v1/groups/nope/rotate").status_code == 404

    def test_pool_summary(self):
        data = client.get("/api/v1/pool").json()
        assert data["teams"]["payments"]["daily"]["amount"] == 2
        assert set(data["groups"]["support"]["teams"]) == {"payments", "risk"}

    def test_schedules_listing(self):
        response = client.get("/api/v1/schedules")
        assert response.status_code == 200
        assert isinstance(response.json(), list)


# ============================================
# REST selections
# ============================================
class TestSelections:
    def test_task_members_views(self):
        store.add_to_task_selection("payments", "daily", "carol")
        selected = client.get("/api/v1/teams/payments/tasks/daily/members").json()
        assert selected == {"view": "selected", "members": ["carol"]}
        available = client.get(
            "/api/v1/teams/payments/tasks/daily/members", params={"view": "available"}
        ).json()
        assert available == {"view": "available", "members": ["alice", "bob"]}

    def test_group_members_views(self):
        store.add_batch_to_group_selection("support", {"risk": ["erin"]})
        data = client.get(
            "/api/v1/groups/support/teams/risk/members", params={"view": "available"}
        ).json()
        assert data["members"] == []

    def test_invalid_view(self):
        response = client.get(
            "/api/v1/teams/payments/tasks/daily/members", params={"view": "everyone"}
        )
        assert response.status_code == 422

    def test_replace_nothing_selected_conflict(self):
        response = client.post(
            "/api/v1/teams/payments/tasks/daily/replace", json={"username": "alice"}
        )
        assert response.status_code == 409

    def test_replace_task_member(self):
        store.add_to_task_selection("payments", "daily", "alice")
        store.add_to_task_selection("payments", "daily", "bob")
        response = client.post(
            "/api/v1/teams/payments/tasks/daily/replace", json={"username": "bob"}
        )
        assert response.status_code == 200
        assert response.json() == {"replaced": "bob", "new_member": "carol"}

    def test_replace_group_member(self):
        store.add_batch_to_group_selection("support", {"payments": ["bob"]})
        response = client.post(
            "/api/v1/groups/support/teams/payments/replace", json={"username": "bob"}
        )
        assert response.json()["new_member"] == "alice"

    def test_replace_requires_username(self):
        response = client.post("/api/v1/teams/payments/tasks/daily/replace", json={})
        assert response.status_code == 422
