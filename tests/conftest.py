"""Pytest fixtures.

In-memory collaborators for the policy engine plus a FastAPI test client
whose dependencies are swapped for them.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from apps.core_api import deps
from apps.core_api.main import app
from seo_agents.policies.approval import ApprovalGate
from seo_agents.policies.catalog import default_catalog
from seo_agents.policies.engine import PolicyEngine
from seo_agents.policies.types import (
    ActionContext,
    ApprovalRequest,
    ApprovalStatus,
    PlanUsage,
    SiteRecord,
)


class FakeSites:
    """Site ownership lookup backed by a dict keyed on (user_token, site_url)."""

    def __init__(self, default: SiteRecord | None = None, error: Exception | None = None):
        self.default = default or SiteRecord(exists=True, is_managed=False, site_id=1, domain="example.com")
        self.records: dict[tuple[str, str], SiteRecord] = {}
        self.error = error
        self.calls = 0

    async def get_site(self, user_token: str, site_url: str) -> SiteRecord:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.records.get((user_token, site_url), self.default)


class FakeSubscriptions:
    def __init__(self, plan: PlanUsage | None = None, error: Exception | None = None):
        self.plan = plan
        self.error = error

    async def get_plan_usage(self, user_token: str, action_type: str) -> PlanUsage | None:
        if self.error is not None:
            raise self.error
        return self.plan


class InMemoryApprovalStore:
    def __init__(self, fail: bool = False):
        self.records: dict[str, ApprovalRequest] = {}
        self.fail = fail

    async def submit(self, request: ApprovalRequest) -> str:
        if self.fail:
            raise ConnectionError("approval store unavailable")
        if request.approval_id in self.records:
            raise ValueError(f"Approval request already exists: {request.approval_id}")
        self.records[request.approval_id] = request
        return request.approval_id

    async def get(self, approval_id: str) -> ApprovalRequest | None:
        return self.records.get(approval_id)

    async def update(
        self, approval_id: str, status: ApprovalStatus, decided_by: str | None = None
    ) -> ApprovalRequest:
        if approval_id not in self.records:
            raise KeyError(approval_id)
        updated = self.records[approval_id].model_copy(
            update={
                "status": status,
                "decided_at": datetime.now(timezone.utc),
                "decided_by": decided_by,
            }
        )
        self.records[approval_id] = updated
        return updated


class InMemoryLeaseStore:
    def __init__(self):
        self.holders: dict[str, str] = {}

    async def claim(self, action_id: str, holder: str, ttl: int | None = None) -> bool:
        if action_id in self.holders:
            return False
        self.holders[action_id] = holder
        return True

    async def release(self, action_id: str, holder: str) -> bool:
        if self.holders.get(action_id) != holder:
            return False
        del self.holders[action_id]
        return True

    async def holder_of(self, action_id: str) -> str | None:
        return self.holders.get(action_id)


# ============================================================================
# COLLABORATORS
# ============================================================================


@pytest.fixture
def sites():
    return FakeSites()


@pytest.fixture
def managed_sites():
    return FakeSites(default=SiteRecord(exists=True, is_managed=True, site_id=2, domain="managed.example.com"))


@pytest.fixture
def subscriptions():
    """Starter plan with headroom."""
    return FakeSubscriptions(plan=PlanUsage(tier="starter", allowance=4, current_usage=1))


@pytest.fixture
def approval_store():
    return InMemoryApprovalStore()


@pytest.fixture
def lease_store():
    return InMemoryLeaseStore()


@pytest.fixture
def engine(sites, subscriptions, approval_store):
    """Policy engine over a non-managed site."""
    return PolicyEngine(sites, subscriptions, approvals=approval_store, catalog=default_catalog())


@pytest.fixture
def managed_engine(managed_sites, subscriptions, approval_store):
    """Policy engine over a managed site."""
    return PolicyEngine(managed_sites, subscriptions, approvals=approval_store, catalog=default_catalog())


@pytest.fixture
def gate(approval_store):
    return ApprovalGate(approval_store, timeout_seconds=3600)


@pytest.fixture
def make_context():
    """Factory for action contexts."""

    def _make(action_type: str = "content_generation", **overrides) -> ActionContext:
        fields = {
            "action_id": "action_1",
            "user_token": "user_abcd1234",
            "site_url": "https://example.com",
            "action_type": action_type,
        }
        fields.update(overrides)
        return ActionContext(**fields)

    return _make


# ============================================================================
# API
# ============================================================================


@pytest.fixture
def mock_redis():
    """Mock Redis client for testing."""
    mock = AsyncMock()
    mock.ping = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def client(engine, gate, lease_store, mock_redis):
    """FastAPI test client wired to in-memory collaborators."""

    async def _redis():
        yield mock_redis

    app.dependency_overrides[deps.get_policy_engine] = lambda: engine
    app.dependency_overrides[deps.get_approval_gate] = lambda: gate
    app.dependency_overrides[deps.get_lease_store] = lambda: lease_store
    app.dependency_overrides[deps.get_redis] = _redis
    yield TestClient(app)
    app.dependency_overrides.clear()
