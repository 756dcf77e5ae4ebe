"""API Endpoint Tests.

Test /policies, /approvals, /leases, /healthz, /readyz, /metrics
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from seo_agents.policies.catalog import new_site_policy


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200
    assert "SEO Agent Governance API" in response.json()["name"]


def test_healthz_returns_200(client):
    """Test liveness check."""
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readyz_returns_ready(client):
    """Test readiness check."""
    with patch("apps.core_api.routers.health.check_db_connection", AsyncMock(return_value=True)):
        response = client.get("/readyz")
    assert response.status_code == 200
    assert response.json()["checks"] == {"database": "ok", "redis": "ok"}


def test_readyz_reports_failed_database(client):
    with patch("apps.core_api.routers.health.check_db_connection", AsyncMock(side_effect=OSError("refused"))):
        response = client.get("/readyz")
    assert response.status_code == 503
    assert response.json()["checks"]["database"] == "failed"


def test_metrics_exposed(client):
    """Test Prometheus metrics endpoint."""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


def test_request_id_header(client):
    response = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


# ============================================================================
# /policies
# ============================================================================


def test_policy_info_without_params(client):
    response = client.get("/policies", params={"userToken": "user_abcd1234"})
    data = response.json()

    assert response.status_code == 200
    assert data["newSiteDefault"]["maxPages"] == 5
    assert data["actionSpecific"] is None
    assert data["userPermissions"] is None
    assert "Specify a site URL to get site-specific policy recommendations" in data["recommendations"]


def test_policy_info_for_action(client):
    response = client.get(
        "/policies",
        params={"userToken": "user_abcd1234", "actionType": "schema_injection", "siteUrl": "https://example.com"},
    )
    data = response.json()

    assert data["actionSpecific"]["known"] is True
    assert data["actionSpecific"]["defaultPolicy"]["blastRadius"]["riskLevel"] == "high"
    assert data["userPermissions"] == {
        "hasPermission": False,
        "siteUrl": "https://example.com",
        "actionType": "schema_injection",
    }


def test_policy_info_requires_user_token(client):
    response = client.get("/policies", params={"actionType": "content_generation"})

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "user_token_required"


def test_policy_info_reports_permission(client):
    response = client.get(
        "/policies",
        params={"userToken": "user_abcd1234", "actionType": "content_generation", "siteUrl": "https://example.com"},
    )

    assert response.json()["userPermissions"]["hasPermission"] is True


def test_policy_info_skips_permission_without_site(client):
    response = client.get("/policies", params={"userToken": "user_abcd1234", "actionType": "content_generation"})

    assert response.json()["userPermissions"] is None


def test_validate_allowed(client):
    response = client.post(
        "/policies/validate",
        json={
            "userToken": "user_abcd1234",
            "actionType": "content_generation",
            "siteUrl": "https://example.com",
            "actionId": "act_42",
        },
    )
    data = response.json()

    assert response.status_code == 200
    assert data["actionId"] == "act_42"
    assert data["validation"]["allowed"] is True
    assert data["validation"]["adjustedPolicy"]["environment"] == "DRY_RUN"
    assert data["validation"]["estimatedRisk"] == "low"
    assert "DRY_RUN mode active - no actual changes will be made" in data["recommendations"]


def test_validate_generates_action_id(client):
    response = client.post(
        "/policies/validate",
        json={"userToken": "u", "actionType": "content_generation", "siteUrl": "https://example.com"},
    )
    assert response.json()["actionId"].startswith("temp_")


def test_generated_action_ids_are_unique(client):
    body = {"userToken": "u", "actionType": "content_generation", "siteUrl": "https://example.com"}

    ids = {client.post("/policies/validate", json=body).json()["actionId"] for _ in range(5)}

    assert len(ids) == 5


def test_validate_denied_returns_reason(client):
    response = client.post(
        "/policies/validate",
        json={"userToken": "u", "actionType": "cms_publishing", "siteUrl": "https://example.com"},
    )
    data = response.json()

    assert response.status_code == 200
    assert data["validation"]["allowed"] is False
    assert data["validation"]["reason"].startswith("Insufficient permissions")
    assert data["recommendations"][0].startswith("Action blocked:")


def test_validate_clamps_requested_policy(client):
    response = client.post(
        "/policies/validate",
        json={
            "userToken": "u",
            "actionType": "content_generation",
            "siteUrl": "https://example.com",
            "requestedPolicy": {"environment": "PRODUCTION", "maxPages": 2},
        },
    )
    validation = response.json()["validation"]

    assert validation["adjustedPolicy"]["environment"] == "DRY_RUN"
    assert validation["clampedFields"] == ["environment", "max_pages"]


def test_validate_rejects_missing_fields(client):
    response = client.post("/policies/validate", json={})
    assert response.status_code == 422


def test_runtime_check(client):
    response = client.post(
        "/policies/runtime-check",
        json={"policy": {"maxPages": 5}, "stats": {"pagesProcessed": 5}},
    )
    data = response.json()

    assert data["shouldStop"] is True
    assert data["withinLimits"] is False
    assert data["reason"] == "Page limit reached: 5/5"


# ============================================================================
# /approvals
# ============================================================================


@pytest.fixture
def approval_id(gate, make_context):
    """A pending approval for act_7."""
    return asyncio.run(gate.request_approval(make_context(action_id="act_7"), new_site_policy()))


def test_get_approval(client, approval_id):
    response = client.get(f"/approvals/{approval_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["actionId"] == "act_7"


def test_approval_decision_then_conflict(client, approval_id):
    first = client.post(f"/approvals/{approval_id}/decision", json={"approved": True, "decidedBy": "reviewer"})
    second = client.post(f"/approvals/{approval_id}/decision", json={"approved": False, "decidedBy": "reviewer"})

    assert first.status_code == 200
    assert first.json()["status"] == "approved"
    assert second.status_code == 409
    assert second.json()["detail"]["status"] == "approved"


def test_cancel_approval(client, approval_id):
    response = client.post(f"/approvals/{approval_id}/cancel")
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"


def test_unknown_approval_is_404(client):
    assert client.get("/approvals/approval_missing").status_code == 404


# ============================================================================
# /leases
# ============================================================================


def test_lease_claim_conflict_and_release(client):
    first = client.post("/leases/act_1", json={"holder": "worker-1"})
    second = client.post("/leases/act_1", json={"holder": "worker-2"})
    wrong_release = client.delete("/leases/act_1", params={"holder": "worker-2"})
    release = client.delete("/leases/act_1", params={"holder": "worker-1"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"]["holder"] == "worker-1"
    assert wrong_release.status_code == 409
    assert release.status_code == 200
    assert release.json()["claimed"] is False
