"""
/policies Router - Action Governance Endpoints.

Handles:
- GET /policies: New-site default, catalog default, recommendations
- POST /policies/validate: Validate an attempted action
- POST /policies/runtime-check: Runtime limit check for a running action
"""

import time
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import Field

from apps.core_api.deps import get_catalog, get_policy_engine
from seo_agents.policies.catalog import PolicyCatalog, new_site_policy
from seo_agents.policies.engine import PolicyEngine
from seo_agents.policies.recommendations import (
    execution_recommendations,
    policy_recommendations,
    rejection_recommendations,
)
from seo_agents.policies.runtime import enforce_runtime_limits
from seo_agents.policies.types import (
    ActionContext,
    GovernanceModel,
    Policy,
    PolicyOverride,
    RuntimeLimitResult,
    RuntimeStats,
    ValidationResult,
)
from seo_obs.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================


class ValidateRequest(GovernanceModel):
    """Request schema for POST /policies/validate."""

    user_token: str = Field(..., min_length=1)
    action_type: str = Field(..., min_length=1)
    site_url: str = Field(..., min_length=1)
    action_id: str | None = Field(None, description="Idempotency key; generated when omitted")
    payload: dict[str, Any] = Field(default_factory=dict)
    target_urls: list[str] = Field(default_factory=list)
    requested_policy: PolicyOverride = Field(default_factory=PolicyOverride)

    def to_context(self) -> ActionContext:
        return ActionContext(
            action_id=self.action_id or f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}",
            user_token=self.user_token,
            site_url=self.site_url,
            action_type=self.action_type,
            payload=self.payload,
            target_urls=self.target_urls,
        )


class ValidateResponse(GovernanceModel):
    action_id: str
    validation: ValidationResult
    recommendations: list[str]


class RuntimeCheckRequest(GovernanceModel):
    """Request schema for POST /policies/runtime-check. Policy may be partial."""

    policy: PolicyOverride
    stats: RuntimeStats


class ActionPolicyInfo(GovernanceModel):
    action_type: str
    known: bool
    default_policy: Policy


class UserPermissions(GovernanceModel):
    has_permission: bool
    site_url: str
    action_type: str


class PolicyInfoResponse(GovernanceModel):
    new_site_default: Policy
    action_specific: ActionPolicyInfo | None = None
    user_permissions: UserPermissions | None = None
    recommendations: list[str]


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.get("", response_model=PolicyInfoResponse)
async def get_policy_info(
    user_token: str | None = Query(None, alias="userToken"),
    action_type: str | None = Query(None, alias="actionType"),
    site_url: str | None = Query(None, alias="siteUrl"),
    catalog: PolicyCatalog = Depends(get_catalog),
    engine: PolicyEngine = Depends(get_policy_engine),
) -> PolicyInfoResponse:
    """
    Policy information and recommendations for an action type.

    With both siteUrl and actionType, also reports whether the user may run
    that action on that site (ownership, managed status, subscription).
    """
    if not user_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "user_token_required"},
        )

    action_specific = None
    if action_type:
        action_specific = ActionPolicyInfo(
            action_type=action_type,
            known=catalog.knows(action_type),
            default_policy=catalog.default_for(action_type),
        )

    user_permissions = None
    if site_url and action_type:
        user_permissions = UserPermissions(
            has_permission=await engine.check_user_permissions(user_token, site_url, action_type),
            site_url=site_url,
            action_type=action_type,
        )

    return PolicyInfoResponse(
        new_site_default=new_site_policy(),
        action_specific=action_specific,
        user_permissions=user_permissions,
        recommendations=policy_recommendations(site_url, action_type),
    )


@router.post("/validate", response_model=ValidateResponse)
async def validate_policy(
    request_body: ValidateRequest,
    engine: PolicyEngine = Depends(get_policy_engine),
) -> ValidateResponse:
    """
    Validate an attempted action.

    Denials are returned with 200 and allowed=false; the reason is meant to be
    shown to the user verbatim.
    """
    context = request_body.to_context()
    requested = request_body.requested_policy
    result = await engine.validate_policy(context, None if requested.is_empty() else requested)

    if result.allowed and result.adjusted_policy is not None:
        recommendations = execution_recommendations(result.adjusted_policy)
    else:
        recommendations = rejection_recommendations(result.reason or "Unknown error")

    return ValidateResponse(
        action_id=context.action_id,
        validation=result,
        recommendations=recommendations,
    )


@router.post("/runtime-check", response_model=RuntimeLimitResult)
async def runtime_check(request_body: RuntimeCheckRequest) -> RuntimeLimitResult:
    """Whether a running action must stop."""
    return enforce_runtime_limits(request_body.policy, request_body.stats)
