"""Approval Gate.

Decides whether a human must sign off on an action and runs the two-phase
approval protocol:

1. request_approval() submits a pending ApprovalRequest and returns its id.
2. The executor polls poll_approval_status() (or checks is_cleared()) and may
   not pass the gated step until the status is APPROVED.

Pending requests expire after APPROVAL_TIMEOUT_SECONDS; an expired or
cancelled request never clears.
"""

import time
import uuid
from datetime import datetime, timedelta, timezone

from seo_agents.policies.contracts import ApprovalStore
from seo_agents.policies.exceptions import (
    ApprovalNotFound,
    ApprovalStateError,
    ApprovalSubmissionError,
)
from seo_agents.policies.risk import is_high_risk_action
from seo_agents.policies.types import (
    ActionContext,
    ApprovalRequest,
    ApprovalStatus,
    Environment,
    Policy,
    RiskLevel,
)
from seo_obs.logging import get_logger
from seo_obs.metrics import approval_requests_total

logger = get_logger(__name__)

LARGE_CHANGE_PAGES = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalGate:
    """Approval requirement check plus approval lifecycle."""

    def __init__(self, store: ApprovalStore | None = None, timeout_seconds: int = 3600):
        self.store = store
        self.timeout_seconds = timeout_seconds

    # ------------------------------------------------------------------------
    # REQUIREMENT
    # ------------------------------------------------------------------------

    def requires_approval(self, context: ActionContext, policy: Policy) -> bool:
        """True if any approval trigger fires.

        Evaluated independently of the SafetyValidator production gate.
        """
        if policy.environment == Environment.PRODUCTION and is_high_risk_action(context.action_type):
            return True

        # Large-scale changes
        if policy.blast_radius.max_affected_pages > LARGE_CHANGE_PAGES:
            return True

        if policy.blast_radius.risk_level == RiskLevel.HIGH:
            return True

        return policy.requires_approval

    # ------------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------------

    def build_request(
        self, context: ActionContext, policy: Policy, risk: RiskLevel | None = None
    ) -> ApprovalRequest:
        requested_at = _utcnow()
        return ApprovalRequest(
            approval_id=f"approval_{context.action_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}",
            action_id=context.action_id,
            user_token=context.user_token,
            site_url=context.site_url,
            action_type=context.action_type,
            policy_summary={
                "environment": policy.environment.value,
                "blast_radius": policy.blast_radius.model_dump(mode="json"),
                "max_pages": policy.max_pages,
                "max_patches": policy.max_patches,
            },
            risk_assessment={
                "level": policy.blast_radius.risk_level.value,
                "estimated_risk": risk.value if risk else None,
                "affected_pages": policy.blast_radius.max_affected_pages,
                "rollback_available": policy.blast_radius.rollback_required,
            },
            requested_at=requested_at,
            expires_at=requested_at + timedelta(seconds=self.timeout_seconds),
            status=ApprovalStatus.PENDING,
        )

    def _require_store(self) -> ApprovalStore:
        if self.store is None:
            raise RuntimeError("ApprovalGate has no approval store configured")
        return self.store

    async def request_approval(
        self, context: ActionContext, policy: Policy, risk: RiskLevel | None = None
    ) -> str:
        """Submit a pending approval request and return its id.

        Raises:
            ApprovalSubmissionError: If the store fails to persist the request
        """
        store = self._require_store()
        request = self.build_request(context, policy, risk)

        try:
            approval_id = await store.submit(request)
        except Exception as e:
            logger.error(
                "approval_request_failed",
                action_id=context.action_id,
                error=str(e),
                exc_info=True,
            )
            approval_requests_total.labels(status="failed").inc()
            raise ApprovalSubmissionError(context.action_id) from e

        approval_requests_total.labels(status=ApprovalStatus.PENDING.value).inc()
        logger.info(
            "approval_request_created",
            approval_id=approval_id,
            action_id=context.action_id,
            action_type=context.action_type,
            site_url=context.site_url,
            environment=policy.environment.value,
            expires_at=request.expires_at.isoformat() if request.expires_at else None,
        )
        return approval_id

    # Older callers use this name.
    create_approval_request = request_approval

    async def get_request(self, approval_id: str) -> ApprovalRequest:
        request = await self._require_store().get(approval_id)
        if request is None:
            raise ApprovalNotFound(approval_id)
        return await self._expire_if_stale(request)

    async def poll_approval_status(self, approval_id: str) -> ApprovalStatus:
        request = await self.get_request(approval_id)
        return request.status

    async def is_cleared(self, approval_id: str) -> bool:
        return await self.poll_approval_status(approval_id) == ApprovalStatus.APPROVED

    async def decide(self, approval_id: str, approved: bool, decided_by: str) -> ApprovalRequest:
        """Approve or reject a pending request."""
        status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        return await self._transition(approval_id, status, decided_by)

    async def cancel(self, approval_id: str, decided_by: str | None = None) -> ApprovalRequest:
        """Abandon a pending request."""
        return await self._transition(approval_id, ApprovalStatus.CANCELLED, decided_by)

    async def _transition(
        self, approval_id: str, status: ApprovalStatus, decided_by: str | None
    ) -> ApprovalRequest:
        request = await self.get_request(approval_id)
        if request.status != ApprovalStatus.PENDING:
            raise ApprovalStateError(approval_id, request.status.value)

        updated = await self._require_store().update(approval_id, status, decided_by)
        approval_requests_total.labels(status=status.value).inc()
        logger.info(
            "approval_request_decided",
            approval_id=approval_id,
            status=status.value,
            decided_by=decided_by,
        )
        return updated

    async def _expire_if_stale(self, request: ApprovalRequest) -> ApprovalRequest:
        if (
            request.status == ApprovalStatus.PENDING
            and request.expires_at is not None
            and request.expires_at <= _utcnow()
        ):
            approval_requests_total.labels(status=ApprovalStatus.EXPIRED.value).inc()
            logger.info("approval_request_expired", approval_id=request.approval_id)
            return await self._require_store().update(request.approval_id, ApprovalStatus.EXPIRED)
        return request
