"""
/approvals Router - Approval Lifecycle Endpoints.

Handles:
- GET /approvals/{approval_id}: Current record (pending requests past their
  deadline are reported as expired)
- POST /approvals/{approval_id}/decision: Approve or reject
- POST /approvals/{approval_id}/cancel: Abandon a pending request
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field

from apps.core_api.deps import get_approval_gate
from seo_agents.policies.approval import ApprovalGate
from seo_agents.policies.exceptions import ApprovalNotFound, ApprovalStateError
from seo_agents.policies.types import ApprovalRequest, GovernanceModel

router = APIRouter()


class DecisionRequest(GovernanceModel):
    approved: bool
    decided_by: str = Field(..., min_length=1)


class CancelRequest(GovernanceModel):
    decided_by: str | None = None


def _not_found(e: ApprovalNotFound) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "approval_not_found", "approval_id": e.approval_id},
    )


def _conflict(e: ApprovalStateError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"error": "approval_not_pending", "approval_id": e.approval_id, "status": e.status},
    )


@router.get("/{approval_id}", response_model=ApprovalRequest)
async def get_approval(approval_id: str, gate: ApprovalGate = Depends(get_approval_gate)) -> ApprovalRequest:
    try:
        return await gate.get_request(approval_id)
    except ApprovalNotFound as e:
        raise _not_found(e)


@router.post("/{approval_id}/decision", response_model=ApprovalRequest)
async def decide_approval(
    approval_id: str,
    request_body: DecisionRequest,
    gate: ApprovalGate = Depends(get_approval_gate),
) -> ApprovalRequest:
    try:
        return await gate.decide(approval_id, request_body.approved, request_body.decided_by)
    except ApprovalNotFound as e:
        raise _not_found(e)
    except ApprovalStateError as e:
        raise _conflict(e)


@router.post("/{approval_id}/cancel", response_model=ApprovalRequest)
async def cancel_approval(
    approval_id: str,
    request_body: CancelRequest | None = None,
    gate: ApprovalGate = Depends(get_approval_gate),
) -> ApprovalRequest:
    decided_by = request_body.decided_by if request_body else None
    try:
        return await gate.cancel(approval_id, decided_by)
    except ApprovalNotFound as e:
        raise _not_found(e)
    except ApprovalStateError as e:
        raise _conflict(e)
