"""
/leases Router - Action Lease Endpoints.

An executor claims an action_id before calling /policies/validate so that
duplicate submissions of the same action are rejected here.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field

from apps.core_api.deps import get_lease_store
from seo_agents.policies.contracts import ActionLeaseStore
from seo_agents.policies.types import GovernanceModel

router = APIRouter()


class LeaseRequest(GovernanceModel):
    holder: str = Field(..., min_length=1, description="Executor identity")
    ttl_seconds: int | None = Field(None, ge=1)


class LeaseResponse(GovernanceModel):
    action_id: str
    holder: str
    claimed: bool


@router.post("/{action_id}", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
async def claim_lease(
    action_id: str,
    request_body: LeaseRequest,
    leases: ActionLeaseStore = Depends(get_lease_store),
) -> LeaseResponse:
    claimed = await leases.claim(action_id, request_body.holder, request_body.ttl_seconds)
    if not claimed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "action_already_claimed",
                "action_id": action_id,
                "holder": await leases.holder_of(action_id),
            },
        )
    return LeaseResponse(action_id=action_id, holder=request_body.holder, claimed=True)


@router.delete("/{action_id}", response_model=LeaseResponse)
async def release_lease(
    action_id: str,
    holder: str,
    leases: ActionLeaseStore = Depends(get_lease_store),
) -> LeaseResponse:
    released = await leases.release(action_id, holder)
    if not released:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "lease_not_held", "action_id": action_id},
        )
    return LeaseResponse(action_id=action_id, holder=holder, claimed=False)
