"""Collaborator contracts.

The engine reads ownership and subscription data and writes approval records
through these protocols. Implementations live in seo_store.
"""

from typing import Protocol

from seo_agents.policies.types import ApprovalRequest, ApprovalStatus, PlanUsage, SiteRecord


class SiteOwnershipLookup(Protocol):
    """Site ownership lookup: (user_token, site_url) -> {exists, is_managed}."""

    async def get_site(self, user_token: str, site_url: str) -> SiteRecord:
        """Return the owned site matching site_url, or SiteRecord(exists=False)."""
        ...


class SubscriptionLookup(Protocol):
    """Subscription/usage lookup: (user_token, action_type) -> plan usage."""

    async def get_plan_usage(self, user_token: str, action_type: str) -> PlanUsage | None:
        """Return plan allowance and current-period usage, or None without a plan."""
        ...


class ApprovalStore(Protocol):
    """Approval persistence."""

    async def submit(self, request: ApprovalRequest) -> str:
        """Persist a new request and return its approval_id."""
        ...

    async def get(self, approval_id: str) -> ApprovalRequest | None:
        ...

    async def update(self, approval_id: str, status: ApprovalStatus, decided_by: str | None = None) -> ApprovalRequest:
        ...


class ActionLeaseStore(Protocol):
    """Atomic claim on an action_id, held by one executor at a time."""

    async def claim(self, action_id: str, holder: str, ttl: int | None = None) -> bool:
        ...

    async def release(self, action_id: str, holder: str) -> bool:
        ...

    async def holder_of(self, action_id: str) -> str | None:
        ...
