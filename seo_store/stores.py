"""Governance Store Adapters.

Postgres lookups used by the policy engine (site ownership, subscription
usage) and Redis-backed approval records and action leases.
"""

import json
from datetime import datetime, timezone

from redis import asyncio as aioredis
from sqlalchemy import func, select

from seo_agents.policies.safety import strip_scheme
from seo_agents.policies.types import ApprovalRequest, ApprovalStatus, PlanUsage, SiteRecord
from seo_obs.logging import get_logger

logger = get_logger(__name__)

# Action types that consume a metered resource, keyed to usage_tracking.resource_type.
METERED_RESOURCES: dict[str, str] = {
    "content_generation": "article",
}


def current_month_year() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m")


# ============================================================================
# POSTGRES LOOKUPS
# ============================================================================


class PostgresSiteStore:
    """Site ownership lookup over the websites table."""

    def __init__(self, session_factory):
        """Initialize site store.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self.session_factory = session_factory

    async def get_site(self, user_token: str, site_url: str) -> SiteRecord:
        """Find a site owned by user_token whose domain contains site_url.

        Args:
            user_token: Owner token
            site_url: Site URL, with or without scheme

        Returns:
            SiteRecord (exists=False when not found)
        """
        from seo_store.models import Website

        domain = strip_scheme(site_url)

        async with self.session_factory() as session:
            stmt = (
                select(Website)
                .where(Website.user_token == user_token)
                .where(Website.domain.icontains(domain, autoescape=True))
                .order_by(Website.id)
                .limit(1)
            )
            result = await session.execute(stmt)
            website = result.scalar_one_or_none()

            if website is None:
                logger.info("site_not_found", user_token_suffix=user_token[-4:], domain=domain)
                return SiteRecord(exists=False)

            return SiteRecord(
                exists=True,
                is_managed=bool(website.is_managed),
                site_id=website.id,
                domain=website.domain,
            )


class PostgresSubscriptionStore:
    """Subscription/usage lookup over user_plans and usage_tracking."""

    def __init__(self, session_factory, metered_resources: dict[str, str] | None = None):
        self.session_factory = session_factory
        self.metered_resources = metered_resources or METERED_RESOURCES

    async def get_plan_usage(self, user_token: str, action_type: str) -> PlanUsage | None:
        """Plan allowance and current-month usage for a metered action type.

        Returns:
            PlanUsage, or None when the user has no plan. allowance is None
            for action types that are not metered.
        """
        from seo_store.models import UsageTracking, UserPlan

        async with self.session_factory() as session:
            result = await session.execute(
                select(UserPlan).where(UserPlan.user_token == user_token)
            )
            plan = result.scalar_one_or_none()

            if plan is None:
                return None

            resource_type = self.metered_resources.get(action_type)
            if resource_type is None:
                return PlanUsage(tier=plan.tier)

            usage = await session.execute(
                select(func.coalesce(func.sum(UsageTracking.count), 0))
                .where(UsageTracking.user_token == user_token)
                .where(UsageTracking.resource_type == resource_type)
                .where(UsageTracking.month_year == current_month_year())
            )

            return PlanUsage(
                tier=plan.tier,
                allowance=plan.posts_allowed,
                current_usage=int(usage.scalar() or 0),
            )


# ============================================================================
# REDIS APPROVAL STORE
# ============================================================================


class RedisApprovalStore:
    """Approval records as JSON documents.

    Key Structure:
    - {prefix}:approval:{approval_id} → ApprovalRequest (JSON)
    - {prefix}:approval:action:{action_id} → Set of approval ids
    """

    def __init__(self, client: aioredis.Redis, key_prefix: str = "seoagent", ttl: int = 604800):
        """Initialize approval store.

        Args:
            client: Async Redis client (decode_responses=True)
            key_prefix: Namespace for keys
            ttl: Retention of approval records in seconds
        """
        self.client = client
        self.key_prefix = key_prefix
        self.ttl = ttl

    def _key(self, approval_id: str) -> str:
        return f"{self.key_prefix}:approval:{approval_id}"

    def _action_key(self, action_id: str) -> str:
        return f"{self.key_prefix}:approval:action:{action_id}"

    async def submit(self, request: ApprovalRequest) -> str:
        """Persist a new approval request.

        Raises:
            ValueError: If a request with the same id already exists
        """
        created = await self.client.set(
            self._key(request.approval_id),
            request.model_dump_json(),
            ex=self.ttl,
            nx=True,
        )
        if not created:
            raise ValueError(f"Approval request already exists: {request.approval_id}")

        await self.client.sadd(self._action_key(request.action_id), request.approval_id)
        await self.client.expire(self._action_key(request.action_id), self.ttl)
        return request.approval_id

    async def get(self, approval_id: str) -> ApprovalRequest | None:
        value = await self.client.get(self._key(approval_id))
        if value is None:
            return None
        return ApprovalRequest.model_validate(json.loads(value))

    async def update(
        self, approval_id: str, status: ApprovalStatus, decided_by: str | None = None
    ) -> ApprovalRequest:
        """Set a new status, keeping the record's remaining TTL.

        Raises:
            KeyError: If the approval does not exist
        """
        request = await self.get(approval_id)
        if request is None:
            raise KeyError(approval_id)

        updated = request.model_copy(
            update={
                "status": status,
                "decided_at": datetime.now(timezone.utc),
                "decided_by": decided_by,
            }
        )
        await self.client.set(self._key(approval_id), updated.model_dump_json(), keepttl=True)
        return updated

    async def list_for_action(self, action_id: str) -> list[str]:
        members = await self.client.smembers(self._action_key(action_id))
        return sorted(members)


# ============================================================================
# REDIS ACTION LEASES
# ============================================================================

# Delete the lease only if it is still held by the caller.
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class RedisActionLeaseStore:
    """At-most-once claim on an action_id.

    Key Structure:
    - {prefix}:lease:{action_id} → holder id (TTL = lease lifetime)
    """

    def __init__(self, client: aioredis.Redis, key_prefix: str = "seoagent", default_ttl: int = 900):
        self.client = client
        self.key_prefix = key_prefix
        self.default_ttl = default_ttl

    def _key(self, action_id: str) -> str:
        return f"{self.key_prefix}:lease:{action_id}"

    async def claim(self, action_id: str, holder: str, ttl: int | None = None) -> bool:
        """Atomically claim an action. False if another holder has it."""
        claimed = await self.client.set(
            self._key(action_id), holder, ex=ttl or self.default_ttl, nx=True
        )
        logger.info("action_lease_claim", action_id=action_id, holder=holder, claimed=bool(claimed))
        return bool(claimed)

    async def release(self, action_id: str, holder: str) -> bool:
        """Release a lease held by holder. False if not held by holder."""
        released = await self.client.eval(_RELEASE_SCRIPT, 1, self._key(action_id), holder)
        return bool(released)

    async def holder_of(self, action_id: str) -> str | None:
        return await self.client.get(self._key(action_id))
