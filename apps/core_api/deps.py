"""
FastAPI Dependency Injection.

Provides dependency injection for:
- Redis connections
- Postgres session factory
- Policy engine, approval gate and lease store

Tests replace these through app.dependency_overrides.
"""

from typing import AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis

from seo_agents.policies.approval import ApprovalGate
from seo_agents.policies.catalog import PolicyCatalog, default_catalog
from seo_agents.policies.engine import PolicyEngine
from seo_agents.policies.types import ActionType
from seo_config.settings import Settings
from seo_store.database import get_session_factory
from seo_store.stores import (
    PostgresSiteStore,
    PostgresSubscriptionStore,
    RedisActionLeaseStore,
    RedisApprovalStore,
)

# Initialize settings
settings = Settings()

# Built once; immutable
_catalog = default_catalog()


# ============================================================================
# SETTINGS DEPENDENCY
# ============================================================================


def get_settings() -> Settings:
    """Dependency: Application settings."""
    return settings


def get_catalog() -> PolicyCatalog:
    """Dependency: Policy catalog."""
    return _catalog


# ============================================================================
# REDIS DEPENDENCIES
# ============================================================================


_redis_client: Redis | None = None


async def init_redis() -> None:
    """Initialize Redis connection pool."""
    global _redis_client
    _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


async def get_redis() -> AsyncGenerator[Redis, None]:
    """Dependency: Redis connection."""
    global _redis_client
    if not _redis_client:
        _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)

    yield _redis_client


# ============================================================================
# GOVERNANCE DEPENDENCIES
# ============================================================================


def get_approval_store(redis: Redis = Depends(get_redis)) -> RedisApprovalStore:
    return RedisApprovalStore(
        redis, key_prefix=settings.REDIS_KEY_PREFIX, ttl=settings.APPROVAL_KEY_TTL_SECONDS
    )


def get_lease_store(redis: Redis = Depends(get_redis)) -> RedisActionLeaseStore:
    """Dependency: Action lease store."""
    return RedisActionLeaseStore(
        redis, key_prefix=settings.REDIS_KEY_PREFIX, default_ttl=settings.ACTION_LEASE_TTL_SECONDS
    )


def get_policy_engine(
    approvals: RedisApprovalStore = Depends(get_approval_store),
    catalog: PolicyCatalog = Depends(get_catalog),
) -> PolicyEngine:
    """Dependency: Policy engine wired to Postgres lookups and Redis approvals."""
    session_factory = get_session_factory()
    return PolicyEngine(
        sites=PostgresSiteStore(session_factory),
        subscriptions=PostgresSubscriptionStore(
            session_factory,
            metered_resources={ActionType.CONTENT_GENERATION.value: settings.USAGE_RESOURCE_ARTICLE},
        ),
        approvals=approvals,
        catalog=catalog,
        settings=settings,
    )


def get_approval_gate(approvals: RedisApprovalStore = Depends(get_approval_store)) -> ApprovalGate:
    """Dependency: Approval gate for lifecycle endpoints."""
    return ApprovalGate(approvals, timeout_seconds=settings.APPROVAL_TIMEOUT_SECONDS)
