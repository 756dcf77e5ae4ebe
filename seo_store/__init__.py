"""
SEO Agent Governance Storage Package.

Collaborator implementations for the policy engine:
- Postgres (SQLAlchemy async): site ownership, subscription usage
- Redis: approval records, action leases
"""

from seo_store.stores import (
    PostgresSiteStore,
    PostgresSubscriptionStore,
    RedisActionLeaseStore,
    RedisApprovalStore,
)

__all__ = [
    "PostgresSiteStore",
    "PostgresSubscriptionStore",
    "RedisActionLeaseStore",
    "RedisApprovalStore",
]
