"""Policy Catalog.

Immutable rule table of default policies per action type. A catalog is built
once and injected into the engine; tenants that need different defaults build
their own with with_entry() instead of mutating shared state.
"""

from collections.abc import Mapping
from types import MappingProxyType

from seo_agents.policies.merge import apply_override
from seo_agents.policies.types import (
    ActionType,
    BlastRadius,
    BlastRadiusOverride,
    BlastScope,
    Environment,
    Policy,
    PolicyOverride,
    RiskLevel,
)

# Applied before every type-specific entry so every field is always defined.
BASELINE_POLICY = Policy(
    environment=Environment.DRY_RUN,
    max_pages=10,
    max_patches=20,
    timeout_ms=300_000,
    requires_approval=False,
    respect_robots=True,
    blast_radius=BlastRadius(
        scope=BlastScope.SINGLE_PAGE,
        max_affected_pages=1,
        risk_level=RiskLevel.LOW,
        rollback_required=True,
    ),
)

DEFAULT_POLICIES: Mapping[str, PolicyOverride] = MappingProxyType({
    ActionType.TECHNICAL_SEO_CRAWL.value: PolicyOverride(
        environment=Environment.PRODUCTION,
        max_pages=100,
        timeout_ms=300_000,
        respect_robots=True,
        requires_approval=False,
        blast_radius=BlastRadiusOverride(
            scope=BlastScope.SITE_WIDE,
            max_affected_pages=0,  # read-only
            risk_level=RiskLevel.LOW,
            rollback_required=False,
        ),
    ),
    ActionType.CONTENT_GENERATION.value: PolicyOverride(
        environment=Environment.DRY_RUN,
        max_pages=1,
        requires_approval=False,
        blast_radius=BlastRadiusOverride(
            scope=BlastScope.SINGLE_PAGE,
            max_affected_pages=1,
            risk_level=RiskLevel.LOW,
            rollback_required=True,
        ),
    ),
    ActionType.TECHNICAL_SEO_FIX.value: PolicyOverride(
        environment=Environment.DRY_RUN,
        max_pages=20,
        max_patches=50,
        timeout_ms=600_000,
        requires_approval=True,
        blast_radius=BlastRadiusOverride(
            scope=BlastScope.SITE_WIDE,
            max_affected_pages=50,
            risk_level=RiskLevel.MEDIUM,
            rollback_required=True,
        ),
    ),
    ActionType.CMS_PUBLISHING.value: PolicyOverride(
        environment=Environment.DRY_RUN,
        max_pages=1,
        requires_approval=True,
        blast_radius=BlastRadiusOverride(
            scope=BlastScope.SINGLE_PAGE,
            max_affected_pages=1,
            risk_level=RiskLevel.MEDIUM,
            rollback_required=True,
        ),
    ),
    ActionType.SCHEMA_INJECTION.value: PolicyOverride(
        environment=Environment.DRY_RUN,
        max_pages=10,
        max_patches=20,
        requires_approval=True,
        blast_radius=BlastRadiusOverride(
            scope=BlastScope.SECTION,
            max_affected_pages=20,
            risk_level=RiskLevel.HIGH,
            rollback_required=True,
        ),
    ),
})

# Relaxed override granted to sites their owner has marked as managed.
MANAGED_SITE_OVERRIDE = PolicyOverride(
    environment=Environment.PRODUCTION,
    requires_approval=False,
    max_pages=50,
    max_patches=100,
)


class PolicyCatalog:
    """Read-only table of default policies keyed by action type."""

    __slots__ = ("_entries", "_baseline", "_fallback_action")

    def __init__(
        self,
        entries: Mapping[str, PolicyOverride],
        baseline: Policy = BASELINE_POLICY,
        fallback_action: str = ActionType.CONTENT_GENERATION.value,
    ):
        if fallback_action not in entries:
            raise ValueError(f"Fallback action {fallback_action!r} has no catalog entry")

        self._entries = MappingProxyType(dict(entries))
        self._baseline = baseline
        self._fallback_action = fallback_action

    @property
    def entries(self) -> Mapping[str, PolicyOverride]:
        return self._entries

    @property
    def baseline(self) -> Policy:
        return self._baseline

    @property
    def fallback_action(self) -> str:
        return self._fallback_action

    def knows(self, action_type: str) -> bool:
        return action_type in self._entries

    def default_for(self, action_type: str) -> Policy:
        """Baseline first, then the type entry (or the fallback entry for unknown types)."""
        entry = self._entries.get(action_type)
        if entry is None:
            entry = self._entries[self._fallback_action]
        return apply_override(self._baseline, entry)

    def with_entry(self, action_type: str, entry: PolicyOverride) -> "PolicyCatalog":
        """Return a new catalog with one entry added or replaced."""
        entries = dict(self._entries)
        entries[action_type] = entry
        return PolicyCatalog(entries, baseline=self._baseline, fallback_action=self._fallback_action)


def default_catalog() -> PolicyCatalog:
    return PolicyCatalog(DEFAULT_POLICIES)


def new_site_policy() -> Policy:
    """Fixed conservative policy for first-time or unverified sites."""
    return Policy(
        environment=Environment.DRY_RUN,
        max_pages=5,
        max_patches=10,
        timeout_ms=60_000,
        requires_approval=True,
        respect_robots=True,
        blast_radius=BlastRadius(
            scope=BlastScope.SINGLE_PAGE,
            max_affected_pages=5,
            risk_level=RiskLevel.LOW,
            rollback_required=True,
        ),
    )
