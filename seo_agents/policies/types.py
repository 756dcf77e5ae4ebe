"""Governance Types.

Enums and Pydantic models shared by the catalog, resolver, validator, scorer,
approval gate and runtime limiter. Field names are snake_case in Python and
camelCase on the wire (maxPages, blastRadius, requiresApproval, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ActionType(str, Enum):
    """Known action types. ActionContext.action_type stays an open string."""

    TECHNICAL_SEO_CRAWL = "technical_seo_crawl"
    CONTENT_GENERATION = "content_generation"
    TECHNICAL_SEO_FIX = "technical_seo_fix"
    CMS_PUBLISHING = "cms_publishing"
    SCHEMA_INJECTION = "schema_injection"
    ROBOTS_MODIFICATION = "robots_modification"
    CANONICAL_CHANGES = "canonical_changes"
    CONTENT_OPTIMIZATION = "content_optimization"
    META_TAG_UPDATES = "meta_tag_updates"
    ALT_TEXT_UPDATES = "alt_text_updates"
    SITEMAP_GENERATION = "sitemap_generation"


class Environment(str, Enum):
    """Blast tier of an action, ordered by increasing real-world effect."""

    DRY_RUN = "DRY_RUN"
    STAGING = "STAGING"
    PRODUCTION = "PRODUCTION"

    @property
    def rank(self) -> int:
        return _ENVIRONMENT_RANK[self]


_ENVIRONMENT_RANK = {Environment.DRY_RUN: 0, Environment.STAGING: 1, Environment.PRODUCTION: 2}


class BlastScope(str, Enum):
    SINGLE_PAGE = "single_page"
    SECTION = "section"
    SITE_WIDE = "site_wide"

    @property
    def rank(self) -> int:
        return _SCOPE_RANK[self]


_SCOPE_RANK = {BlastScope.SINGLE_PAGE: 0, BlastScope.SECTION: 1, BlastScope.SITE_WIDE: 2}


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class ValidationStage(str, Enum):
    """States of one validate_policy invocation."""

    RESOLVING_POLICY = "RESOLVING_POLICY"
    VALIDATING_SAFETY = "VALIDATING_SAFETY"
    REJECTED = "REJECTED"
    SCORING_RISK = "SCORING_RISK"
    DETERMINING_APPROVAL = "DETERMINING_APPROVAL"
    RETURNING_RESULT = "RETURNING_RESULT"


class DenialCode(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    DOMAIN_NOT_ALLOWED = "domain_not_allowed"
    APPROVAL_REQUIRED_FOR_HIGH_RISK = "approval_required_for_high_risk"
    INTERNAL_ERROR = "internal_error"


class GovernanceModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# POLICY
# ============================================================================


class BlastRadius(GovernanceModel):
    """Worst-case footprint of an action."""

    model_config = ConfigDict(frozen=True)

    scope: BlastScope = BlastScope.SINGLE_PAGE
    max_affected_pages: int = Field(default=1, ge=0)
    risk_level: RiskLevel = RiskLevel.LOW
    rollback_required: bool = True


class Policy(GovernanceModel):
    """Effective contract governing one action invocation."""

    model_config = ConfigDict(frozen=True)

    environment: Environment = Environment.DRY_RUN
    max_pages: int | None = Field(default=None, ge=0)
    max_patches: int | None = Field(default=None, ge=0)
    timeout_ms: int | None = Field(default=None, ge=0)
    requires_approval: bool = False
    respect_robots: bool = True
    blast_radius: BlastRadius = Field(default_factory=BlastRadius)
    allowed_domains: tuple[str, ...] | None = None


class BlastRadiusOverride(GovernanceModel):
    """Partial blast radius; unset fields keep the resolved value."""

    scope: BlastScope | None = None
    max_affected_pages: int | None = Field(default=None, ge=0)
    risk_level: RiskLevel | None = None
    rollback_required: bool | None = None


class PolicyOverride(GovernanceModel):
    """Partial policy supplied by a catalog entry, a site lookup or a caller."""

    environment: Environment | None = None
    max_pages: int | None = Field(default=None, ge=0)
    max_patches: int | None = Field(default=None, ge=0)
    timeout_ms: int | None = Field(default=None, ge=0)
    requires_approval: bool | None = None
    respect_robots: bool | None = None
    blast_radius: BlastRadiusOverride | None = None
    allowed_domains: list[str] | None = None

    def is_empty(self) -> bool:
        return not self.model_fields_set


# ============================================================================
# INVOCATION
# ============================================================================


class ActionContext(GovernanceModel):
    """Per-invocation description of an attempted action."""

    action_id: str = Field(..., min_length=1, description="Idempotency key for the attempt")
    user_token: str = Field(..., min_length=1)
    site_url: str = Field(..., min_length=1)
    action_type: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    target_urls: list[str] = Field(default_factory=list)


class ValidationResult(GovernanceModel):
    """Sole output of validate_policy."""

    allowed: bool
    reason: str | None = None
    denial_code: DenialCode | None = None
    adjusted_policy: Policy | None = None
    approval_required: bool
    estimated_risk: RiskLevel
    approval_id: str | None = None
    clamped_fields: list[str] = Field(default_factory=list)


class RuntimeStats(GovernanceModel):
    """Counters sampled from the executor; never mutated by the engine."""

    pages_processed: int = Field(default=0, ge=0)
    patches_applied: int = Field(default=0, ge=0)
    execution_time_ms: int = Field(default=0, ge=0)


class RuntimeLimitResult(GovernanceModel):
    within_limits: bool
    should_stop: bool
    reason: str | None = None


# ============================================================================
# COLLABORATOR RECORDS
# ============================================================================


class SiteRecord(GovernanceModel):
    """Site ownership lookup response."""

    exists: bool
    is_managed: bool = False
    site_id: int | None = None
    domain: str | None = None


class PlanUsage(GovernanceModel):
    """Subscription/usage lookup response."""

    tier: str
    allowance: int | None = Field(default=None, ge=0)
    current_usage: int = Field(default=0, ge=0)


class ApprovalRequest(GovernanceModel):
    """Approval record submitted to the approval store."""

    approval_id: str
    action_id: str
    user_token: str
    site_url: str
    action_type: str
    policy_summary: dict[str, Any]
    risk_assessment: dict[str, Any]
    requested_at: datetime
    expires_at: datetime | None = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    decided_at: datetime | None = None
    decided_by: str | None = None
