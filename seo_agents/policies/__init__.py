"""Agent action governance: policy resolution, safety, risk, approvals, runtime limits."""

from seo_agents.policies.approval import ApprovalGate
from seo_agents.policies.catalog import PolicyCatalog, default_catalog, new_site_policy
from seo_agents.policies.engine import PolicyEngine
from seo_agents.policies.risk import RiskScorer
from seo_agents.policies.runtime import enforce_runtime_limits
from seo_agents.policies.safety import SafetyValidator
from seo_agents.policies.types import (
    ActionContext,
    ActionType,
    Environment,
    Policy,
    PolicyOverride,
    RiskLevel,
    RuntimeStats,
    ValidationResult,
)

__all__ = [
    "ActionContext",
    "ActionType",
    "ApprovalGate",
    "Environment",
    "Policy",
    "PolicyCatalog",
    "PolicyEngine",
    "PolicyOverride",
    "RiskLevel",
    "RiskScorer",
    "RuntimeStats",
    "SafetyValidator",
    "ValidationResult",
    "default_catalog",
    "enforce_runtime_limits",
    "new_site_policy",
]
