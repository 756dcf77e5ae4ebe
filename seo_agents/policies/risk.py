"""Risk Scorer.

Deterministic integer accumulation over action class, environment and blast
radius. The total is clamped at zero before thresholds, so a rollback-capable
low-impact action can never score below "low".
"""

from seo_agents.policies.types import ActionContext, BlastRadius, Environment, Policy, RiskLevel

HIGH_RISK_ACTIONS: frozenset[str] = frozenset(
    {
        "schema_injection",
        "technical_seo_fix",
        "cms_publishing",
        "robots_modification",
        "canonical_changes",
    }
)

MEDIUM_RISK_ACTIONS: frozenset[str] = frozenset(
    {
        "content_optimization",
        "meta_tag_updates",
        "alt_text_updates",
        "sitemap_generation",
    }
)

_ENVIRONMENT_POINTS = {
    Environment.PRODUCTION: 2,
    Environment.STAGING: 1,
    Environment.DRY_RUN: 0,
}

HIGH_THRESHOLD = 7
MEDIUM_THRESHOLD = 4


def is_high_risk_action(action_type: str) -> bool:
    return action_type in HIGH_RISK_ACTIONS


def is_medium_risk_action(action_type: str) -> bool:
    return action_type in MEDIUM_RISK_ACTIONS


def action_class_points(action_type: str) -> int:
    if is_high_risk_action(action_type):
        return 3
    if is_medium_risk_action(action_type):
        return 2
    return 1


def blast_radius_points(blast_radius: BlastRadius) -> int:
    if blast_radius.max_affected_pages > 50:
        return 3
    if blast_radius.max_affected_pages > 10:
        return 2
    return 1


class RiskScorer:
    """Pure function of (action_type, environment, blast_radius)."""

    def raw_score(self, action_type: str, environment: Environment, blast_radius: BlastRadius) -> int:
        total = action_class_points(action_type)
        total += _ENVIRONMENT_POINTS[environment]
        total += blast_radius_points(blast_radius)

        # Rollback capability reduces risk
        if blast_radius.rollback_required:
            total -= 1

        return max(total, 0)

    def level_for(self, total: int) -> RiskLevel:
        if total >= HIGH_THRESHOLD:
            return RiskLevel.HIGH
        if total >= MEDIUM_THRESHOLD:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def score(self, context: ActionContext, policy: Policy) -> RiskLevel:
        total = self.raw_score(context.action_type, policy.environment, policy.blast_radius)
        return self.level_for(total)
