"""Advisory messages returned alongside policy lookups and validation results."""

from seo_agents.policies.types import ActionType, Environment, Policy, RiskLevel


def policy_recommendations(site_url: str | None, action_type: str | None) -> list[str]:
    """Guidance for choosing a policy before requesting validation."""
    recommendations = []

    if not site_url:
        recommendations.append("Specify a site URL to get site-specific policy recommendations")

    if not action_type:
        recommendations.append("Specify an action type to get action-specific policy guidance")

    if site_url and action_type:
        if action_type == ActionType.TECHNICAL_SEO_FIX.value:
            recommendations.append("Start with DRY_RUN environment to preview changes")
            recommendations.append("Limit maxPages to 20 or less for initial testing")
            recommendations.append("Enable rollback capability for all technical fixes")
        elif action_type == ActionType.CONTENT_GENERATION.value:
            recommendations.append("Content generation is generally low-risk and can run in PRODUCTION")
            recommendations.append("Consider setting maxPages to 1 for focused content creation")
        elif action_type == ActionType.CMS_PUBLISHING.value:
            recommendations.append("Always require approval for CMS publishing actions")
            recommendations.append("Use STAGING environment first to test publication workflow")
        else:
            recommendations.append("Use conservative settings for unknown action types")
            recommendations.append("Start with DRY_RUN environment and approval required")

    recommendations.append("Monitor execution stats to adjust policies over time")
    recommendations.append("Higher blast radius actions always require manual approval")
    return recommendations


def execution_recommendations(policy: Policy) -> list[str]:
    """Guidance for an allowed action."""
    recommendations = []

    if policy.environment == Environment.PRODUCTION:
        recommendations.append("Running in PRODUCTION - changes will be live immediately")
    elif policy.environment == Environment.DRY_RUN:
        recommendations.append("DRY_RUN mode active - no actual changes will be made")

    if policy.blast_radius.risk_level == RiskLevel.HIGH:
        recommendations.append("High-risk operation - monitor closely during execution")

    if policy.max_pages is not None and policy.max_pages > 50:
        recommendations.append("Large-scale operation - consider running in smaller batches")

    if not policy.blast_radius.rollback_required:
        recommendations.append("No rollback capability - ensure changes are thoroughly tested")

    return recommendations


def rejection_recommendations(reason: str) -> list[str]:
    """Guidance for a denied action, keyed off the denial reason."""
    recommendations = [f"Action blocked: {reason}"]
    lowered = reason.lower()

    if "permission" in lowered:
        recommendations.append("Verify website ownership and management status")
        recommendations.append("Check if website is marked as managed in your account")

    if "approval" in lowered:
        recommendations.append("Request manual approval for this high-risk action")
        recommendations.append("Consider reducing blast radius or using DRY_RUN mode")

    if "limit" in lowered:
        recommendations.append("Check your subscription limits and usage")
        recommendations.append("Consider upgrading your plan for higher limits")

    recommendations.append("Contact support if you believe this restriction is incorrect")
    return recommendations
