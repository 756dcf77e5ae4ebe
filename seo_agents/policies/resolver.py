"""Policy Resolver.

effective = tighten(default_for(action_type) + site_override, requested)

The site override is the only path that can loosen a default: it comes from
the owner marking a site as managed. Caller requests can only tighten.
"""

from seo_agents.policies.catalog import MANAGED_SITE_OVERRIDE, PolicyCatalog
from seo_agents.policies.contracts import SiteOwnershipLookup
from seo_agents.policies.merge import apply_override, tighten
from seo_agents.policies.types import ActionContext, Policy, PolicyOverride
from seo_obs.logging import get_logger
from seo_obs.metrics import policy_overrides_clamped_total

logger = get_logger(__name__)


class PolicyResolver:
    """Merges catalog defaults, site overrides and caller requests."""

    def __init__(self, catalog: PolicyCatalog, sites: SiteOwnershipLookup):
        self.catalog = catalog
        self.sites = sites

    async def site_policy_override(self, user_token: str, site_url: str) -> PolicyOverride:
        """Relaxed override for managed sites; empty otherwise.

        Lookup failure is treated as no override. Safe only because this
        path can loosen policy, never tighten it.
        """
        try:
            site = await self.sites.get_site(user_token, site_url)
        except Exception as e:
            logger.warning("site_policy_lookup_failed", site_url=site_url, error=str(e))
            return PolicyOverride()

        if site.exists and site.is_managed:
            return MANAGED_SITE_OVERRIDE.model_copy()
        return PolicyOverride()

    async def resolve(
        self, context: ActionContext, requested: PolicyOverride | None = None
    ) -> tuple[Policy, list[str]]:
        """Resolve the effective policy.

        Returns:
            (effective policy, requested fields that were clamped)
        """
        base = self.catalog.default_for(context.action_type)
        if not self.catalog.knows(context.action_type):
            logger.info(
                "unknown_action_type_fallback",
                action_type=context.action_type,
                fallback=self.catalog.fallback_action,
            )

        site_override = await self.site_policy_override(context.user_token, context.site_url)
        resolved = apply_override(base, site_override)

        effective, clamped = tighten(resolved, requested)
        if clamped:
            for field in clamped:
                policy_overrides_clamped_total.labels(field=field).inc()
            logger.warning(
                "policy_override_clamped",
                action_id=context.action_id,
                action_type=context.action_type,
                fields=clamped,
            )

        return effective, clamped
