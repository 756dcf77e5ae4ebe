"""Safety Validator.

Permission, subscription, domain allowlist and production/high-risk checks.
Each check raises a PolicyDenied subclass; validate() turns the first one into
a SafetyDecision. Collaborator failures surface as InternalError and, like any
unexpected error, deny (fail-closed).
"""

import re

from pydantic import BaseModel

from seo_agents.policies.contracts import SiteOwnershipLookup, SubscriptionLookup
from seo_agents.policies.exceptions import (
    ApprovalRequiredForHighRisk,
    DomainNotAllowed,
    InternalError,
    PermissionDenied,
    PolicyDenied,
)
from seo_agents.policies.risk import is_high_risk_action
from seo_agents.policies.types import ActionContext, DenialCode, Environment, Policy
from seo_obs.logging import get_logger

logger = get_logger(__name__)

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)

PERMISSION_REASON = "Insufficient permissions for this action"
NOT_MANAGED_REASON = f"{PERMISSION_REASON}: site is not managed"
QUOTA_REASON = f"{PERMISSION_REASON}: subscription limit reached"
INTERNAL_REASON = "Policy validation failed"


def strip_scheme(site_url: str) -> str:
    return _SCHEME.sub("", site_url.strip())


class SafetyDecision(BaseModel):
    allowed: bool
    reason: str | None = None
    code: DenialCode | None = None


class SafetyValidator:
    """Validates an action context against the effective policy."""

    def __init__(self, sites: SiteOwnershipLookup, subscriptions: SubscriptionLookup):
        self.sites = sites
        self.subscriptions = subscriptions

    async def validate(self, context: ActionContext, policy: Policy) -> SafetyDecision:
        try:
            await self.check_permissions(context)
            self.check_domain(context, policy)
            self.check_environment(context, policy)
        except PolicyDenied as denial:
            logger.info(
                "safety_check_denied",
                action_id=context.action_id,
                action_type=context.action_type,
                code=denial.code.value,
                reason=denial.reason,
            )
            return SafetyDecision(allowed=False, reason=denial.reason, code=denial.code)
        except InternalError as e:
            logger.error(
                "safety_check_failed",
                action_id=context.action_id,
                source=e.source,
                error=str(e.__cause__),
                exc_info=True,
            )
            return SafetyDecision(allowed=False, reason=e.reason, code=e.code)
        except Exception as e:
            logger.error(
                "safety_check_failed",
                action_id=context.action_id,
                error=str(e),
                exc_info=True,
            )
            return SafetyDecision(allowed=False, reason=INTERNAL_REASON, code=DenialCode.INTERNAL_ERROR)

        return SafetyDecision(allowed=True)

    async def has_permission(self, user_token: str, site_url: str, action_type: str) -> bool:
        """Ownership, managed status and subscription only. Lookup failures count as no."""
        context = ActionContext(
            action_id="permission_check",
            user_token=user_token,
            site_url=site_url,
            action_type=action_type,
        )
        try:
            await self.check_permissions(context)
        except PolicyDenied:
            return False
        except InternalError as e:
            logger.warning("permission_check_failed", site_url=site_url, source=e.source, error=str(e.__cause__))
            return False
        return True

    # ------------------------------------------------------------------------
    # CHECKS
    # ------------------------------------------------------------------------

    async def check_permissions(self, context: ActionContext) -> None:
        """Ownership, managed status (high-risk only) and subscription."""
        try:
            site = await self.sites.get_site(context.user_token, context.site_url)
        except Exception as e:
            raise InternalError("site_lookup", INTERNAL_REASON) from e

        if not site.exists:
            raise PermissionDenied(PERMISSION_REASON)

        if is_high_risk_action(context.action_type) and not site.is_managed:
            raise PermissionDenied(NOT_MANAGED_REASON)

        await self.check_subscription(context)

    async def check_subscription(self, context: ActionContext) -> None:
        try:
            plan = await self.subscriptions.get_plan_usage(context.user_token, context.action_type)
        except Exception as e:
            raise InternalError("subscription_lookup", INTERNAL_REASON) from e

        if plan is None:
            raise PermissionDenied(QUOTA_REASON)

        # No allowance means the action type is not metered.
        if plan.allowance is not None and plan.current_usage >= plan.allowance:
            raise PermissionDenied(QUOTA_REASON)

    def check_domain(self, context: ActionContext, policy: Policy) -> None:
        if not policy.allowed_domains:
            return

        domain = strip_scheme(context.site_url)
        if not any(allowed in domain for allowed in policy.allowed_domains):
            raise DomainNotAllowed(domain)

    def check_environment(self, context: ActionContext, policy: Policy) -> None:
        if (
            policy.environment == Environment.PRODUCTION
            and is_high_risk_action(context.action_type)
            and not policy.requires_approval
        ):
            raise ApprovalRequiredForHighRisk()
