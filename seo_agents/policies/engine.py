"""Policy Engine.

Single entry point for action governance:

    RESOLVING_POLICY -> VALIDATING_SAFETY -> (REJECTED | SCORING_RISK)
        -> DETERMINING_APPROVAL -> RETURNING_RESULT

validate_policy never raises. Any unexpected failure yields a conservative
denial (allowed=False, approval_required=True, estimated_risk=high).

No state survives across calls except the approval record. Two concurrent
calls with the same action_id are both evaluated; callers that need
at-most-once execution claim the action_id through an ActionLeaseStore first.
"""

import time

from opentelemetry import trace

from seo_agents.policies.approval import ApprovalGate
from seo_agents.policies.catalog import PolicyCatalog, default_catalog, new_site_policy
from seo_agents.policies.contracts import ApprovalStore, SiteOwnershipLookup, SubscriptionLookup
from seo_agents.policies.exceptions import ApprovalSubmissionError
from seo_agents.policies.resolver import PolicyResolver
from seo_agents.policies.risk import RiskScorer
from seo_agents.policies.runtime import enforce_runtime_limits
from seo_agents.policies.safety import INTERNAL_REASON, SafetyValidator
from seo_agents.policies.types import (
    ActionContext,
    ActionType,
    DenialCode,
    Policy,
    PolicyOverride,
    RiskLevel,
    RuntimeLimitResult,
    RuntimeStats,
    ValidationResult,
    ValidationStage,
)
from seo_config.settings import Settings
from seo_obs.logging import bind_action_context, get_logger
from seo_obs.metrics import policy_decisions_total, policy_denials_total, policy_validation_duration

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)

# Caller-supplied action types are open-ended; bound the label set.
KNOWN_ACTION_TYPES = frozenset(action.value for action in ActionType)
OTHER_ACTION_LABEL = "other"


def _denied(reason: str, code: DenialCode) -> ValidationResult:
    return ValidationResult(
        allowed=False,
        reason=reason,
        denial_code=code,
        approval_required=True,
        estimated_risk=RiskLevel.HIGH,
    )


class PolicyEngine:
    """Resolves, validates, scores and gates autonomous actions."""

    def __init__(
        self,
        sites: SiteOwnershipLookup,
        subscriptions: SubscriptionLookup,
        approvals: ApprovalStore | None = None,
        catalog: PolicyCatalog | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or Settings()
        self.catalog = catalog or default_catalog()
        self.resolver = PolicyResolver(self.catalog, sites)
        self.validator = SafetyValidator(sites, subscriptions)
        self.scorer = RiskScorer()
        self.gate = ApprovalGate(approvals, timeout_seconds=settings.APPROVAL_TIMEOUT_SECONDS)

    def action_label(self, action_type: str) -> str:
        """Metric label for an action type; unrecognized values share one series."""
        if self.catalog.knows(action_type) or action_type in KNOWN_ACTION_TYPES:
            return action_type
        return OTHER_ACTION_LABEL

    async def validate_policy(
        self, context: ActionContext, requested: PolicyOverride | None = None
    ) -> ValidationResult:
        """Decide whether an action may run, under which policy, and with what oversight."""
        start = time.perf_counter()
        with bind_action_context(context.action_id, context.action_type, context.site_url):
            with tracer.start_as_current_span("policy.validate") as span:
                span.set_attribute("seoagent.action_id", context.action_id)
                span.set_attribute("seoagent.action_type", context.action_type)

                result = await self._validate(context, requested)

                span.set_attribute("seoagent.allowed", result.allowed)
                span.set_attribute("seoagent.estimated_risk", result.estimated_risk.value)

        policy_validation_duration.observe(time.perf_counter() - start)
        policy_decisions_total.labels(
            action_type=self.action_label(context.action_type),
            outcome="allowed" if result.allowed else "denied",
        ).inc()
        if result.denial_code is not None:
            policy_denials_total.labels(code=result.denial_code.value).inc()

        return result

    async def _validate(
        self, context: ActionContext, requested: PolicyOverride | None
    ) -> ValidationResult:
        stage = ValidationStage.RESOLVING_POLICY
        try:
            policy, clamped = await self.resolver.resolve(context, requested)

            stage = ValidationStage.VALIDATING_SAFETY
            decision = await self.validator.validate(context, policy)
            if not decision.allowed:
                stage = ValidationStage.REJECTED
                logger.warning(
                    "policy_validation_denied",
                    stage=stage.value,
                    reason=decision.reason,
                    code=decision.code.value if decision.code else None,
                )
                return _denied(decision.reason or INTERNAL_REASON, decision.code or DenialCode.INTERNAL_ERROR)

            stage = ValidationStage.SCORING_RISK
            risk = self.scorer.score(context, policy)

            stage = ValidationStage.DETERMINING_APPROVAL
            approval_required = self.gate.requires_approval(context, policy)
            approval_id = None
            if approval_required and self.gate.store is not None:
                try:
                    approval_id = await self.gate.request_approval(context, policy, risk)
                except ApprovalSubmissionError:
                    # Still reported as approval_required; executor cannot clear it.
                    approval_id = None

            stage = ValidationStage.RETURNING_RESULT
            logger.info(
                "policy_validation_passed",
                stage=stage.value,
                environment=policy.environment.value,
                estimated_risk=risk.value,
                approval_required=approval_required,
                approval_id=approval_id,
            )
            return ValidationResult(
                allowed=True,
                adjusted_policy=policy,
                approval_required=approval_required,
                estimated_risk=risk,
                approval_id=approval_id,
                clamped_fields=clamped,
            )

        except Exception as e:
            logger.error("policy_validation_error", stage=stage.value, error=str(e), exc_info=True)
            return _denied(INTERNAL_REASON, DenialCode.INTERNAL_ERROR)

    async def check_user_permissions(self, user_token: str, site_url: str, action_type: str) -> bool:
        return await self.validator.has_permission(user_token, site_url, action_type)

    def enforce_runtime_limits(self, policy: Policy | PolicyOverride, stats: RuntimeStats) -> RuntimeLimitResult:
        return enforce_runtime_limits(policy, stats)

    def new_site_policy(self) -> Policy:
        return new_site_policy()
