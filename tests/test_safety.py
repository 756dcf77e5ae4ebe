"""Safety validator tests."""

import pytest

from seo_agents.policies.catalog import default_catalog
from seo_agents.policies.exceptions import ApprovalRequiredForHighRisk, DomainNotAllowed, InternalError
from seo_agents.policies.merge import apply_override
from seo_agents.policies.safety import (
    INTERNAL_REASON,
    NOT_MANAGED_REASON,
    PERMISSION_REASON,
    QUOTA_REASON,
    SafetyValidator,
    strip_scheme,
)
from seo_agents.policies.types import (
    DenialCode,
    Environment,
    PlanUsage,
    PolicyOverride,
    SiteRecord,
)
from tests.conftest import FakeSites, FakeSubscriptions


def _policy(action_type: str, **override):
    return apply_override(default_catalog().default_for(action_type), PolicyOverride(**override))


def test_strip_scheme():
    assert strip_scheme("https://example.com/blog") == "example.com/blog"
    assert strip_scheme("HTTP://example.com") == "example.com"
    assert strip_scheme("example.com") == "example.com"


@pytest.mark.asyncio
async def test_allows_owned_site_with_quota(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)

    decision = await validator.validate(make_context(), _policy("content_generation"))

    assert decision.allowed is True
    assert decision.reason is None


@pytest.mark.asyncio
async def test_denies_unknown_site(make_context, subscriptions):
    validator = SafetyValidator(FakeSites(default=SiteRecord(exists=False)), subscriptions)

    decision = await validator.validate(make_context(), _policy("content_generation"))

    assert decision.allowed is False
    assert decision.reason == PERMISSION_REASON
    assert decision.code == DenialCode.PERMISSION_DENIED


@pytest.mark.asyncio
async def test_high_risk_action_requires_managed_site(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)

    decision = await validator.validate(make_context("technical_seo_fix"), _policy("technical_seo_fix"))

    assert decision.allowed is False
    assert decision.reason == NOT_MANAGED_REASON
    assert decision.reason.startswith("Insufficient permissions")


@pytest.mark.asyncio
async def test_denies_without_plan(make_context, sites):
    validator = SafetyValidator(sites, FakeSubscriptions(plan=None))

    decision = await validator.validate(make_context(), _policy("content_generation"))

    assert decision.allowed is False
    assert decision.reason == QUOTA_REASON


@pytest.mark.asyncio
async def test_denies_when_allowance_used_up(make_context, sites):
    plan = PlanUsage(tier="starter", allowance=4, current_usage=4)
    validator = SafetyValidator(sites, FakeSubscriptions(plan=plan))

    decision = await validator.validate(make_context(), _policy("content_generation"))

    assert decision.allowed is False
    assert decision.code == DenialCode.PERMISSION_DENIED


@pytest.mark.asyncio
async def test_unmetered_action_ignores_usage(make_context, sites):
    validator = SafetyValidator(sites, FakeSubscriptions(plan=PlanUsage(tier="starter")))

    decision = await validator.validate(make_context("technical_seo_crawl"), _policy("technical_seo_crawl"))

    assert decision.allowed is True


@pytest.mark.asyncio
async def test_domain_allowlist_substring_match(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)
    policy = _policy("content_generation", allowed_domains=["example.com"])

    allowed = await validator.validate(make_context(site_url="https://blog.example.com"), policy)
    denied = await validator.validate(make_context(site_url="https://other.org"), policy)

    assert allowed.allowed is True
    assert denied.allowed is False
    assert denied.reason == "Domain not in allowed list"
    assert denied.code == DenialCode.DOMAIN_NOT_ALLOWED


def test_check_domain_raises(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)

    with pytest.raises(DomainNotAllowed) as exc:
        validator.check_domain(make_context(site_url="http://other.org"), _policy("content_generation", allowed_domains=["example.com"]))

    assert exc.value.domain == "other.org"


def test_production_high_risk_without_approval_is_denied(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)
    policy = _policy("technical_seo_fix", environment=Environment.PRODUCTION, requires_approval=False)

    with pytest.raises(ApprovalRequiredForHighRisk) as exc:
        validator.check_environment(make_context("technical_seo_fix"), policy)

    assert exc.value.reason == "High-risk actions in production require approval"


def test_production_high_risk_with_approval_passes(make_context, sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)
    policy = _policy("technical_seo_fix", environment=Environment.PRODUCTION, requires_approval=True)

    validator.check_environment(make_context("technical_seo_fix"), policy)


@pytest.mark.asyncio
async def test_lookup_failure_denies(make_context, subscriptions):
    validator = SafetyValidator(FakeSites(error=ConnectionError("db down")), subscriptions)

    decision = await validator.validate(make_context(), _policy("content_generation"))

    assert decision.allowed is False
    assert decision.reason == INTERNAL_REASON
    assert decision.code == DenialCode.INTERNAL_ERROR


@pytest.mark.asyncio
async def test_permission_checked_before_domain(make_context, subscriptions):
    validator = SafetyValidator(FakeSites(default=SiteRecord(exists=False)), subscriptions)
    policy = _policy("content_generation", allowed_domains=["nowhere.test"])

    decision = await validator.validate(make_context(), policy)

    assert decision.code == DenialCode.PERMISSION_DENIED


@pytest.mark.asyncio
async def test_site_lookup_failure_raises_internal_error(make_context, subscriptions):
    validator = SafetyValidator(FakeSites(error=ConnectionError("db down")), subscriptions)

    with pytest.raises(InternalError) as exc:
        await validator.check_permissions(make_context())

    assert exc.value.source == "site_lookup"
    assert exc.value.code == DenialCode.INTERNAL_ERROR
    assert isinstance(exc.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_subscription_lookup_failure_raises_internal_error(make_context, sites):
    validator = SafetyValidator(sites, FakeSubscriptions(error=TimeoutError("slow")))

    with pytest.raises(InternalError) as exc:
        await validator.check_subscription(make_context())

    assert exc.value.source == "subscription_lookup"


# ============================================================================
# has_permission
# ============================================================================


@pytest.mark.asyncio
async def test_has_permission_for_owned_site(sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)

    assert await validator.has_permission("user_abcd1234", "https://example.com", "content_generation") is True


@pytest.mark.asyncio
async def test_has_permission_false_for_high_risk_on_unmanaged_site(sites, subscriptions):
    validator = SafetyValidator(sites, subscriptions)

    assert await validator.has_permission("user_abcd1234", "https://example.com", "schema_injection") is False


@pytest.mark.asyncio
async def test_has_permission_false_when_lookup_fails(subscriptions):
    validator = SafetyValidator(FakeSites(error=ConnectionError("db down")), subscriptions)

    assert await validator.has_permission("user_abcd1234", "https://example.com", "content_generation") is False
