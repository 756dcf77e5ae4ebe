"""Runtime Limiter.

Polled by an executor while an action runs. Pure: never blocks, never sleeps,
never mutates the stats it is given. Checks run in fixed priority order
(pages, patches, timeout). A limit of None is unbounded; 0 stops at once.
"""

from seo_agents.policies.types import Policy, PolicyOverride, RuntimeLimitResult, RuntimeStats
from seo_obs.metrics import runtime_limit_stops_total


def _stop(limit: str, reason: str) -> RuntimeLimitResult:
    runtime_limit_stops_total.labels(limit=limit).inc()
    return RuntimeLimitResult(within_limits=False, should_stop=True, reason=reason)


def enforce_runtime_limits(policy: Policy | PolicyOverride, stats: RuntimeStats) -> RuntimeLimitResult:
    """Decide whether a running action must stop."""
    if policy.max_pages is not None and stats.pages_processed >= policy.max_pages:
        return _stop("pages", f"Page limit reached: {stats.pages_processed}/{policy.max_pages}")

    if policy.max_patches is not None and stats.patches_applied >= policy.max_patches:
        return _stop("patches", f"Patch limit reached: {stats.patches_applied}/{policy.max_patches}")

    if policy.timeout_ms is not None and stats.execution_time_ms >= policy.timeout_ms:
        return _stop(
            "timeout",
            f"Timeout reached: {stats.execution_time_ms}ms >= {policy.timeout_ms}ms",
        )

    return RuntimeLimitResult(within_limits=True, should_stop=False)
