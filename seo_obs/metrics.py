"""
Prometheus Metrics Registration.

Custom metrics for the policy engine and approval gate.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# COUNTERS
# ============================================================================

policy_decisions_total = Counter(
    "policy_decisions_total",
    "Policy validation outcomes",
    ["action_type", "outcome"],  # allowed, denied
)

policy_denials_total = Counter(
    "policy_denials_total", "Policy denials by code", ["code"]
)

policy_overrides_clamped_total = Counter(
    "policy_overrides_clamped_total",
    "Caller-requested policy fields clamped to the resolved value",
    ["field"],
)

approval_requests_total = Counter(
    "approval_requests_total", "Approval request lifecycle events", ["status"]
)

runtime_limit_stops_total = Counter(
    "runtime_limit_stops_total", "Runtime limit stop signals", ["limit"]  # pages, patches, timeout
)

# ============================================================================
# HISTOGRAMS
# ============================================================================

policy_validation_duration = Histogram(
    "policy_validation_duration_seconds",
    "End-to-end validate_policy duration",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
