"""
SEO Agent Governance FastAPI Application.

Main API server providing:
- /policies: policy lookup, validation, runtime limit checks
- /approvals: approval status and decisions
- /leases: action_id leases for executors
- /healthz, /readyz: Health checks
- /metrics: Prometheus metrics
"""

__all__ = ["app"]
