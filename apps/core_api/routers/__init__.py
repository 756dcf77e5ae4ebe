"""
FastAPI Routers.

Contains:
- policies: GET /policies, POST /policies/validate, POST /policies/runtime-check
- approvals: GET /approvals/{id}, POST /approvals/{id}/decision, POST /approvals/{id}/cancel
- leases: POST /leases/{action_id}, DELETE /leases/{action_id}
- health: GET /healthz, /readyz
- metrics: GET /metrics
"""

__all__ = ["policies", "approvals", "leases", "health", "metrics"]
