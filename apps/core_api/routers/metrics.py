"""
Prometheus Metrics Endpoint.

Exposes /metrics for Prometheus scraping.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest

# Registers the governance metrics with the default registry
import seo_obs.metrics  # noqa: F401

router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    """
    Prometheus metrics endpoint.

    Example metrics:
    ```
    # HELP policy_decisions_total Policy validation outcomes
    # TYPE policy_decisions_total counter
    policy_decisions_total{action_type="schema_injection",outcome="denied"} 3.0
    ```
    """
    return generate_latest()
