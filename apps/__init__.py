"""
SEO Agent Governance Applications Package.

Contains:
- core_api: FastAPI application exposing the policy engine
"""

__version__ = "0.1.0"
