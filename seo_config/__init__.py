"""
SEO Agent Governance Configuration Package.

Provides Pydantic Settings loaded from environment variables.
"""

from seo_config.settings import Settings

__all__ = ["Settings"]
