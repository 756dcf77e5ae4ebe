"""SQLAlchemy Async Models.

Driver: asyncpg ONLY (no psycopg2)

Read-only from the engine's point of view: ownership, plans and usage are
written by the rest of the product.
"""

from sqlalchemy import Boolean, Column, Integer, String, Text, TIMESTAMP, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Website(Base):
    """A site registered by a user."""

    __tablename__ = "websites"

    id = Column(Integer, primary_key=True)
    user_token = Column(String(255), nullable=False, index=True)
    domain = Column(Text, nullable=False, index=True)
    is_managed = Column(Boolean, nullable=False, server_default="false")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class UserPlan(Base):
    """Subscription tier and allowances."""

    __tablename__ = "user_plans"

    id = Column(Integer, primary_key=True)
    user_token = Column(String(255), nullable=False, unique=True)
    tier = Column(String(50), nullable=False, server_default="starter")
    sites_allowed = Column(Integer, nullable=False, server_default="2")
    posts_allowed = Column(Integer, nullable=False, server_default="4")
    status = Column(String(50), nullable=False, server_default="active")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())


class UsageTracking(Base):
    """Per-month usage counter for a metered resource."""

    __tablename__ = "usage_tracking"
    __table_args__ = (
        UniqueConstraint("user_token", "site_id", "resource_type", "month_year"),
    )

    id = Column(Integer, primary_key=True)
    user_token = Column(String(255), nullable=False, index=True)
    site_id = Column(Integer)
    resource_type = Column(String(50), nullable=False)
    month_year = Column(String(7), nullable=False)  # YYYY-MM
    count = Column(Integer, nullable=False, server_default="0")
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
