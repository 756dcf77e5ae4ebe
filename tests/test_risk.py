"""Risk scorer tests."""

import itertools

import pytest

from seo_agents.policies.risk import (
    HIGH_RISK_ACTIONS,
    MEDIUM_RISK_ACTIONS,
    RiskScorer,
    action_class_points,
    blast_radius_points,
)
from seo_agents.policies.types import BlastRadius, Environment, RiskLevel

scorer = RiskScorer()


def test_action_classes_are_disjoint():
    assert not HIGH_RISK_ACTIONS & MEDIUM_RISK_ACTIONS


@pytest.mark.parametrize(
    "action_type,points",
    [("technical_seo_fix", 3), ("meta_tag_updates", 2), ("content_generation", 1), ("foo_bar", 1)],
)
def test_action_class_points(action_type, points):
    assert action_class_points(action_type) == points


@pytest.mark.parametrize("pages,points", [(0, 1), (10, 1), (11, 2), (50, 2), (51, 3)])
def test_blast_radius_points_boundaries(pages, points):
    assert blast_radius_points(BlastRadius(max_affected_pages=pages)) == points


def test_level_thresholds():
    assert scorer.level_for(0) == RiskLevel.LOW
    assert scorer.level_for(3) == RiskLevel.LOW
    assert scorer.level_for(4) == RiskLevel.MEDIUM
    assert scorer.level_for(6) == RiskLevel.MEDIUM
    assert scorer.level_for(7) == RiskLevel.HIGH


def test_worst_case_is_high():
    blast = BlastRadius(max_affected_pages=100, rollback_required=False)
    assert scorer.raw_score("schema_injection", Environment.PRODUCTION, blast) == 8
    assert scorer.level_for(8) == RiskLevel.HIGH


def test_rollback_reduces_score():
    with_rollback = BlastRadius(max_affected_pages=30, rollback_required=True)
    without = BlastRadius(max_affected_pages=30, rollback_required=False)

    assert scorer.raw_score("technical_seo_fix", Environment.DRY_RUN, with_rollback) == 4
    assert scorer.raw_score("technical_seo_fix", Environment.DRY_RUN, without) == 5


def test_score_never_negative():
    blast = BlastRadius(max_affected_pages=0, rollback_required=True)
    assert scorer.raw_score("content_generation", Environment.DRY_RUN, blast) >= 0


def test_score_is_deterministic():
    blast = BlastRadius(max_affected_pages=25, rollback_required=True)
    scores = {scorer.raw_score("cms_publishing", Environment.STAGING, blast) for _ in range(10)}
    assert len(scores) == 1


def test_score_monotonic_in_environment_and_pages():
    """Raising environment or blast radius never lowers risk."""
    environments = [Environment.DRY_RUN, Environment.STAGING, Environment.PRODUCTION]
    page_counts = [0, 5, 11, 30, 51, 500]

    for action_type, rollback in itertools.product(["content_generation", "alt_text_updates", "robots_modification"], [True, False]):
        for env_low, env_high in zip(environments, environments[1:]):
            for pages in page_counts:
                blast = BlastRadius(max_affected_pages=pages, rollback_required=rollback)
                assert scorer.raw_score(action_type, env_low, blast) <= scorer.raw_score(action_type, env_high, blast)

        for env in environments:
            for low, high in zip(page_counts, page_counts[1:]):
                assert scorer.raw_score(
                    action_type, env, BlastRadius(max_affected_pages=low, rollback_required=rollback)
                ) <= scorer.raw_score(
                    action_type, env, BlastRadius(max_affected_pages=high, rollback_required=rollback)
                )
