"""
Tests for Entity Correlator
"""

import pytest

from ..tools.correlator import (
    EntityCorrelator,
    determine_correlation_type,
    score_correlations,
    score_pair,
)
from ..tools.store import InMemoryStore
from .conftest import make_entity_set


class TestScorePair:
    """Tests for pairwise scoring"""

    def test_strength_is_mean_of_min_confidences(self):
        source = make_entity_set("a", ("email", "a@b.com", 0.95), ("location", "Rome", 0.6))
        target = make_entity_set("b", ("email", "a@b.com", 0.9), ("location", "Rome", 0.8))

        correlation = score_pair(source, target)

        assert correlation.strength == pytest.approx((0.9 + 0.6) / 2)
        assert correlation.shared_entities == ["email:a@b.com", "location:Rome"]
        assert correlation.source_agent_id == "a"
        assert correlation.target_agent_id == "b"
        assert correlation.execution_id == "exec-a"

    def test_type_must_match(self):
        source = make_entity_set("a", ("location", "Paris", 0.6))
        target = make_entity_set("b", ("person_name", "Paris", 0.7))

        assert score_pair(source, target) is None

    def test_no_matches(self):
        source = make_entity_set("a", ("email", "a@b.com", 0.95))
        target = make_entity_set("b", ("email", "c@d.com", 0.95))

        assert score_pair(source, target) is None


class TestCorrelationType:
    """Tests for correlation type priority"""

    def test_priority(self):
        assert determine_correlation_type(["location:Rome", "email:a@b.com"]) == "user_identity"
        assert determine_correlation_type(["person_name:Ada"]) == "user_identity"
        assert determine_correlation_type(["location:Rome", "date:2024-01-01"]) == "temporal"
        assert determine_correlation_type(["identifier:7", "location:Rome"]) == "geographic"
        assert determine_correlation_type(["identifier:7"]) == "reference"
        assert determine_correlation_type(["price:10", "url:https://x.io"]) == "data_overlap"


class TestScoreCorrelations:
    """Tests for score_correlations"""

    def test_shared_email_both_directions(self):
        first = make_entity_set("a", ("email", "a@b.com", 0.95))
        second = make_entity_set("b", ("email", "a@b.com", 0.95))

        forward = score_correlations(first, [second])
        backward = score_correlations(second, [first])

        for correlations in (forward, backward):
            assert len(correlations) == 1
            assert correlations[0].correlation_type == "user_identity"
            assert correlations[0].strength == pytest.approx(0.95)

    def test_strength_at_threshold_is_omitted(self):
        source = make_entity_set("a", ("location", "Rome", 0.5))
        target = make_entity_set("b", ("location", "Rome", 0.6))

        assert score_correlations(source, [target]) == []

    def test_strength_above_threshold_is_kept(self):
        source = make_entity_set("a", ("location", "Rome", 0.6))
        target = make_entity_set("b", ("location", "Rome", 0.6))

        assert len(score_correlations(source, [target])) == 1

    def test_custom_threshold(self):
        source = make_entity_set("a", ("location", "Rome", 0.6))
        target = make_entity_set("b", ("location", "Rome", 0.6))

        assert score_correlations(source, [target], threshold=0.7) == []

    def test_same_agent_targets_skipped(self):
        source = make_entity_set("a", ("email", "a@b.com", 0.95), execution_id="e2")
        earlier = make_entity_set("a", ("email", "a@b.com", 0.95), execution_id="e1")

        assert score_correlations(source, [earlier]) == []


class TestEntityCorrelator:
    """Tests for EntityCorrelator"""

    @pytest.mark.asyncio
    async def test_correlates_against_latest_sets_of_other_agents(self):
        store = InMemoryStore()
        await store.append_entities(make_entity_set("b", ("email", "old@b.com", 0.95), execution_id="b1"))
        await store.append_entities(make_entity_set("b", ("email", "a@b.com", 0.95), execution_id="b2"))
        await store.append_entities(make_entity_set("c", ("location", "Oslo", 0.6)))

        correlator = EntityCorrelator(store)
        correlations = await correlator.correlate(make_entity_set("a", ("email", "a@b.com", 0.95)))

        assert len(correlations) == 1
        assert correlations[0].target_agent_id == "b"

    @pytest.mark.asyncio
    async def test_sample_size_limits_agents_scanned(self):
        store = InMemoryStore()
        await store.append_entities(make_entity_set("old", ("email", "a@b.com", 0.95)))
        await store.append_entities(make_entity_set("new", ("location", "Oslo", 0.6)))

        correlator = EntityCorrelator(store, sample_size=1)
        correlations = await correlator.correlate(make_entity_set("a", ("email", "a@b.com", 0.95)))

        assert correlations == []

    @pytest.mark.asyncio
    async def test_empty_source_skips_scan(self):
        store = InMemoryStore()
        await store.append_entities(make_entity_set("b", ("email", "a@b.com", 0.95)))

        correlator = EntityCorrelator(store)

        assert await correlator.correlate(make_entity_set("a")) == []
