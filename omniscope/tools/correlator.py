"""
Entity Correlator

Scores overlap between one agent's fresh entities and the latest entity
sets of other agents. Identical (type, value) pairs are shared entities;
strength is the mean of min(confidence) over the matched pairs.

The scan only runs outward from the agent that just executed and samples
at most sample_size other agents.
"""

from typing import Iterable, Optional

import structlog

from ..schemas.models import Correlation, EntitySet

logger = structlog.get_logger(__name__)

SIGNIFICANCE_THRESHOLD = 0.5
DEFAULT_SAMPLE_SIZE = 10

# Checked in order; first matching entity type decides the correlation type
CORRELATION_TYPE_RULES = [
    ({"email", "person_name"}, "user_identity"),
    ({"date"}, "temporal"),
    ({"location"}, "geographic"),
    ({"identifier"}, "reference"),
]


def determine_correlation_type(shared_entities: Iterable[str]) -> str:
    """Classify a correlation from its shared "type:value" keys"""
    entity_types = {key.split(":", 1)[0] for key in shared_entities}
    for types, correlation_type in CORRELATION_TYPE_RULES:
        if entity_types & types:
            return correlation_type
    return "data_overlap"


def score_pair(source: EntitySet, target: EntitySet) -> Optional[Correlation]:
    """
    Compare two entity sets.

    Returns:
        Correlation with mean matched confidence, or None without matches
    """
    shared: list[str] = []
    total = 0.0

    for source_entity in source.entities:
        for target_entity in target.entities:
            if source_entity.type == target_entity.type and source_entity.value == target_entity.value:
                shared.append(source_entity.key)
                total += min(source_entity.confidence, target_entity.confidence)

    if not shared:
        return None

    return Correlation(
        source_agent_id=source.agent_id,
        target_agent_id=target.agent_id,
        correlation_type=determine_correlation_type(shared),
        strength=total / len(shared),
        shared_entities=shared,
        execution_id=source.execution_id,
    )


def score_correlations(
    source: EntitySet,
    targets: Iterable[EntitySet],
    threshold: float = SIGNIFICANCE_THRESHOLD,
) -> list[Correlation]:
    """
    Score source against every target of another agent.

    Only correlations with strength strictly above threshold are returned.
    """
    correlations = []
    for target in targets:
        if target.agent_id == source.agent_id:
            continue
        correlation = score_pair(source, target)
        if correlation is None:
            continue
        if correlation.strength > threshold:
            correlations.append(correlation)
        else:
            logger.debug(
                "Correlation below threshold",
                source_agent_id=source.agent_id,
                target_agent_id=target.agent_id,
                strength=correlation.strength,
            )
    return correlations


class EntityCorrelator:
    """
    Correlates a fresh entity set against stored sets of other agents.
    """

    def __init__(
        self,
        results,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        threshold: float = SIGNIFICANCE_THRESHOLD,
    ):
        """
        Initialize correlator.

        Args:
            results: ResultStore holding previously tagged entity sets
            sample_size: Maximum number of other agents to compare against
            threshold: Strength a correlation must exceed to be kept
        """
        self.results = results
        self.sample_size = sample_size
        self.threshold = threshold

    async def correlate(self, source: EntitySet) -> list[Correlation]:
        """Score source against the latest sets of up to sample_size other agents"""
        if not source.entities:
            return []

        targets = await self.results.recent_entity_sets(
            exclude_agent_id=source.agent_id,
            limit=self.sample_size,
        )
        correlations = score_correlations(source, targets, self.threshold)

        if correlations:
            logger.info(
                "Correlations found",
                agent_id=source.agent_id,
                targets_scanned=len(targets),
                correlation_count=len(correlations),
                types=sorted({c.correlation_type for c in correlations}),
            )

        return correlations
