"""
Execution Engine Tools
"""

from .extractor import extract_path
from .field_classifier import FieldClassification, classify_fields, describe_structure
from .semantic_tagger import extract_entities
from .semantic_metadata import build_semantic_metadata
from .correlator import EntityCorrelator, score_correlations
from .request_builder import build_headers, build_request
from .stats import StatsRescheduler, compute_next_run
from .store import AgentStore, ResultStore, InMemoryStore
from .redis_store import RedisStore

__all__ = [
    "extract_path",
    "FieldClassification",
    "classify_fields",
    "describe_structure",
    "extract_entities",
    "build_semantic_metadata",
    "EntityCorrelator",
    "score_correlations",
    "build_headers",
    "build_request",
    "StatsRescheduler",
    "compute_next_run",
    "AgentStore",
    "ResultStore",
    "InMemoryStore",
    "RedisStore",
]
