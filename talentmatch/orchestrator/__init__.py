# orchestrator package
"""Orchestrator wiring repositories, record adapter and scorer."""

from talentmatch.orchestrator.match_orchestrator import (
    DEFAULT_THRESHOLD,
    InvalidThresholdError,
    MatchOrchestrator,
    OrchestratorResult,
    match_candidates_to_job,
    parse_threshold,
)

__all__ = [
    "DEFAULT_THRESHOLD",
    "InvalidThresholdError",
    "MatchOrchestrator",
    "OrchestratorResult",
    "match_candidates_to_job",
    "parse_threshold",
]
