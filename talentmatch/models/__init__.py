# models package
"""Data models for the candidate matching engine."""

from talentmatch.models.job import Job
from talentmatch.models.candidate import Candidate
from talentmatch.models.match_result import ApiResponse, ErrorDetail, MatchResult, ScoreBreakdown
from talentmatch.models.outcome import Loaded, RecordOutcome, Skipped

__all__ = [
    "Job",
    "Candidate",
    "ScoreBreakdown",
    "MatchResult",
    "ErrorDetail",
    "ApiResponse",
    "Loaded",
    "Skipped",
    "RecordOutcome",
]
