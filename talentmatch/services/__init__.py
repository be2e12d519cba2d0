# services package
"""Collaborators of the matching engine (records, repositories, logging)."""

from talentmatch.services.records import (
    InvalidRecordError,
    candidate_from_record,
    clean_skills,
    job_from_record,
    load_candidates,
)
from talentmatch.services.repository import (
    CandidateRepository,
    InMemoryRepository,
    JobNotFoundError,
    JobRepository,
    JsonFileRepository,
    RepositoryError,
    skills_distribution,
)

__all__ = [
    "InvalidRecordError",
    "candidate_from_record",
    "clean_skills",
    "job_from_record",
    "load_candidates",
    "CandidateRepository",
    "InMemoryRepository",
    "JobNotFoundError",
    "JobRepository",
    "JsonFileRepository",
    "RepositoryError",
    "skills_distribution",
]
