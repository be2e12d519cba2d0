"""
Pytest configuration and shared fixtures.
"""

import json
import pytest
from pathlib import Path
from typing import Any, Dict, List

from talentmatch.models import Candidate, Job


@pytest.fixture
def react_job() -> Job:
    """Remote React job with a 2-5 years band."""
    return Job(
        id="job-react",
        title="React Developer",
        skills=["React", "Node"],
        location="Remote",
        experience_min=2,
        experience_max=5,
    )


@pytest.fixture
def react_candidate() -> Candidate:
    """Candidate covering every skill of the React job."""
    return Candidate(
        id="cand-react",
        name="Ada",
        skills=["react", "node", "css"],
        experience_years=3,
    )


@pytest.fixture
def job_records() -> List[Dict[str, Any]]:
    """Raw job records, as stored by the web app."""
    return [
        {
            "id": "job-1",
            "title": "Senior React Developer",
            "skills": ["React", "TypeScript", "Node.js", "AWS", "Docker"],
            "location": "Remote",
            "experience_min": 5,
            "experience_max": 10,
            "status": "published",
        },
        {
            "id": "job-2",
            "title": "Full Stack Developer",
            "skills": ["JavaScript", "Python", "Django", "PostgreSQL", "Redis"],
            "location": "New York, NY",
            "experience_min": 3,
            "experience_max": 7,
            "status": "published",
        },
    ]


@pytest.fixture
def candidate_records() -> List[Dict[str, Any]]:
    """Raw candidate records; scores against job-1 are 96, 50, 38, 58, 58."""
    return [
        {
            "id": "candidate-1",
            "name": "Sarah Johnson",
            "email": "sarah.johnson@email.com",
            "skills": ["React", "TypeScript", "Node.js", "AWS", "Docker"],
            "experience_years": 5,
        },
        {
            "id": "candidate-2",
            "name": "Michael Chen",
            "skills": ["Python", "Django", "PostgreSQL", "Redis", "Kubernetes"],
            "experience_years": 7,
        },
        {
            "id": "candidate-3",
            "name": "Emily Rodriguez",
            "skills": ["Vue.js", "JavaScript", "CSS", "Figma", "Webpack"],
            "experience_years": 3,
        },
        {
            "id": "candidate-4",
            "name": "David Kim",
            "skills": ["Java", "Spring Boot", "Microservices", "MongoDB", "Docker"],
            "experience_years": 6,
        },
        {
            "id": "candidate-5",
            "name": "Lisa Wang",
            "skills": ["React Native", "iOS", "Android", "Firebase", "GraphQL"],
            "experience_years": 4,
        },
    ]


@pytest.fixture
def jobs_file(tmp_path, job_records) -> Path:
    """Jobs JSON file (top-level list)."""
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps(job_records, indent=2))
    return path


@pytest.fixture
def candidates_file(tmp_path, candidate_records) -> Path:
    """Candidates JSON file (API envelope with a data key)."""
    path = tmp_path / "candidates.json"
    path.write_text(json.dumps({"status": "ok", "data": candidate_records, "errors": []}, indent=2))
    return path
