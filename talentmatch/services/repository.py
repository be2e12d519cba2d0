"""
Repository
Collaboratori che forniscono job e candidati gia' caricati.

Il matching non legge mai da storage direttamente: riceve un repository
costruito dal chiamante (in memoria per i test, file JSON per la CLI).
"""

import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable


Record = Dict[str, Any]


class RepositoryError(Exception):
    """Sorgente dati illeggibile o con formato inatteso."""
    pass


class JobNotFoundError(Exception):
    """Il job richiesto non esiste."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


@runtime_checkable
class JobRepository(Protocol):
    def get_job(self, job_id: str) -> Optional[Record]:
        """Ritorna il record del job o None se non esiste."""
        ...

    def list_jobs(self) -> List[Record]:
        ...


@runtime_checkable
class CandidateRepository(Protocol):
    def list_candidates(self) -> List[Record]:
        """Tutti i candidati da confrontare con un job."""
        ...


class InMemoryRepository:
    """Repository in memoria per job e candidati."""

    def __init__(
        self,
        jobs: Optional[Iterable[Record]] = None,
        candidates: Optional[Iterable[Record]] = None
    ):
        self._jobs = list(jobs or [])
        self._candidates = list(candidates or [])

    def get_job(self, job_id: str) -> Optional[Record]:
        for job in self._jobs:
            if not isinstance(job, Mapping) or job.get("id") is None:
                continue
            if str(job["id"]) == str(job_id):
                return job
        return None

    def list_jobs(self) -> List[Record]:
        return list(self._jobs)

    def list_candidates(self) -> List[Record]:
        return list(self._candidates)


def load_records(path: Path, key: str) -> List[Record]:
    """
    Legge una lista di record da un file JSON.

    Formati accettati: lista al top level, oppure oggetto con la lista
    sotto `key` o sotto "data" (envelope dell'API).
    File mancante o vuoto -> nessun record.

    Raises:
        RepositoryError: JSON malformato o struttura inattesa
    """
    if not path.exists():
        return []
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
    except OSError as e:
        raise RepositoryError(f"Cannot read {path}: {e}") from e
    if not content:
        return []

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise RepositoryError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get(key, payload.get("data"))
    if not isinstance(payload, list):
        raise RepositoryError(f"{path}: expected a list of {key}")
    return payload


class JsonFileRepository(InMemoryRepository):
    """Repository su file JSON (uno per i job, uno per i candidati)."""

    def __init__(self, jobs_path: Union[str, Path], candidates_path: Union[str, Path]):
        self.jobs_path = Path(jobs_path)
        self.candidates_path = Path(candidates_path)
        super().__init__(
            jobs=load_records(self.jobs_path, "jobs"),
            candidates=load_records(self.candidates_path, "candidates"),
        )


def skills_distribution(records: Iterable[Any], limit: int = 10) -> List[Tuple[str, int]]:
    """
    Skill piu' frequenti tra i record (job o candidati).

    Ordine: conteggio decrescente, a parita' prima apparizione.
    """
    counts: Counter = Counter()
    for record in records:
        skills = record.get("skills") if isinstance(record, Mapping) else getattr(record, "skills", None)
        for skill in skills or []:
            if isinstance(skill, str) and skill:
                counts[skill] += 1
    # most_common mantiene l'ordine di inserimento a parita' di conteggio
    return counts.most_common(limit)
