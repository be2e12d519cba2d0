"""
Record adapter
Converte i record grezzi (dict JSON inseriti dagli utenti, spesso parziali)
nei modelli validati usati dallo scoring.

I default vengono applicati qui, non nello scorer:
- experience_min mancante/0 -> 0, experience_max mancante/0 -> 10
- experience_years mancante -> 0
- title, location mancanti -> ""
- skill non stringa o vuote vengono scartate
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from talentmatch.models.job import Job
from talentmatch.models.candidate import Candidate
from talentmatch.models.outcome import Loaded, RecordOutcome, Skipped


DEFAULT_EXPERIENCE_MIN = 0
DEFAULT_EXPERIENCE_MAX = 10


class InvalidRecordError(Exception):
    """Record che non supera la validazione al confine."""
    pass


def clean_skills(skills: Any) -> List[str]:
    """Tiene solo le skill stringa non vuote, senza spazi ai bordi."""
    if not isinstance(skills, (list, tuple)):
        return []
    cleaned = []
    for skill in skills:
        if not skill or not isinstance(skill, str):
            continue
        skill_clean = skill.strip()
        if skill_clean:
            cleaned.append(skill_clean)
    return cleaned


def _error_summary(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def job_from_record(record: Union[Job, Mapping[str, Any]]) -> Job:
    """
    Costruisce un Job da un record grezzo.

    Raises:
        InvalidRecordError: se il record non e' un dict o non e' valido
    """
    if isinstance(record, Job):
        return record
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"job record must be an object, got {type(record).__name__}")

    data: Dict[str, Any] = dict(record)
    data["title"] = data.get("title") or ""
    data["location"] = data.get("location") or ""
    data["skills"] = clean_skills(data.get("skills"))
    # "or": anche 0 / None prendono il default (max 0 non e' una fascia valida)
    data["experience_min"] = data.get("experience_min") or DEFAULT_EXPERIENCE_MIN
    data["experience_max"] = data.get("experience_max") or DEFAULT_EXPERIENCE_MAX

    try:
        return Job.model_validate(data)
    except ValidationError as e:
        label = f"job {data['id']}" if data.get("id") else "job"
        raise InvalidRecordError(f"invalid {label}: {_error_summary(e)}") from e


def candidate_from_record(record: Union[Candidate, Mapping[str, Any]]) -> Candidate:
    """
    Costruisce un Candidate da un record grezzo.

    Raises:
        InvalidRecordError: se il record non e' un dict o non e' valido
    """
    if isinstance(record, Candidate):
        return record
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"candidate record must be an object, got {type(record).__name__}")

    data: Dict[str, Any] = dict(record)
    data["name"] = data.get("name") or ""
    data["skills"] = clean_skills(data.get("skills"))
    data["experience_years"] = data.get("experience_years") or 0

    try:
        return Candidate.model_validate(data)
    except ValidationError as e:
        raise InvalidRecordError(_error_summary(e)) from e


def _record_id(record: Any) -> Optional[str]:
    if isinstance(record, Candidate):
        return record.id
    if isinstance(record, Mapping):
        value = record.get("id")
        return None if value is None else str(value)
    return None


def load_candidates(records: Iterable[Union[Candidate, Mapping[str, Any]]]) -> List[RecordOutcome]:
    """
    Valida un batch di candidati senza mai sollevare eccezioni.

    Returns:
        Un esito per record, nello stesso ordine: Loaded o Skipped(motivo)
    """
    outcomes: List[RecordOutcome] = []
    for index, record in enumerate(records):
        try:
            outcomes.append(Loaded(candidate=candidate_from_record(record)))
        except InvalidRecordError as e:
            outcomes.append(Skipped(index=index, record_id=_record_id(record), reason=str(e)))
    return outcomes
