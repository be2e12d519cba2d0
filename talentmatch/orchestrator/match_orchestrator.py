"""
Match Orchestrator
Coordina repository, adapter dei record e scorer per rispondere a
"quali candidati sono adatti a questo job?".

Responsabilità:
- Recupera job e candidati dai repository iniettati
- Valida i record al confine (i candidati invalidi diventano Skipped)
- Delega lo scoring a MatchScorer
- Produce il risultato finale o l'envelope JSON dell'API
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from talentmatch.scoring.match_scorer import MatchScorer
from talentmatch.services.logging_utils import log_section, print_with_prefix
from talentmatch.services.records import InvalidRecordError, job_from_record, load_candidates
from talentmatch.services.repository import (
    CandidateRepository,
    InMemoryRepository,
    JobNotFoundError,
    JobRepository,
)
from talentmatch.models.job import Job
from talentmatch.models.candidate import Candidate
from talentmatch.models.match_result import ApiResponse, MatchResult
from talentmatch.models.outcome import Loaded, Skipped


DEFAULT_THRESHOLD = 70


class InvalidThresholdError(ValueError):
    """Soglia non numerica o fuori da [0, 100]."""
    pass


def parse_threshold(value: Any, default: float = DEFAULT_THRESHOLD) -> float:
    """Normalizza la soglia (anche da query string); None -> default."""
    if value is None or value == "":
        return float(default)
    try:
        threshold = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidThresholdError(f"threshold must be a number, got {value!r}") from e
    if math.isnan(threshold) or not 0 <= threshold <= 100:
        raise InvalidThresholdError(f"threshold must be between 0 and 100, got {value!r}")
    return threshold


@dataclass
class OrchestratorResult:
    """Risultato completo del matching per un job."""
    job: Job
    matches: List[MatchResult]
    skipped: List[Skipped] = field(default_factory=list)
    threshold: float = DEFAULT_THRESHOLD
    total_candidates: int = 0

    def matches_as_dicts(self) -> List[Dict[str, Any]]:
        # exclude_unset: i campi opzionali assenti in input non vengono aggiunti;
        # name, skills ed experience_years tornano normalizzati dall'adapter
        return [m.model_dump(mode="json", exclude_unset=True) for m in self.matches]


class MatchOrchestrator:
    """
    Orchestratore del matching job -> candidati.

    FLUSSO:
    1. JobRepository fornisce il record del job -> Job validato
    2. CandidateRepository fornisce i candidati -> Loaded / Skipped
    3. MatchScorer calcola score, filtra per soglia e ordina
    4. Ritorna OrchestratorResult (o ApiResponse per il layer web)
    """

    def __init__(
        self,
        job_repository: Optional[JobRepository] = None,
        candidate_repository: Optional[CandidateRepository] = None,
        scorer: Optional[MatchScorer] = None,
        default_threshold: float = DEFAULT_THRESHOLD,
        verbose: bool = False
    ):
        self.job_repository = job_repository if job_repository is not None else InMemoryRepository()
        self.candidate_repository = candidate_repository if candidate_repository is not None else InMemoryRepository()
        self.default_threshold = parse_threshold(default_threshold)
        self.verbose = verbose

        self._scorer = scorer

    @property
    def scorer(self) -> MatchScorer:
        if self._scorer is None:
            self._scorer = MatchScorer(verbose=self.verbose)
        return self._scorer

    def run(self, job_id: str, threshold: Any = None) -> OrchestratorResult:
        """
        Esegue il matching di tutti i candidati contro un job.

        Args:
            job_id: Identificativo del job
            threshold: Score minimo (incluso); None -> default_threshold

        Raises:
            JobNotFoundError: il job non esiste
            InvalidRecordError: il record del job non e' valido
            InvalidThresholdError: soglia fuori da [0, 100]
        """
        threshold_value = parse_threshold(threshold, default=self.default_threshold)

        log_section(self._log, f"MATCH ORCHESTRATOR: job {job_id}", width=70, char="=")

        record = self.job_repository.get_job(job_id)
        if record is None:
            self._log(f"Job {job_id} not found")
            raise JobNotFoundError(job_id)
        job = job_from_record(record)
        self._log(f"   -> Job: {job.title} ({len(job.skills)} skills, "
                  f"{job.experience_min:g}-{job.experience_max:g} years, {job.location or '-'})")

        return self.match_job(job, self.candidate_repository.list_candidates(), threshold_value)

    def matches_response(self, job_id: str, threshold: Any = None) -> ApiResponse:
        """Come run(), ma restituisce l'envelope {status, data, errors}."""
        try:
            result = self.run(job_id, threshold)
        except JobNotFoundError as e:
            return ApiResponse.error("JOB_NOT_FOUND", str(e))
        except InvalidThresholdError as e:
            return ApiResponse.error("INVALID_THRESHOLD", str(e))
        except InvalidRecordError as e:
            return ApiResponse.error("INVALID_JOB", str(e))
        return ApiResponse.ok(result.matches_as_dicts())

    def match_job(
        self,
        job: Job,
        candidate_records: Iterable[Union[Candidate, Mapping[str, Any]]],
        threshold: Any = None
    ) -> OrchestratorResult:
        """Matching di un job gia' caricato contro i candidati dati (record o modelli)."""
        threshold = parse_threshold(threshold, default=self.default_threshold)
        outcomes = load_candidates(candidate_records)
        candidates = [o.candidate for o in outcomes if isinstance(o, Loaded)]
        skipped = [o for o in outcomes if isinstance(o, Skipped)]

        self._log(f"   -> Candidates: {len(candidates)} valid, {len(skipped)} skipped")
        for s in skipped:
            self._log(f"   SKIP #{s.index} ({s.record_id or 'no id'}): {s.reason}")

        matches = self.scorer.compute_matches(job, candidates, threshold)

        log_section(self._log, "FINAL RESULT", width=70, char="-")
        self._log(f"   Threshold: {threshold:g}")
        self._log(f"   Matches:   {len(matches)}/{len(outcomes)}")
        if matches:
            self._log(f"   Best:      {matches[0].candidate.name} ({matches[0].match_score})")

        return OrchestratorResult(
            job=job,
            matches=matches,
            skipped=skipped,
            threshold=threshold,
            total_candidates=len(outcomes),
        )

    def _log(self, message: str) -> None:
        """Conditional logging."""
        print_with_prefix("[Orchestrator]", message, enabled=self.verbose)


# ═══════════════════════════════════════════════════════════════════════════
# SIMPLE API
# ═══════════════════════════════════════════════════════════════════════════

def match_candidates_to_job(
    job: Union[Job, Mapping[str, Any]],
    candidates: Iterable[Union[Candidate, Mapping[str, Any]]],
    threshold: Any = DEFAULT_THRESHOLD,
    verbose: bool = False
) -> OrchestratorResult:
    """
    API semplice per il matching di un job gia' caricato.

    Args:
        job: Job o record grezzo
        candidates: Candidati o record grezzi
        threshold: Score minimo (incluso), 0-100
        verbose: Se True, stampa log

    Returns:
        OrchestratorResult con match ordinati e candidati scartati
    """
    orchestrator = MatchOrchestrator(verbose=verbose)
    return orchestrator.match_job(job_from_record(job), candidates, threshold)

