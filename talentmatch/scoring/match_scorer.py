"""
Match Scorer
Calcolo deterministico del match tra una posizione e un insieme di candidati.

Responsabilità:
- Confronta le skill (substring bidirezionale, case-insensitive)
- Valuta gli anni di esperienza rispetto alla fascia del job
- Segnale location (Remote / non Remote)
- Role fit euristico sulle keyword del titolo
- Filtra per soglia e ordina i risultati (migliore prima)
"""

import math
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from talentmatch.services.logging_utils import log_section, print_with_prefix
from talentmatch.models.job import Job
from talentmatch.models.candidate import Candidate
from talentmatch.models.match_result import MatchResult, ScoreBreakdown


REMOTE_LOCATION = "Remote"
REMOTE_LOCATION_SCORE = 100.0
ON_SITE_LOCATION_SCORE = 80.0

ROLE_FIT_BASE = 50.0
REACT_BONUS = 30.0
FULL_STACK_BONUS = 20.0
FULL_STACK_MIN_SKILLS = 4
FRONTEND_BONUS = 20.0
BACKEND_BONUS = 20.0
FRONTEND_SKILLS = frozenset({"css", "html", "javascript", "vue", "angular"})
BACKEND_SKILLS = frozenset({"python", "java", "node", "django", "spring"})


class ScoringWeights(BaseModel):
    """Pesi dei quattro sotto-score; devono sommare a 1."""
    skills: float = Field(default=0.4, ge=0, le=1)
    experience: float = Field(default=0.3, ge=0, le=1)
    location: float = Field(default=0.1, ge=0, le=1)
    role_fit: float = Field(default=0.2, ge=0, le=1)

    @model_validator(mode="after")
    def _check_total(self) -> "ScoringWeights":
        total = self.skills + self.experience + self.location + self.role_fit
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"weights must sum to 1.0 (got {total})")
        return self


def round_half_up(value: float) -> int:
    # round() di Python arrotonda al pari: 12.5 -> 12, qui serve 13
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class MatchScorer:
    """
    Calcola lo score di match tra un job e una lista di candidati.

    LOGICA DI SCORING (per candidato, indipendente dagli altri):
    1. Skill score: quota di skill del job coperte dal candidato
    2. Experience score: anni del candidato vs fascia [min, max]
    3. Location score: 100 se il job e' "Remote", altrimenti 80
    4. Role fit: base 50 + bonus sulle keyword del titolo (cap 100)
    5. Score finale pesato, arrotondato e limitato a [0, 100]

    Lo scorer non ha stato mutabile: la stessa istanza puo' essere
    usata da piu' chiamanti in parallelo.
    """

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        verbose: bool = False
    ):
        self.weights = weights or ScoringWeights()
        self.verbose = verbose

    def compute_matches(
        self,
        job: Job,
        candidates: Iterable[Candidate],
        threshold: float
    ) -> List[MatchResult]:
        """
        Calcola i match per tutti i candidati e ritorna quelli sopra soglia.

        Args:
            job: Posizione con skill, fascia di esperienza, location e titolo
            candidates: Candidati da valutare (anche vuoto)
            threshold: Score minimo (incluso) per comparire nei risultati

        Returns:
            Lista di MatchResult ordinata per match_score decrescente;
            a parita' di score resta l'ordine di input.
        """
        log_section(self._log, f"Matching candidates vs {job.title or 'Job'}", width=60, char="-")

        results = [self.score_candidate(job, candidate) for candidate in candidates]
        kept = [r for r in results if r.match_score >= threshold]
        self._log(f"   -> {len(kept)}/{len(results)} candidates with score >= {threshold}")

        # sorted() e' stabile: i pari merito mantengono l'ordine di input
        return sorted(kept, key=lambda r: r.match_score, reverse=True)

    def score_candidate(self, job: Job, candidate: Candidate) -> MatchResult:
        """Calcola score e breakdown di un singolo candidato, senza filtri."""
        skill_score = clamp(self._calculate_skill_score(job.skills, candidate.skills))
        experience_score = clamp(self._calculate_experience_score(
            candidate.experience_years, job.experience_min, job.experience_max
        ))
        location_score = clamp(self._calculate_location_score(job.location))
        role_fit_score = clamp(self._calculate_role_fit_score(job.title, candidate.skills))

        w = self.weights
        weighted = (
            skill_score * w.skills +
            experience_score * w.experience +
            location_score * w.location +
            role_fit_score * w.role_fit
        )
        match_score = int(clamp(round_half_up(weighted)))

        self._log(
            f"{candidate.name or 'Candidate'}: {match_score} "
            f"(skills {skill_score:.0f}, exp {experience_score:.0f}, "
            f"loc {location_score:.0f}, role {role_fit_score:.0f})"
        )

        return MatchResult(
            candidate=candidate,
            match_score=match_score,
            breakdown=ScoreBreakdown(
                skills=round_half_up(skill_score),
                experience=round_half_up(experience_score),
                location=round_half_up(location_score),
                role_fit=round_half_up(role_fit_score),
            ),
        )

    def _calculate_skill_score(
        self,
        job_skills: Sequence[str],
        candidate_skills: Sequence[str]
    ) -> float:
        """
        Percentuale di skill del job presenti nel candidato.

        Una skill del job e' coperta se e' contenuta in una skill del
        candidato o la contiene ("React" ~ "React.js"). Senza skill
        richieste lo score e' 0.
        """
        if not job_skills:
            return 0.0

        candidate_lower = [s.lower() for s in candidate_skills]
        matched = [
            skill for skill in job_skills
            if self._skill_covered(skill.lower(), candidate_lower)
        ]
        if self.verbose:
            self._log(f"   matched skills: {matched or '-'}")
        return len(matched) / len(job_skills) * 100

    @staticmethod
    def _skill_covered(job_skill: str, candidate_lower: Sequence[str]) -> bool:
        return any(job_skill in cs or cs in job_skill for cs in candidate_lower)

    def _calculate_experience_score(
        self,
        candidate_years: float,
        min_years: float,
        max_years: float
    ) -> float:
        """Calcola score esperienza rispetto alla fascia [min_years, max_years]."""
        if min_years <= candidate_years <= max_years:
            return 100.0
        if candidate_years < min_years:
            # raggiungibile solo con min_years > 0
            return max(0.0, candidate_years / min_years * 100)
        # sovra-qualificato: -50 punti per ogni "fascia massima" in eccesso
        return max(0.0, 100 - (candidate_years - max_years) / max_years * 50)

    def _calculate_location_score(self, location: Optional[str]) -> float:
        return REMOTE_LOCATION_SCORE if location == REMOTE_LOCATION else ON_SITE_LOCATION_SCORE

    def _calculate_role_fit_score(self, title: Optional[str], candidate_skills: Sequence[str]) -> float:
        """Bonus cumulativi sulle keyword del titolo, poi cap a 100."""
        job_title = (title or "").lower()
        skills_lower = [s.lower() for s in candidate_skills]

        score = ROLE_FIT_BASE
        if "react" in job_title and any("react" in s for s in skills_lower):
            score += REACT_BONUS
        if "full stack" in job_title and len(skills_lower) >= FULL_STACK_MIN_SKILLS:
            score += FULL_STACK_BONUS
        if "frontend" in job_title and any(s in FRONTEND_SKILLS for s in skills_lower):
            score += FRONTEND_BONUS
        if "backend" in job_title and any(s in BACKEND_SKILLS for s in skills_lower):
            score += BACKEND_BONUS
        return min(100.0, score)

    def _log(self, message: str) -> None:
        print_with_prefix("[MatchScorer]", message, enabled=self.verbose)


def compute_matches(
    job: Job,
    candidates: Iterable[Candidate],
    threshold: float,
    verbose: bool = False
) -> List[MatchResult]:
    """
    API semplice: scoring con pesi di default.

    Args:
        job: Posizione da coprire
        candidates: Candidati gia' caricati
        threshold: Score minimo (incluso), 0-100
        verbose: Se True, stampa log

    Returns:
        Risultati filtrati e ordinati per match_score decrescente
    """
    return MatchScorer(verbose=verbose).compute_matches(job, candidates, threshold)
