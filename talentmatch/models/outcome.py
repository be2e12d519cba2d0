from pydantic import BaseModel
from typing import Optional, Union

from talentmatch.models.candidate import Candidate


class Loaded(BaseModel):
    """Record candidato valido, pronto per lo scoring."""
    candidate: Candidate


class Skipped(BaseModel):
    """Record candidato scartato al confine, con il motivo."""
    index: int                          # posizione nel batch di input
    record_id: Optional[str] = None
    reason: str


RecordOutcome = Union[Loaded, Skipped]
