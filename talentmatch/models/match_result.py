from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from talentmatch.models.candidate import Candidate


class ScoreBreakdown(BaseModel):
    # Sotto-score non pesati, arrotondati singolarmente
    skills: int = Field(ge=0, le=100)
    experience: int = Field(ge=0, le=100)
    location: int = Field(ge=0, le=100)
    role_fit: int = Field(ge=0, le=100)


class MatchResult(BaseModel):
    candidate: Candidate
    match_score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown


class ErrorDetail(BaseModel):
    code: str                       # es. "JOB_NOT_FOUND"
    message: Optional[str] = None


class ApiResponse(BaseModel):
    """Envelope JSON restituito dall'endpoint delle match."""
    status: Literal["ok", "error"] = "ok"
    data: Optional[Any] = None
    errors: List[ErrorDetail] = []

    @classmethod
    def ok(cls, data: Any) -> "ApiResponse":
        return cls(status="ok", data=data, errors=[])

    @classmethod
    def error(cls, code: str, message: Optional[str] = None) -> "ApiResponse":
        return cls(status="error", data=None, errors=[ErrorDetail(code=code, message=message)])

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
