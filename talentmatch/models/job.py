from pydantic import BaseModel, Field, model_validator
from typing import List, Optional


class Job(BaseModel):
    """Posizione aperta con i requisiti usati dal matching."""
    title: str = ""
    skills: List[str] = []
    location: str = ""                          # "Remote" (esatto) vale come full remote
    experience_min: float = Field(default=0, ge=0)
    experience_max: float = Field(default=10, gt=0)
    # Campi descrittivi, non usati nello scoring
    id: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None                # "draft" | "published" | "closed"
    created_at: Optional[str] = None
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def _check_experience_band(self) -> "Job":
        if self.experience_max < self.experience_min:
            raise ValueError(
                f"experience_max ({self.experience_max}) must be >= experience_min ({self.experience_min})"
            )
        return self
