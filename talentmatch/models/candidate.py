from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Candidate(BaseModel):
    # Campi extra del record (es. colonne aggiunte dal frontend) restano sul modello
    model_config = ConfigDict(extra="allow")

    name: str = ""
    skills: List[str] = []
    experience_years: float = Field(default=0, ge=0)
    # Anagrafica: il matching la restituisce invariata
    id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None                # new, screened, shortlisted, interviewed, rejected, hired
    resumes: List[str] = []
    parsed_text: Optional[str] = None
    created_at: Optional[str] = None
