"""Election schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from app.schemas.base import CamelModel


class ElectionLevel(StrEnum):
    UNIVERSITY = "UNIVERSITY"
    FACULTY = "FACULTY"
    DEPARTMENT = "DEPARTMENT"


class ElectionStatus(StrEnum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class CandidateCreate(BaseModel):
    """Candidate entry in an election creation request."""

    name: str
    department: str
    level: str
    avatar: str
    color: str


class ElectionCreate(CamelModel):
    """Request body for creating an election."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    level: ElectionLevel
    start_date: datetime
    end_date: datetime
    candidates: list[CandidateCreate] = Field(..., min_length=2)


class ElectionStatusUpdate(BaseModel):
    """Request body for moving an election between states."""

    status: ElectionStatus = ElectionStatus.ACTIVE

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CandidateResponse(CamelModel):
    """Candidate representation."""

    id: int
    election_id: int
    name: str
    department: str | None = None
    level: str | None = None
    avatar: str | None = None
    color: str | None = None


class ElectionSummary(CamelModel):
    """Election without candidates."""

    id: int
    title: str
    description: str
    level: ElectionLevel
    status: ElectionStatus
    start_date: datetime
    end_date: datetime


class ElectionResponse(ElectionSummary):
    """Election with its candidates."""

    candidates: list[CandidateResponse] = Field(default_factory=list)
