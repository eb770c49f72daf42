"""Vote and tally schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from app.schemas.base import CamelModel


class VoteCreate(CamelModel):
    """Vote claim submitted after the client's ledger transaction."""

    signature: str = Field(..., min_length=10)
    election_id: StrictInt
    candidate_id: StrictInt
    candidate_name: str = Field(..., min_length=1)
    matric: str = Field(..., min_length=3)
    wallet_address: str = Field(..., min_length=32)
    network: str = "devnet"


class VoteResponse(CamelModel):
    """A persisted vote row."""

    id: int
    signature: str
    election_id: int
    candidate_id: int
    candidate_name: str
    matric: str
    wallet_address: str
    network: str
    created_at: datetime | None = None


class DuplicateVoteResponse(BaseModel):
    """Acknowledgement for a signature that was already accepted."""

    model_config = ConfigDict(extra="forbid")

    ok: bool = True
    duplicate: bool = True


class HasVotedResponse(CamelModel):
    """Whether a matric already has a vote in an election."""

    ok: bool
    has_voted: bool


class CandidateTally(CamelModel):
    """Vote count for one candidate."""

    candidate_id: int
    candidate_name: str
    votes: int
