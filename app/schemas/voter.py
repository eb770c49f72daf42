"""Voter schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.schemas.base import CamelModel


class VoterCreate(BaseModel):
    """Request body for registering a voter."""

    name: str = Field(..., min_length=1)
    matric: str = Field(..., min_length=3)
    email: EmailStr | None = None
    department: str | None = None
    eligible: bool = True


class VoterUpdate(BaseModel):
    """Partial voter update; omitted fields are left untouched."""

    name: str | None = Field(default=None, min_length=1)
    matric: str | None = Field(default=None, min_length=3)
    email: EmailStr | None = None
    department: str | None = None
    eligible: bool | None = None


class WalletLinkRequest(CamelModel):
    """Attach a connected wallet to a voter's matric."""

    matric: str = Field(..., min_length=3)
    wallet_address: str = Field(..., min_length=32)


class VoterResponse(CamelModel):
    """Voter representation."""

    id: int
    matric: str
    name: str
    email: str | None = None
    department: str | None = None
    eligible: bool = True
    wallet_address: str | None = None
    wallet_verified: bool = False
    wallet_verified_at: datetime | None = None
    last_vote_signature: str | None = None
    last_vote_at: datetime | None = None
    created_at: datetime | None = None
