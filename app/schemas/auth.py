"""Wallet sign-in schemas."""

from pydantic import BaseModel, Field


class NonceRequest(BaseModel):
    """Request body for nonce issuance."""

    address: str = Field(..., min_length=1)


class NonceResponse(BaseModel):
    """Nonce the wallet must sign."""

    nonce: int
    statement: str
    domain: str


class VerifyRequest(BaseModel):
    """Signed nonce presented by the wallet."""

    address: str = Field(..., min_length=1)
    signature: str | list[int]
    nonce: int


class VerifyResponse(BaseModel):
    """Result of a successful sign-in."""

    ok: bool = True
    role: str
