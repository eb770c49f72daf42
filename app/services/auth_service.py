"""Wallet-signature admin sign-in."""

from __future__ import annotations

import logging
import secrets
import time
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import settings
from app.services.common import SupabaseService
from app.services.voter_service import VoterService
from app.utils.errors import InvalidInputError, UnauthorizedError
from app.utils.time import now_utc
from app.utils.wallet import sign_in_message, verify_wallet_signature
from supabase import AsyncClient

logger = logging.getLogger(__name__)

ROLE_ADMIN = "ADMIN"
ROLE_VIEWER = "VIEWER"


class NonceStore:
    """Single-use sign-in nonces keyed by wallet address, with expiry."""

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.nonce_ttl_seconds
        self._nonces: dict[str, tuple[float, int]] = {}

    def issue(self, address: str) -> int:
        nonce = secrets.randbelow(1_000_000_000)
        self._nonces[address] = (time.monotonic() + self.ttl_seconds, nonce)
        return nonce

    def consume(self, address: str, nonce: int) -> bool:
        """Return True if ``nonce`` is the live nonce for ``address``; it is spent either way."""
        entry = self._nonces.pop(address, None)
        if entry is None:
            return False
        expires_at, expected = entry
        return expected == nonce and expires_at > time.monotonic()

    def purge_expired(self) -> int:
        now = time.monotonic()
        expired = [
            address for address, (expires_at, _) in self._nonces.items() if expires_at <= now
        ]
        for address in expired:
            self._nonces.pop(address, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._nonces)


nonce_store = NonceStore()


def create_access_token(user_id: Any, role: str, address: str) -> str:
    """Issue a signed admin session token."""
    expires = now_utc() + timedelta(seconds=settings.jwt_ttl_seconds)
    claims = {"sub": str(user_id), "role": role, "address": address, "exp": expires}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Validate a session token and return its claims."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise UnauthorizedError() from exc


class AuthService:
    """Verify signed nonces and resolve the caller's role."""

    def __init__(self, client: AsyncClient, nonces: NonceStore | None = None) -> None:
        self.db = SupabaseService(client)
        self.voters = VoterService(client)
        self.nonces = nonces or nonce_store

    def issue_nonce(self, address: str) -> int:
        return self.nonces.issue(address.strip())

    async def verify(
        self, address: str, signature: str | list[int], nonce: int
    ) -> tuple[dict[str, Any], str]:
        """Check a signed nonce and return ``(user, token)``.

        Raises:
            InvalidInputError: the nonce is unknown, expired or mismatched,
                or the signature/address cannot be decoded.
            UnauthorizedError: the signature does not verify.
        """
        if not self.nonces.consume(address, nonce):
            raise InvalidInputError("invalid nonce")

        message = sign_in_message(settings.sign_in_statement, nonce)
        if not verify_wallet_signature(address, message, signature):
            raise UnauthorizedError("bad signature")

        user = await self._upsert_user(address)
        user = await self._maybe_promote(user, address)

        try:
            await self.voters.mark_wallet_verified(address)
        except Exception:
            logger.exception("Could not mark voter wallet %s verified", address)

        token = create_access_token(user["id"], user["role"], address)
        return user, token

    async def _upsert_user(self, address: str) -> dict[str, Any]:
        rows = await self.db.execute(
            self.db.client.table("users").upsert(
                {"wallet_address": address},
                on_conflict="wallet_address",
                ignore_duplicates=False,
            ),
            default=[],
        )
        if rows:
            return rows[0]
        return await self.db.select_one(
            "users", {"wallet_address": address}, not_found_label="User"
        )

    async def _maybe_promote(self, user: dict[str, Any], address: str) -> dict[str, Any]:
        """Grant ADMIN to allow-listed wallets, or to the first user ever."""
        if user.get("role") == ROLE_ADMIN:
            return user
        admin_count = await self.db.count("users", {"role": ROLE_ADMIN})
        if address not in settings.admin_wallet_set and admin_count > 0:
            return user
        rows = await self.db.update("users", {"id": user["id"]}, {"role": ROLE_ADMIN})
        logger.info("Wallet %s promoted to admin", address)
        return rows[0] if rows else {**user, "role": ROLE_ADMIN}
