"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration.

    Values are read from environment variables (or a `.env` file).
    """

    # Supabase
    supabase_url: str
    supabase_service_key: str
    supabase_http_max_connections: int = 100
    supabase_http_max_keepalive_connections: int = 50
    supabase_postgrest_timeout_seconds: int = 30

    # App
    app_name: str = "Mac Votes API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    enable_scheduler: bool = True

    # Scheduling
    timezone: str = "UTC"
    election_sweep_minutes: int = 5
    nonce_purge_minutes: int = 10

    # Performance tuning
    slow_request_log_threshold_ms: int = 0
    slow_query_log_threshold_ms: int = 0

    # Ledger (Solana JSON-RPC)
    solana_rpc_url: str = "https://api.devnet.solana.com"
    solana_network: str = "devnet"
    ledger_commitment: str = "confirmed"
    ledger_timeout_seconds: float = 10.0

    # Voting
    enforce_one_vote_per_voter: bool = True

    # Live tally stream
    stream_keepalive_seconds: float = 25.0
    stream_queue_size: int = 32

    # Admin auth
    jwt_secret: str = "dev-secret-change"
    jwt_algorithm: str = "HS256"
    jwt_ttl_seconds: int = 3600
    auth_cookie_name: str = "token"
    auth_cookie_secure: bool = False
    admin_wallets: str = ""
    sign_in_statement: str = "Sign in to Mac Votes"
    nonce_ttl_seconds: int = 300

    @property
    def origins_list(self) -> list[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def admin_wallet_set(self) -> set[str]:
        """Parse comma-separated ADMIN_WALLETS into a set."""
        return {w.strip() for w in self.admin_wallets.split(",") if w.strip()}

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()  # type: ignore[call-arg]
