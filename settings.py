from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    # Deployment
    environment: str
    public_app_url: str
    cors_origins: list[str]

    # Persistence
    strict_writes: bool

    # Password reset
    reset_token_ttl_seconds: int

    # Mail (SMTP); mail is considered unconfigured without a host
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str
    smtp_use_tls: bool
    mail_from: str

    # Debug
    debug_log_requests: bool

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def returns_reset_links(self) -> bool:
        # Only an explicitly named non-production environment may hand out links.
        return bool(self.environment) and not self.is_production


def get_settings() -> Settings:
    # Empty when unset; unset is treated like production for reset links.
    environment = os.getenv("APP_ENV", "").strip().lower()
    public_app_url = os.getenv("PUBLIC_APP_URL", "http://localhost:3000").rstrip("/")
    cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Default: surface write failures instead of pretending the request succeeded.
    strict_writes = _env_bool("STRICT_WRITES", True)

    reset_token_ttl_seconds = _env_int("RESET_TOKEN_TTL_SECONDS", 60 * 60)

    smtp_host = os.getenv("SMTP_HOST", "").strip()
    smtp_port = _env_int("SMTP_PORT", 587)
    smtp_username = os.getenv("SMTP_USERNAME", "")
    smtp_password = os.getenv("SMTP_PASSWORD", "")
    smtp_use_tls = _env_bool("SMTP_USE_TLS", True)
    mail_from = os.getenv("MAIL_FROM", "no-reply@dygo.local")

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", True)

    return Settings(
        environment=environment,
        public_app_url=public_app_url,
        cors_origins=cors_origins or ["*"],
        strict_writes=strict_writes,
        reset_token_ttl_seconds=reset_token_ttl_seconds,
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_username=smtp_username,
        smtp_password=smtp_password,
        smtp_use_tls=smtp_use_tls,
        mail_from=mail_from,
        debug_log_requests=debug_log_requests,
    )
