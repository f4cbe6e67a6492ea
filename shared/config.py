"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_DEFAULT_SEED_SOURCE_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
_DEFAULT_TRANSACTIONS_TABLE = "product_transactions"
_DEFAULT_API_PORT = 3000
_DEFAULT_SEED_FETCH_TIMEOUT_SECONDS = 10.0


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in {"dev", "local"}


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def _get_float(name: str, default: float) -> float:
    raw_value = (get_env(name, "") or "").strip()
    if not raw_value:
        return default
    try:
        return float(raw_value)
    except ValueError:
        logger.warning("invalid_float_env name=%s value=%s; using default=%s", name, raw_value, default)
        return default


def _get_int(name: str, default: int) -> int:
    raw_value = (get_env(name, "") or "").strip()
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError:
        logger.warning("invalid_int_env name=%s value=%s; using default=%s", name, raw_value, default)
        return default


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in {"dev", "local"}:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS",
        app_env(),
    )

    return []


def supabase_url() -> str | None:
    """Return the PostgREST store URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return the PostgREST store service key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def transactions_table() -> str:
    """Return the table holding product transactions."""
    return (get_env("TRANSACTIONS_TABLE", "") or "").strip() or _DEFAULT_TRANSACTIONS_TABLE


def seed_source_url() -> str:
    """Return the URL of the JSON feed used to seed the store."""
    return (get_env("SEED_SOURCE_URL", "") or "").strip() or _DEFAULT_SEED_SOURCE_URL


def seed_fetch_timeout_seconds() -> float:
    """Return the timeout applied to the seed feed request."""
    timeout = _get_float("SEED_FETCH_TIMEOUT_SECONDS", _DEFAULT_SEED_FETCH_TIMEOUT_SECONDS)
    return timeout if timeout > 0 else _DEFAULT_SEED_FETCH_TIMEOUT_SECONDS


def api_host() -> str:
    return (get_env("API_HOST", "") or "").strip() or "0.0.0.0"


def api_port() -> int:
    return _get_int("API_PORT", _DEFAULT_API_PORT)


def log_level() -> str:
    """Return the root logging level name."""
    return (get_env("LOG_LEVEL", "INFO") or "INFO").strip().upper() or "INFO"
