"""
Centralized configuration for the EffectivO backend.

Settings come from environment variables (loaded from .env/.env.local by
main.py) and are read through the functions below so tests can patch them.
"""

import os


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Production deploys set APP_ENV=production; missing settings are then fatal."""
    return os.getenv("APP_ENV", "").lower() == "production"


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_frontend_url() -> str:
    """Get frontend URL (the Next.js app that calls this API)."""
    return os.environ.get("FRONTEND_URL", "http://localhost:3000").rstrip("/")


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants for dev and the configured frontend URL.
    """
    hosts = ["localhost", "127.0.0.1"]
    origins = [f"http://{host}:{port}" for host in hosts for port in (3000, 5173)]

    frontend_url = get_frontend_url()
    if frontend_url not in origins:
        origins.append(frontend_url)

    return origins


def get_database_url() -> str | None:
    """PostgreSQL URL in any driver form (postgresql://, postgres://, +asyncpg)."""
    return os.environ.get("DATABASE_URL") or None


def get_db_pool_size() -> int:
    return int(os.getenv("DB_POOL_SIZE", "5"))


def is_sql_echo() -> bool:
    return os.getenv("SQL_ECHO", "").lower() == "true"


def get_sendgrid_api_key() -> str | None:
    return os.environ.get("SENDGRID_API_KEY") or None


def get_from_email() -> str:
    """Sender address for calendar invites."""
    return os.environ.get("FROM_EMAIL", "noreply@effectivo.app")


def get_from_name() -> str:
    return os.environ.get("FROM_NAME", "EffectivO Calendar")


def get_sentry_dsn() -> str | None:
    return os.environ.get("SENTRY_DSN") or None


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("SENDGRID_API_KEY", "SendGrid API key for calendar invite emails", False),
    ("FROM_EMAIL", "Sender address for calendar invites", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production():
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    return not errors, errors + warnings
