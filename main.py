"""
EffectivO backend entry point.

One FastAPI app on one asyncio event loop. The lifespan builds the mail
transport once at startup and disposes of the database engine on shutdown.

Run with: python main.py [--port PORT]
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config
from core.database import close_engine
from core.notifications.channels.email import create_mailer
from web_api.routes.calendar_invites import router as calendar_invites_router
from web_api.routes.next_actions import router as next_actions_router

logging.basicConfig(
    level=config.get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if config.get_sentry_dsn():
    sentry_sdk.init(dsn=config.get_sentry_dsn(), traces_sample_rate=0.1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Builds the SendGrid mailer from configuration so request handlers get an
    explicit transport handle instead of reading the environment themselves.
    """
    ok, messages = config.check_required_env_vars()
    for message in messages:
        logger.warning(message)
    if not ok:
        raise RuntimeError("Missing required environment variables")

    app.state.mailer = create_mailer(
        api_key=config.get_sendgrid_api_key(),
        from_email=config.get_from_email(),
        from_name=config.get_from_name(),
    )

    yield

    logger.info("Shutting down...")
    await close_engine()  # Close database connections


app = FastAPI(
    title="EffectivO API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors: 400 with an error string."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    message = f"Invalid request: {location}: {detail}" if location else f"Invalid request: {detail}"
    return JSONResponse({"error": message}, status_code=400)


# Include routers
app.include_router(calendar_invites_router)
app.include_router(next_actions_router)


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/health")
async def health():
    """Health check endpoint with mail transport status."""
    mailer = getattr(app.state, "mailer", None)
    return {
        "status": "healthy",
        "mail_configured": bool(mailer and mailer.client),
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="EffectivO API Server")
    parser.add_argument(
        "--port",
        type=int,
        default=config.get_api_port(),
        help="Port to run the server on (default: 8000)",
    )
    args = parser.parse_args()

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
