"""FastAPI application entry point."""

import logging
import tomllib
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from importlib import metadata
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapter.sql.connection import Database
from adapter.sql.user_repository import SqlUserRepository
from api.errors import register_exception_handlers
from api.middleware import setup_middleware
from api.responses import success
from api.routes import users
from services.credential_service import CredentialService
from utils.config import Settings, load_settings
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "User Management API"
DISTRIBUTION_NAME = "user-management-api"


def _read_version() -> str:
    """pyproject.toml is the single source of truth; fall back to installed metadata."""
    pyproject = Path(__file__).parent.parent.parent / "pyproject.toml"
    try:
        with open(pyproject, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except FileNotFoundError:
        return metadata.version(DISTRIBUTION_NAME)


VERSION = _read_version()


def _configure_cors(app: FastAPI, cors_origins_env: str) -> None:
    # Browsers reject credentials with a wildcard origin
    if cors_origins_env == "*":
        cors_origins = ["*"]
        allow_credentials = False
        logger.warning(
            "CORS configured with wildcard origin ('*'). "
            "For production, set CORS_ORIGINS to specific domains (e.g., 'https://app.example.com')"
        )
    else:
        cors_origins = [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
        allow_credentials = True
        logger.info("CORS configured with specific origins", extra={"origins": cors_origins})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Pass settings explicitly in tests."""
    settings = settings or load_settings()
    setup_structured_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store at startup and close it at shutdown."""
        database = Database(settings.database_url)
        database.init()
        app.state.user_repo = SqlUserRepository(database)
        logger.info("Service started", extra={"service": SERVICE_NAME, "version": VERSION})

        yield  # App runs here

        app.state.user_repo = None
        database.close()
        logger.info("Service stopped", extra={"service": SERVICE_NAME})

    app = FastAPI(
        title=SERVICE_NAME,
        description="CRUD user management with bearer-token authentication",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_repo = None
    app.state.credentials = CredentialService(
        settings.signing_key,
        expiration=timedelta(hours=settings.jwt_expiration_hours),
        bcrypt_rounds=settings.bcrypt_rounds,
    )

    setup_middleware(app)
    _configure_cors(app, settings.cors_origins)
    register_exception_handlers(app)
    app.include_router(users.router)

    @app.get("/")
    async def root():
        """Liveness and version info."""
        return success(
            data={
                "version": VERSION,
                "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            },
            message=f"{SERVICE_NAME} is running",
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Requests are logged by our middleware, so uvicorn's access log stays off
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=app.state.settings.port,
        access_log=False,
    )
