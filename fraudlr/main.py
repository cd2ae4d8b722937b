"""
Fraudlr backend API
Authentication, sessions, cases, integrations and subscriptions.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fraudlr.api.routes import auth, cases, integrations, users
from fraudlr.core.config import INSECURE_DEV_SECRET, Settings, get_settings
from fraudlr.core.exceptions import FraudlrError, InternalError, ValidationError
from fraudlr.db.base import Base
from fraudlr.db.session import build_engine, build_session_factory
from fraudlr.utils.auth import SessionTokens, configure_password_hashing
# Import all models to ensure they're registered with Base
import fraudlr.models  # noqa: F401

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )


def run_migrations(database_url: str) -> None:
    """Run Alembic migrations. Fails startup if they fail, so the DB is never left out of sync."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found, skipping Alembic migrations")
        return
    try:
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
        alembic_cfg.attributes["database_url"] = database_url
        # Logging is already configured by the app
        alembic_cfg.attributes["skip_logging_config"] = True
        command.upgrade(alembic_cfg, "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FraudlrError)
    async def fraudlr_error_handler(request: Request, exc: FraudlrError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ValidationError("Invalid request body").to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # Details stay in the log; the client only sees a generic message
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=InternalError().to_dict(),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    configure_password_hashing(settings.BCRYPT_ROUNDS)

    engine = build_engine(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.RUN_MIGRATIONS:
            logger.info("Running Alembic migrations...")
            run_migrations(settings.DATABASE_URL)
        else:
            logger.info("Creating database tables...")
            Base.metadata.create_all(bind=engine)
        yield
        engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.session_tokens = SessionTokens(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime=settings.token_lifetime,
    )

    if not settings.is_production and settings.JWT_SECRET == INSECURE_DEV_SECRET:
        logger.warning("Using the insecure development JWT_SECRET; set JWT_SECRET before deploying")

    register_exception_handlers(app)

    # Cookies carry the session, so credentials must be allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(cases.router, prefix="/api", tags=["Cases"])
    app.include_router(integrations.router, prefix="/api", tags=["Integrations"])

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()
