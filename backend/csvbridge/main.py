from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from csvbridge.core.config import settings
from csvbridge.core.logging import configure_logging, logger
from csvbridge.api.router import api_router
from csvbridge.db.session import engine
from csvbridge.db.base import Base
import csvbridge.db.models  # noqa: F401
from csvbridge.services.files import ensure_dirs
from csvbridge.services.seed import seed_admin


def _cors_origins() -> list[str]:
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    return origins or ["*"]


def create_app() -> FastAPI:
    configure_logging(settings.ENV, settings.LOG_LEVEL)
    app = FastAPI(title="csvbridge", description="CSV to SQL Server importer", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        if settings.ENV == "test":
            return
        ensure_dirs()
        # dev only; other environments run alembic upgrade head
        if settings.ENV == "dev":
            Base.metadata.create_all(bind=engine)
            if settings.SEED_ADMIN:
                seed_admin()

    logger.info("app_started", env=settings.ENV, remote_driver=settings.REMOTE_DB_DRIVER)
    return app


app = create_app()
