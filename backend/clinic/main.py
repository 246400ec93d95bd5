from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from clinic.config.settings import settings
from clinic.core.errors import (
    ClinicError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
)
from clinic.db.base import get_engine, get_session_factory
from clinic.db.session import set_global_session_factory

# -------------------------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application start-up & shutdown hooks."""
    # ------------------------------------------------------------------ start‑up -----
    logger.info("Application startup …")

    engine = None
    try:
        logger.info("Initializing Database Engine...")
        engine = await get_engine(str(settings.database_url), echo=settings.database_echo)
        app.state.engine = engine
        logger.info("DB engine ready and stored in app state.")

        session_factory = await get_session_factory(engine)
        app.state.session_factory = session_factory
        set_global_session_factory(session_factory)
        logger.info("DB session factory ready (globally accessible).")
    except Exception as e:
        logger.critical(
            f"CRITICAL ERROR DURING STARTUP INITIALIZATIONS: {e}", exc_info=True
        )
        if engine:  # Attempt to clean up engine if it was created
            try:
                await engine.dispose()
                logger.info("Disposed engine after startup failure.")
            except Exception as dispose_e:
                logger.error(
                    f"Error disposing engine after startup failure: {dispose_e}"
                )
        raise  # Re-raise the exception to stop the Uvicorn server from starting fully

    # ------------------------------------------------ give control back
    yield

    # ------------------------------------------------ shutdown --------
    logger.info("Application shutdown …")
    if engine:
        try:
            await engine.dispose()
            logger.info("DB engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")

    logger.info("Shutdown complete")


# -------------------------------------------------------------------------------------
# Error translation
# -------------------------------------------------------------------------------------
_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(exc: ClinicError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Clinic Services", lifespan=lifespan)

    # CORS ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o) for o in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ClinicError, clinic_error_handler)

    @app.get("/health")
    async def health_check(request: Request):
        engine = getattr(request.app.state, "engine", None)
        return {"status": "ok", "database": "configured" if engine else "not configured"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting clinic services")
    uvicorn.run("clinic.main:app", host="0.0.0.0", port=8000)
