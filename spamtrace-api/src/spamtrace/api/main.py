"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from spamtrace.domain.errors import InputValidationError, ScanError
from spamtrace.infrastructure import configure_logging, get_settings

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"IMAP endpoint: {settings.imap_address}, folder: {settings.spam_folder}")

    yield

    logger.info("Shutdown complete")


def _error_body(category: str, detail: str) -> dict[str, str]:
    return {"category": category, "detail": detail}


async def scan_error_handler(request: Request, exc: ScanError) -> JSONResponse:
    status_code = 400 if isinstance(exc, InputValidationError) else 500
    if status_code == 500:
        logger.error(f"Scan failed ({exc.category}): {exc.detail}")
    return JSONResponse(status_code=status_code, content=_error_body(exc.category, exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(InputValidationError.category, problems or "Invalid request body"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=_error_body("internal", "Internal server error"))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Trace sender IPs of unread spam and geolocate them",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ScanError, scan_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    from spamtrace.api.routes import router

    app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "spamtrace.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )


# Create app instance
app = create_app()
