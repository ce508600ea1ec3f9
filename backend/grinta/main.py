import logging
import os

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
import sentry_sdk

from .routers import admin, challenges, matches
from .exceptions import DomainException, ProblemDetail
from .config import API_PREFIX, parse_number

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _init_sentry() -> None:
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not set; settlement errors are only logged locally.")
        return

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        traces_sample_rate=parse_number("SENTRY_TRACES_SAMPLE_RATE", 0.0, float),
    )
    logger.info("Sentry enabled (environment=%s)", environment or "default")


def _allowed_origins() -> list[str]:
    """Explicit CORS origins from ``ALLOWED_ORIGINS``; wildcards are refused."""

    raw = os.getenv("ALLOWED_ORIGINS", "").strip()
    if not raw:
        raise ValueError(
            "ALLOWED_ORIGINS must list the trusted front-end origins, comma separated."
        )
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if not origins:
        raise ValueError("ALLOWED_ORIGINS must contain at least one non-empty origin.")
    if "*" in origins:
        raise ValueError("ALLOWED_ORIGINS cannot include '*'; credentials are allowed.")
    return origins


def _problem_response(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(),
        media_type=PROBLEM_JSON,
    )


_init_sentry()
ALLOWED_ORIGINS = _allowed_origins()

app = FastAPI(
    title="Grinta Settlement API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

logger.info("Serving settlement API under %r", API_PREFIX)


@app.get("/healthz", tags=["health"])  # unprefixed for uptime checks
def root_healthz():
    return {"status": "ok"}


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if exc.status_code >= 409:
        logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.code, exc.detail)
    return _problem_response(
        ProblemDetail(
            type=exc.type,
            title=exc.title,
            detail=exc.detail,
            status=exc.status_code,
            code=exc.code,
        )
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem_response(
        ProblemDetail(
            title=detail,
            detail=detail,
            status=exc.status_code,
            code=getattr(exc, "code", f"http_{exc.status_code}"),
        )
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return _problem_response(
        ProblemDetail(
            title="Internal Server Error",
            status=500,
            detail=str(exc),
            code="internal_server_error",
        )
    )


api_router = APIRouter(prefix=API_PREFIX)


@api_router.get("/healthz", tags=["health"])
def api_healthz():
    return {"status": "ok"}


v0_router = APIRouter(prefix="/v0")
for module in (matches, challenges, admin):
    v0_router.include_router(module.router)

api_router.include_router(v0_router)
app.include_router(api_router)
