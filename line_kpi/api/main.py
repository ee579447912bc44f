import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from line_kpi import __version__
from line_kpi.api.routers import chat, kpi
from line_kpi.errors import KpiError, ValidationError


logger = logging.getLogger(__name__)


class HealthStatus(BaseModel):
    status: str
    version: str


app = FastAPI(title="Line KPI API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KpiError)
async def kpi_error_handler(request: Request, exc: KpiError) -> JSONResponse:
    """Render errors with both the ``ok`` and ``status`` discriminators."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "status": "error", "error": exc.code, "message": exc.message},
        headers={"Cache-Control": "no-store, max-age=0"},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed query strings and bodies in the same shape as other errors."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return await kpi_error_handler(request, ValidationError(f"Invalid request: {details}"))


api = APIRouter(prefix="/api")


@api.get("/health")
async def health_check() -> HealthStatus:
    """Return health status of the API."""
    return {"status": "healthy", "version": __version__}


api.include_router(kpi.router)
api.include_router(chat.router)

app.include_router(api)
