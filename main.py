import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from config import settings
from core.errors import (
    ConflictError,
    NotAuthenticatedError,
    NotFoundError,
    PlannerError,
    ScheduleMutationError,
    ValidationError,
)
from services.db import init_models
from api.v1.router import api_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
_LOG = logging.getLogger(__name__)

# most specific first; FormatError is a ValidationError
_STATUS: list[tuple[type[PlannerError], int]] = [
    (ValidationError, 422),
    (NotAuthenticatedError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ScheduleMutationError, 500),
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_models()
    yield


app = FastAPI(title="Meal-Planner API", version="1.0.0", lifespan=lifespan)

# CORS (public demo only – lock down in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlannerError)
async def planner_error(request: Request, exc: PlannerError) -> JSONResponse:
    code = next((c for cls, c in _STATUS if isinstance(exc, cls)), 500)
    if code >= 500:
        _LOG.error("%s %s failed: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if code == 401 else None
    return JSONResponse(status_code=code, content={"detail": str(exc)}, headers=headers)


app.include_router(api_router, prefix="/api/v1")


@app.get("/health", tags=["meta"])
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.env_name}
