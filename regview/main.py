import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from regview.api import auth, health, registry
from regview.core.config import settings
from regview.core.errors import RegistryError
from regview.core.logging_config import configure_logging
from regview.schemas.response import ApiResponse
from regview.services.registry_service import RegistryService

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Log level: {settings.LOG_LEVEL}")
    RegistryService.get_instance()
    logger.info(f"{settings.PROJECT_NAME} started, upstream registry: {settings.REGISTRY_URL}")
    yield
    # Shutdown
    logger.info(f"{settings.PROJECT_NAME} shutting down, closing registry client...")
    await RegistryService.shutdown()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Read API over a container image registry",
    version="0.1.0",
    lifespan=lifespan
)

# Every error leaves the API in the same envelope as successful responses
@app.exception_handler(RegistryError)
async def registry_exception_handler(request: Request, exc: RegistryError):
    logger.error(f"[REGISTRY ERROR] on {request.url.path}: {exc.status_code} {exc.message}")
    return ApiResponse.error(exc.status_code, exc.message).to_response()

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    response = ApiResponse.error(exc.status_code, message).to_response()
    if exc.headers:
        response.headers.update(exc.headers)
    return response

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"[VALIDATION ERROR] on {request.url}: {exc.errors()}")
    return ApiResponse(
        status=422,
        message="Invalid request",
        data=jsonable_encoder(exc.errors()),
    ).to_response()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Accept", "Content-Type"],
)

app.include_router(health.router, prefix=f"{settings.API_V1_STR}/health", tags=["health"])
app.include_router(auth.router, prefix=settings.API_V1_STR, tags=["auth"])
app.include_router(registry.router, prefix=f"{settings.API_V1_STR}/registry", tags=["registry"])

# Built frontend, served last so API routes take precedence
if os.path.isdir(settings.STATIC_DIR):
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
