"""
Face Attendance API - Main Entry Point

FastAPI application factory.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from face_attendance.core.config import Settings, VERSION, get_settings
from face_attendance.core.exceptions import AppException
from face_attendance.core.logging import get_logger, log_error, log_request, log_response, setup_logging
from face_attendance.core.responses import ApiResponse
from face_attendance.infrastructure.store import Store, create_store
from face_attendance.routers import attendance, identities, recognition, set_services
from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.enrollment import EnrollmentService
from face_attendance.services.face_embedder import FaceEmbedder, create_embedder
from face_attendance.services.gallery import Gallery
from face_attendance.services.matcher import Matcher
from face_attendance.services.recognition import RecognitionService

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    embedder: Optional[FaceEmbedder] = None,
) -> FastAPI:
    """
    Build the application.
    Store and embedder default to the configured backends.
    """
    settings = settings or get_settings()
    setup_logging(level="DEBUG" if settings.debug else "INFO")

    # ============================================================
    # Service Initialization (Dependency Injection)
    # ============================================================

    logger.info(f"Starting Face Attendance API v{VERSION}")

    # 1. Store and embedder
    store = store or create_store(settings)
    embedder = embedder or create_embedder(settings)
    logger.info(f"✓ Store backend: {store.backend}, embedder: {embedder.name}")

    # 2. Domain services
    gallery = Gallery(store.identities, embedding_dim=settings.embedding_dim)
    ledger = AttendanceLedger(store.attendance, tz=settings.timezone)
    enrollment = EnrollmentService(gallery, embedder, store.images, max_image_bytes=settings.max_image_bytes)
    recognition_service = RecognitionService(
        gallery, Matcher(), ledger, default_threshold=settings.match_threshold
    )

    # 3. Removal cascade: attendance records, then the profile image
    gallery.on_remove(ledger.on_identity_removed)
    gallery.on_remove(enrollment.on_identity_removed)

    # 4. Inject services into routers
    set_services(gallery, ledger, enrollment, recognition_service)
    logger.info("✓ Service instances injected into routers")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await embedder.initialize()
        yield

    # ============================================================
    # Application Setup
    # ============================================================

    app = FastAPI(
        title="Face Attendance API",
        description="Face recognition gallery with once-per-day attendance",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        redirect_slashes=False,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        start = time.perf_counter()
        log_request(logger, request.method, request.url.path, request_id=request_id)
        response = await call_next(request)
        log_response(logger, response.status_code, (time.perf_counter() - start) * 1000, request_id=request_id)
        response.headers["X-Request-ID"] = request_id
        return response

    # ============================================================
    # Global Exception Handlers
    # ============================================================

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """
        Handle all custom AppException and subclasses.
        Returns unified ApiResponse format.
        """
        logger.warning(f"AppException: {exc.code} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse.from_exception(exc).model_dump(mode="json")
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies, forms and parameters are 400 VALIDATION_ERROR."""
        errors = [
            {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ]
        first = errors[0] if errors else {"loc": [], "msg": "Invalid request"}
        message = f"{'.'.join(first['loc'])}: {first['msg']}" if first["loc"] else first["msg"]
        logger.warning(f"Request validation failed: {message}")
        return JSONResponse(
            status_code=400,
            content=ApiResponse.fail(
                message=message,
                code="VALIDATION_ERROR",
                meta={"errors": errors},
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.
        Logs full traceback and returns generic error.
        """
        log_error(logger, exc, context=f"{request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=ApiResponse.fail(
                message="Internal server error",
                code="INTERNAL_ERROR"
            ).model_dump()
        )

    # ============================================================
    # Root Endpoints
    # ============================================================

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.
        Returns service status and embedder readiness.
        """
        return ApiResponse.ok({
            "status": "healthy",
            "version": VERSION,
            "embedder_state": embedder.state.value,
            "store_backend": store.backend,
        })

    # ============================================================
    # Router Registration
    # ============================================================

    app.include_router(identities.router, prefix="/identities", tags=["identities"])
    app.include_router(recognition.router, prefix="/recognitions", tags=["recognition"])
    app.include_router(attendance.router, prefix="/attendance", tags=["attendance"])

    logger.info("Application setup complete")
    return app


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "face_attendance.main:create_app",
        factory=True,
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
