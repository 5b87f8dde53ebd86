"""
LSPI Admin Backend - Main FastAPI Application
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.api.routes import articles, auth, dashboard, tags, users
from app.exceptions import (
    AuthErrorCode,
    AuthServiceError,
    NotWhitelistedError,
    PermissionDeniedError,
    RegistrationError,
    SessionRevokedError,
    ValidationError,
)
from app.services.auth_service import AuthService
from app.services.deploy_hook import deploy_hook
from app.services.session_service import SessionEvent, SessionProvider

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def log_session_event(event: SessionEvent) -> None:
    logger.info("Session %s for %s", event.state.value, event.uid)


# Define lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events"""
    logger.info("Starting %s v%s (debug=%s)", settings.APP_NAME, settings.APP_VERSION, settings.DEBUG)

    provider = SessionProvider()
    provider.start()
    unsubscribe = provider.subscribe(log_session_event)
    app.state.session_provider = provider
    app.state.auth_service = AuthService(provider)

    yield

    # Shutdown
    logger.info("Shutting down %s", settings.APP_NAME)
    unsubscribe()
    provider.stop()
    await deploy_hook.drain()


# Create FastAPI application with lifespan
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="LSPI Admin Backend API - articles, tags and staff accounts",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


def _error(status_code: int, detail: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, **extra})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(PermissionDeniedError)
async def permission_error_handler(request: Request, exc: PermissionDeniedError):
    # Backend refusals are not differentiated to the user
    logger.info("Permission denied on %s: %s", request.url.path, exc)
    return _error(status.HTTP_403_FORBIDDEN, "Terjadi kesalahan: akses ditolak.")


@app.exception_handler(NotWhitelistedError)
async def not_whitelisted_handler(request: Request, exc: NotWhitelistedError):
    return _error(status.HTTP_403_FORBIDDEN, str(exc), code="not-whitelisted")


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    status_code = {
        AuthErrorCode.EMAIL_ALREADY_IN_USE: status.HTTP_409_CONFLICT,
        AuthErrorCode.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
        AuthErrorCode.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    }.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return _error(status_code, str(exc), code=exc.code.value)


@app.exception_handler(SessionRevokedError)
async def session_revoked_handler(request: Request, exc: SessionRevokedError):
    return _error(
        status.HTTP_401_UNAUTHORIZED,
        "Akun Anda tidak lagi memiliki akses. Silakan hubungi Admin.",
        code="session-revoked",
    )


@app.exception_handler(AuthServiceError)
async def auth_service_error_handler(request: Request, exc: AuthServiceError):
    if exc.code in (AuthErrorCode.INVALID_CREDENTIALS, AuthErrorCode.INVALID_EMAIL):
        return _error(
            status.HTTP_401_UNAUTHORIZED,
            "Email atau password salah. Silakan coba lagi.",
            code=exc.code.value,
        )
    if exc.code == AuthErrorCode.WEAK_PASSWORD:
        return _error(status.HTTP_400_BAD_REQUEST, "Password minimal 6 karakter.", code=exc.code.value)
    logger.error("Auth service error on %s: %s", request.url.path, exc)
    return _error(status.HTTP_502_BAD_GATEWAY, "Layanan autentikasi tidak tersedia.", code=exc.code.value)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "message": str(exc) if settings.DEBUG else "An error occurred",
        },
    )


app.include_router(auth.router)
app.include_router(articles.router)
app.include_router(tags.router)
app.include_router(users.router)
app.include_router(dashboard.router)


# Health check endpoint
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check"""
    return {
        "status": "online",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check endpoint"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "debug_mode": settings.DEBUG,
        "firebase_configured": bool(
            settings.FIREBASE_CREDENTIALS_JSON
            or settings.FIREBASE_EMULATOR_HOST
            or settings.FIREBASE_CREDENTIALS_PATH
        ),
        "identity_toolkit_configured": bool(settings.FIREBASE_WEB_API_KEY),
        "deploy_hook_configured": bool(settings.DEPLOY_HOOK_URL),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG
    )
