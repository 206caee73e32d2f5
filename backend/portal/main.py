from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from portal import __version__
from portal.core.config import settings
from portal.core.database import init_db, close_db
from portal.core.exceptions import PortalError
from portal.core.logging_config import logger
from portal.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from portal.core.rate_limiter import limiter, rate_limit_exceeded_handler
from portal.api.router import api_router
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
import portal.models  # Import models so metadata knows about them


def validate_config() -> None:
    """Refuse to start in production with default secrets; warn elsewhere"""
    problems = []
    if not settings.SECRET_KEY or settings.SECRET_KEY == "CHANGE_ME":
        problems.append("SECRET_KEY is not set or using default value")
    if not settings.SESSION_SECRET_KEY or settings.SESSION_SECRET_KEY == "CHANGE_ME":
        problems.append("SESSION_SECRET_KEY is not set or using default value")
    if not settings.SMS_API_KEY:
        logger.warning("[Startup] SMS_API_KEY not set - OTP codes will not be delivered")

    if problems and settings.is_production():
        for problem in problems:
            logger.critical(f"[Startup] CRITICAL: {problem}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(problems)}")
    for problem in problems:
        logger.warning(f"[Startup] WARNING: {problem}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")
    validate_config()
    await init_db()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Student portal: phone login, jobs, tasks, skills and certificates",
    version=__version__,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes, wrong methods and other framework errors in the portal error shape"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "code": "VALIDATION_ERROR",
            "details": jsonable_errors(exc),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


app.include_router(api_router, prefix="/api")


def run():
    import uvicorn
    uvicorn.run(
        "portal.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
