import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so every table is registered with Base before create_all
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, BOOKING_LOCK_BACKEND, BOOKING_LOCK_TIMEOUT_SECONDS
from .database import Base, engine
from .domain.appointments.locks import get_staff_locks
from .domain.appointments.router import router as appointments_router
from .domain.catalog.router import router as catalog_router
from .domain.clients.router import router as clients_router
from .domain.scheduling.router import router as scheduling_router
from .domain.tenants.router import router as tenants_router
from .domain.waitlist.router import router as waitlist_router
from .errors import BookingError, ConflictError, ErrorKind, NotFoundError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    # Connect the lock backend up front so a bad REDIS_URL fails at startup
    get_staff_locks()
    logger.info(f"Booking locks ready ({BOOKING_LOCK_BACKEND})")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Booking Platform API", version="1.0.0", lifespan=lifespan)


def status_code_for(exc: BookingError) -> int:
    """HTTP status of a domain error"""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    if exc.kind == ErrorKind.BOOKING_LOCK_TIMEOUT:
        return 503
    return 400


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    status_code = status_code_for(exc)
    headers = None
    if exc.retryable:
        headers = {"Retry-After": str(max(1, int(BOOKING_LOCK_TIMEOUT_SECONDS)))}
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} - {exc.kind.value}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.kind.value},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "error": ErrorKind.VALIDATION_FAILED.value},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Routes
app.include_router(tenants_router)
app.include_router(catalog_router)
app.include_router(scheduling_router)
app.include_router(clients_router)
app.include_router(appointments_router)
app.include_router(waitlist_router)


@app.get("/")
def root():
    return {"message": "Booking Platform API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
