import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

# Security - bearer tokens are decoded only to read the tenant claim
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Tenant resolution
TENANT_HEADER = os.getenv("TENANT_HEADER", "X-Tenant-Id")
TENANT_CLAIM = os.getenv("TENANT_CLAIM", "tenantId")

# Booking serialization
# "memory" serializes per staff member inside one process, "redis" across processes
BOOKING_LOCK_BACKEND = os.getenv("BOOKING_LOCK_BACKEND", "memory").lower()
BOOKING_LOCK_TIMEOUT_SECONDS = float(os.getenv("BOOKING_LOCK_TIMEOUT_SECONDS", "10"))
# Upper bound on how long a redis lock survives a crashed holder
BOOKING_LOCK_TTL_SECONDS = int(os.getenv("BOOKING_LOCK_TTL_SECONDS", "30"))
REDIS_URL = os.getenv("REDIS_URL")

# Calendar
UPCOMING_DEFAULT_LIMIT = int(os.getenv("UPCOMING_DEFAULT_LIMIT", "10"))

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")
