# problemlog/main.py
import os
from dotenv import load_dotenv

# Load environment variables from .env BEFORE anything else
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.bootstrap import bootstrap_system
from .core.config import get_settings
from .core.users import auth_backend_cookie, auth_backend_jwt, fastapi_users

from .api.activity import main as activity_main_api
from .api.auth import main as auth_main_api
from .api.complaints import main as complaints_main_api
from .api.dashboard import main as dashboard_main_api
from .api.locations import main as locations_main_api
from .api.mail import main as mail_main_api
from .api.master_data import main as master_data_main_api
from .api.settings import main as settings_main_api
from .api.users import main as users_main_api

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Problem Log System", version=__version__)


# --- Database Initialization ---
@app.on_event("startup")
async def on_startup():
    """Create tables and the first Super Admin when needed."""
    await bootstrap_system()
    logger.info("Database tables initialized")


# ============================================================================
# --- SECURITY: CORS ---
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# --- SECURITY: HTTP SECURITY HEADERS ---
# ============================================================================
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# --- Uploaded branding images ---
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# ============================================================================
# --- GLOBAL EXCEPTION HANDLER ---
# ============================================================================
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


# ============================================================================
# --- FASTAPI USERS ROUTERS ---
# ============================================================================
# Login for API clients (Authorization: Bearer)
app.include_router(
    fastapi_users.get_auth_router(auth_backend_jwt),
    prefix="/auth/jwt",
    tags=["auth"],
)
# Login for the browser console (HttpOnly cookie)
app.include_router(
    fastapi_users.get_auth_router(auth_backend_cookie),
    prefix="/auth/cookie",
    tags=["auth"],
)


# ============================================================================
# --- DOMAIN API ROUTERS ---
# ============================================================================
app.include_router(auth_main_api.router, prefix="/api", tags=["auth"])
app.include_router(complaints_main_api.router, prefix="/api", tags=["complaints"])
app.include_router(dashboard_main_api.router, prefix="/api", tags=["dashboard"])
app.include_router(locations_main_api.router, prefix="/api", tags=["locations"])
app.include_router(mail_main_api.router, prefix="/api", tags=["mail"])
app.include_router(master_data_main_api.router, prefix="/api", tags=["master-data"])
app.include_router(users_main_api.router, prefix="/api", tags=["users"])
app.include_router(settings_main_api.router, prefix="/api", tags=["settings"])
app.include_router(activity_main_api.router, prefix="/api", tags=["activity"])


@app.get("/api/health", tags=["health"])
async def health():
    return {"status": "ok", "version": __version__}
