import logging
import time
from contextlib import asynccontextmanager

import admin_routes
import auth
import auth_routes
import config
import database
import models
import redirects
import url_routes
from errors import install_error_handlers
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from rate_limit import RateLimit, api_limiter, redirect_limiter

# --- Logging ---
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("snaplinks")

# --- DB tables ---
models.Base.metadata.create_all(bind=database.engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = database.SessionLocal()
    try:
        auth.ensure_admin(db)
    finally:
        db.close()
    logger.info("SnapLinks started (env=%s, base=%s)", config.ENVIRONMENT, config.PUBLIC_BASE_URL)
    yield


app = FastAPI(
    title="SnapLinks",
    description="Create short links, track clicks, and manage them from a dashboard.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- CORS (allow frontend dev servers, etc.) ---
origins = ["*"] if config.ENVIRONMENT == "dev" else [config.CLIENT_ORIGIN]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# --- Request log: METHOD path status elapsed ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    if request.url.path != "/api/health":
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s %s %.1f ms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response

# Health check (useful for uptime monitors & load balancers)
@app.get("/api/health", include_in_schema=False, dependencies=[Depends(RateLimit(api_limiter))])
def health():
    return {"status": "ok", "env": config.ENVIRONMENT}

# ---------- API ----------
app.include_router(auth_routes.router)
app.include_router(url_routes.router)
app.include_router(admin_routes.router)

# Redirect /{short_id}; registered last so it never shadows /api or /docs
@app.get("/{short_id}", include_in_schema=False, dependencies=[Depends(RateLimit(redirect_limiter))])
def redirect_short_url(short_id: str, db=Depends(database.get_db)):
    link = redirects.resolve_and_track(db, short_id)
    return RedirectResponse(url=link.original_url, status_code=307)
