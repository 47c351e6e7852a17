import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from failseed.auth import routes as auth_router
from failseed.conversation import routes as conversation_router
from failseed.entries import routes as entries_router
from failseed.core.config import CORS_ORIGINS, LOG_LEVEL
from failseed.core.database import Base, engine
from failseed.core.errors import register_exception_handlers

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("failseed")

app = FastAPI(
    title="FailSeed API",
    version="1.0.0",
    description="Backend for FailSeed: reflective conversations that turn failures into growth entries.",
)

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Guest-Session"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - started) * 1000.0
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms")
    return response


register_exception_handlers(app)

# Routers
app.include_router(auth_router.router)
app.include_router(conversation_router.router)
app.include_router(entries_router.router)


@app.get("/api/health", tags=["System"])
def health_route():
    return {"status": "ok"}


# DB Tables
@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
