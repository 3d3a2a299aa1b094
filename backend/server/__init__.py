"""Server — FastAPI app creation, middleware, startup."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.config import ALLOWED_ORIGINS, LOG_LEVEL
from server.database import init_db

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from auth.routes import router as auth_router
from users.routes import router as users_router
from plans.routes import router as plans_router
from resources.routes import router as resources_router
from brain.routes import router as brain_router

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup: initializing database")
    init_db()
    yield
    logger.info("Application shutdown")


app = FastAPI(title="ExamBridge API", version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=ALLOWED_ORIGINS != ["*"],
)


# ─── API routes ──────────────────────────────────────────────
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(users_router, tags=["users"])
app.include_router(plans_router, tags=["plans"])
app.include_router(resources_router, tags=["resources"])
app.include_router(brain_router, tags=["brain"])


@app.get("/health")
def health_check():
    return {"status": "ok", "version": APP_VERSION}
