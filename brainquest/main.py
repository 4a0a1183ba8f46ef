# FastAPI entry point; wires the quiz engine to HTTP routes and the database
# brainquest/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import os
import sys

# Add project root to sys.path to allow for absolute imports
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Import routers and services
from brainquest.endpoints import (
    questions as questions_router,
    quiz as quiz_router,
    bosses as bosses_router,
    users as users_router,
    challenges as challenges_router,
)
from brainquest.services import session_registry
from brainquest.services.question_service import question_service
from brainquest.utils.config import settings
from brainquest.utils.logger import logger
from brainquest.utils.db import engine
from brainquest.models.user import Base

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("BrainQuest API starting up...")

    # Create database tables if they don't exist
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Loading question templates...")
    question_service.load_templates(settings.template_dir)
    logger.info(f"Generators ready for: {[t.value for t in question_service.available_topics()]}")

    logger.info("Startup complete.")
    yield
    # On shutdown
    logger.info("BrainQuest API shutting down...")
    # No background work may outlive its session
    session_registry.clear()

# --- FastAPI App Initialization ---
app = FastAPI(
    title="BrainQuest API",
    description="Quiz progression engine: generated questions, XP, levels, streaks and boss battles.",
    version="1.0.0",
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your frontend's domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Routers ---
app.include_router(questions_router.router, prefix="/questions", tags=["Questions"])
app.include_router(quiz_router.router, prefix="/quiz", tags=["Quiz"])
app.include_router(bosses_router.router, prefix="/bosses", tags=["Bosses"])
app.include_router(bosses_router.battles_router, prefix="/battles", tags=["Bosses"])
app.include_router(users_router.router, prefix="/users", tags=["Users"])
app.include_router(challenges_router.router, prefix="/challenges", tags=["Challenges"])

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {"message": "Welcome to the BrainQuest API"}
