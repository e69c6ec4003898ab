import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.core.config import get_settings
from app.core.database import engine, Base
from app.api import leaderboard, rules, seasons

# Import all models so Base.metadata is populated for create_all
import app.models.models  # noqa: F401

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create_all skips existing tables
    logger.info("Starting up, creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready.")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Fantasy draft scoring engine for elimination reality shows: rule packs, weekly council, bonus games and leaderboards.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS: open for the commissioner console and public leaderboard pages
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(seasons.router)
app.include_router(rules.router)
app.include_router(leaderboard.router)


@app.get("/health")
async def health():
    return {"status": "healthy"}
