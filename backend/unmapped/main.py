from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .database.session import init_db
from .dependencies import get_services
from .routers import badges, game, multiplayer, players
from .logger import get_logger

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events for the application."""
    # Startup: Initialize database
    await init_db()
    logger.info("Database ready")
    yield
    # Shutdown: stop every clock that is still ticking
    app.dependency_overrides.get(get_services, get_services)().close()


# Create FastAPI application
app = FastAPI(
    title="Unmapped",
    description="Location-guessing game that scores how far off you are in shame points",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(game.router, prefix="/api")
app.include_router(multiplayer.router, prefix="/api")
app.include_router(players.router, prefix="/api")
app.include_router(badges.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Unmapped API",
        "docs": "/docs",
        "health": "ok"
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
