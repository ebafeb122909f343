"""
CricTourney - Fantasy Cricket Tournament Simulation API
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crictourney import __version__
from crictourney.config import settings
from crictourney.database import init_db
from crictourney.api.tournament import router as tournament_router
from crictourney.api.match import router as match_router
from crictourney.api.auction import router as auction_router
from crictourney.api.deps import sessions

logging.basicConfig(level=settings.LOG_LEVEL)

# Initialize FastAPI app
app = FastAPI(
    title="CricTourney",
    description="Fantasy Cricket Tournament Simulation API",
    version=__version__,
)

# CORS origins - configurable via environment variable
default_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

if settings.CORS_ORIGINS:
    default_origins.extend([o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournament_router, prefix="/api")
app.include_router(match_router, prefix="/api")
app.include_router(auction_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    init_db()


@app.on_event("shutdown")
def shutdown_event():
    """Stop any auto simulation timers"""
    for manager in sessions.values():
        manager.shutdown()


@app.get("/")
def root():
    """Health check endpoint"""
    return {
        "name": "CricTourney API",
        "version": __version__,
        "status": "running",
    }


@app.get("/api/health")
def health_check():
    """API health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
