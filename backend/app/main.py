"""
FuelEU Compliance Ledger - FastAPI Application

Main entry point for the compliance ledger backend.

Architecture:
- Route telemetry → Compliance Calculator → Compliance Balance (CB)
- CB → Banking ledger (append-only bank entries)
- CBs of several ships → Pool Allocator → validated pool (Article 21)
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import routes_router, compliance_router, banking_router, pools_router
from .database import init_db

# Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8001"))

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    logger.info("Database initialised")
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="FuelEU Compliance Ledger",
    description="""
    FuelEU Compliance Ledger - Compliance Balance, Banking and Pooling

    Stores vessel routes, computes each ship's compliance balance against the
    FuelEU target intensity, and manages banking and Article 21 pooling.

    ## Flow
    1. **Routes**: emissions data per route, one baseline route for comparison
    2. **Compliance**: CB = (89.3368 - GHG intensity) × fuel × 41000 MJ/t
    3. **Banking**: bank surplus, apply it later (append-only ledger)
    4. **Pooling**: greedy redistribution of surplus to deficits

    ## Key Principles
    - Pool balances are always re-derived from stored data
    - Pools are created atomically and never edited
    - Exactly one baseline route at a time
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(routes_router)
app.include_router(compliance_router)
app.include_router(banking_router)
app.include_router(pools_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "FuelEU Compliance Ledger",
        "version": "1.0.0",
        "description": "Compliance balance, banking and pooling",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m app.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
