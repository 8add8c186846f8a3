from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from coopledger.api import auth, admin, contributions, dashboard, members, loans, ai
from coopledger.core.config import settings
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info("Starting Cooperative Ledger API")

API_VERSION = "1.0.0"

app = FastAPI(
    title="Cooperative Ledger API",
    description=settings.SOCIETY_NAME,
    version=API_VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "*"],  # Frontend URLs - allow all for dev
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Include routers
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(contributions.router)
app.include_router(dashboard.router)
app.include_router(members.router)
app.include_router(loans.router)
app.include_router(ai.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Cooperative Ledger API", "version": API_VERSION}


@app.get("/api/health")
def health_check():
    """Health check endpoint - checks API and database connectivity."""
    from coopledger.db.base import SessionLocal
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from datetime import datetime, timezone

    db_status = "unreachable"
    db_error = None
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_error = str(e)
    finally:
        db.close()

    status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": status,
        "version": API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "ok",
            "database": db_status,
        },
        **({"database_error": db_error} if db_error else {})
    }
