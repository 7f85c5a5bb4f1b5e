"""
InternHub - Main Application

FastAPI backend with:
- PostgreSQL (SQLAlchemy) as the primary store
- MongoDB as the document store and fallback
- JWT authentication

Run: uvicorn internhub.main:app --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from internhub.api.routes import api_router
from internhub.core.config import get_settings
from internhub.core.exceptions import register_exception_handlers
from internhub.core.log_config import configure_logging
from internhub.db.mongodb import init_mongo_indexes, test_mongo_connection
from internhub.db.postgres import init_relational_schema, test_postgres_connection

settings = get_settings()
configure_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="InternHub",
    description="""
    An internship marketplace.

    ## Features
    - **Authentication**: JWT-based auth for students, company admins and superadmins
    - **Companies**: Company pages with superadmin moderation
    - **Internships**: Search, post, bookmark
    - **Applications**: Apply, review, withdraw
    - **Notifications**: Status changes and new applications

    ## Databases
    - PostgreSQL: primary store
    - MongoDB: legacy documents and fallback writes
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create the relational schema and MongoDB indexes on startup."""
    try:
        init_relational_schema()
    except Exception as e:
        logger.warning("Relational schema initialization failed: %s", e)
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    primary = test_postgres_connection()
    document = test_mongo_connection()
    return {
        "status": "healthy" if primary or document else "unhealthy",
        "postgres": "connected" if primary else "disconnected",
        "mongodb": "connected" if document else "disconnected"
    }
