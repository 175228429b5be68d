"""
Users API Server
CRUD operations over the users collection in MongoDB
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from config.settings import ALLOWED_ORIGINS, LOG_LEVEL, PORT
from database.connection import init_database, close_database
from api.routes import health, users
from utils.error_handling import setup_error_handling

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def log_endpoints(app: FastAPI):
    """Log every mounted user endpoint"""
    logger.info(f"Server running on http://localhost:{PORT}")
    logger.info("API Endpoints available under /users:")
    for route in app.routes:
        if isinstance(route, APIRoute) and route.path.startswith("/users"):
            for method in sorted(route.methods):
                logger.info(f"  - {method} {route.path}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager; a failed connection aborts startup"""
    await init_database()
    log_endpoints(app)
    yield
    await close_database()

# FastAPI app initialization
app = FastAPI(
    title="Users API",
    description="REST API exposing CRUD operations over User records",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Setup centralized error handling
setup_error_handling(app)

# Include API routes
app.include_router(health.router, tags=["Health"])
app.include_router(users.router, prefix="/users", tags=["Users"])
