"""
Configuration settings for the Users API
"""

import os
import logging

logger = logging.getLogger(__name__)

# Environment configuration
MONGO_URI = os.getenv("MONGO_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME")  # Falls back to the database named in MONGO_URI
USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")
MONGO_SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000))
PORT = int(os.getenv("PORT", 5000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS settings
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "").split(",") if origin.strip()]

# Validate required environment variables
if not MONGO_URI:
    raise ValueError("MONGO_URI environment variable is required")

logger.info(f"Users collection: {USERS_COLLECTION}")
