"""
Application Settings

Values are read from the environment (and a local .env file) once at import.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

# Photo uploads
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
UPLOAD_URL_PREFIX = "/uploads"
MAX_PHOTO_BYTES = int(os.getenv("MAX_PHOTO_BYTES", str(5 * 1024 * 1024)))
MAX_PHOTOS_PER_REQUEST = int(os.getenv("MAX_PHOTOS_PER_REQUEST", "10"))

# HTTP
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
PORT = int(os.getenv("PORT", "8000"))
API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))

# Listing defaults
DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "USA")
PROPERTY_COLLECTION = "property"
