"""
Runtime configuration.
Reads the process environment (and a local .env file) once at import.
"""

import os
from typing import Dict, Any

from dotenv import load_dotenv

# Load .env only once here
load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Dict[str, Any]:
    """
    Build the settings mapping consumed by the app factory.

    Returns:
        dict: Upper-case keys suitable for `app.config.update()`.
    """
    return {
        "DB_CONNECTION_STRING": os.getenv("DB_CONNECTION_STRING", "mongodb://localhost:27017/"),
        "DB_NAME": os.getenv("DB_NAME", "locshare"),
        "DB_TIMEOUT_MS": int(os.getenv("DB_TIMEOUT_MS", 5000)),
        "PORT": int(os.getenv("PORT", 3000)),
        "JWT_SECRET": os.getenv("JWT_SECRET"),
        "TOKEN_EXPIRATION_MINUTES": int(os.getenv("TOKEN_EXPIRATION_MINUTES", 60)),  # Default 1 hour
        "APP_ENV": os.getenv("APP_ENV", "development").strip().lower(),
        "FRONTEND_DIST": os.getenv("FRONTEND_DIST", os.path.join("frontend", "dist")),
        "PROTECT_LOCATIONS": _flag("PROTECT_LOCATIONS"),
        "CORS_ORIGINS": os.getenv("CORS_ORIGINS", "*"),
    }
