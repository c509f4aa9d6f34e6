# jobrisk/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

load_dotenv()

def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")

class Config:
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key")
    SESSION_COOKIE_SAMESITE = "Lax"

    # OpenAI
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")

    # Assessment call
    ASSESSMENT_TIMEOUT_SECONDS = float(os.environ.get("ASSESSMENT_TIMEOUT_SECONDS", "90"))
    ASSESSMENT_TEMPERATURE = float(os.environ.get("ASSESSMENT_TEMPERATURE", "0"))
    ASSESSMENT_SEED = int(os.environ.get("ASSESSMENT_SEED", "42"))
    # web search grounding; the Responses API has no seed, so ASSESSMENT_SEED
    # only applies when this is off
    GROUNDED_SEARCH = _flag("GROUNDED_SEARCH", "1")

    # Input handling
    STRICT_HOST_MATCH = _flag("STRICT_HOST_MATCH", "0")
    MAX_IMAGE_BYTES = int(os.environ.get("MAX_IMAGE_BYTES", str(8 * 1024 * 1024)))
    # leave headroom for the multipart envelope around the screenshot
    MAX_CONTENT_LENGTH = MAX_IMAGE_BYTES * 2

    # View state
    MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "500"))

    # Export
    REPORT_PREFIX = os.environ.get("REPORT_PREFIX", "AI-Risk-Assessment")

    # CORS origins for the JSON API (comma-separated); empty means any
    CORS_ORIGINS = [s.strip() for s in os.environ.get("CORS_ORIGINS", "").split(",") if s.strip()]

class DevConfig(Config):
    DEBUG = True

class ProdConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True

class TestConfig(Config):
    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-key"

def get_config(env: str | None = None):
    """Resolve config by env string or environment variables."""
    env = (env or os.environ.get("JOBRISK_ENV") or os.environ.get("FLASK_ENV") or "production").lower()
    if env in ("dev", "development"):
        return DevConfig
    if env in ("test", "testing"):
        return TestConfig
    return ProdConfig
