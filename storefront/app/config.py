import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # sql | rest
    CATALOG_BACKEND = os.getenv("CATALOG_BACKEND", "sql")
    CATALOG_REST_URL = os.getenv("CATALOG_REST_URL", "")
    CATALOG_REST_KEY = os.getenv("CATALOG_REST_KEY", "")
    CATALOG_REST_TIMEOUT = int(os.getenv("CATALOG_REST_TIMEOUT", "10"))

    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # In-memory view states (cart, screen) per browser session
    VIEW_STATE_MAX_SESSIONS = int(os.getenv("VIEW_STATE_MAX_SESSIONS", "1000"))
    VIEW_STATE_IDLE_SECONDS = int(os.getenv("VIEW_STATE_IDLE_SECONDS", "3600"))

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    CATALOG_BACKEND = "sql"
    ADMIN_USERNAME = "admin"
    ADMIN_PASSWORD = "admin123"
