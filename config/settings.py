# Backend configuration settings
from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # MongoDB
    mongo_url: str = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
    db_name: str = os.environ.get('DB_NAME', 'scan_dashboard')

    # Scanning backend
    scanner_api_url: str = os.environ.get('SCANNER_API_URL', 'http://localhost:8080')
    scanner_timeout_seconds: float = float(os.environ.get('SCANNER_TIMEOUT_SECONDS', 10))
    # Connection-level retries only, so a POST is never sent twice
    scanner_connect_retries: int = int(os.environ.get('SCANNER_CONNECT_RETRIES', 2))

    # Status store
    status_store_write_attempts: int = int(os.environ.get('STATUS_STORE_WRITE_ATTEMPTS', 3))

    # List caps
    scans_list_limit: int = int(os.environ.get('SCANS_LIST_LIMIT', 100))
    reports_list_limit: int = int(os.environ.get('REPORTS_LIST_LIMIT', 100))

    # CORS
    cors_origins: str = os.environ.get('CORS_ORIGINS', '*')

    class Config:
        env_file = '.env'
        case_sensitive = False
        extra = 'ignore'  # Allow extra fields from .env

@lru_cache()
def get_settings() -> Settings:
    return Settings()
