"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent  # paperpile_navigate/utils/config.py -> project root
DATA_DIR = _PROJECT_ROOT / "data"


# ========================================
# Pydantic Settings (from .env)
# ========================================

class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database settings
    database_url: str = f"sqlite:///{DATA_DIR / 'papers.db'}"
    database_echo: bool = False

    # Semantic Scholar settings
    semantic_scholar_api_key: str = ""
    semantic_scholar_base_url: str = "https://api.semanticscholar.org/graph/v1"
    semantic_scholar_request_delay: float = 1.0
    semantic_scholar_max_retries: int = 3
    semantic_scholar_default_retry_after: float = 2.0
    semantic_scholar_reference_limit: int = 500
    semantic_scholar_discover_limit: int = 50

    # arXiv settings
    arxiv_base_url: str = "http://export.arxiv.org/api/query"
    arxiv_max_retries: int = 3
    # arXiv asks clients to wait 3 seconds between requests
    arxiv_default_retry_after: float = 3.0

    request_timeout: int = 30

    # Worldline settings
    similarity_threshold: float = 0.15
    default_worldline_color: str = "#6366f1"
    default_tag_color: str = "#6366f1"

    # Server
    cors_origins: List[str] = ["*"]

    # Monitoring
    log_level: str = "INFO"

    # Environment
    environment: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
