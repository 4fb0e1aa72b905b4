"""Backend configuration using Pydantic Settings"""
from pydantic_settings import BaseSettings
from typing import List
import os


class BackendSettings(BaseSettings):
    """Server configuration loaded from environment variables"""

    # ==================== Server Configuration ====================
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    api_title: str = "Marketing Relay API"
    api_version: str = "1.0.0"
    api_description: str = """
    Relay between the marketing frontend and generative providers.

    Features:
    - RunwayML text-to-image and image-to-video tasks (submit + poll)
    - OpenRouter-powered marketing forms returning one JSON object each
    - ImgBB upload for inline reference images
    - Optional SendGrid delivery of generated campaign emails
    """

    # ==================== HTTP ====================
    cors_allow_origins: List[str] = ["*"]
    cors_allow_methods: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: List[str] = ["Content-Type", "Authorization"]
    max_body_bytes: int = 50 * 1024 * 1024

    # ==================== Logging ====================
    log_dir: str = "./logs"
    log_rotation: str = "1 day"
    log_retention: str = "30 days"
    log_format: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = BackendSettings()

# Override log_level from environment if set (for uvicorn reload support)
if os.getenv('LOG_LEVEL'):
    settings.log_level = os.getenv('LOG_LEVEL')
