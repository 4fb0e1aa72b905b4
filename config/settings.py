"""Configuration management module"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Provider configuration, read once at startup"""

    # RunwayML (image/video generation)
    runway_api_key: str = ""
    runway_base_url: str = "https://api.dev.runwayml.com"
    runway_api_version: str = "2024-11-06"

    # OpenRouter (text completion)
    openrouter_api_key: str = ""
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "openai/gpt-5-chat"

    # ImgBB (image hosting for reference images)
    imgbb_api_key: str = ""
    imgbb_upload_url: str = "https://api.imgbb.com/1/upload"

    # SendGrid (optional campaign delivery)
    sendgrid_api_key: str = ""
    sendgrid_api_url: str = "https://api.sendgrid.com/v3/mail/send"

    # Caller-side polling defaults (CLI / TaskPoller)
    task_poll_interval: float = 5.0  # seconds between status reads
    task_poll_max_attempts: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def missing_credentials(self) -> list:
        """Names of provider credentials that are not configured"""
        missing = []
        if not self.runway_api_key:
            missing.append("RUNWAY_API_KEY")
        if not self.openrouter_api_key:
            missing.append("OPENROUTER_API_KEY")
        if not self.imgbb_api_key:
            missing.append("IMGBB_API_KEY")
        if not self.sendgrid_api_key:
            missing.append("SENDGRID_API_KEY")
        return missing


# 全局配置实例
settings = Settings()
