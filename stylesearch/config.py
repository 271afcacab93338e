from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "env_prefix": "",
        "case_sensitive": False,
    }

    # Agent service (conversations, messages, shopping scraper)
    agent_api_base_url: str = "https://agent-service-2wpf.onrender.com"
    user_id: str = "user_12345"  # forwarded for attribution only

    # AI backend
    conversation_backend: Literal["remote", "claude"] = "remote"
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-5-20250929"
    claude_max_tokens: int = 2048

    # Shopping search region defaults
    shopping_country: str = "IN"
    shopping_language: str = "en"
    shopping_location: str = "India"
    shopping_gl: str = "in"
    shopping_hl: str = "en"

    # HTTP
    http_timeout_seconds: float = 20.0

    # App
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str = ""


settings = Settings()
