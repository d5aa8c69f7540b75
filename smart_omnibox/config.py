"""Configuration settings for the Smart Omnibox service"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""
    
    # Server
    port: int = 8010
    debug: bool = False
    
    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000"
    ]
    
    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "smart-omnibox:"
    query_history_limit: int = 100
    
    # Chat completion backend (OpenAI-compatible)
    deepseek_api_key: str = ""
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"
    chat_temperature: float = 0.2
    chat_max_tokens: int = 800
    chat_timeout_seconds: float = 60.0
    
    # Suggestions
    max_suggestions: int = 8
    max_predictions: int = 6
    history_lookup_limit: int = 5
    
    # Logging
    log_level: str = "INFO"
    
    # Monitoring
    metrics_enabled: bool = True
    
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )


settings = Settings()
