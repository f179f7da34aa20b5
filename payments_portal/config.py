"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # HubSpot CRM
    hubspot_private_app_token: str | None = None
    hubspot_api_base: str = "https://api.hubapi.com"

    # External payment page for "pay remaining balance"
    payment_page_url: str = "https://pay.example.com/checkout"

    # Service
    service_name: str = "payments-portal"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0


settings = Settings()
