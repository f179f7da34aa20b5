"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from payments_portal.config import Settings, settings
from payments_portal.infrastructure.clients.hubspot import HubSpotClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    """Provide application settings"""
    return settings


def get_hubspot_client(config: Settings = Depends(get_settings)) -> HubSpotClient:
    """
    Provide HubSpot API client instance.

    Raises:
        ConfigurationError: No HubSpot token configured
    """
    return HubSpotClient(
        token=config.hubspot_private_app_token or "",
        base_url=config.hubspot_api_base,
        timeout=config.http_timeout_seconds,
    )
