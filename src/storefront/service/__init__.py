"""Storefront service factory.

Provides get_service() / set_service() to swap implementations:
- HttpStorefrontService for the real order and address service
- FakeStorefrontService for development and testing
"""

from storefront.config import Settings, load_settings
from storefront.service.fake_adapter import FakeStorefrontService
from storefront.service.http_adapter import HttpStorefrontService
from storefront.service.port import StorefrontService

_current_service: StorefrontService | None = None


def build_service(settings: Settings) -> StorefrontService:
    """Create the adapter named by ``settings.service_adapter``."""
    if settings.service_adapter == "fake":
        return FakeStorefrontService()
    if settings.service_adapter == "http":
        return HttpStorefrontService(base_url=settings.api_url, timeout=settings.http_timeout)
    raise ValueError(f"Unknown service adapter: {settings.service_adapter}")


def get_service() -> StorefrontService:
    """Return the current service. Defaults to the adapter configured in the environment."""
    global _current_service
    if _current_service is None:
        _current_service = build_service(load_settings())
    return _current_service


def set_service(service: StorefrontService) -> None:
    """Override the active service (useful for tests)."""
    global _current_service
    _current_service = service


def reset_service() -> None:
    """Drop the active service so the next get_service() builds a fresh one."""
    global _current_service
    if _current_service is not None:
        _current_service.close()
    _current_service = None
