"""Storefront settings, read from the environment.

    STOREFRONT_API_URL            base URL of the order/address service
    STOREFRONT_STORAGE_PATH       durable storage file (cart snapshot lives here)
    STOREFRONT_CART_KEY           storage key of the cart snapshot
    STOREFRONT_REDIRECT_DELAY     seconds to wait before leaving checkout
    STOREFRONT_HTTP_TIMEOUT       request timeout in seconds; unset means none
    STOREFRONT_SERVICE_ADAPTER    "http" (default) or "fake"
    STOREFRONT_LOG_DIR            directory for the rotating log files
    STOREFRONT_LOG_LEVEL          log level; LOG_LEVEL is also honoured
"""

import os
from dataclasses import dataclass
from pathlib import Path

CART_STORAGE_KEY = "cart"
ORDERS_PATH = "/orders"
DEFAULT_REDIRECT_DELAY = 2.0


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _get_float(*keys: str, default: float | None = None) -> float | None:
    value = _get_env(*keys)
    if value is None:
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    api_url: str = "http://localhost:3000/api"
    storage_path: str = str(Path.home() / ".storefront" / "storage.json")
    cart_key: str = CART_STORAGE_KEY
    redirect_delay: float = DEFAULT_REDIRECT_DELAY
    http_timeout: float | None = None
    service_adapter: str = "http"
    log_dir: str = "logs"
    log_level: str | None = None


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    defaults = Settings()
    return Settings(
        api_url=_get_env("STOREFRONT_API_URL", default=defaults.api_url),
        storage_path=_get_env("STOREFRONT_STORAGE_PATH", default=defaults.storage_path),
        cart_key=_get_env("STOREFRONT_CART_KEY", default=defaults.cart_key),
        redirect_delay=_get_float("STOREFRONT_REDIRECT_DELAY", default=defaults.redirect_delay),
        http_timeout=_get_float("STOREFRONT_HTTP_TIMEOUT", default=None),
        service_adapter=_get_env("STOREFRONT_SERVICE_ADAPTER", default=defaults.service_adapter),
        log_dir=_get_env("STOREFRONT_LOG_DIR", default=defaults.log_dir),
        log_level=_get_env("STOREFRONT_LOG_LEVEL", "LOG_LEVEL"),
    )
