"""Sandbox order and address service.

Serves the storefront's service contract from memory so the storefront can
be developed and demonstrated without the real backend.

Usage:
    uvicorn storefront.api.sandbox:app --port 3000 --root-path /api
    STOREFRONT_API_URL=http://localhost:3000 ...
"""

from storefront.api.routes import create_app
from storefront.domain import storefront
from storefront.utils.logging import configure_logging

# The domain is initialized at module level so uvicorn workers share it
storefront.init()
configure_logging()

app = create_app()
