"""
Middleware package for the storefront.
"""
from .customer_auth import (
    require_customer_auth,
    get_auth_headers,
    get_customer_id,
    get_customer_token,
    get_cache_id,
)
