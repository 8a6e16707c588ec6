"""
Service accessors bound to the current app and request.

App-wide singletons (backend client, invalidation bus, redemption locks) live
in app.extensions; request-scoped services pick up the customer's auth
headers and session cache id.
"""
from flask import current_app

from ..middleware.customer_auth import get_auth_headers, get_customer_id, get_cache_id
from .commerce_client import CommerceClient
from .invalidation import InvalidationBus
from .redemption_service import RedemptionLocks, RedemptionService
from .point_config_service import PointConfigService
from .points_service import PointsService
from .cart_service import CartService
from .checkout_view import CheckoutSummaryView, open_checkout_view


def init_services(app) -> None:
    """Register app-wide service singletons."""
    app.extensions.setdefault('commerce_client', CommerceClient.from_config(app.config))
    app.extensions.setdefault('invalidation_bus', InvalidationBus())
    app.extensions.setdefault('redemption_locks', RedemptionLocks())


def get_commerce_client() -> CommerceClient:
    return current_app.extensions['commerce_client']


def get_invalidation_bus() -> InvalidationBus:
    return current_app.extensions['invalidation_bus']


def get_redemption_locks() -> RedemptionLocks:
    return current_app.extensions['redemption_locks']


def point_config_service() -> PointConfigService:
    return PointConfigService(
        get_commerce_client(),
        max_workers=current_app.config.get('POINT_CONFIG_MAX_WORKERS', 8)
    )


def points_service() -> PointsService:
    return PointsService(
        get_commerce_client(),
        get_auth_headers(),
        customer_id=get_customer_id(),
        cache_id=get_cache_id(),
        cache_timeout=current_app.config.get('COINS_CACHE_TIMEOUT', 300)
    )


def cart_service() -> CartService:
    return CartService(
        get_commerce_client(),
        get_auth_headers(),
        cache_id=get_cache_id(),
        cache_timeout=current_app.config.get('CART_CACHE_TIMEOUT', 300)
    )


def redemption_service() -> RedemptionService:
    return RedemptionService(
        get_commerce_client(),
        get_auth_headers(),
        get_invalidation_bus(),
        get_redemption_locks(),
        cache_id=get_cache_id()
    )


def checkout_view(cart_id: str):
    """Context manager for a CheckoutSummaryView bound to this request."""
    return open_checkout_view(
        cart_id,
        cart_service(),
        point_config_service(),
        points_service(),
        redemption_service(),
        get_invalidation_bus(),
        cache_id=get_cache_id()
    )
