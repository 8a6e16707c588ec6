"""
Cart reads through the session's "carts" cache tag.

All reads within one tag generation see the same cart snapshot; a redemption
change publishes the tag and the next read goes back to the backend.
"""
import logging
from typing import Optional, Dict

from ..models.cart import Cart
from ..utils.cache import cache, get_cache_tag, tagged_key
from ..utils.exceptions import CommerceBackendError, NotFoundError
from .invalidation import CARTS

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIMEOUT = 300


class CartService:
    """Retrieves carts for the current session."""

    def __init__(
        self,
        client,
        auth_headers: Optional[Dict[str, str]] = None,
        cache_id: str = None,
        cache_timeout: int = DEFAULT_CACHE_TIMEOUT
    ):
        self.client = client
        self.auth_headers = auth_headers
        self.cache_id = cache_id
        self.cache_timeout = cache_timeout

    def get_cart(self, cart_id: str) -> Cart:
        """
        Get a cart snapshot.

        Raises:
            NotFoundError: backend has no such cart
            CommerceBackendError: any other backend failure
        """
        key = tagged_key(get_cache_tag(CARTS, self.cache_id), 'cart', cart_id)
        data = cache.get(key)

        if data is None:
            logger.debug('Fetching cart %s from backend', cart_id)
            try:
                data = self.client.retrieve_cart(cart_id, self.auth_headers)
            except CommerceBackendError as e:
                if e.status_code == 404:
                    raise NotFoundError('Cart', cart_id) from e
                raise
            if not data:
                raise NotFoundError('Cart', cart_id)
            cache.set(key, data, timeout=self.cache_timeout)

        return Cart.from_dict(data)
