"""
Commerce backend Store API client.
Handles carts, products, orders and the coin endpoints.
"""
import logging
import httpx
from typing import Optional, Dict, Any, List

from ..utils.exceptions import CommerceBackendError

logger = logging.getLogger(__name__)


class CommerceClient:
    """
    Client for the commerce backend's Store REST API.

    Supports:
    - Cart retrieval
    - Product and order retrieval
    - Customer coin balance and ledger
    - Variant point configs
    - Coin redemption on a cart (apply/remove)
    """

    def __init__(
        self,
        base_url: str,
        publishable_key: str = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport = None
    ):
        """
        Initialize commerce client.

        Args:
            base_url: Backend root URL (e.g. http://localhost:9000)
            publishable_key: Store API publishable key, sent on every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip('/')
        self.publishable_key = publishable_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config) -> 'CommerceClient':
        """Create client from a Flask config mapping."""
        return cls(
            base_url=config['COMMERCE_BACKEND_URL'],
            publishable_key=config.get('COMMERCE_PUBLISHABLE_KEY'),
            timeout=config.get('COMMERCE_REQUEST_TIMEOUT', 30.0),
        )

    def _request(
        self,
        method: str,
        path: str,
        auth_headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Execute a Store API request and return the decoded JSON body."""
        headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        }
        if self.publishable_key:
            headers['x-publishable-api-key'] = self.publishable_key
        if auth_headers:
            headers.update(auth_headers)

        try:
            with httpx.Client(
                base_url=self.base_url,
                transport=self.transport,
                timeout=self.timeout
            ) as client:
                response = client.request(
                    method,
                    path,
                    headers=headers,
                    params=params,
                    json=json
                )
        except httpx.HTTPError as e:
            logger.error('Store API %s %s unreachable: %s', method, path, e)
            raise CommerceBackendError(
                f'Commerce backend unreachable: {e}',
                original_error=e
            ) from e

        if response.is_error:
            message = self._error_message(response)
            logger.warning('Store API %s %s returned %s: %s', method, path, response.status_code, message)
            raise CommerceBackendError(
                message,
                status_code=response.status_code
            )

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pull the backend's message out of an error response."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get('message'):
            return str(body['message'])
        return response.reason_phrase or f'HTTP {response.status_code}'

    # ==================== Collaborators ====================

    def retrieve_cart(self, cart_id: str, auth_headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Get a cart with items, totals and metadata."""
        result = self._request(
            'GET',
            f'/store/carts/{cart_id}',
            auth_headers=auth_headers,
            params={'fields': '*items,*items.variant,+metadata'}
        )
        return result.get('cart', {})

    def retrieve_product(self, product_id: str, region_id: str = None) -> Dict[str, Any]:
        """Get a product with calculated variant prices for a region."""
        params = {'fields': '*variants.calculated_price'}
        if region_id:
            params['region_id'] = region_id
        result = self._request('GET', f'/store/products/{product_id}', params=params)
        return result.get('product', {})

    def retrieve_order(self, order_id: str, auth_headers: Dict[str, str]) -> Dict[str, Any]:
        """Get an order with its line items."""
        result = self._request(
            'GET',
            f'/store/orders/{order_id}',
            auth_headers=auth_headers,
            params={'fields': '*items,*items.variant'}
        )
        return result.get('order', {})

    # ==================== Coins ====================

    def get_customer_points(self, auth_headers: Dict[str, str]) -> Dict[str, Any]:
        """
        Get the customer's coin balance and ledger.

        Returns:
            Dict with 'coins' (int) and 'transactions' (list)
        """
        return self._request('GET', '/store/customers/me/points', auth_headers=auth_headers)

    def get_variant_point_config(self, variant_id: str) -> Dict[str, Any]:
        """
        Get the payment policy for a variant.

        Returns:
            point_config dict, or {} if the backend has none
        """
        result = self._request('GET', f'/store/variants/{variant_id}/point-config')
        return result.get('point_config') or {}

    def redeem_points(
        self,
        cart_id: str,
        auth_headers: Dict[str, str],
        variant_ids: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Apply coins to a cart.

        Args:
            cart_id: Cart to redeem against
            auth_headers: Customer authorization headers
            variant_ids: Explicit, complete selection. None lets the backend
                apply its default logic; [] means apply to nothing.

        Returns:
            Updated cart dict
        """
        body = {'cart_id': cart_id}
        if variant_ids is not None:
            body['variant_ids'] = list(variant_ids)

        result = self._request(
            'POST',
            '/store/customers/me/points/redeem',
            auth_headers=auth_headers,
            json=body
        )
        return result.get('cart', {})

    def remove_points(self, cart_id: str, auth_headers: Dict[str, str]) -> Dict[str, Any]:
        """
        Remove committed coins from a cart.

        Returns:
            Updated cart dict
        """
        result = self._request(
            'DELETE',
            '/store/customers/me/points/redeem',
            auth_headers=auth_headers,
            json={'cart_id': cart_id}
        )
        return result.get('cart', {})
