"""
Shared fixtures for storefront tests.

The commerce backend is replaced by FakeCommerceBackend behind an
httpx.MockTransport, so the real CommerceClient code runs end to end.
"""
import re
import copy
import json
import time
import uuid
import jwt
import httpx
import pytest

from storefront import create_app
from storefront.services.commerce_client import CommerceClient


BACKEND_URL = 'http://commerce.test'
SIGNING_KEY = 'backend-signing-key-for-tests-0123456789'


def make_cart(cart_id='cart_123', items=None, metadata=None, **totals):
    """Cart payload shaped like the backend's /store/carts response."""
    items = items if items is not None else [
        {'id': 'item_1', 'variant_id': 'variant_currency', 'quantity': 1,
         'total': 20, 'original_total': 20, 'product_title': 'T-Shirt'},
        {'id': 'item_2', 'variant_id': 'variant_points', 'quantity': 2,
         'total': 30, 'original_total': 30, 'product_title': 'Sticker Pack'},
        {'id': 'item_3', 'variant': {'id': 'variant_both'}, 'quantity': 1,
         'total': 15, 'original_total': 15, 'product_title': 'Mug'},
    ]
    item_subtotal = sum(i['total'] for i in items)
    cart = {
        'id': cart_id,
        'currency_code': 'usd',
        'item_subtotal': item_subtotal,
        'subtotal': item_subtotal,
        'shipping_subtotal': 5,
        'tax_total': 6.5,
        'discount_subtotal': 0,
        'total': item_subtotal + 5 + 6.5,
        'items': items,
        'metadata': metadata or {},
    }
    cart.update(totals)
    return cart


class FakeCommerceBackend:
    """In-memory stand-in for the commerce backend Store API."""

    def __init__(self):
        self.carts = {}
        self.point_configs = {}
        self.failing_variants = set()
        self.products = {}
        self.orders = {}
        self.coins = 0
        self.transactions = []
        self.requests = []
        self.redeem_error = None        # (status, message)
        self.revert_error = None        # (status, message)
        self.points_error = None        # (status, message)
        self.cart_error = None          # (status, message) for cart GETs
        self.strict_revert = False      # 400 when nothing is applied
        self.on_redeem = None           # hook called before redeem completes

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> CommerceClient:
        return CommerceClient(BACKEND_URL, publishable_key='pk_test', transport=self.transport())

    # ==================== Helpers ====================

    def calls(self, method=None, path=None):
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    @staticmethod
    def _json(status, payload):
        return httpx.Response(status, json=payload)

    def _error(self, status, message):
        return self._json(status, {'type': 'invalid_data', 'message': message})

    def _add_transaction(self, txn_type, points, reason, cart_id):
        now = '2026-10-19T10:30:00.000Z'
        self.transactions.insert(0, {
            'id': f'ptx_{uuid.uuid4().hex[:8]}',
            'customer_id': 'cus_123',
            'type': txn_type,
            'points': points,
            'reason': reason,
            'reference_id': cart_id,
            'reference_type': 'cart',
            'created_at': now,
            'updated_at': now,
        })

    def _cost_for(self, cart, variant_ids):
        cost = 0
        for item in cart['items']:
            vid = item.get('variant_id') or (item.get('variant') or {}).get('id')
            config = self.point_configs.get(vid)
            if not config or config.get('point_price') is None:
                continue
            if config['payment_type'] == 'points' or (
                config['payment_type'] == 'both' and variant_ids and vid in variant_ids
            ):
                cost += config['point_price'] * item['quantity']
        return cost

    # ==================== Routing ====================

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content) if request.content else {}
        path = request.url.path
        authed = bool(request.headers.get('authorization'))

        match = re.fullmatch(r'/store/variants/([^/]+)/point-config', path)
        if match and request.method == 'GET':
            variant_id = match.group(1)
            if variant_id in self.failing_variants:
                return self._error(500, 'An unknown error occurred.')
            config = self.point_configs.get(variant_id)
            if config is None:
                return self._error(404, f'Variant {variant_id} not found')
            return self._json(200, {'point_config': config})

        match = re.fullmatch(r'/store/carts/([^/]+)', path)
        if match and request.method == 'GET':
            if self.cart_error:
                return self._error(*self.cart_error)
            cart = self.carts.get(match.group(1))
            if cart is None:
                return self._error(404, 'Cart not found')
            return self._json(200, {'cart': copy.deepcopy(cart)})

        match = re.fullmatch(r'/store/products/([^/]+)', path)
        if match and request.method == 'GET':
            product = self.products.get(match.group(1))
            if product is None:
                return self._error(404, 'Product not found')
            return self._json(200, {'product': copy.deepcopy(product)})

        match = re.fullmatch(r'/store/orders/([^/]+)', path)
        if match and request.method == 'GET':
            if not authed:
                return self._error(401, 'Unauthorized')
            order = self.orders.get(match.group(1))
            if order is None:
                return self._error(404, 'Order not found')
            return self._json(200, {'order': copy.deepcopy(order)})

        if path == '/store/customers/me/points' and request.method == 'GET':
            if not authed:
                return self._error(401, 'Unauthorized')
            if self.points_error:
                return self._error(*self.points_error)
            return self._json(200, {'coins': self.coins, 'transactions': copy.deepcopy(self.transactions)})

        if path == '/store/customers/me/points/redeem' and request.method == 'POST':
            return self._redeem(body, authed)

        if path == '/store/customers/me/points/redeem' and request.method == 'DELETE':
            return self._revert(body, authed)

        return self._error(404, f'No route for {request.method} {path}')

    def _redeem(self, body, authed):
        if not authed:
            return self._error(401, 'Unauthorized')
        if self.on_redeem:
            self.on_redeem()
        if self.redeem_error:
            return self._error(*self.redeem_error)

        cart = self.carts.get(body.get('cart_id'))
        if cart is None:
            return self._error(404, 'Cart not found')
        if cart['metadata'].get('points_cost'):
            return self._error(400, 'Coins are already applied to this cart')

        cost = self._cost_for(cart, body.get('variant_ids'))
        if cost > self.coins:
            return self._error(400, 'Insufficient coin balance')

        self.coins -= cost
        self._add_transaction('spend', cost, 'Redeemed on cart', cart['id'])
        cart['metadata']['points_cost'] = cost
        return self._json(200, {'cart': copy.deepcopy(cart)})

    def _revert(self, body, authed):
        if not authed:
            return self._error(401, 'Unauthorized')
        if self.revert_error:
            return self._error(*self.revert_error)

        cart = self.carts.get(body.get('cart_id'))
        if cart is None:
            return self._error(404, 'Cart not found')

        cost = cart['metadata'].pop('points_cost', None)
        if not cost:
            if self.strict_revert:
                return self._error(400, 'No coins applied to this cart')
            return self._json(200, {'cart': copy.deepcopy(cart)})

        self.coins += cost
        self._add_transaction('adjust', cost, 'Redemption removed', cart['id'])
        return self._json(200, {'cart': copy.deepcopy(cart)})


@pytest.fixture
def backend():
    """Backend seeded with one mixed cart, three variant configs and a balance."""
    fake = FakeCommerceBackend()
    fake.carts['cart_123'] = make_cart()
    fake.point_configs = {
        'variant_currency': {'variant_id': 'variant_currency', 'payment_type': 'currency', 'point_price': None},
        'variant_points': {'variant_id': 'variant_points', 'payment_type': 'points', 'point_price': 500},
        'variant_both': {'variant_id': 'variant_both', 'payment_type': 'both', 'point_price': 300},
    }
    fake.coins = 5000
    fake.transactions = [{
        'id': 'ptx_earn_1',
        'customer_id': 'cus_123',
        'type': 'earn',
        'points': 5000,
        'reason': 'Order #1001',
        'reference_id': 'order_1001',
        'reference_type': 'order',
        'created_at': '2026-10-01T09:00:00.000Z',
        'updated_at': '2026-10-01T09:00:00.000Z',
    }]
    return fake


@pytest.fixture
def app(backend):
    """Create application for testing."""
    app = create_app('testing')
    app.extensions['commerce_client'] = backend.client()
    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def auth_token():
    """Customer JWT as issued by the backend at login."""
    return jwt.encode(
        {'actor_id': 'cus_123', 'actor_type': 'customer', 'exp': int(time.time()) + 3600},
        SIGNING_KEY,
        algorithm='HS256'
    )


@pytest.fixture
def expired_token():
    return jwt.encode(
        {'actor_id': 'cus_123', 'exp': int(time.time()) - 60},
        SIGNING_KEY,
        algorithm='HS256'
    )


@pytest.fixture
def auth_headers(auth_token):
    """Request headers for a logged-in customer."""
    return {
        'Authorization': f'Bearer {auth_token}',
        'Content-Type': 'application/json'
    }


@pytest.fixture
def backend_auth_headers(auth_token):
    """Headers the storefront forwards to the backend."""
    return {'authorization': f'Bearer {auth_token}'}
