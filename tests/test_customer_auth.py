"""
Tests for customer session authentication.
"""
import jwt
from flask import g

from storefront.middleware.customer_auth import (
    decode_customer_token,
    get_auth_headers,
    get_cache_id,
    get_customer_id,
    get_customer_token,
)

from conftest import SIGNING_KEY


class TestDecodeCustomerToken:

    def test_valid_token(self, auth_token):
        payload = decode_customer_token(auth_token)
        assert payload['actor_id'] == 'cus_123'

    def test_expired_token(self, expired_token):
        assert decode_customer_token(expired_token) is None

    def test_garbage_token(self):
        assert decode_customer_token('not-a-jwt') is None

    def test_empty_token(self):
        assert decode_customer_token(None) is None


class TestAuthHeaders:
    """Tests for request-scoped auth helpers."""

    def test_bearer_header(self, app, auth_token):
        with app.test_request_context(headers={'Authorization': f'Bearer {auth_token}'}):
            assert get_customer_token() == auth_token
            assert get_auth_headers() == {'authorization': f'Bearer {auth_token}'}
            assert get_customer_id() == 'cus_123'

    def test_cookie(self, app, auth_token):
        cookie = f"{app.config['AUTH_COOKIE_NAME']}={auth_token}"
        with app.test_request_context(headers={'Cookie': cookie}):
            assert get_customer_token() == auth_token

    def test_sub_claim_fallback(self, app):
        token = jwt.encode({'sub': 'cus_999'}, SIGNING_KEY, algorithm='HS256')
        with app.test_request_context(headers={'Authorization': f'Bearer {token}'}):
            assert get_customer_id() == 'cus_999'

    def test_no_token(self, app):
        with app.test_request_context():
            assert get_auth_headers() is None
            assert get_customer_id() is None
            assert g.auth_headers is None

    def test_cache_id_stable_per_session(self, app):
        with app.test_request_context():
            first = get_cache_id()
            assert get_cache_id() == first
            assert len(first) == 32
