"""
Customer Session Authentication Middleware.

The commerce backend issues customers a JWT at login. The storefront keeps it
in a cookie (or receives it as a bearer header) and forwards it on every
customer-scoped backend call. Signature verification is the backend's job;
here the token is only decoded to check expiry and read the customer id.

Token payload fields used:
- actor_id: Customer ID
- exp: Expiration time
"""
import uuid
import logging
import jwt
from functools import wraps
from typing import Optional, Dict
from flask import request, session, g, current_app

from ..utils.errors import unauthorized, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_AUTH_COOKIE = '_storefront_jwt'


def get_customer_token() -> Optional[str]:
    """
    Get the customer token from the request.

    Priority:
    1. Authorization: Bearer header
    2. Auth cookie
    """
    auth_header = request.headers.get('Authorization', '')
    if auth_header.lower().startswith('bearer '):
        return auth_header[7:].strip() or None

    cookie_name = current_app.config.get('AUTH_COOKIE_NAME', DEFAULT_AUTH_COOKIE)
    return request.cookies.get(cookie_name) or None


def decode_customer_token(token: str) -> Optional[dict]:
    """
    Decode a customer token without verifying its signature.

    Returns:
        Payload dict, or None if malformed or expired
    """
    if not token:
        return None

    try:
        return jwt.decode(
            token,
            options={
                'verify_signature': False,
                'verify_exp': True,
            }
        )
    except jwt.ExpiredSignatureError:
        logger.info('[Auth] Customer token expired')
        return None
    except jwt.InvalidTokenError as e:
        logger.info('[Auth] Invalid customer token: %s', e)
        return None


def get_auth_headers() -> Optional[Dict[str, str]]:
    """
    Authorization headers for customer-scoped backend calls.

    Sets g.customer_id when a usable token is present.

    Returns:
        {'authorization': 'Bearer ...'} or None when not logged in
    """
    if 'auth_headers' in g:
        return g.auth_headers

    token = get_customer_token()
    payload = decode_customer_token(token)

    if payload is None:
        g.auth_headers = None
        g.customer_id = None
    else:
        g.auth_headers = {'authorization': f'Bearer {token}'}
        g.customer_id = payload.get('actor_id') or payload.get('sub')

    return g.auth_headers


def get_customer_id() -> Optional[str]:
    get_auth_headers()
    return g.get('customer_id')


def get_cache_id() -> str:
    """Per-session id scoping the 'carts' and 'coins' cache tags."""
    cache_id = session.get('cache_id')
    if not cache_id:
        cache_id = uuid.uuid4().hex
        session['cache_id'] = cache_id
    return cache_id


def require_customer_auth(f):
    """
    Decorator to require a logged-in customer.

    Sets g.auth_headers and g.customer_id if authenticated.

    Usage:
        @require_customer_auth
        def my_endpoint():
            headers = g.auth_headers
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if get_auth_headers() is None:
            return unauthorized('You must be logged in', ErrorCode.AUTH_REQUIRED)
        return f(*args, **kwargs)

    return decorated_function
