"""
Coin redemption commit/revert for carts.

A cart is either Unapplied (no metadata.points_cost) or Committed
(points_cost present). The customer's CoinSelection is a client-side
pre-commit state that never reaches the cart by itself.

- commit: backend records one 'spend' ledger entry, lowers the balance and
  sets points_cost on the cart in one step
- revert: backend clears points_cost and records a compensating entry

This service only calls the backend and, on success, publishes the "carts"
and "coins" topics together. At most one commit or revert may be in flight
for a cart at a time.
"""
import re
import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Optional, Dict, Sequence

from ..models.cart import Cart
from ..utils.exceptions import (
    AuthorizationError,
    CommerceBackendError,
    RedemptionInProgressError,
    RedemptionRejectedError,
    RevertRejectedError,
)
from .invalidation import CARTS, COINS

logger = logging.getLogger(__name__)

# Backend answers meaning the cart had no coins to remove
NOTHING_TO_REMOVE = re.compile(
    r'(no (coins|points)\b.*\b(applied|redeemed))|(nothing to remove)',
    re.IGNORECASE
)


class RedemptionState(str, Enum):
    """Where a cart is in the redemption lifecycle."""
    UNAPPLIED = 'unapplied'     # No points_cost on the cart
    SELECTED = 'selected'       # Client-side selection, not committed
    COMMITTED = 'committed'     # points_cost locked to the cart


def redemption_state(cart: Cart, selection=None) -> RedemptionState:
    """Derive the state from the cart and an optional view selection."""
    if cart.has_points_applied:
        return RedemptionState.COMMITTED
    if selection is not None and selection.selected_variant_ids():
        return RedemptionState.SELECTED
    return RedemptionState.UNAPPLIED


class RedemptionLocks:
    """One non-blocking lock per cart; a held lock means a change is in flight."""

    def __init__(self):
        self._guard = threading.Lock()
        self._held = set()

    def is_busy(self, cart_id: str) -> bool:
        with self._guard:
            return cart_id in self._held

    @contextmanager
    def hold(self, cart_id: str):
        """
        Hold the cart's lock for one commit or revert.

        Raises:
            RedemptionInProgressError: another change for the cart is pending
        """
        with self._guard:
            if cart_id in self._held:
                raise RedemptionInProgressError(cart_id)
            self._held.add(cart_id)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(cart_id)


class RedemptionService:
    """
    Applies and removes coins on a cart.

    Usage:
        service = RedemptionService(client, auth_headers, bus, locks, cache_id)
        cart = service.commit(cart_id, selection.selected_variant_ids())
        cart = service.revert(cart_id)
    """

    def __init__(
        self,
        client,
        auth_headers: Optional[Dict[str, str]],
        bus,
        locks: RedemptionLocks,
        cache_id: str = None
    ):
        self.client = client
        self.auth_headers = auth_headers
        self.bus = bus
        self.locks = locks
        self.cache_id = cache_id

    def is_busy(self, cart_id: str) -> bool:
        return self.locks.is_busy(cart_id)

    def _publish(self) -> None:
        self.bus.publish(CARTS, COINS, cache_id=self.cache_id)

    def commit(self, cart_id: str, variant_ids: Optional[Sequence[str]] = None) -> Cart:
        """
        Redeem coins on a cart.

        Args:
            cart_id: Cart to apply coins to
            variant_ids: The complete selection; [] is sent as-is

        Returns:
            Updated cart (Committed on success)

        Raises:
            AuthorizationError: customer not logged in
            RedemptionInProgressError: a change for this cart is pending
            RedemptionRejectedError: backend declined; message is user-facing
        """
        if not self.auth_headers:
            raise AuthorizationError('You must be logged in to redeem coins')

        selection = list(variant_ids) if variant_ids is not None else None

        with self.locks.hold(cart_id):
            try:
                data = self.client.redeem_points(cart_id, self.auth_headers, variant_ids=selection)
            except CommerceBackendError as e:
                logger.error(
                    'Coin redemption failed for cart %s (status %s): %s',
                    cart_id, e.status_code, e.message
                )
                raise RedemptionRejectedError(e.message or 'Failed to redeem coins') from e

            self._publish()

        cart = Cart.from_dict(data)
        logger.info(
            'Coins redeemed on cart %s: %s coins for %s',
            cart_id, cart.points_cost, 'default selection' if selection is None else f'{len(selection)} variants'
        )
        return cart

    def revert(self, cart_id: str) -> Cart:
        """
        Remove committed coins from a cart.

        Safe on a cart with nothing applied: a "nothing to remove" answer is
        treated as success and the current cart is returned.

        Raises:
            AuthorizationError: customer not logged in
            RedemptionInProgressError: a change for this cart is pending
            RevertRejectedError: backend declined; message is user-facing
        """
        if not self.auth_headers:
            raise AuthorizationError('You must be logged in to remove coins')

        with self.locks.hold(cart_id):
            try:
                data = self.client.remove_points(cart_id, self.auth_headers)
            except CommerceBackendError as e:
                if not self._nothing_to_remove(e):
                    logger.error(
                        'Coin removal failed for cart %s (status %s): %s',
                        cart_id, e.status_code, e.message
                    )
                    raise RevertRejectedError(e.message or 'Failed to remove coins') from e

                logger.info('Cart %s had no coins to remove', cart_id)
                try:
                    data = self.client.retrieve_cart(cart_id, self.auth_headers)
                except CommerceBackendError as fetch_error:
                    raise RevertRejectedError(fetch_error.message or 'Failed to remove coins') from fetch_error

            self._publish()

        logger.info('Coins removed from cart %s', cart_id)
        return Cart.from_dict(data)

    @staticmethod
    def _nothing_to_remove(error: CommerceBackendError) -> bool:
        return error.status_code in (400, 404, 409) and bool(NOTHING_TO_REMOVE.search(error.message or ''))
