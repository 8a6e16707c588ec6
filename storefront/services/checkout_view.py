"""
Checkout summary view.

Ties together one cart's totals, its line item prices, the customer's coin
balance and the coin redemption control for the lifetime of one view. The
view owns its CoinSelection, listens on the invalidation bus while open and
re-fetches whatever was invalidated.

After close() the view ignores everything: an in-flight commit or revert
still completes on the backend, but no state of a closed view is updated.
"""
import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any, List

from ..models.cart import Cart
from ..models.points import PaymentType
from ..utils.exceptions import (
    StorefrontError,
    AuthorizationError,
    RedemptionInProgressError,
    RedemptionRejectedError,
    RevertRejectedError,
)
from .cart_totals import CartTotals, compute_cart_totals
from .coin_selection import CoinSelection
from .invalidation import CARTS, COINS, TOPICS
from .points_service import format_coins
from .price_display import line_item_price, line_item_unit_price
from .redemption_service import RedemptionState, redemption_state

logger = logging.getLogger(__name__)

SURFACED_ERRORS = (
    AuthorizationError,
    RedemptionInProgressError,
    RedemptionRejectedError,
    RevertRejectedError,
)


class CheckoutSummaryView:
    """
    Usage:
        with open_checkout_view(cart_id, ...) as view:
            view.toggle('variant_123')
            if not view.redeem():
                show(view.error)
    """

    def __init__(
        self,
        cart_id: str,
        cart_service,
        point_config_service,
        points_service,
        redemption_service,
        bus,
        cache_id: str = None
    ):
        self.cart_id = cart_id
        self.cart_service = cart_service
        self.point_config_service = point_config_service
        self.points_service = points_service
        self.redemption_service = redemption_service
        self.bus = bus
        self.cache_id = cache_id

        self.cart: Optional[Cart] = None
        self.point_configs: Dict[str, Any] = {}
        self.coin_balance: Optional[int] = None
        self.error: Optional[str] = None
        self.failure: Optional[StorefrontError] = None
        self.selection = CoinSelection()
        self.closed = False
        self._stale = set(TOPICS)

        for topic in TOPICS:
            self.bus.subscribe(topic, self._on_invalidated)

    # ==================== Lifecycle ====================

    def _on_invalidated(self, sender, topic: str = None, cache_id: str = None, **kwargs):
        if self.closed:
            return
        if cache_id is None or cache_id == self.cache_id:
            self._stale.add(topic)

    @property
    def stale(self) -> bool:
        return bool(self._stale)

    def refresh(self) -> None:
        """Re-fetch whatever the bus has invalidated since the last load."""
        if self.closed:
            return

        if COINS in self._stale:
            self._stale.discard(COINS)
            points = self.points_service.get_customer_points()
            if self.closed:
                return
            self.coin_balance = points.balance.balance if points else None

        if CARTS in self._stale:
            self._stale.discard(CARTS)
            try:
                cart = self.cart_service.get_cart(self.cart_id)
                configs = self.point_config_service.lookup_many(cart.variant_ids)
            except StorefrontError:
                self._stale.add(CARTS)
                raise
            if self.closed:
                return
            self._show_cart(cart)
            self.point_configs = configs

    load = refresh

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for topic in TOPICS:
            self.bus.unsubscribe(topic, self._on_invalidated)
        self.selection.dispose()

    # ==================== Reads ====================

    def totals(self) -> CartTotals:
        return compute_cart_totals(self.cart, self.point_configs)

    @property
    def state(self) -> RedemptionState:
        return redemption_state(self.cart, self.selection)

    @property
    def busy(self) -> bool:
        return self.redemption_service.is_busy(self.cart_id)

    @property
    def coins_visible(self) -> bool:
        """Coins UI is hidden when the balance is unavailable."""
        return self.coin_balance is not None

    @property
    def can_redeem(self) -> bool:
        return (
            self.coins_visible
            and self.coin_balance > 0
            and not self.cart.has_points_applied
            and not self.busy
        )

    def items(self) -> List[Dict[str, Any]]:
        rows = []
        for item in self.cart.items:
            config = self.point_configs.get(item.variant_id) if item.variant_id else None
            selected = bool(item.variant_id) and self.selection.is_selected(item.variant_id)
            rows.append({
                'id': item.id,
                'variant_id': item.variant_id,
                'title': item.product_title or item.title,
                'thumbnail': item.thumbnail,
                'quantity': item.quantity,
                'point_config': config.to_dict() if config else None,
                'coin_selectable': config is not None and config.payment_type == PaymentType.BOTH,
                'coin_selected': selected,
                'price': line_item_price(item, self.cart.currency_code, config, coin_selected=selected),
                'unit_price': line_item_unit_price(item, self.cart.currency_code, config),
            })
        return rows

    # ==================== Actions ====================

    def toggle(self, variant_id: str) -> bool:
        return self.selection.toggle(variant_id)

    def _reset_error(self) -> None:
        self.error = None
        self.failure = None

    def _record_failure(self, error: StorefrontError, fallback: str) -> None:
        if self.closed:
            return
        self.error = error.message or fallback
        self.failure = error

    def _show_cart(self, cart: Cart) -> None:
        self.cart = cart
        self.selection.restrict_to(cart.variant_ids)

    def _after_change(self, cart: Cart) -> None:
        """Show the cart the backend returned, then re-fetch what was invalidated."""
        if self.closed:
            return
        self._show_cart(cart)
        try:
            self.refresh()
        except StorefrontError as e:
            logger.warning('Refresh after coin change failed for cart %s: %s', self.cart_id, e.message)

    def redeem(self) -> bool:
        """
        Commit the current selection.

        Returns:
            True on success; on failure the message is in self.error
        """
        if self.closed:
            return False
        self._reset_error()

        try:
            cart = self.redemption_service.commit(self.cart_id, self.selection.selected_variant_ids())
        except SURFACED_ERRORS as e:
            self._record_failure(e, 'Failed to redeem coins')
            return False

        self._after_change(cart)
        return True

    def remove(self) -> bool:
        """
        Revert committed coins and clear the selection.

        Returns:
            True on success; on failure the message is in self.error
        """
        if self.closed:
            return False
        self._reset_error()

        try:
            cart = self.redemption_service.revert(self.cart_id)
        except SURFACED_ERRORS as e:
            self._record_failure(e, 'Failed to remove coins')
            return False

        if self.closed:
            return True
        self.selection.clear()
        self._after_change(cart)
        return True

    def to_dict(self) -> Dict[str, Any]:
        points_cost = self.cart.points_cost
        return {
            'cart_id': self.cart_id,
            'totals': self.totals().to_dict(),
            'items': self.items(),
            'redemption': {
                'visible': self.coins_visible,
                'state': self.state.value,
                'coin_balance': self.coin_balance,
                'coin_balance_label': format_coins(self.coin_balance) if self.coins_visible else None,
                'points_cost': points_cost,
                'points_cost_label': format_coins(points_cost) if points_cost else None,
                'selected_variant_ids': self.selection.selected_variant_ids(),
                'busy': self.busy,
                'can_redeem': self.can_redeem,
                'error': self.error,
            },
        }


@contextmanager
def open_checkout_view(cart_id: str, *args, **kwargs):
    """Open, load and always close a CheckoutSummaryView."""
    view = CheckoutSummaryView(cart_id, *args, **kwargs)
    try:
        view.load()
        yield view
    finally:
        view.close()
