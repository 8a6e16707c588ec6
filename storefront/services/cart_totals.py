"""
Cart totals with coin-only items split out.

Every line item is settled either in currency or in coins, never both:
- payment_type 'points' items are coin-settled: their point_price x quantity
  goes to the coin subtotal and their currency total is removed from the
  currency subtotal and total
- 'currency' items, 'both' items and items with no config are
  currency-settled; a 'both' item only shows an informational "or N Coins"
  price, and is paid with coins only through a committed redemption
- a committed redemption (cart.metadata.points_cost) is shown as its own
  line exactly as recorded, never recomputed from current prices
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any, Mapping

from ..models.cart import Cart, LineItem
from ..models.points import VariantPointConfig

logger = logging.getLogger(__name__)

ZERO = Decimal('0')


class Settlement(str, Enum):
    """How a line item is paid in a totals computation."""
    CURRENCY = 'currency'
    POINTS = 'points'


def classify_line_item(item: LineItem, config: Optional[VariantPointConfig]) -> Settlement:
    """Points-settled iff the variant is coins-only; anything else is currency."""
    if config is not None and config.points_only and config.point_price is not None:
        return Settlement.POINTS
    return Settlement.CURRENCY


@dataclass
class TotalsAmount:
    """One amount shown on a totals line."""
    kind: str           # 'currency' or 'coins'
    value: Any          # Decimal for currency, int for coins
    negative: bool = False

    def to_dict(self) -> Dict[str, Any]:
        value = float(self.value) if self.kind == 'currency' else int(self.value)
        data = {'kind': self.kind, 'value': value, 'negative': self.negative}
        if self.kind == 'coins':
            data['label'] = f'{int(self.value):,} Coins'
        return data


@dataclass
class TotalsLine:
    key: str
    label: str
    amounts: List[TotalsAmount] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'label': self.label,
            'amounts': [a.to_dict() for a in self.amounts],
        }


@dataclass
class CartTotals:
    """Result of splitting a cart into currency-payable and coin-payable parts."""
    cart_id: str
    currency_code: str
    currency_subtotal: Decimal
    adjusted_total: Decimal
    shipping_subtotal: Decimal
    tax_total: Decimal
    discount_subtotal: Decimal
    coin_only_subtotal: int
    coin_items_currency_total: Decimal
    points_cost: Optional[int] = None
    currency_item_ids: List[str] = field(default_factory=list)
    coin_item_ids: List[str] = field(default_factory=list)

    @property
    def has_coin_only_items(self) -> bool:
        return self.coin_only_subtotal > 0

    @property
    def show_currency_subtotal(self) -> bool:
        return self.currency_subtotal > 0

    def _split_amounts(self, currency_value: Decimal) -> List[TotalsAmount]:
        amounts = []
        if currency_value > 0:
            amounts.append(TotalsAmount('currency', currency_value))
        if self.has_coin_only_items:
            amounts.append(TotalsAmount('coins', self.coin_only_subtotal))
        if not amounts:
            # The total line is never left empty
            amounts.append(TotalsAmount('currency', ZERO))
        return amounts

    def lines(self) -> List[TotalsLine]:
        """Display lines in render order."""
        lines = [
            TotalsLine('subtotal', 'Subtotal (excl. shipping and taxes)',
                       self._split_amounts(self.currency_subtotal)),
        ]
        if self.show_currency_subtotal:
            lines.append(TotalsLine('shipping', 'Shipping',
                                    [TotalsAmount('currency', self.shipping_subtotal)]))
        if self.discount_subtotal:
            lines.append(TotalsLine('discount', 'Discount',
                                    [TotalsAmount('currency', self.discount_subtotal, negative=True)]))
        if self.points_cost:
            lines.append(TotalsLine('coins_applied', 'Coins Applied',
                                    [TotalsAmount('coins', self.points_cost)]))
        if self.show_currency_subtotal:
            lines.append(TotalsLine('taxes', 'Taxes',
                                    [TotalsAmount('currency', self.tax_total)]))
        lines.append(TotalsLine('total', 'Total', self._split_amounts(self.adjusted_total)))
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cart_id': self.cart_id,
            'currency_code': self.currency_code,
            'currency_subtotal': float(self.currency_subtotal),
            'adjusted_total': float(self.adjusted_total),
            'shipping_subtotal': float(self.shipping_subtotal),
            'tax_total': float(self.tax_total),
            'discount_subtotal': float(self.discount_subtotal),
            'coin_only_subtotal': self.coin_only_subtotal,
            'points_cost': self.points_cost,
            'currency_item_ids': list(self.currency_item_ids),
            'coin_item_ids': list(self.coin_item_ids),
            'lines': [line.to_dict() for line in self.lines()],
        }


def _clamp(value: Decimal, name: str, cart_id: str) -> Decimal:
    if value < 0:
        # Policy changed after the cart was priced
        logger.warning('Cart %s %s went negative (%s); clamping to zero', cart_id, name, value)
        return ZERO
    return value


def compute_cart_totals(
    cart: Cart,
    point_configs: Mapping[str, Optional[VariantPointConfig]]
) -> CartTotals:
    """
    Split a cart's totals into currency and coin parts.

    Args:
        cart: Cart snapshot from the backend
        point_configs: variant_id -> config; missing or None means currency only

    Returns:
        CartTotals with non-negative currency amounts
    """
    coin_only_subtotal = 0
    coin_items_currency_total = ZERO
    currency_item_ids = []
    coin_item_ids = []

    for item in cart.items:
        config = point_configs.get(item.variant_id) if item.variant_id else None

        if classify_line_item(item, config) == Settlement.POINTS:
            coin_only_subtotal += config.point_price * item.quantity
            coin_items_currency_total += item.total
            coin_item_ids.append(item.id)
        else:
            currency_item_ids.append(item.id)

    currency_subtotal = _clamp(cart.item_subtotal - coin_items_currency_total, 'currency subtotal', cart.id)
    adjusted_total = _clamp(cart.total - coin_items_currency_total, 'total', cart.id)

    return CartTotals(
        cart_id=cart.id,
        currency_code=cart.currency_code,
        currency_subtotal=currency_subtotal,
        adjusted_total=adjusted_total,
        shipping_subtotal=cart.shipping_subtotal,
        tax_total=cart.tax_total,
        discount_subtotal=cart.discount_subtotal,
        coin_only_subtotal=coin_only_subtotal,
        coin_items_currency_total=coin_items_currency_total,
        points_cost=cart.points_cost,
        currency_item_ids=currency_item_ids,
        coin_item_ids=coin_item_ids,
    )
