"""
Price presentation for line items and products.

Turns backend prices plus a variant's point config into what the storefront
shows. Coin prices here are informational; only cart_totals decides what is
actually payable.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, List

from ..models.cart import LineItem, to_decimal
from ..models.points import VariantPointConfig, PaymentType
from .points_service import format_coins


def get_percentage_diff(original: Decimal, calculated: Decimal) -> int:
    """Whole-percent decrease from original to calculated."""
    if not original:
        return 0
    decrease = (to_decimal(original) - to_decimal(calculated)) / to_decimal(original) * 100
    return int(decrease.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _is_both(config: Optional[VariantPointConfig]) -> bool:
    return config is not None and config.payment_type == PaymentType.BOTH and config.point_price is not None


def _is_points_only(config: Optional[VariantPointConfig]) -> bool:
    return config is not None and config.points_only and config.point_price is not None


# ==================== Line items ====================

def line_item_price(
    item: LineItem,
    currency_code: str,
    config: Optional[VariantPointConfig] = None,
    coin_selected: bool = False
) -> Dict[str, Any]:
    """
    Line total display.

    Coins-only items, and 'both' items the customer has selected for coins,
    show their coin price. Everything else shows the currency total, with the
    "or N Coins" alternate for 'both' items.
    """
    current = item.total
    original = item.original_total
    selected_both = coin_selected and _is_both(config)

    if _is_points_only(config) or selected_both:
        coins = config.point_price * item.quantity
        return {
            'mode': 'coins',
            'coins': coins,
            'coins_label': format_coins(coins),
            # Struck-through currency price for a 'both' item paid with coins
            'struck_amount': float(current) if selected_both else None,
            'currency_code': currency_code,
        }

    has_reduced_price = current < original
    data = {
        'mode': 'currency',
        'amount': float(current),
        'currency_code': currency_code,
        'has_reduced_price': has_reduced_price,
        'original_amount': float(original) if has_reduced_price else None,
        'percentage_diff': get_percentage_diff(original, current) if has_reduced_price else None,
        'alternate_coins': None,
        'alternate_label': None,
    }
    if _is_both(config):
        coins = config.point_price * item.quantity
        data['alternate_coins'] = coins
        data['alternate_label'] = f'or {format_coins(coins)}'
    return data


def line_item_unit_price(
    item: LineItem,
    currency_code: str,
    config: Optional[VariantPointConfig] = None
) -> Dict[str, Any]:
    """Per-unit display for a line item."""
    if _is_points_only(config):
        return {
            'mode': 'coins',
            'coins': config.point_price,
            'coins_label': format_coins(config.point_price),
            'currency_code': currency_code,
        }

    quantity = item.quantity or 1
    has_reduced_price = item.total < item.original_total
    data = {
        'mode': 'currency',
        'amount': float(item.total / quantity),
        'currency_code': currency_code,
        'has_reduced_price': has_reduced_price,
        'original_amount': float(item.original_total / quantity) if has_reduced_price else None,
        'percentage_diff': get_percentage_diff(item.original_total, item.total) if has_reduced_price else None,
        'alternate_coins': None,
        'alternate_label': None,
    }
    if _is_both(config):
        data['alternate_coins'] = config.point_price
        data['alternate_label'] = f'or {format_coins(config.point_price)}'
    return data


# ==================== Products ====================

def get_prices_for_variant(variant: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Currency price details for a variant with a calculated price."""
    calculated = (variant or {}).get('calculated_price') or {}
    if not calculated.get('calculated_amount'):
        return None

    calculated_amount = to_decimal(calculated.get('calculated_amount'))
    original_amount = to_decimal(calculated.get('original_amount') or calculated_amount)
    price_list = calculated.get('calculated_price') or {}

    return {
        'variant_id': variant.get('id'),
        'calculated_amount': float(calculated_amount),
        'original_amount': float(original_amount),
        'currency_code': calculated.get('currency_code'),
        'price_type': price_list.get('price_list_type'),
        'percentage_diff': get_percentage_diff(original_amount, calculated_amount),
    }


def get_product_price(product: Dict[str, Any], variant_id: str = None) -> Dict[str, Any]:
    """
    Cheapest variant price and, when variant_id is given, that variant's price.

    Raises:
        ValueError: product has no id
    """
    if not product or not product.get('id'):
        raise ValueError('No product provided')

    variants: List[Dict[str, Any]] = product.get('variants') or []

    priced = [v for v in variants if (v.get('calculated_price') or {}).get('calculated_amount')]
    cheapest = None
    if priced:
        cheapest_variant = min(priced, key=lambda v: to_decimal(v['calculated_price']['calculated_amount']))
        cheapest = get_prices_for_variant(cheapest_variant)

    variant_price = None
    if variant_id:
        variant = next((v for v in variants if v.get('id') == variant_id), None)
        variant_price = get_prices_for_variant(variant) if variant else None

    return {
        'product': product,
        'cheapest_price': cheapest,
        'variant_price': variant_price,
    }


def product_price(
    price: Optional[Dict[str, Any]],
    config: Optional[VariantPointConfig] = None,
    variant_selected: bool = True
) -> Dict[str, Any]:
    """
    Product page price block.

    Coins-only variants hide the currency price; 'both' variants show the
    currency price followed by "or N Coins".
    """
    if price is None:
        return {'loading': True}

    coin_only = _is_points_only(config)
    show_coin_price = coin_only or _is_both(config)
    on_sale = price.get('price_type') == 'sale'

    data = {
        'loading': False,
        'show_currency_price': not coin_only,
        'from_label': not variant_selected,
        'amount': price['calculated_amount'],
        'currency_code': price.get('currency_code'),
        'on_sale': on_sale and not coin_only,
        'original_amount': price['original_amount'] if on_sale and not coin_only else None,
        'percentage_diff': price['percentage_diff'] if on_sale and not coin_only else None,
        'coin_price': None,
        'coin_label': None,
    }
    if show_coin_price:
        data['coin_price'] = config.point_price
        data['coin_label'] = format_coins(config.point_price) if coin_only else f'or {format_coins(config.point_price)}'
    return data


def product_preview(
    product: Dict[str, Any],
    config: Optional[VariantPointConfig] = None
) -> Dict[str, Any]:
    """Product card: title, cheapest currency price and the first variant's coin price."""
    cheapest = get_product_price(product)['cheapest_price']
    show_coin_price = _is_points_only(config) or _is_both(config)

    return {
        'handle': product.get('handle'),
        'title': product.get('title'),
        'thumbnail': product.get('thumbnail'),
        'coin_label': format_coins(config.point_price) if show_coin_price else None,
        'price': cheapest if cheapest and not _is_points_only(config) else None,
    }
