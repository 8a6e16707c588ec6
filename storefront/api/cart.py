"""
Cart API endpoints.

Handles:
- Cart totals with coin-only items split out
- Checkout summary (totals, line item prices, coin redemption state)
"""
from flask import Blueprint, request, jsonify

from ..services import cart_service, point_config_service, checkout_view
from ..services.cart_totals import compute_cart_totals

cart_bp = Blueprint('cart', __name__)


def parse_selected(value: str) -> list:
    """Comma separated variant ids from a query param."""
    if not value:
        return []
    return list(dict.fromkeys(v.strip() for v in value.split(',') if v.strip()))


@cart_bp.route('/<cart_id>/totals', methods=['GET'])
def get_cart_totals(cart_id):
    """
    Get a cart's currency and coin totals.

    Returns:
        Currency subtotal/total after removing coin-only items, the coin-only
        subtotal, committed points_cost and ordered display lines
    """
    cart = cart_service().get_cart(cart_id)
    configs = point_config_service().lookup_many(cart.variant_ids)
    totals = compute_cart_totals(cart, configs)
    return jsonify(totals.to_dict())


@cart_bp.route('/<cart_id>/summary', methods=['GET'])
def get_checkout_summary(cart_id):
    """
    Get the checkout summary for a cart.

    Query params:
        selected: Comma separated variant ids the customer has ticked to pay
                  with coins (client-side selection, not committed)

    Returns:
        Totals, line items with price displays and the redemption control state
    """
    with checkout_view(cart_id) as view:
        for variant_id in parse_selected(request.args.get('selected', '')):
            view.toggle(variant_id)
        return jsonify(view.to_dict())
