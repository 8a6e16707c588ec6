"""
Coins API endpoints.

Handles:
- Account coin balance and transaction history
- Applying coins to a cart (commit)
- Removing coins from a cart (revert)
"""
from flask import Blueprint, request, jsonify

from ..services import points_service, checkout_view
from ..services.coin_selection import CoinSelection
from ..services.points_service import describe_customer_points
from ..utils.errors import exception_response
from ..utils.exceptions import ValidationError

coins_bp = Blueprint('coins', __name__)


def parse_redeem_payload(payload: dict) -> list:
    """
    Selected variant ids from a redeem request body.

    Accepts either {"variant_ids": [...]} or {"selections": {id: bool}}.
    A body with neither redeems against an empty selection.
    """
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')

    if 'variant_ids' in payload:
        variant_ids = payload['variant_ids']
        if not isinstance(variant_ids, list) or not all(isinstance(v, str) for v in variant_ids):
            raise ValidationError('variant_ids must be a list of strings', 'variant_ids')
        return list(dict.fromkeys(variant_ids))

    if 'selections' in payload:
        selections = payload['selections']
        if not isinstance(selections, dict):
            raise ValidationError('selections must be an object', 'selections')
        return CoinSelection.from_mapping(selections).selected_variant_ids()

    return []


# ==============================================================================
# ACCOUNT
# ==============================================================================

@coins_bp.route('/account/coins', methods=['GET'])
def get_account_coins():
    """
    Get the customer's coin balance and history.

    Returns:
        {'available': False} when not logged in or the backend is unavailable,
        otherwise balance and transactions newest first
    """
    return jsonify(describe_customer_points(points_service().get_customer_points()))


# ==============================================================================
# REDEMPTION
# ==============================================================================

@coins_bp.route('/carts/<cart_id>/coins', methods=['POST'])
def redeem_coins(cart_id):
    """
    Apply coins to a cart.

    Request body:
    {
        "variant_ids": ["variant_1", "variant_2"]
    }

    The list is the complete selection; it is always sent to the backend,
    empty or not.

    Returns:
        Checkout summary with the committed points_cost
    """
    payload = request.get_json(silent=True)
    if payload is None:
        if request.get_data():
            raise ValidationError('Request body must be a JSON object')
        payload = {}
    variant_ids = parse_redeem_payload(payload)

    with checkout_view(cart_id) as view:
        for variant_id in variant_ids:
            view.toggle(variant_id)

        if not view.redeem():
            return exception_response(view.failure)
        return jsonify(view.to_dict())


@coins_bp.route('/carts/<cart_id>/coins', methods=['DELETE'])
def remove_coins(cart_id):
    """
    Remove committed coins from a cart.

    Safe to call on a cart with no coins applied.

    Returns:
        Checkout summary with no points_cost
    """
    with checkout_view(cart_id) as view:
        if not view.remove():
            return exception_response(view.failure)
        return jsonify(view.to_dict())
