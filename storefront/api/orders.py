"""
Order item endpoints.

Line items of a placed order, priced the same way as cart items so coin-only
purchases show their coin price.
"""
from flask import Blueprint, jsonify, g

from ..middleware.customer_auth import require_customer_auth
from ..models.cart import LineItem
from ..services import get_commerce_client, point_config_service
from ..services.price_display import line_item_price, line_item_unit_price
from ..utils.exceptions import CommerceBackendError, NotFoundError

orders_bp = Blueprint('orders', __name__)


@orders_bp.route('/<order_id>/items', methods=['GET'])
@require_customer_auth
def get_order_items(order_id):
    """Get an order's line items with price displays."""
    try:
        order = get_commerce_client().retrieve_order(order_id, g.auth_headers)
    except CommerceBackendError as e:
        if e.status_code == 404:
            raise NotFoundError('Order', order_id) from e
        raise

    if not order:
        raise NotFoundError('Order', order_id)

    currency_code = order.get('currency_code') or ''
    items = [LineItem.from_dict(i) for i in order.get('items') or []]
    configs = point_config_service().lookup_many(i.variant_id for i in items)

    return jsonify({
        'order_id': order_id,
        'currency_code': currency_code,
        'items': [
            {
                'id': item.id,
                'variant_id': item.variant_id,
                'title': item.product_title or item.title,
                'thumbnail': item.thumbnail,
                'quantity': item.quantity,
                'price': line_item_price(item, currency_code, configs.get(item.variant_id)),
                'unit_price': line_item_unit_price(item, currency_code, configs.get(item.variant_id)),
            }
            for item in items
        ],
    })
