"""
Product price endpoints.

Currency price from the backend's calculated prices plus the variant's coin
price, for product pages and product cards.
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import get_commerce_client, point_config_service
from ..services.price_display import get_product_price, product_price, product_preview
from ..utils.exceptions import CommerceBackendError, NotFoundError

products_bp = Blueprint('products', __name__)


@products_bp.route('/<product_id>/price', methods=['GET'])
def get_price(product_id):
    """
    Get price display for a product.

    Query params:
        variant_id: Selected variant (optional; cheapest price otherwise)
        region_id: Pricing region (default DEFAULT_REGION_ID)

    Returns:
        'price' block for the product page and 'preview' block for cards
    """
    variant_id = request.args.get('variant_id')
    region_id = request.args.get('region_id') or current_app.config.get('DEFAULT_REGION_ID')

    try:
        product = get_commerce_client().retrieve_product(product_id, region_id=region_id)
    except CommerceBackendError as e:
        if e.status_code == 404:
            raise NotFoundError('Product', product_id) from e
        raise

    if not product:
        raise NotFoundError('Product', product_id)

    prices = get_product_price(product, variant_id=variant_id)
    variants = product.get('variants') or []
    first_variant_id = variants[0].get('id') if variants else None

    configs = point_config_service().lookup_many([v for v in (variant_id, first_variant_id) if v])
    selected_price = prices['variant_price'] if variant_id else prices['cheapest_price']

    return jsonify({
        'product_id': product_id,
        'variant_id': variant_id,
        'price': product_price(
            selected_price,
            configs.get(variant_id) if variant_id else configs.get(first_variant_id),
            variant_selected=bool(variant_id)
        ),
        'preview': product_preview(product, configs.get(first_variant_id)),
    })
