"""
Tests for line item and product price presentation.
"""
import pytest

from storefront.models.cart import LineItem
from storefront.models.points import VariantPointConfig
from storefront.services.price_display import (
    get_percentage_diff,
    get_product_price,
    line_item_price,
    line_item_unit_price,
    product_preview,
    product_price,
)

POINTS = VariantPointConfig('variant_points', 'points', 500)
BOTH = VariantPointConfig('variant_both', 'both', 300)
CURRENCY = VariantPointConfig('variant_currency', 'currency')


def item(total=30, original_total=30, quantity=2, variant_id='variant_x'):
    return LineItem.from_dict({
        'id': 'item_1',
        'variant_id': variant_id,
        'quantity': quantity,
        'total': total,
        'original_total': original_total,
    })


def product():
    return {
        'id': 'prod_1',
        'handle': 'mug',
        'title': 'Mug',
        'variants': [
            {'id': 'variant_large', 'calculated_price': {
                'calculated_amount': 25, 'original_amount': 25, 'currency_code': 'usd',
                'calculated_price': {'price_list_type': None}}},
            {'id': 'variant_small', 'calculated_price': {
                'calculated_amount': 15, 'original_amount': 20, 'currency_code': 'usd',
                'calculated_price': {'price_list_type': 'sale'}}},
            {'id': 'variant_unpriced', 'calculated_price': None},
        ],
    }


class TestPercentageDiff:

    def test_rounds_half_up(self):
        assert get_percentage_diff(20, 15) == 25
        assert get_percentage_diff(3, 2) == 33
        assert get_percentage_diff(8, 7) == 13

    def test_zero_original(self):
        assert get_percentage_diff(0, 10) == 0


class TestLineItemPrice:
    """Tests for line_item_price."""

    def test_currency_item_has_no_coins(self):
        data = line_item_price(item(), 'usd', CURRENCY)
        assert data['mode'] == 'currency'
        assert data['amount'] == 30.0
        assert data['alternate_label'] is None
        assert 'coins' not in data

    def test_points_item_shows_coins(self):
        data = line_item_price(item(), 'usd', POINTS)
        assert data['mode'] == 'coins'
        assert data['coins'] == 1000
        assert data['coins_label'] == '1,000 Coins'
        assert data['struck_amount'] is None

    def test_both_item_shows_alternate(self):
        data = line_item_price(item(quantity=1, total=15, original_total=15), 'usd', BOTH)
        assert data['mode'] == 'currency'
        assert data['amount'] == 15.0
        assert data['alternate_label'] == 'or 300 Coins'

    def test_selected_both_item_strikes_currency(self):
        data = line_item_price(item(quantity=1, total=15, original_total=15), 'usd', BOTH, coin_selected=True)
        assert data['mode'] == 'coins'
        assert data['coins'] == 300
        assert data['struck_amount'] == 15.0

    def test_selected_flag_ignored_for_currency_item(self):
        data = line_item_price(item(), 'usd', CURRENCY, coin_selected=True)
        assert data['mode'] == 'currency'

    def test_reduced_price(self):
        data = line_item_price(item(total=15, original_total=20), 'usd', None)
        assert data['has_reduced_price'] is True
        assert data['original_amount'] == 20.0
        assert data['percentage_diff'] == 25

    def test_missing_config_is_currency(self):
        data = line_item_price(item(), 'usd', None)
        assert data['mode'] == 'currency'
        assert data['alternate_coins'] is None


class TestLineItemUnitPrice:

    def test_currency_unit_price(self):
        data = line_item_unit_price(item(total=30, quantity=2), 'usd', None)
        assert data['amount'] == 15.0

    def test_points_unit_price(self):
        data = line_item_unit_price(item(), 'usd', POINTS)
        assert data['coins'] == 500

    def test_both_unit_alternate(self):
        data = line_item_unit_price(item(), 'usd', BOTH)
        assert data['alternate_label'] == 'or 300 Coins'


class TestProductPrice:
    """Tests for product page and card prices."""

    def test_cheapest_and_variant_price(self):
        prices = get_product_price(product(), variant_id='variant_large')
        assert prices['cheapest_price']['variant_id'] == 'variant_small'
        assert prices['cheapest_price']['percentage_diff'] == 25
        assert prices['variant_price']['calculated_amount'] == 25.0

    def test_unknown_variant(self):
        assert get_product_price(product(), variant_id='nope')['variant_price'] is None

    def test_no_product(self):
        with pytest.raises(ValueError):
            get_product_price({})

    def test_loading_without_price(self):
        assert product_price(None) == {'loading': True}

    def test_points_only_hides_currency(self):
        price = get_product_price(product())['cheapest_price']
        data = product_price(price, POINTS, variant_selected=True)
        assert data['show_currency_price'] is False
        assert data['on_sale'] is False
        assert data['coin_label'] == '500 Coins'

    def test_both_shows_currency_and_alternate(self):
        price = get_product_price(product())['cheapest_price']
        data = product_price(price, BOTH, variant_selected=False)
        assert data['show_currency_price'] is True
        assert data['from_label'] is True
        assert data['on_sale'] is True
        assert data['original_amount'] == 20.0
        assert data['coin_label'] == 'or 300 Coins'

    def test_currency_has_no_coin_label(self):
        price = get_product_price(product())['cheapest_price']
        data = product_price(price, CURRENCY)
        assert data['coin_price'] is None
        assert data['coin_label'] is None

    def test_preview(self):
        data = product_preview(product(), BOTH)
        assert data['title'] == 'Mug'
        assert data['coin_label'] == '300 Coins'
        assert data['price']['calculated_amount'] == 15.0

    def test_preview_points_only_hides_price(self):
        data = product_preview(product(), POINTS)
        assert data['price'] is None
        assert data['coin_label'] == '500 Coins'
