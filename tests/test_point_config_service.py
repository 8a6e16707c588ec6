"""
Tests for variant point config lookups.
"""
import pytest
from unittest.mock import MagicMock

from storefront.models.points import PaymentType, VariantPointConfig
from storefront.services.point_config_service import PointConfigService
from storefront.utils.exceptions import CommerceBackendError, PolicyUnavailableError


class TestVariantPointConfig:
    """Tests for the config model's invariants."""

    def test_currency_drops_point_price(self):
        config = VariantPointConfig('v1', 'currency', 500)
        assert config.payment_type == PaymentType.CURRENCY
        assert config.point_price is None

    def test_points_requires_price(self):
        with pytest.raises(ValueError):
            VariantPointConfig('v1', 'points')

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            VariantPointConfig('v1', 'both', -1)

    def test_zero_price_allowed(self):
        assert VariantPointConfig('v1', 'points', 0).point_price == 0

    def test_unknown_payment_type_rejected(self):
        with pytest.raises(ValueError):
            VariantPointConfig('v1', 'barter', 10)


class TestPointConfigService:
    """Tests for PointConfigService against the fake backend."""

    def test_fetch_returns_config(self, backend):
        service = PointConfigService(backend.client())
        config = service.fetch('variant_points')

        assert config.variant_id == 'variant_points'
        assert config.payment_type == PaymentType.POINTS
        assert config.point_price == 500

    def test_fetch_failure_raises(self, backend):
        backend.failing_variants.add('variant_points')
        service = PointConfigService(backend.client())

        with pytest.raises(PolicyUnavailableError) as exc:
            service.fetch('variant_points')
        assert exc.value.variant_id == 'variant_points'

    def test_lookup_failure_is_none(self, backend):
        """A failed lookup degrades to currency-only (None)."""
        backend.failing_variants.add('variant_points')
        service = PointConfigService(backend.client())
        assert service.lookup('variant_points') is None

    def test_lookup_malformed_config_is_none(self):
        client = MagicMock()
        client.get_variant_point_config.return_value = {'payment_type': 'points'}
        service = PointConfigService(client)
        assert service.lookup('variant_1') is None

    def test_lookup_empty_config_is_none(self):
        client = MagicMock()
        client.get_variant_point_config.return_value = {}
        assert PointConfigService(client).lookup('variant_1') is None

    def test_lookup_blank_id_skips_backend(self):
        client = MagicMock()
        assert PointConfigService(client).lookup('') is None
        client.get_variant_point_config.assert_not_called()

    def test_lookup_many_partial_failure(self, backend):
        """One failing variant does not affect the others."""
        backend.failing_variants.add('variant_both')
        service = PointConfigService(backend.client(), max_workers=3)

        configs = service.lookup_many(['variant_currency', 'variant_points', 'variant_both'])

        assert set(configs) == {'variant_currency', 'variant_points', 'variant_both'}
        assert configs['variant_both'] is None
        assert configs['variant_points'].point_price == 500
        assert configs['variant_currency'].payment_type == PaymentType.CURRENCY

    def test_lookup_many_dedups(self):
        client = MagicMock()
        client.get_variant_point_config.return_value = {'payment_type': 'both', 'point_price': 300}
        service = PointConfigService(client)

        configs = service.lookup_many(['v1', 'v1', None, 'v2', 'v1'])

        assert list(configs) == ['v1', 'v2']
        assert client.get_variant_point_config.call_count == 2

    def test_lookup_many_empty(self):
        client = MagicMock()
        assert PointConfigService(client).lookup_many([]) == {}
        client.get_variant_point_config.assert_not_called()

    def test_backend_error_message_kept(self):
        client = MagicMock()
        client.get_variant_point_config.side_effect = CommerceBackendError('boom', status_code=500)

        with pytest.raises(PolicyUnavailableError) as exc:
            PointConfigService(client).fetch('v1')
        assert 'boom' in exc.value.message
