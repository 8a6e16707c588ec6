"""
Variant payment policy lookups.

A variant's point config decides whether it is paid with currency, coins or
either. Configs are public data, fetched fresh for every view, and any
failure degrades to currency-only pricing rather than blocking the page.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, Iterable, List

from ..models.points import VariantPointConfig
from ..utils.exceptions import CommerceBackendError, PolicyUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class PointConfigService:
    """
    Looks up VariantPointConfig for variants shown in one view.

    Usage:
        service = PointConfigService(client)
        configs = service.lookup_many(cart.variant_ids)
        config = configs.get(item.variant_id)  # None -> currency only
    """

    def __init__(self, client, max_workers: int = DEFAULT_MAX_WORKERS):
        self.client = client
        self.max_workers = max_workers

    def fetch(self, variant_id: str) -> Optional[VariantPointConfig]:
        """
        Fetch a variant's config.

        Returns:
            The config, or None when the backend has none for the variant

        Raises:
            PolicyUnavailableError: Fetch failed or the config is malformed
        """
        try:
            data = self.client.get_variant_point_config(variant_id)
        except CommerceBackendError as e:
            raise PolicyUnavailableError(variant_id, e.message) from e

        if not data:
            return None

        try:
            return VariantPointConfig.from_dict({'variant_id': variant_id, **data})
        except (ValueError, TypeError) as e:
            raise PolicyUnavailableError(variant_id, str(e)) from e

    def lookup(self, variant_id: str) -> Optional[VariantPointConfig]:
        """Fetch a variant's config, treating any failure as absent."""
        if not variant_id:
            return None
        try:
            return self.fetch(variant_id)
        except PolicyUnavailableError as e:
            logger.warning('Failed to fetch point config for variant %s: %s', variant_id, e.message)
            return None

    def lookup_many(self, variant_ids: Iterable[str]) -> Dict[str, Optional[VariantPointConfig]]:
        """
        Look up configs for several variants concurrently.

        Duplicate and empty ids are dropped; every remaining id appears in the
        result, mapped to None where the lookup failed.
        """
        unique_ids: List[str] = []
        for variant_id in variant_ids:
            if variant_id and variant_id not in unique_ids:
                unique_ids.append(variant_id)

        if not unique_ids:
            return {}

        workers = max(1, min(self.max_workers, len(unique_ids)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self.lookup, unique_ids))

        return dict(zip(unique_ids, results))
