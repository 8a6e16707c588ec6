"""
Coin balance and ledger reads for the storefront.

ARCHITECTURE:
- The ledger lives in the commerce backend; entries are created there only as
  a side effect of a committed or reverted redemption (or earning, which is
  outside this app)
- This service never writes ledger entries, it only reads snapshots
- Responses are cached under the session's "coins" tag and dropped when a
  redemption change publishes that tag

An unauthenticated customer or a failed fetch hides the coins feature for the
view; neither is an error for the caller.
"""
import logging
from typing import Optional, List, Dict, Any

from ..models.points import CustomerPoints, PointBalance, PointTransaction, PointTransactionType
from ..utils.cache import cache, get_cache_tag, tagged_key
from ..utils.exceptions import CommerceBackendError
from .invalidation import COINS

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIMEOUT = 300

# Badge colour per ledger entry type
BADGE_COLORS = {
    PointTransactionType.EARN: 'green',
    PointTransactionType.SPEND: 'red',
    PointTransactionType.ADJUST: 'grey',
}


def format_coins(amount: int) -> str:
    """Format a coin amount for display, e.g. '1,200 Coins'."""
    return f'{int(amount):,} Coins'


class PointsService:
    """
    Reads a customer's coin balance and history.

    Usage:
        service = PointsService(client, auth_headers, customer_id, cache_id)
        balance = service.get_balance()     # None -> hide coins UI
        history = service.get_history()
    """

    def __init__(
        self,
        client,
        auth_headers: Optional[Dict[str, str]],
        customer_id: str = None,
        cache_id: str = None,
        cache_timeout: int = DEFAULT_CACHE_TIMEOUT
    ):
        self.client = client
        self.auth_headers = auth_headers
        self.customer_id = customer_id
        self.cache_id = cache_id
        self.cache_timeout = cache_timeout

    def _fetch(self) -> Dict[str, Any]:
        key = tagged_key(get_cache_tag(COINS, self.cache_id), 'points', customer=self.customer_id)
        data = cache.get(key)
        if data is None:
            data = self.client.get_customer_points(self.auth_headers)
            cache.set(key, data, timeout=self.cache_timeout)
        return data

    def get_customer_points(self) -> Optional[CustomerPoints]:
        """
        Get balance and ledger in one snapshot.

        Returns:
            CustomerPoints, or None when the feature is unavailable
        """
        if not self.auth_headers:
            return None

        try:
            data = self._fetch()
        except CommerceBackendError as e:
            logger.error('Failed to fetch customer coins: %s', e.message)
            return None

        try:
            return CustomerPoints.from_response(data, customer_id=self.customer_id)
        except (KeyError, ValueError, TypeError) as e:
            logger.error('Malformed coins response for customer %s: %s', self.customer_id, e)
            return None

    def get_balance(self) -> Optional[PointBalance]:
        points = self.get_customer_points()
        return points.balance if points else None

    def get_history(self) -> Optional[List[PointTransaction]]:
        """Ledger entries in backend order (newest first as returned)."""
        points = self.get_customer_points()
        return list(points.transactions) if points else None


def describe_transaction(txn: PointTransaction) -> Dict[str, Any]:
    """Presentation of one ledger entry for the account coins page."""
    sign = '+' if txn.signed_points >= 0 else '-'
    return {
        'id': txn.id,
        'type': txn.type.value,
        'badge_color': BADGE_COLORS.get(txn.type, 'grey'),
        'reason': txn.reason or '-',
        'amount': txn.signed_points,
        'amount_label': f'{sign}{abs(txn.points):,}',
        'created_at': txn.created_at.isoformat() if txn.created_at else None,
        'date_label': txn.created_at.strftime('%b %d, %Y, %I:%M %p') if txn.created_at else None,
    }


def describe_customer_points(points: Optional[CustomerPoints]) -> Dict[str, Any]:
    """Account coins page payload; hidden when points is None."""
    if points is None:
        return {'available': False}

    return {
        'available': True,
        'balance': points.balance.balance,
        'balance_label': f'{points.balance.balance:,}',
        'transactions': [describe_transaction(t) for t in points.transactions],
    }
