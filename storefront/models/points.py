"""
Coin (loyalty point) models for the storefront.

The ledger and balances live in the commerce backend; these are read-only
snapshots of what it returns. Variant point configs are policy data and are
looked up per view, never stored on line items.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any


# ==================== Enums ====================

class PaymentType(str, Enum):
    """How a product variant may be paid for."""
    CURRENCY = 'currency'   # Money only
    POINTS = 'points'       # Coins only
    BOTH = 'both'           # Either; currency unless coins are committed


class PointTransactionType(str, Enum):
    """Types of ledger entries."""
    EARN = 'earn'       # Credit
    SPEND = 'spend'     # Debit from a redemption
    ADJUST = 'adjust'   # Manual or compensating change (+/-)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the backend."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace('Z', '+00:00'))


# ==================== Models ====================

@dataclass(frozen=True)
class VariantPointConfig:
    """Payment policy for one product variant."""
    variant_id: str
    payment_type: PaymentType
    point_price: Optional[int] = None

    def __post_init__(self):
        payment_type = PaymentType(self.payment_type)
        object.__setattr__(self, 'payment_type', payment_type)

        if payment_type == PaymentType.CURRENCY:
            object.__setattr__(self, 'point_price', None)
            return

        if self.point_price is None:
            raise ValueError(
                f"point_price is required for payment_type '{payment_type.value}'"
            )
        if int(self.point_price) < 0:
            raise ValueError('point_price must be non-negative')
        object.__setattr__(self, 'point_price', int(self.point_price))

    @property
    def points_only(self) -> bool:
        return self.payment_type == PaymentType.POINTS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VariantPointConfig':
        return cls(
            variant_id=data['variant_id'],
            payment_type=data.get('payment_type') or PaymentType.CURRENCY,
            point_price=data.get('point_price'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'variant_id': self.variant_id,
            'payment_type': self.payment_type.value,
            'point_price': self.point_price,
        }


@dataclass(frozen=True)
class PointTransaction:
    """
    Immutable ledger entry.

    points is a magnitude; whether it credits or debits the balance is decided
    by type. Adjustments carry their own sign.
    """
    id: str
    customer_id: str
    type: PointTransactionType
    points: int
    reason: Optional[str] = None
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def signed_points(self) -> int:
        """Effect of this entry on the balance."""
        if self.type == PointTransactionType.EARN:
            return abs(self.points)
        if self.type == PointTransactionType.SPEND:
            return -abs(self.points)
        return self.points

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PointTransaction':
        return cls(
            id=data['id'],
            customer_id=data.get('customer_id'),
            type=PointTransactionType(data['type']),
            points=int(data.get('points') or 0),
            reason=data.get('reason'),
            reference_id=data.get('reference_id'),
            reference_type=data.get('reference_type'),
            created_at=parse_timestamp(data.get('created_at')),
            updated_at=parse_timestamp(data.get('updated_at')),
        )


@dataclass(frozen=True)
class PointBalance:
    """A customer's current coin balance."""
    customer_id: Optional[str]
    balance: int

    def __post_init__(self):
        if self.balance < 0:
            raise ValueError('balance must be non-negative')


@dataclass
class CustomerPoints:
    """Balance plus full ledger snapshot, as returned by one fetch."""
    balance: PointBalance
    transactions: List[PointTransaction] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: Dict[str, Any], customer_id: str = None) -> 'CustomerPoints':
        transactions = [PointTransaction.from_dict(t) for t in data.get('transactions') or []]
        if customer_id is None and transactions:
            customer_id = transactions[0].customer_id
        return cls(
            balance=PointBalance(customer_id=customer_id, balance=int(data.get('coins') or 0)),
            transactions=transactions,
        )
