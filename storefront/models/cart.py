"""
Cart and line item snapshots read from the commerce backend.

The engine never mutates these; it only reads them to classify and sum.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, List, Dict, Any


def to_decimal(value) -> Decimal:
    """Backend amounts arrive as JSON numbers or strings; None means zero."""
    if value is None:
        return Decimal('0')
    return Decimal(str(value))


@dataclass(frozen=True)
class LineItem:
    """A cart or order line item."""
    id: str
    variant_id: Optional[str]
    quantity: int
    total: Decimal
    original_total: Decimal
    title: Optional[str] = None
    product_title: Optional[str] = None
    thumbnail: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        variant = data.get('variant') or {}
        return cls(
            id=data['id'],
            variant_id=data.get('variant_id') or variant.get('id'),
            quantity=int(data.get('quantity') or 0),
            total=to_decimal(data.get('total')),
            original_total=to_decimal(data.get('original_total')),
            title=data.get('title'),
            product_title=data.get('product_title'),
            thumbnail=data.get('thumbnail'),
        )


@dataclass(frozen=True)
class Cart:
    """
    Cart totals, items and metadata.

    metadata.points_cost is set by the backend when a coin redemption has been
    committed; its presence is the only signal that coins are applied.
    """
    id: str
    currency_code: str
    total: Decimal = Decimal('0')
    subtotal: Decimal = Decimal('0')
    item_subtotal: Decimal = Decimal('0')
    shipping_subtotal: Decimal = Decimal('0')
    tax_total: Decimal = Decimal('0')
    discount_subtotal: Decimal = Decimal('0')
    items: List[LineItem] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    customer_id: Optional[str] = None

    @property
    def points_cost(self) -> Optional[int]:
        value = (self.metadata or {}).get('points_cost')
        if not value:
            return None
        return int(value)

    @property
    def has_points_applied(self) -> bool:
        return self.points_cost is not None

    @property
    def variant_ids(self) -> List[str]:
        """Distinct variant ids in line item order."""
        seen = []
        for item in self.items:
            if item.variant_id and item.variant_id not in seen:
                seen.append(item.variant_id)
        return seen

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Cart':
        return cls(
            id=data['id'],
            currency_code=data.get('currency_code') or '',
            total=to_decimal(data.get('total')),
            subtotal=to_decimal(data.get('subtotal')),
            item_subtotal=to_decimal(data.get('item_subtotal')),
            shipping_subtotal=to_decimal(data.get('shipping_subtotal')),
            tax_total=to_decimal(data.get('tax_total')),
            discount_subtotal=to_decimal(data.get('discount_subtotal')),
            items=[LineItem.from_dict(i) for i in data.get('items') or []],
            metadata=dict(data.get('metadata') or {}),
            customer_id=data.get('customer_id'),
        )
