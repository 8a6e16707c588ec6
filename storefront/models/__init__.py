"""
Data models for the storefront.
Read-only snapshots of commerce backend carts, coin ledgers and payment policy.
"""
from .cart import Cart, LineItem, to_decimal
from .points import (
    # Enums
    PaymentType,
    PointTransactionType,
    # Models
    VariantPointConfig,
    PointTransaction,
    PointBalance,
    CustomerPoints,
)
