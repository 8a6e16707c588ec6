"""
Custom exceptions for storefront business logic.

These exceptions provide more specific error handling than generic Exception,
allowing for better error messages and appropriate HTTP status codes.
"""


class StorefrontError(Exception):
    """Base exception for all storefront business logic errors."""

    def __init__(self, message: str, code: str = "STOREFRONT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class ValidationError(StorefrontError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class AuthorizationError(StorefrontError):
    """Customer not authenticated for this operation."""

    def __init__(self, message: str = "You must be logged in"):
        super().__init__(message, "AUTHORIZATION_ERROR")


class CommerceBackendError(StorefrontError):
    """Error communicating with the commerce backend."""

    def __init__(self, message: str, status_code: int = None, original_error: Exception = None):
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message, "COMMERCE_BACKEND_ERROR")


class PolicyUnavailableError(StorefrontError):
    """A variant's point configuration could not be fetched or is malformed."""

    def __init__(self, variant_id: str, reason: str = None):
        self.variant_id = variant_id
        message = f"Point config for variant {variant_id} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, "POLICY_UNAVAILABLE")


class RedemptionRejectedError(StorefrontError):
    """Backend declined to apply coins to a cart."""

    def __init__(self, message: str = "Failed to redeem coins"):
        super().__init__(message, "REDEMPTION_REJECTED")


class RevertRejectedError(StorefrontError):
    """Backend declined to remove coins from a cart."""

    def __init__(self, message: str = "Failed to remove coins"):
        super().__init__(message, "REVERT_REJECTED")


class RedemptionInProgressError(StorefrontError):
    """A coin redemption change is already pending for the cart."""

    def __init__(self, cart_id: str):
        self.cart_id = cart_id
        message = f"A coin update for cart {cart_id} is already in progress"
        super().__init__(message, "REDEMPTION_IN_PROGRESS")
