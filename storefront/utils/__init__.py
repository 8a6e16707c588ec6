"""
Utility modules for the storefront.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    exception_response,
    bad_request,
    unauthorized,
    not_found,
    conflict,
    internal_error
)
from .exceptions import (
    StorefrontError,
    NotFoundError,
    ValidationError,
    AuthorizationError,
    CommerceBackendError,
    PolicyUnavailableError,
    RedemptionRejectedError,
    RevertRejectedError,
    RedemptionInProgressError
)
