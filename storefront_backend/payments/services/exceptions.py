# payments/services/exceptions.py

"""
PAYMENT GATEWAY ERRORS
"""


class GatewayError(Exception):
    """Base exception for payment gateway failures."""


class GatewayConfigurationError(GatewayError):
    """Raised when base URL / API key are not configured."""


class GatewayRequestError(GatewayError):
    """Raised on HTTP/network failures or unusable gateway responses."""

    def __init__(self, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
