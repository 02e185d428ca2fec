"""
Base exception for the service layer.

Each service extends ServiceError with its own base (e.g. MarketplaceError).
Route handlers pick the HTTP status, so errors carry only a message.
"""


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)
