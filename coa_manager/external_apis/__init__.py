"""External API clients for third-party services."""

# Import all client classes for easy access
from .accounts import AccountsAPIClient

__all__ = ['AccountsAPIClient']
