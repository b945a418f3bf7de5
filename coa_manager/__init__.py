"""Chart-of-accounts client for the business-management API."""

__version__ = "0.1.0"
