"""Repository package for account data."""

from coa_manager.repositories.account_repository import AccountRepository

__all__ = [
    "AccountRepository",
]
