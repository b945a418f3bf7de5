"""Accounts API client."""

from .client import AccountsAPIClient

__all__ = ['AccountsAPIClient']
