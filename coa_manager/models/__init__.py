"""Data models for accounts and errors."""

from coa_manager.models.account import AccountType, AccountRecord, AccountNode, AccountForm
from coa_manager.models.errors import (
    AccountsError,
    AccountsAPIError,
    NetworkError,
    ServerRejection,
    MalformedResponse,
    InvalidParentReference,
    AccountValidationError,
)

__all__ = [
    "AccountType",
    "AccountRecord",
    "AccountNode",
    "AccountForm",
    "AccountsError",
    "AccountsAPIError",
    "NetworkError",
    "ServerRejection",
    "MalformedResponse",
    "InvalidParentReference",
    "AccountValidationError",
]
