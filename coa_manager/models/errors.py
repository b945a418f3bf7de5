"""Exceptions raised by the accounts client and the tree services."""

from typing import Optional


class AccountsError(Exception):
    """Base exception for chart-of-accounts errors."""
    pass


class AccountsAPIError(AccountsError):
    """Base exception for failures talking to the accounts API."""
    pass


class NetworkError(AccountsAPIError):
    """Raised when the request did not reach the server or no response arrived."""

    def __init__(self, message: str = "No response from server. Please check your connection."):
        super().__init__(message)


class ServerRejection(AccountsAPIError):
    """Raised when the server answers with a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class MalformedResponse(AccountsAPIError):
    """Raised when a response body cannot be interpreted."""
    pass


class InvalidParentReference(AccountsError):
    """Raised when a parent account id does not resolve in the loaded records."""

    def __init__(self, parent_account_id: int):
        super().__init__(f"Parent account {parent_account_id} does not exist")
        self.parent_account_id = parent_account_id


class AccountValidationError(AccountsError):
    """Raised when an account form fails client-side validation."""
    pass
