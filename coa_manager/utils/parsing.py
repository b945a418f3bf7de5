"""Common parsing utility functions.

This module contains helpers for parsing the loosely-typed values that come
back from the accounts API and from operator input.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = ("ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE")

# Older forms sent "Income" for revenue accounts
ACCOUNT_TYPE_ALIASES = {
    "INCOME": "REVENUE",
}

_NO_PARENT_STRINGS = ("", "0", "none", "null", "undefined")


def parse_parent_id(value: Any) -> Optional[int]:
    """
    Parse a parent account reference.

    None, empty strings and 0 all mean "top level, no parent".

    Args:
        value: Parent id as int, numeric string or None

    Returns:
        The parent id, or None for a top-level account

    Raises:
        ValueError: If the value is not a usable id
    """
    if value is None or value is False:
        return None

    if isinstance(value, str):
        value = value.strip()
        if value.lower() in _NO_PARENT_STRINGS:
            return None

    try:
        parent_id = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid parent account id: {value!r}")

    if isinstance(value, float) and value != parent_id:
        raise ValueError(f"Invalid parent account id: {value!r}")
    if parent_id < 0:
        raise ValueError(f"Invalid parent account id: {value!r}")

    return parent_id or None


def parse_account_type(value: Any) -> str:
    """
    Parse an account type in any letter case.

    Args:
        value: Account type such as "Asset", "asset" or "ASSET"

    Returns:
        Upper-case account type name

    Raises:
        ValueError: If the value is not a known account type
    """
    if value is None:
        raise ValueError("Account type is required")

    normalized = str(value).strip().upper()
    normalized = ACCOUNT_TYPE_ALIASES.get(normalized, normalized)
    if normalized not in ACCOUNT_TYPES:
        raise ValueError(f"Unknown account type: {value!r}")
    return normalized


def normalize_term(term: Optional[str]) -> str:
    """Lower-case and strip a search term; None becomes an empty string."""
    if not term:
        return ""
    return str(term).strip().lower()
