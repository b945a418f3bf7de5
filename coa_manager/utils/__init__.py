"""Utilities package for common functions."""

from .parsing import parse_parent_id, parse_account_type, normalize_term

__all__ = ['parse_parent_id', 'parse_account_type', 'normalize_term']
