"""Mock accounts API client for development and testing."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from coa_manager.config import ACCOUNT_TYPE_PREFIX
from coa_manager.models.errors import ServerRejection
from coa_manager.utils.parsing import parse_parent_id

logger = logging.getLogger(__name__)


def sample_accounts() -> List[Dict[str, Any]]:
    """A small seed chart of accounts."""
    return [
        {"account_id": 1, "account_code": "1000", "account_name": "Assets", "account_type": "ASSET", "parent_account_id": None},
        {"account_id": 2, "account_code": "1010", "account_name": "Cash", "account_type": "ASSET", "parent_account_id": 1},
        {"account_id": 3, "account_code": "1020", "account_name": "Bank Accounts", "account_type": "ASSET", "parent_account_id": 1},
        {"account_id": 4, "account_code": "1021", "account_name": "Main Checking", "account_type": "ASSET", "parent_account_id": 3},
        {"account_id": 5, "account_code": "2000", "account_name": "Liabilities", "account_type": "LIABILITY", "parent_account_id": None},
        {"account_id": 6, "account_code": "2010", "account_name": "Accounts Payable", "account_type": "LIABILITY", "parent_account_id": 5},
        {"account_id": 7, "account_code": "3000", "account_name": "Equity", "account_type": "EQUITY", "parent_account_id": None},
        {"account_id": 8, "account_code": "4000", "account_name": "Revenue", "account_type": "REVENUE", "parent_account_id": None},
        {"account_id": 9, "account_code": "4010", "account_name": "Sales", "account_type": "REVENUE", "parent_account_id": 8},
        {"account_id": 10, "account_code": "5000", "account_name": "Expenses", "account_type": "EXPENSE", "parent_account_id": None},
        {"account_id": 11, "account_code": "5010", "account_name": "Rent", "account_type": "EXPENSE", "parent_account_id": 10},
    ]


class MockAccountsAPIClient:
    """
    An in-memory stand-in for the accounts API.

    Exposes the same coroutines as AccountsAPIClient and raises the same
    errors. The server side assigns ids and account codes.
    """

    def __init__(self, accounts: Optional[List[Dict[str, Any]]] = None):
        """
        Initialize the mock with an optional starting set of account rows.

        Args:
            accounts: Account rows; copied, never shared with the caller
        """
        self.accounts: Dict[int, Dict[str, Any]] = {}
        for row in accounts or []:
            self.accounts[int(row["account_id"])] = dict(row)

        self.next_id = max(self.accounts, default=0) + 1
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self._fail: Optional[Exception] = None
        logger.info(f"Initialized mock accounts API with {len(self.accounts)} accounts")

    async def close(self):
        """Nothing to release; present for parity with AccountsAPIClient."""
        return None

    def fail_next(self, exc: Exception):
        """Make the next call raise exc."""
        self._fail = exc

    def _record_call(self, name: str, **fields):
        self.calls.append((name, fields))
        if self._fail is not None:
            exc, self._fail = self._fail, None
            raise exc

    def _level(self, account_id: int) -> int:
        level = 0
        seen = set()
        parent = self.accounts[account_id].get("parent_account_id")
        while parent and parent in self.accounts and parent not in seen:
            seen.add(parent)
            level += 1
            parent = self.accounts[parent].get("parent_account_id")
        return level

    def _next_code(self, account_type: str, parent_id: Optional[int]) -> str:
        """Generate the next free account code under a parent or type band."""
        used = {str(row.get("account_code") or "") for row in self.accounts.values()}

        if parent_id is None:
            prefix = ACCOUNT_TYPE_PREFIX.get(account_type, "9")
            base = int(prefix + "000")
            step = 100
        else:
            parent_code = str(self.accounts[parent_id].get("account_code") or "")
            if not parent_code.isdigit():
                sequence = 1
                while f"{parent_code}-{sequence:02d}" in used:
                    sequence += 1
                return f"{parent_code}-{sequence:02d}"
            base = int(parent_code)
            step = 10 if self._level(parent_id) == 0 else 1
            base += step

        code = base
        while str(code) in used:
            code += step
        return str(code)

    def _descendants(self, account_id: int) -> set:
        found = set()
        pending = [account_id]
        while pending:
            current = pending.pop()
            for row in self.accounts.values():
                child_id = row["account_id"]
                if row.get("parent_account_id") == current and child_id not in found:
                    found.add(child_id)
                    pending.append(child_id)
        return found

    async def fetch_accounts(self) -> List[Dict[str, Any]]:
        self._record_call("fetch_accounts")
        return [dict(row) for row in self.accounts.values()]

    async def create_account(self, account_name: str, account_type: str,
                             parent_account_id: Optional[int]) -> Dict[str, Any]:
        self._record_call(
            "create_account",
            account_name=account_name,
            account_type=account_type,
            parent_account_id=parent_account_id,
        )
        if not account_name:
            raise ServerRejection("account_name is required", 400)

        parent_id = parse_parent_id(parent_account_id)
        if parent_id is not None and parent_id not in self.accounts:
            raise ServerRejection("Parent account not found", 400)

        account_id = self.next_id
        self.next_id += 1
        self.accounts[account_id] = {
            "account_id": account_id,
            "account_code": self._next_code(account_type, parent_id),
            "account_name": account_name,
            "account_type": account_type,
            "parent_account_id": parent_id,
        }
        return {"account_id": account_id}

    async def update_account(self, account_id: int, account_code: Optional[str], account_name: str,
                             account_type: str, parent_account_id: Optional[int]) -> Dict[str, Any]:
        self._record_call(
            "update_account",
            account_id=account_id,
            account_code=account_code,
            account_name=account_name,
            account_type=account_type,
            parent_account_id=parent_account_id,
        )
        if account_id not in self.accounts:
            raise ServerRejection("Account not found", 404)

        parent_id = parse_parent_id(parent_account_id)
        if parent_id is not None:
            if parent_id not in self.accounts:
                raise ServerRejection("Parent account not found", 400)
            if parent_id == account_id or parent_id in self._descendants(account_id):
                raise ServerRejection("An account cannot be moved under itself", 400)

        row = self.accounts[account_id]
        row.update({
            "account_name": account_name,
            "account_type": account_type,
            "parent_account_id": parent_id,
        })
        if account_code is not None:
            row["account_code"] = account_code
        return {"success": True}

    async def delete_account(self, account_id: int) -> Dict[str, Any]:
        self._record_call("delete_account", account_id=account_id)
        if account_id not in self.accounts:
            raise ServerRejection("Account not found", 404)
        if any(row.get("parent_account_id") == account_id for row in self.accounts.values()):
            raise ServerRejection("Cannot delete an account that has child accounts", 409)

        del self.accounts[account_id]
        return {"success": True}
