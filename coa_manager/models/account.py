"""Account models for the chart of accounts."""

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any, List

from coa_manager.utils.parsing import parse_parent_id, parse_account_type

logger = logging.getLogger(__name__)


class AccountType(str, enum.Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    @classmethod
    def parse(cls, value: Any) -> "AccountType":
        """Parse a type name in any letter case (e.g. "Asset")."""
        if isinstance(value, cls):
            return value
        return cls(parse_account_type(value))


@dataclass(frozen=True)
class AccountRecord:
    """
    A single account row as returned by the accounts API.

    Records are immutable; the whole set is replaced after every fetch.
    """
    account_id: int
    account_code: str = ""
    account_name: str = ""
    account_type: str = ""  # Authoritative only for top-level accounts
    parent_account_id: Optional[int] = None  # None means top level

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountRecord":
        """
        Build a record from a server row.

        Args:
            data: Row dictionary from the API

        Returns:
            AccountRecord

        Raises:
            ValueError: If the row has no usable account_id
        """
        raw_id = data.get("account_id")
        try:
            account_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid account_id: {raw_id!r}")
        if account_id <= 0:
            raise ValueError(f"Invalid account_id: {raw_id!r}")

        account_type = data.get("account_type")
        if account_type:
            try:
                account_type = AccountType.parse(account_type).value
            except ValueError:
                account_type = str(account_type).strip().upper()

        raw_parent = data.get("parent_account_id")
        try:
            parent_account_id = parse_parent_id(raw_parent)
        except ValueError:
            # Unusable parent references are shown at the top level
            logger.warning(f"Account {account_id} has invalid parent {raw_parent!r}, treating it as top level")
            parent_account_id = None

        return cls(
            account_id=account_id,
            account_code=str(data.get("account_code") or ""),
            account_name=str(data.get("account_name") or ""),
            account_type=account_type or "",
            parent_account_id=parent_account_id,
        )

    @property
    def is_root(self) -> bool:
        return self.parent_account_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "account_code": self.account_code,
            "account_name": self.account_name,
            "account_type": self.account_type,
            "parent_account_id": self.parent_account_id,
        }


@dataclass
class AccountNode:
    """An account placed in the tree, with its depth and ordered children."""
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    parent_account_id: Optional[int]
    level_no: int = 0
    children: List["AccountNode"] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: AccountRecord, level_no: int = 0,
                    children: Optional[List["AccountNode"]] = None) -> "AccountNode":
        return cls(
            account_id=record.account_id,
            account_code=record.account_code,
            account_name=record.account_name,
            account_type=record.account_type,
            parent_account_id=record.parent_account_id,
            level_no=level_no,
            children=children if children is not None else [],
        )

    @property
    def record(self) -> AccountRecord:
        return AccountRecord(
            account_id=self.account_id,
            account_code=self.account_code,
            account_name=self.account_name,
            account_type=self.account_type,
            parent_account_id=self.parent_account_id,
        )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def with_children(self, children: List["AccountNode"]) -> "AccountNode":
        """Return a copy of this node carrying a different children list."""
        return replace(self, children=children)


@dataclass
class AccountForm:
    """
    Draft of the add/edit account form.

    account_id is None while creating; account_code is only sent on edit
    because the server assigns codes to new accounts.
    """
    account_name: str = ""
    account_type: str = ""
    parent_account_id: Optional[int] = None
    account_code: Optional[str] = None
    account_id: Optional[int] = None
    original_parent_id: Optional[int] = None

    @property
    def is_edit(self) -> bool:
        return self.account_id is not None

    @property
    def parent_changed(self) -> bool:
        return self.parent_account_id != self.original_parent_id
