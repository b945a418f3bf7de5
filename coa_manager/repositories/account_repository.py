"""Repository holding the flat list of accounts fetched from the API."""

import logging
from typing import Dict, List, Optional, Any

from coa_manager.models.account import AccountRecord, AccountForm
from coa_manager.services.account_tree import sort_records

logger = logging.getLogger(__name__)


class AccountRepository:
    """
    Store of AccountRecord objects, sorted by account code.

    The store is replaced wholesale on every fetch_all(). Mutations are passed
    straight to the client and never patch the local records; callers reload
    afterwards.
    """

    def __init__(self, client):
        """
        Initialize with an accounts API client.

        Args:
            client: AccountsAPIClient or anything exposing the same coroutines
        """
        self.client = client
        self._records: List[AccountRecord] = []
        self._by_id: Dict[int, AccountRecord] = {}

    @property
    def records(self) -> List[AccountRecord]:
        return list(self._records)

    def get(self, account_id: Optional[int]) -> Optional[AccountRecord]:
        if account_id is None:
            return None
        return self._by_id.get(account_id)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, account_id) -> bool:
        return account_id in self._by_id

    def replace_all(self, records: List[AccountRecord]):
        """Swap in a new record set, sorted by account code."""
        self._records = sort_records(records)
        self._by_id = {record.account_id: record for record in self._records}

    async def fetch_records(self) -> List[AccountRecord]:
        """
        Fetch every account without touching the store.

        Rows that cannot be converted are skipped with a warning.

        Returns:
            Sorted list of records
        """
        rows = await self.client.fetch_accounts()

        records = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning(f"Skipping account row that is not an object: {row!r}")
                continue
            try:
                records.append(AccountRecord.from_dict(row))
            except ValueError as e:
                logger.warning(f"Skipping invalid account row {row!r}: {str(e)}")

        return sort_records(records)

    async def fetch_all(self) -> List[AccountRecord]:
        """
        Fetch every account and replace the store.

        API errors propagate and leave the store untouched.
        """
        records = await self.fetch_records()
        self.replace_all(records)
        logger.info(f"Loaded {len(self._records)} accounts")
        return self.records

    async def create(self, form: AccountForm) -> Dict[str, Any]:
        return await self.client.create_account(
            form.account_name,
            form.account_type,
            form.parent_account_id,
        )

    async def update(self, form: AccountForm) -> Any:
        return await self.client.update_account(
            form.account_id,
            form.account_code,
            form.account_name,
            form.account_type,
            form.parent_account_id,
        )

    async def delete(self, account_id: int) -> Any:
        return await self.client.delete_account(account_id)
