"""HTTP client for the accounts API."""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from coa_manager.config import (
    ACCOUNTS_API_URL,
    ACCOUNTS_API_TIMEOUT,
    OPERATION_LIST,
    OPERATION_CREATE,
    OPERATION_UPDATE,
    OPERATION_DELETE,
)
from coa_manager.models.errors import NetworkError, ServerRejection, MalformedResponse

logger = logging.getLogger(__name__)


class AccountsAPIClient:
    """
    Client for the accounts endpoint.

    Every call is a POST of {"operation": N, ...fields} to the same URL.
    Failures are raised as NetworkError, ServerRejection or MalformedResponse;
    nothing is retried.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the accounts API client.

        Args:
            base_url: Endpoint URL (defaults to ACCOUNTS_API_URL)
            timeout: Total request timeout in seconds (defaults to ACCOUNTS_API_TIMEOUT)
            session: Optional existing aiohttp session. The client does not close sessions it did not create.
        """
        self.base_url = base_url or ACCOUNTS_API_URL
        self.timeout = timeout if timeout is not None else ACCOUNTS_API_TIMEOUT
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Content-Type": "application/json"},
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AccountsAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _post(self, operation: int, **fields) -> Any:
        """
        Send one operation to the API and return the decoded JSON body.

        Raises:
            NetworkError: If the server could not be reached
            ServerRejection: If the server answered with an error status
            MalformedResponse: If a success response is not valid JSON
        """
        payload = {"operation": operation, **fields}
        logger.debug(f"POST {self.base_url} operation={operation}")

        session = await self._get_session()
        try:
            async with session.post(self.base_url, json=payload) as response:
                status = response.status
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"No response from accounts API for operation {operation}: {str(e)}")
            raise NetworkError() from e

        try:
            data = json.loads(body) if body else None
        except ValueError:
            if status >= 400:
                raise ServerRejection(f"API Error: {status}", status)
            logger.error(f"Accounts API returned invalid JSON for operation {operation}")
            raise MalformedResponse(f"Invalid JSON in response to operation {operation}")

        if status >= 400:
            message = None
            if isinstance(data, dict):
                message = data.get("message")
            logger.error(f"Accounts API error {status} for operation {operation}: {data}")
            raise ServerRejection(message or f"API Error: {status}", status)

        if isinstance(data, dict) and data.get("success") is False:
            message = data.get("message") or "Request was rejected by the server"
            logger.error(f"Accounts API rejected operation {operation}: {message}")
            raise ServerRejection(message, status)

        return data

    async def fetch_accounts(self) -> List[Dict[str, Any]]:
        """
        Fetch the full flat account list.

        A body that is not a list is logged and treated as an empty list.
        """
        try:
            data = await self._post(OPERATION_LIST)
        except MalformedResponse as e:
            logger.warning(f"Treating malformed account list as empty: {str(e)}")
            return []

        if isinstance(data, dict) and isinstance(data.get("data"), list):
            data = data["data"]

        if not isinstance(data, list):
            logger.warning(f"Expected a list of accounts, got {type(data).__name__}; treating as empty")
            return []

        logger.info(f"Fetched {len(data)} accounts")
        return data

    async def create_account(self, account_name: str, account_type: str,
                             parent_account_id: Optional[int]) -> Dict[str, Any]:
        """Create an account. The response carries the new account_id."""
        data = await self._post(
            OPERATION_CREATE,
            account_name=account_name,
            account_type=account_type,
            parent_account_id=parent_account_id,
        )
        logger.info(f"Created account '{account_name}' ({account_type}) under parent {parent_account_id}")
        return data if isinstance(data, dict) else {"result": data}

    async def update_account(self, account_id: int, account_code: Optional[str], account_name: str,
                             account_type: str, parent_account_id: Optional[int]) -> Any:
        fields = {
            "account_id": account_id,
            "account_name": account_name,
            "account_type": account_type,
            "parent_account_id": parent_account_id,
        }
        if account_code is not None:
            fields["account_code"] = account_code

        data = await self._post(OPERATION_UPDATE, **fields)
        logger.info(f"Updated account {account_id}")
        return data

    async def delete_account(self, account_id: int) -> Any:
        data = await self._post(OPERATION_DELETE, account_id=account_id)
        logger.info(f"Deleted account {account_id}")
        return data
