"""
Unit tests for the accounts API client
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from coa_manager.external_apis.accounts.client import AccountsAPIClient
from coa_manager.models.errors import MalformedResponse, NetworkError, ServerRejection

API_URL = "http://test.local/api/accounts"


def make_session(status=200, body=None, raw_body=None):
    """Build a mock aiohttp session whose post() returns one canned response."""
    response = MagicMock()
    response.status = status
    text = raw_body if raw_body is not None else json.dumps(body)
    response.text = AsyncMock(return_value=text)

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.post.return_value.__aenter__.return_value = response
    return session


def sent_payload(session):
    _, kwargs = session.post.call_args
    return kwargs["json"]


@pytest.mark.asyncio
async def test_fetch_accounts_posts_list_operation():
    rows = [{"account_id": 1, "account_code": "1000", "account_name": "Assets", "account_type": "ASSET"}]
    session = make_session(body=rows)
    client = AccountsAPIClient(base_url=API_URL, session=session)

    result = await client.fetch_accounts()

    assert result == rows
    args, _ = session.post.call_args
    assert args[0] == API_URL
    assert sent_payload(session) == {"operation": 1}


@pytest.mark.asyncio
async def test_fetch_accounts_unwraps_data_envelope():
    rows = [{"account_id": 1}]
    client = AccountsAPIClient(base_url=API_URL, session=make_session(body={"data": rows}))

    assert await client.fetch_accounts() == rows


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"message": "ok"}, "accounts", None, 42])
async def test_fetch_accounts_non_list_is_empty(body):
    client = AccountsAPIClient(base_url=API_URL, session=make_session(body=body))

    assert await client.fetch_accounts() == []


@pytest.mark.asyncio
async def test_fetch_accounts_invalid_json_is_empty():
    client = AccountsAPIClient(base_url=API_URL, session=make_session(raw_body="<html>oops</html>"))

    assert await client.fetch_accounts() == []


@pytest.mark.asyncio
async def test_create_account_payload():
    session = make_session(body={"account_id": 12})
    client = AccountsAPIClient(base_url=API_URL, session=session)

    result = await client.create_account("Petty Cash", "ASSET", 1)

    assert result == {"account_id": 12}
    assert sent_payload(session) == {
        "operation": 2,
        "account_name": "Petty Cash",
        "account_type": "ASSET",
        "parent_account_id": 1,
    }


@pytest.mark.asyncio
async def test_create_root_account_sends_null_parent():
    session = make_session(body={"account_id": 13})
    client = AccountsAPIClient(base_url=API_URL, session=session)

    await client.create_account("Equity", "EQUITY", None)

    assert sent_payload(session)["parent_account_id"] is None


@pytest.mark.asyncio
async def test_update_account_payload():
    session = make_session(body={"success": True})
    client = AccountsAPIClient(base_url=API_URL, session=session)

    await client.update_account(2, "1010", "Cash on Hand", "ASSET", 1)

    assert sent_payload(session) == {
        "operation": 3,
        "account_id": 2,
        "account_code": "1010",
        "account_name": "Cash on Hand",
        "account_type": "ASSET",
        "parent_account_id": 1,
    }


@pytest.mark.asyncio
async def test_update_account_omits_missing_code():
    session = make_session(body={"success": True})
    client = AccountsAPIClient(base_url=API_URL, session=session)

    await client.update_account(2, None, "Cash", "ASSET", None)

    assert "account_code" not in sent_payload(session)


@pytest.mark.asyncio
async def test_delete_account_payload():
    session = make_session(body={"success": True})
    client = AccountsAPIClient(base_url=API_URL, session=session)

    await client.delete_account(5)

    assert sent_payload(session) == {"operation": 4, "account_id": 5}


@pytest.mark.asyncio
async def test_server_rejection_uses_message():
    client = AccountsAPIClient(base_url=API_URL,
                               session=make_session(status=400, body={"message": "Account code already exists"}))

    with pytest.raises(ServerRejection) as exc_info:
        await client.create_account("Cash", "ASSET", None)

    assert str(exc_info.value) == "Account code already exists"
    assert exc_info.value.status == 400


@pytest.mark.asyncio
async def test_server_rejection_without_message():
    client = AccountsAPIClient(base_url=API_URL, session=make_session(status=500, raw_body="Internal error"))

    with pytest.raises(ServerRejection) as exc_info:
        await client.fetch_accounts()

    assert str(exc_info.value) == "API Error: 500"


@pytest.mark.asyncio
async def test_success_false_is_rejection():
    client = AccountsAPIClient(base_url=API_URL,
                               session=make_session(body={"success": False, "message": "Parent not found"}))

    with pytest.raises(ServerRejection, match="Parent not found"):
        await client.update_account(2, None, "Cash", "ASSET", 99)


@pytest.mark.asyncio
async def test_malformed_mutation_response_raises():
    client = AccountsAPIClient(base_url=API_URL, session=make_session(raw_body="not json"))

    with pytest.raises(MalformedResponse):
        await client.delete_account(1)


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()])
async def test_network_errors(error):
    session = make_session()
    session.post.side_effect = error
    client = AccountsAPIClient(base_url=API_URL, session=session)

    with pytest.raises(NetworkError) as exc_info:
        await client.fetch_accounts()

    assert "check your connection" in str(exc_info.value)


@pytest.mark.asyncio
async def test_close_leaves_shared_session_open():
    session = make_session(body=[])
    client = AccountsAPIClient(base_url=API_URL, session=session)

    async with client:
        await client.fetch_accounts()

    session.close.assert_not_awaited()


def test_defaults_come_from_config():
    client = AccountsAPIClient()

    assert client.base_url == "http://localhost:5000/api/accounts"
    assert client.timeout == 30
