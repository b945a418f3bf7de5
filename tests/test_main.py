"""
Tests for the command-line entry point
"""

from unittest.mock import AsyncMock, patch

import pytest

from coa_manager.main import build_parser, main
from coa_manager.models.errors import NetworkError


@pytest.fixture(autouse=True)
def no_dotenv():
    """Keep local .env files out of the tests."""
    with patch("coa_manager.main.load_dotenv"):
        yield


@pytest.mark.asyncio
async def test_tree_command(capsys):
    code = await main(["--mock", "tree"])

    out = capsys.readouterr().out
    assert code == 0
    assert "1000" in out and "Assets" in out
    assert "Bank Accounts" in out
    assert "Main Checking" not in out


@pytest.mark.asyncio
async def test_tree_search(capsys):
    code = await main(["--mock", "tree", "--search", "checking"])

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert code == 0
    assert len(lines) == 3
    assert "Main Checking" in lines[-1]


@pytest.mark.asyncio
async def test_tree_expand_all(capsys):
    await main(["--mock", "tree", "--expand-all"])

    assert "Main Checking" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_list_command(capsys):
    code = await main(["--mock", "list", "--search", "cash"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Cash" in out
    assert "Liabilities" not in out


@pytest.mark.asyncio
async def test_add_child(capsys):
    code = await main(["--mock", "add", "Petty Cash", "--parent", "1"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Created: Account created successfully!" in out
    assert "1030" in out and "Petty Cash" in out


@pytest.mark.asyncio
async def test_add_root_without_type_fails(capsys):
    code = await main(["--mock", "add", "Mystery"])

    captured = capsys.readouterr()
    assert code == 1
    assert "Invalid account" in captured.err


@pytest.mark.asyncio
async def test_add_with_invalid_parent_fails(capsys):
    code = await main(["--mock", "add", "Petty Cash", "--parent", "abc"])

    captured = capsys.readouterr()
    assert code == 1
    assert "Invalid parent: Invalid parent account id: 'abc'" in captured.err
    assert "Created" not in captured.out


@pytest.mark.asyncio
async def test_edit_unknown_account(capsys):
    code = await main(["--mock", "edit", "999", "--name", "Nope"])

    assert code == 1
    assert "Account 999 not found" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_edit_moves_account(capsys):
    code = await main(["--mock", "edit", "11", "--parent", "5"])

    assert code == 0
    assert "Updated" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_delete_with_confirmation(capsys):
    with patch("builtins.input", return_value="y"):
        code = await main(["--mock", "delete", "11"])

    assert code == 0
    assert "Rent" not in capsys.readouterr().out


@pytest.mark.asyncio
async def test_delete_declined(capsys):
    with patch("builtins.input", return_value="n"):
        code = await main(["--mock", "delete", "11"])

    assert code == 1


@pytest.mark.asyncio
async def test_load_failure_exit_code(capsys):
    with patch("coa_manager.main.AccountsAPIClient") as client_cls:
        client = client_cls.return_value
        client.fetch_accounts = AsyncMock(side_effect=NetworkError())
        client.close = AsyncMock()
        code = await main(["--api-url", "http://test.local/api/accounts", "tree"])

    assert code == 1
    client_cls.assert_called_once_with(base_url="http://test.local/api/accounts")
    assert "check your connection" in capsys.readouterr().err


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
