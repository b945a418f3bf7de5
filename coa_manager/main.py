"""Command-line entry point for the Chart of Accounts client

Loads the account list from the accounts API, renders it as a tree or a
flat list, and adds, edits or deletes accounts. Every mutation is followed
by a full reload so the printed tree always reflects the server.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from coa_manager.config import ACCOUNTS_API_URL, LOG_FORMAT, LOG_LEVEL
from coa_manager.external_apis.accounts import AccountsAPIClient
from coa_manager.mocks.accounts_api import MockAccountsAPIClient, sample_accounts
from coa_manager.models.errors import AccountValidationError
from coa_manager.repositories.account_repository import AccountRepository
from coa_manager.services.account_tree import find_node
from coa_manager.services.chart_of_accounts import ChartOfAccountsController
from coa_manager.services.notifications import Notification, Notifier
from coa_manager.utils.rendering import render_flat, render_rows

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coa-manager", description="Chart of Accounts client")
    parser.add_argument("--api-url", default=None, help=f"Accounts API endpoint (default: {ACCOUNTS_API_URL})")
    parser.add_argument("--mock", action="store_true", help="Use an in-memory sample chart instead of the API")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    tree_parser = subparsers.add_parser("tree", help="Show the chart of accounts as a tree")
    tree_parser.add_argument("--search", default="", help="Only show accounts matching this term (and their parents)")
    tree_parser.add_argument("--collapsed", action="store_true", help="Collapse every account")
    tree_parser.add_argument("--expand-all", action="store_true", help="Expand every account")

    list_parser = subparsers.add_parser("list", help="Show the flat account list")
    list_parser.add_argument("--search", default="", help="Filter by account name")

    add_parser = subparsers.add_parser("add", help="Add an account")
    add_parser.add_argument("name", help="Account name")
    add_parser.add_argument("--type", default="", help="Account type for top-level accounts")
    add_parser.add_argument("--parent", default=None, help="Parent account id")

    edit_parser = subparsers.add_parser("edit", help="Edit an account")
    edit_parser.add_argument("account_id", type=int, help="Account id")
    edit_parser.add_argument("--name", default=None, help="New account name")
    edit_parser.add_argument("--type", default=None, help="New account type (top-level accounts only)")
    edit_parser.add_argument("--parent", default=None, help="New parent account id (0 for top level)")
    edit_parser.add_argument("--code", default=None, help="New account code")

    delete_parser = subparsers.add_parser("delete", help="Delete an account")
    delete_parser.add_argument("account_id", type=int, help="Account id")
    delete_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return parser


def print_notification(notification: Notification):
    stream = sys.stderr if notification.is_error else sys.stdout
    print(f"{notification.title}: {notification.description}", file=stream)


def print_tree(controller: ChartOfAccountsController):
    searching = bool(controller.search_term.strip())
    rows = controller.visible_rows()
    if not rows:
        print("  (no accounts)")
        return
    for line in render_rows(rows, lambda node: searching or controller.is_expanded(node)):
        print(line)


def confirm_delete(record) -> bool:
    name = record.account_name if record else "this account"
    answer = input(f"Are you sure you want to delete {name}? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def run_command(args: argparse.Namespace, controller: ChartOfAccountsController) -> bool:
    if args.command == "tree":
        controller.set_search_term(args.search)
        if args.collapsed:
            controller.collapse_all()
        elif args.expand_all:
            controller.expand_all()
        print_tree(controller)
        return True

    if args.command == "list":
        controller.set_search_term(args.search)
        lines = render_flat(controller.flat_rows())
        for line in lines or ["  (no accounts)"]:
            print(line)
        return True

    if args.command == "add":
        try:
            controller.handle_add_account(args.parent)
        except AccountValidationError as e:
            controller.notifier.error("Invalid parent", str(e))
            return False
        saved = await controller.submit_form(account_name=args.name, account_type=args.type)
        if saved:
            print_tree(controller)
        return saved

    if args.command == "edit":
        node = find_node(controller.tree, args.account_id)
        if node is None:
            controller.notifier.error("Error", f"Account {args.account_id} not found")
            return False
        controller.handle_edit_account(node)

        changes = {}
        if args.name is not None:
            changes["account_name"] = args.name
        if args.type is not None:
            changes["account_type"] = args.type
        if args.parent is not None:
            changes["parent_account_id"] = args.parent
        if args.code is not None:
            changes["account_code"] = args.code

        saved = await controller.submit_form(**changes)
        if saved:
            print_tree(controller)
        return saved

    if args.command == "delete":
        confirm = None if args.yes else confirm_delete
        deleted = await controller.handle_delete_account(args.account_id, confirm=confirm)
        if deleted:
            print_tree(controller)
        return deleted

    return False


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format=LOG_FORMAT
    )

    if args.mock:
        logger.info("Using mock accounts API")
        client = MockAccountsAPIClient(sample_accounts())
    else:
        client = AccountsAPIClient(base_url=args.api_url)

    notifier = Notifier(callback=print_notification)
    controller = ChartOfAccountsController(AccountRepository(client), notifier)

    try:
        if not await controller.load():
            return 1
        ok = await run_command(args, controller)
        return 0 if ok else 1
    finally:
        controller.close()
        await client.close()


def run():
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
