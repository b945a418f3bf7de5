"""
Chart of Accounts controller.

Holds the screen state of the hierarchical account view: the search term,
which nodes are expanded, and the add/edit form. The tree itself is never
kept; it is rebuilt from the repository's records whenever it is asked for.
After every successful mutation the whole account list is fetched again.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from coa_manager.models.account import AccountForm, AccountNode, AccountRecord
from coa_manager.models.errors import (
    AccountsAPIError,
    AccountValidationError,
    InvalidParentReference,
)
from coa_manager.repositories.account_repository import AccountRepository
from coa_manager.services.account_tree import (
    build_tree,
    descendant_ids,
    filter_records,
    filter_tree,
    find_node,
    iter_nodes,
    parent_choices,
    resolve_account_type,
)
from coa_manager.services.notifications import Notifier
from coa_manager.utils.parsing import normalize_term, parse_account_type, parse_parent_id

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error occurred. Check the logs for details."


class ChartOfAccountsController:
    """Controller for the hierarchical chart-of-accounts view."""

    def __init__(self, repository: AccountRepository, notifier: Optional[Notifier] = None):
        """
        Initialize the controller.

        Args:
            repository: Account repository used for fetches and mutations
            notifier: Where operator notifications go (a new Notifier by default)
        """
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.search_term = ""
        self.expanded: Dict[int, bool] = {}
        self.form: Optional[AccountForm] = None
        self.closed = False

    @property
    def records(self) -> List[AccountRecord]:
        return self.repository.records

    @property
    def tree(self) -> List[AccountNode]:
        return build_tree(self.repository.records)

    @property
    def visible_tree(self) -> List[AccountNode]:
        return filter_tree(self.tree, self.search_term)

    def set_search_term(self, term: Optional[str]):
        self.search_term = term or ""

    def is_expanded(self, node: AccountNode) -> bool:
        """Expansion state of a node; unset nodes are open only at the root level."""
        return self.expanded.get(node.account_id, node.level_no == 0)

    def toggle(self, account_id: int) -> bool:
        """
        Flip one node between expanded and collapsed.

        Returns:
            The new state, or False if the account is not in the tree
        """
        node = find_node(self.tree, account_id)
        if node is None:
            logger.warning(f"Cannot toggle unknown account {account_id}")
            return False
        self.expanded[account_id] = not self.is_expanded(node)
        return self.expanded[account_id]

    def expand_all(self):
        for node in iter_nodes(self.tree):
            self.expanded[node.account_id] = True

    def collapse_all(self):
        for node in iter_nodes(self.tree):
            self.expanded[node.account_id] = False

    def visible_rows(self) -> List[AccountNode]:
        """
        Nodes in display order.

        Collapsed nodes hide their children. While a search term is active
        every kept node is shown so that matches are never hidden.
        """
        searching = bool(normalize_term(self.search_term))
        rows: List[AccountNode] = []

        def walk(nodes: List[AccountNode]):
            for node in nodes:
                rows.append(node)
                if searching or self.is_expanded(node):
                    walk(node.children)

        walk(self.visible_tree)
        return rows

    def flat_rows(self) -> List[AccountRecord]:
        """Flat account list filtered by name, as shown on the simple list screen."""
        return filter_records(self.repository.records, self.search_term)

    async def load(self) -> bool:
        """
        Fetch every account and replace the current records.

        Expansion state goes back to the default rule. On failure the current
        records stay as they are and the operator is notified.

        Returns:
            True if the records were replaced
        """
        if self.closed:
            logger.debug("Controller closed, skipping load")
            return False

        try:
            records = await self.repository.fetch_records()
        except AccountsAPIError as e:
            logger.error(f"Error loading accounts: {str(e)}")
            self.notifier.error("Error", str(e))
            return False
        except Exception as e:
            logger.exception(f"Unexpected error loading accounts: {str(e)}")
            self.notifier.error("Error", UNEXPECTED_ERROR_MESSAGE)
            return False

        if self.closed:
            logger.debug("Controller closed while loading, discarding fetched accounts")
            return False

        self.repository.replace_all(records)
        self.expanded = {}
        logger.info(f"Chart of accounts loaded with {len(records)} accounts")
        return True

    def handle_add_account(self, parent_id: Optional[int] = None) -> AccountForm:
        """
        Open the create form bound to parent_id (None for a top-level account).

        Raises:
            AccountValidationError: If parent_id is not a usable account id
        """
        try:
            parent_id = parse_parent_id(parent_id)
        except ValueError as e:
            raise AccountValidationError(str(e))
        parent = self.repository.get(parent_id)

        self.form = AccountForm(
            account_type=parent.account_type if parent else "",
            parent_account_id=parent_id,
            original_parent_id=parent_id,
        )
        logger.debug(f"Opened create form under parent {parent_id}")
        return self.form

    def handle_edit_account(self, node: AccountNode) -> AccountForm:
        """Open the edit form populated from the node's own fields."""
        self.form = AccountForm(
            account_id=node.account_id,
            account_code=node.account_code,
            account_name=node.account_name,
            account_type=node.account_type,
            parent_account_id=node.parent_account_id,
            original_parent_id=node.parent_account_id,
        )
        logger.debug(f"Opened edit form for account {node.account_id}")
        return self.form

    def cancel_form(self):
        self.form = None

    def parent_options(self, form: Optional[AccountForm] = None) -> List[AccountRecord]:
        """Accounts the form may choose as parent."""
        form = form or self.form
        exclude_id = form.account_id if form is not None else None
        return parent_choices(self.repository.records, exclude_id=exclude_id)

    def _validate(self, form: AccountForm):
        if not (form.account_name or "").strip():
            raise AccountValidationError("Account name is required")

        if form.parent_account_id is None:
            try:
                parse_account_type(form.account_type)
            except ValueError:
                raise AccountValidationError("Select an account type for a top-level account")
        elif form.is_edit:
            if (form.parent_account_id == form.account_id
                    or form.parent_account_id in descendant_ids(self.repository.records, form.account_id)):
                raise AccountValidationError("An account cannot be moved under itself or one of its sub-accounts")

    def _effective_type(self, form: AccountForm) -> str:
        if form.parent_account_id is None:
            return parse_account_type(form.account_type)

        # Edits keep the stored type unless the account moves
        if form.is_edit and not form.parent_changed:
            stored = self.repository.get(form.account_id)
            return stored.account_type if stored else form.account_type

        return resolve_account_type(
            form.account_type,
            form.parent_account_id,
            self.repository.records,
        )

    async def _apply_type_to_descendants(self, account_id: int, account_type: str):
        """Give every account below account_id the type of its new root."""
        below = descendant_ids(self.repository.records, account_id)
        for record in self.repository.records:
            if record.account_id not in below or record.account_type == account_type:
                continue
            logger.info(f"Changing type of account {record.account_id} to {account_type}")
            await self.repository.update(AccountForm(
                account_id=record.account_id,
                account_code=record.account_code,
                account_name=record.account_name,
                account_type=account_type,
                parent_account_id=record.parent_account_id,
            ))

    async def submit_form(self, form: Optional[AccountForm] = None, **changes) -> bool:
        """
        Validate and save the add/edit form, then reload the whole chart.

        Args:
            form: Form to submit (defaults to the open form)
            **changes: Field values to apply to the form before submitting

        Returns:
            True if the account was saved and the chart reloaded
        """
        form = form or self.form
        if form is None:
            self.notifier.error("Error", "No account form is open")
            return False

        try:
            if "parent_account_id" in changes:
                try:
                    changes["parent_account_id"] = parse_parent_id(changes["parent_account_id"])
                except ValueError as e:
                    raise AccountValidationError(str(e))
            if changes:
                try:
                    form = replace(form, **changes)
                except TypeError as e:
                    raise AccountValidationError(f"Unknown account form field: {str(e)}")
                self.form = form

            self._validate(form)
            form = replace(form, account_name=form.account_name.strip(),
                           account_type=self._effective_type(form))
        except InvalidParentReference as e:
            logger.warning(f"Refusing to save account: {str(e)}")
            self.notifier.error("Invalid parent", str(e))
            return False
        except AccountValidationError as e:
            logger.warning(f"Refusing to save account: {str(e)}")
            self.notifier.error("Invalid account", str(e))
            return False

        try:
            if form.is_edit:
                await self.repository.update(form)
                await self._apply_type_to_descendants(form.account_id, form.account_type)
                self.notifier.success("Updated", "Account updated successfully!")
            else:
                await self.repository.create(form)
                self.notifier.success("Created", "Account created successfully!")
        except AccountsAPIError as e:
            logger.error(f"Error saving account: {str(e)}")
            self.notifier.error("Error", str(e))
            return False
        except Exception as e:
            logger.exception(f"Unexpected error saving account: {str(e)}")
            self.notifier.error("Error", UNEXPECTED_ERROR_MESSAGE)
            return False

        self.form = None
        await self.load()
        return True

    async def handle_delete_account(self, account_id: int,
                                    confirm: Optional[Callable[[Optional[AccountRecord]], bool]] = None) -> bool:
        """
        Delete an account and reload the chart.

        Args:
            account_id: Account to delete
            confirm: Optional callable given the record; returning False cancels

        Returns:
            True if the account was deleted
        """
        record = self.repository.get(account_id)
        if confirm is not None and not confirm(record):
            logger.info(f"Deletion of account {account_id} cancelled")
            return False

        try:
            await self.repository.delete(account_id)
        except AccountsAPIError as e:
            logger.error(f"Error deleting account {account_id}: {str(e)}")
            self.notifier.error("Error", str(e))
            return False
        except Exception as e:
            logger.exception(f"Unexpected error deleting account {account_id}: {str(e)}")
            self.notifier.error("Error", UNEXPECTED_ERROR_MESSAGE)
            return False

        self.notifier.success("Deleted", "Account deleted successfully!")
        await self.load()
        return True

    def close(self):
        """Mark the view as torn down; later loads are ignored."""
        self.closed = True
