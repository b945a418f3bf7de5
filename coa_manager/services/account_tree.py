"""
Chart-of-accounts tree operations.

Pure functions that turn the flat account list into a forest, filter the
forest by a search term and resolve the type a child account inherits from
its parent. None of these functions touch the network or mutate their inputs.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from coa_manager.config import MAX_TREE_DEPTH
from coa_manager.models.account import AccountNode, AccountRecord
from coa_manager.models.errors import InvalidParentReference
from coa_manager.utils.parsing import normalize_term

logger = logging.getLogger(__name__)


def sort_records(records: Iterable[AccountRecord]) -> List[AccountRecord]:
    """Return the records sorted by account_code (plain string order)."""
    return sorted(records, key=lambda record: record.account_code)


def _effective_parents(records: Sequence[AccountRecord]) -> Dict[int, Optional[int]]:
    """
    Map each account id to the parent it will hang under in the tree.

    Dangling and self references become None. Every parent cycle is broken
    by promoting its member that comes first in input order to the top level.
    """
    position = {}
    parent_of: Dict[int, Optional[int]] = {}

    for index, record in enumerate(records):
        if record.account_id in position:
            continue
        position[record.account_id] = index
        parent_of[record.account_id] = record.parent_account_id

    for account_id, parent_id in parent_of.items():
        if parent_id is None:
            continue
        if parent_id == account_id:
            logger.warning(f"Account {account_id} references itself as parent, treating it as top level")
            parent_of[account_id] = None
        elif parent_id not in parent_of:
            logger.warning(f"Account {account_id} references missing parent {parent_id}, treating it as top level")
            parent_of[account_id] = None

    resolved: Set[int] = set()
    for account_id in position:
        path: List[int] = []
        on_path: Dict[int, int] = {}
        node = account_id
        while node is not None and node not in resolved:
            if node in on_path:
                cycle = path[on_path[node]:]
                head = min(cycle, key=position.get)
                logger.warning(f"Parent cycle detected between accounts {cycle}, treating account {head} as top level")
                parent_of[head] = None
                break
            on_path[node] = len(path)
            path.append(node)
            node = parent_of[node]
        resolved.update(path)

    return parent_of


def build_tree(records: Sequence[AccountRecord], parent_id: Optional[int] = None,
               level: int = 0) -> List[AccountNode]:
    """
    Build the account forest from a flat list of records.

    The records are expected to be sorted by account_code already; sibling
    order follows input order and is never changed here.

    Args:
        records: Flat list of account records
        parent_id: Build only the subtree below this account (None or 0 for the whole forest)
        level: level_no given to the top nodes of the result

    Returns:
        List of root AccountNode objects
    """
    parent_id = parent_id or None

    seen = set()
    unique_records = []
    for record in records:
        if record.account_id in seen:
            logger.warning(f"Duplicate account_id {record.account_id} ignored")
            continue
        seen.add(record.account_id)
        unique_records.append(record)

    parent_of = _effective_parents(unique_records)

    children_map: Dict[Optional[int], List[AccountRecord]] = defaultdict(list)
    for record in unique_records:
        children_map[parent_of[record.account_id]].append(record)

    def attach(current_parent: Optional[int], current_level: int) -> List[AccountNode]:
        nodes = []
        for record in children_map.get(current_parent, []):
            if current_level - level >= MAX_TREE_DEPTH:
                logger.warning(f"Account {record.account_id} exceeds maximum tree depth {MAX_TREE_DEPTH}, subtree dropped")
                continue
            node = AccountNode.from_record(record, level_no=current_level)
            node.children = attach(record.account_id, current_level + 1)
            nodes.append(node)
        return nodes

    return attach(parent_id, level)


def node_matches(node: AccountNode, term: str) -> bool:
    """Case-insensitive substring match on name, code and type."""
    term = normalize_term(term)
    if not term:
        return True
    return (
        term in (node.account_name or "").lower()
        or term in (node.account_code or "").lower()
        or term in (node.account_type or "").lower()
    )


def filter_tree(tree: List[AccountNode], term: Optional[str]) -> List[AccountNode]:
    """
    Prune the forest down to nodes matching the search term.

    A node is kept when it matches itself or when any descendant matches;
    kept nodes carry only their kept children. Blank terms return the tree
    unchanged.
    """
    term = normalize_term(term)
    if not term:
        return tree

    def prune(nodes: List[AccountNode]) -> List[AccountNode]:
        kept = []
        for node in nodes:
            children = prune(node.children)
            if children or node_matches(node, term):
                kept.append(node.with_children(children))
        return kept

    return prune(tree)


def filter_records(records: Iterable[AccountRecord], term: Optional[str]) -> List[AccountRecord]:
    """Flat account list filter: case-insensitive match on the account name only."""
    term = normalize_term(term)
    if not term:
        return list(records)
    return [record for record in records if term in (record.account_name or "").lower()]


def resolve_account_type(chosen_type: str, parent_account_id: Optional[int],
                         all_records: Iterable[AccountRecord]) -> str:
    """
    Work out the account type to store for a new or edited account.

    Top-level accounts keep the type the operator chose. Child accounts take
    their parent's stored type, which already equals the root ancestor's type.

    Raises:
        InvalidParentReference: If the parent is not among all_records
    """
    if not parent_account_id:
        return chosen_type

    for record in all_records:
        if record.account_id == parent_account_id:
            return record.account_type

    raise InvalidParentReference(parent_account_id)


def iter_nodes(tree: List[AccountNode]) -> Iterator[AccountNode]:
    """Yield every node depth-first, parents before children."""
    for node in tree:
        yield node
        yield from iter_nodes(node.children)


def count_nodes(tree: List[AccountNode]) -> int:
    return sum(1 for _ in iter_nodes(tree))


def find_node(tree: List[AccountNode], account_id: int) -> Optional[AccountNode]:
    for node in iter_nodes(tree):
        if node.account_id == account_id:
            return node
    return None


def descendant_ids(records: Iterable[AccountRecord], account_id: int) -> Set[int]:
    """Ids of every account below account_id (the account itself excluded)."""
    children_map: Dict[int, List[int]] = defaultdict(list)
    for record in records:
        if record.parent_account_id is not None:
            children_map[record.parent_account_id].append(record.account_id)

    found: Set[int] = set()
    pending = list(children_map.get(account_id, []))
    while pending:
        child_id = pending.pop()
        if child_id in found or child_id == account_id:
            continue
        found.add(child_id)
        pending.extend(children_map.get(child_id, []))
    return found


def parent_choices(records: Iterable[AccountRecord], exclude_id: Optional[int] = None) -> List[AccountRecord]:
    """
    Accounts that may be picked as parent.

    When editing, the account itself and its descendants are left out since
    choosing one of them would create a cycle.
    """
    records = list(records)
    if exclude_id is None:
        return records
    excluded = descendant_ids(records, exclude_id)
    excluded.add(exclude_id)
    return [record for record in records if record.account_id not in excluded]
