"""Plain-text rendering of the chart of accounts for the command line."""

from typing import Callable, Iterable, List

TYPE_LABELS = {
    "ASSET": "Asset",
    "LIABILITY": "Liability",
    "EQUITY": "Equity",
    "REVENUE": "Revenue",
    "EXPENSE": "Expense",
}


def type_badge(account_type: str) -> str:
    label = TYPE_LABELS.get((account_type or "").upper(), account_type or "?")
    return f"[{label}]"


def render_rows(rows: Iterable, is_expanded: Callable[[object], bool]) -> List[str]:
    """
    Render tree rows as indented text lines.

    Nodes with children get "-" when expanded and "+" when collapsed.

    Args:
        rows: AccountNode objects in display order
        is_expanded: Callable telling whether a node is expanded
    """
    lines = []
    for node in rows:
        if node.children:
            marker = "-" if is_expanded(node) else "+"
        else:
            marker = " "
        indent = "  " * node.level_no
        lines.append(f"{indent}{marker} {node.account_code:<8} {node.account_name}  {type_badge(node.account_type)}"
                     f"  (id {node.account_id})")
    return lines


def render_flat(records: Iterable) -> List[str]:
    """One line per account for the flat account list."""
    lines = []
    for record in records:
        parent = record.parent_account_id if record.parent_account_id is not None else "-"
        lines.append(f"{record.account_id:>5}  {record.account_code:<8} {record.account_name:<30} "
                     f"{type_badge(record.account_type):<12} parent {parent}")
    return lines
