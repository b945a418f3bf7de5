"""
Tests for operator notifications and text rendering
"""

import logging
from unittest.mock import MagicMock

from coa_manager.models.account import AccountRecord
from coa_manager.services.account_tree import build_tree, iter_nodes
from coa_manager.services.notifications import Notifier
from coa_manager.utils.rendering import render_flat, render_rows, type_badge


def test_notifier_collects_and_forwards():
    callback = MagicMock()
    notifier = Notifier(callback=callback)

    created = notifier.success("Created", "Account created successfully!")
    failed = notifier.error("Error", "No response from server. Please check your connection.")

    assert notifier.notifications == [created, failed]
    assert notifier.latest is failed
    assert failed.is_error
    assert not created.is_error
    assert callback.call_count == 2


def test_notifier_logs(caplog):
    notifier = Notifier()

    with caplog.at_level(logging.INFO, logger="coa_manager.services.notifications"):
        notifier.error("Error", "Account code already exists")

    assert "Account code already exists" in caplog.text
    assert caplog.records[-1].levelno == logging.ERROR


def test_notifier_clear():
    notifier = Notifier()
    notifier.success("Deleted", "Account deleted successfully!")

    notifier.clear()

    assert notifier.latest is None


def test_type_badge():
    assert type_badge("ASSET") == "[Asset]"
    assert type_badge("revenue") == "[Revenue]"
    assert type_badge("OTHER") == "[OTHER]"
    assert type_badge("") == "[?]"


def test_render_rows_indents_and_marks():
    records = [
        AccountRecord(1, "1000", "Assets", "ASSET"),
        AccountRecord(2, "1010", "Cash", "ASSET", 1),
        AccountRecord(3, "2000", "Liabilities", "LIABILITY"),
    ]
    rows = list(iter_nodes(build_tree(records)))

    lines = render_rows(rows, lambda node: node.level_no == 0)

    assert lines[0].startswith("- 1000")
    assert lines[1].startswith("    1010")
    assert "Cash" in lines[1]
    assert lines[2].startswith("  2000")
    assert "[Liability]" in lines[2]

    collapsed = render_rows(rows[:1], lambda node: False)
    assert collapsed[0].startswith("+ 1000")


def test_render_flat():
    lines = render_flat([
        AccountRecord(1, "1000", "Assets", "ASSET"),
        AccountRecord(2, "1010", "Cash", "ASSET", 1),
    ])

    assert "parent -" in lines[0]
    assert "parent 1" in lines[1]
    assert "Cash" in lines[1]
