from __future__ import annotations

import pytest

from todo_sync.extraction import TodoMatch, TriggerTable, extract_todo, is_code


@pytest.fixture()
def table() -> TriggerTable:
    return TriggerTable({"TODO ": "todo", "FIXME ": "fixme"})


def test_line_without_trigger_yields_nothing(table: TriggerTable) -> None:
    assert extract_todo("x = compute(y)  # all good here", table) is None
    assert extract_todo("", table) is None


def test_extracts_title_after_trigger(table: TriggerTable) -> None:
    match = extract_todo("    // TODO fix the bug  ", table)
    assert match == TodoMatch(title="fix the bug", label="todo", issue=None)


def test_trigger_matching_is_case_insensitive_by_default(table: TriggerTable) -> None:
    match = extract_todo("# todo handle retries", table)
    assert match is not None
    assert match.title == "handle retries"
    assert match.label == "todo"


def test_case_sensitive_table_ignores_other_casing() -> None:
    table = TriggerTable({"TODO ": "todo"}, case_sensitive=True)
    assert extract_todo("# todo handle retries", table) is None
    assert extract_todo("# TODO handle retries", table) is not None


def test_first_trigger_in_table_order_wins(table: TriggerTable) -> None:
    match = extract_todo("# FIXME later, TODO now", table)
    assert match is not None
    assert match.label == "todo"
    assert match.title == "now"


def test_issue_reference_is_parsed_and_stripped(table: TriggerTable) -> None:
    match = extract_todo("# TODO #42 rest of title", table)
    assert match == TodoMatch(title="rest of title", label="todo", issue=42)


def test_bare_issue_reference_reads_as_code(table: TriggerTable) -> None:
    # "#42" alone is mostly symbols relative to its length and reads as code.
    assert extract_todo("# TODO #42", table) is None


def test_code_after_trigger_is_discarded(table: TriggerTable) -> None:
    assert extract_todo('TODO = {"a": [1, 2]};', TriggerTable({"TODO": "todo"})) is None
    assert extract_todo("// TODO x->y(); z[0]++;", table) is None


def test_empty_title_is_discarded(table: TriggerTable) -> None:
    assert extract_todo("# TODO    ", table) is None


def test_non_string_content_yields_nothing(table: TriggerTable) -> None:
    assert extract_todo(None, table) is None
    assert extract_todo(42, table) is None


def test_is_code_thresholds() -> None:
    assert not is_code("fix the bug")
    assert not is_code("réparer le bogue à côté")
    assert not is_code("")
    assert is_code("a->b();")
    assert is_code("{}")


def test_table_skips_entries_without_label() -> None:
    table = TriggerTable({"TODO ": "todo", "XXX ": ""})
    assert list(table) == [("TODO ", "todo")]
    assert len(table) == 1
