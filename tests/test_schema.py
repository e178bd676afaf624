"""
Tests for the document schema: serialization, self-healing, factories.
"""
from kanban_sync.schema import (
    STAGE_ORDER,
    Comment,
    Document,
    Task,
    default_columns,
    empty_document,
    make_id,
    next_stage,
    parse_labels,
    seed_document,
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_make_id_is_prefixed_and_unique():
    ids = {make_id("t") for _ in range(200)}
    assert len(ids) == 200
    assert all(i.startswith("t-") for i in ids)


def test_next_stage():
    assert next_stage("TODO") == "WIP"
    assert next_stage("WIP") == "ON CHECK"
    assert next_stage("ON CHECK") == "DONE"
    assert next_stage("DONE") is None
    assert next_stage("Backlog") is None


class TestParseLabels:

    def test_comma_string(self):
        assert parse_labels("ops, dev ,, urgent") == ["ops", "dev", "urgent"]

    def test_deduplicates_keeping_first(self):
        assert parse_labels(["a", "b", "a", " b "]) == ["a", "b"]

    def test_empty_inputs(self):
        assert parse_labels("") == []
        assert parse_labels(None) == []


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Serialization
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_task_uses_camel_case_keys():
    task = Task(id="t-1", title="Write docs", due_date="2026-01-31", labels=["docs"])
    data = task.to_dict()
    assert data["dueDate"] == "2026-01-31"
    assert data["archived"] is False
    assert "due_date" not in data


def test_comment_reads_legacy_when_key():
    comment = Comment.from_dict({"text": "hi", "when": "2025-01-01T00:00:00Z"})
    assert comment.timestamp == "2025-01-01T00:00:00Z"
    assert comment.to_dict() == {"text": "hi", "timestamp": "2025-01-01T00:00:00Z"}


def test_unknown_keys_survive_round_trip():
    """Older seeds carry a `checklist` field the model does not know about"""
    data = {
        "meta": {"title": "Board", "updatedAt": "2025-01-01T00:00:00Z"},
        "boards": [{
            "id": "b1", "title": "B", "color": "blue",
            "columns": [{"id": "c1", "title": "TODO", "tasks": [{
                "id": "t1", "title": "T", "description": "", "labels": [],
                "dueDate": None, "checklist": [{"item": "x"}],
                "comments": [], "archived": False,
            }]}],
        }],
        "ui": {"openBoardId": "b1", "sidebar": "open"},
        "version": 2,
    }
    assert Document.from_dict(data).to_dict() == data


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# openBoardId self-healing
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_missing_open_board_defaults_to_first():
    doc = Document.from_dict({"boards": [{"id": "b1", "title": "One"},
                                         {"id": "b2", "title": "Two"}]})
    assert doc.ui.open_board_id == "b1"
    assert doc.open_board.title == "One"


def test_dangling_open_board_is_repaired():
    doc = Document.from_dict({
        "boards": [{"id": "b1", "title": "One"}],
        "ui": {"openBoardId": "gone"},
    })
    assert doc.ui.open_board_id == "b1"


def test_no_boards_means_no_open_board():
    doc = Document.from_dict({"boards": [], "ui": {"openBoardId": "gone"}})
    assert doc.ui.open_board_id is None
    assert doc.open_board is None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Factories
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_seed_document_shape():
    seed = seed_document()
    assert len(seed["boards"]) == 1
    board = seed["boards"][0]
    assert [c["title"] for c in board["columns"]] == list(STAGE_ORDER)
    assert len(board["columns"][0]["tasks"]) == 1
    assert seed["ui"]["openBoardId"] == board["id"]
    assert seed["meta"]["updatedAt"]


def test_default_columns_have_fresh_ids():
    first, second = default_columns(), default_columns()
    assert [c.title for c in first] == list(STAGE_ORDER)
    assert {c.id for c in first}.isdisjoint({c.id for c in second})


def test_empty_document():
    doc = Document.from_dict(empty_document())
    assert doc.boards == []
    assert doc.ui.open_board_id is None
