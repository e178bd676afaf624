"""
Kanban document schema.

Document → Boards → Columns → Tasks → Comments.

The whole tree is persisted as a single JSON document. Keys on disk are
camelCase (dueDate, openBoardId, updatedAt); unknown keys are carried in
`extra` so older or richer documents survive a load/save round-trip.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable
import time
import uuid


# Workflow stages, in order. advance_task matches column titles against this.
STAGE_ORDER = ("TODO", "WIP", "ON CHECK", "DONE")

DEFAULT_DOCUMENT_TITLE = "My Kanban"
NEW_TASK_TITLE = "New Task"


def utc_now() -> str:
    """ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def make_id(prefix: str = "id") -> str:
    """Generate an opaque id (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"{prefix}-{ts}-{rand}"


def next_stage(title: str) -> Optional[str]:
    """Stage name after `title`, or None for the last / unknown stage."""
    if title not in STAGE_ORDER:
        return None
    idx = STAGE_ORDER.index(title)
    if idx == len(STAGE_ORDER) - 1:
        return None
    return STAGE_ORDER[idx + 1]


def parse_labels(value: Any) -> List[str]:
    """
    Normalize label input into a clean list.

    Accepts a comma-separated string ("ops, dev") or an iterable of strings.
    Blank entries are dropped and duplicates removed, first occurrence wins.
    """
    if value is None:
        return []
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(",")
    else:
        parts = value
    labels: List[str] = []
    for part in parts:
        label = str(part).strip()
        if label and label not in labels:
            labels.append(label)
    return labels


def _extra(data: Dict[str, Any], known: Iterable[str]) -> Dict[str, Any]:
    known = set(known)
    return {k: v for k, v in data.items() if k not in known}


def _mapping(value: Any) -> Dict[str, Any]:
    """`value` if it is an object, else an empty one."""
    return value if isinstance(value, dict) else {}


def _records(value: Any) -> List[Dict[str, Any]]:
    """The object entries of a list. Anything else yields nothing."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _labels(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(label) for label in value]


@dataclass
class Comment:
    """One entry in a task's append-only comment log."""
    text: str
    timestamp: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        # Older documents stored the time under "when"
        ts = data.get("timestamp") or data.get("when") or utc_now()
        return cls(text=str(data.get("text", "")), timestamp=ts)


@dataclass
class Task:
    """A unit of work. Belongs to exactly one column at a time."""

    id: str
    title: str = NEW_TASK_TITLE
    description: str = ""
    labels: List[str] = field(default_factory=list)
    due_date: Optional[str] = None      # ISO date string, e.g. "2026-01-31"
    comments: List[Comment] = field(default_factory=list)
    archived: bool = False              # hidden from rendering, not removed
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    _KEYS = ("id", "title", "description", "labels", "dueDate", "comments", "archived")

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "labels": list(self.labels),
            "dueDate": self.due_date,
            "comments": [c.to_dict() for c in self.comments],
            "archived": self.archived,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data.get("id") or make_id("t")),
            title=str(data.get("title", "")),
            description=data.get("description") or "",
            labels=_labels(data.get("labels")),
            due_date=data.get("dueDate") or None,
            comments=[Comment.from_dict(c) for c in _records(data.get("comments"))],
            archived=bool(data.get("archived", False)),
            extra=_extra(data, cls._KEYS),
        )


@dataclass
class Column:
    """An ordered queue of tasks. The title doubles as the workflow stage key."""

    id: str
    title: str
    tasks: List[Task] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    _KEYS = ("id", "title", "tasks")

    def index_of(self, task_id: str) -> int:
        """Position of a task in this column, or -1."""
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return -1

    def get_task(self, task_id: str) -> Optional[Task]:
        idx = self.index_of(task_id)
        return self.tasks[idx] if idx != -1 else None

    def visible_tasks(self) -> List[Task]:
        """Tasks that are rendered (not archived), in order."""
        return [t for t in self.tasks if not t.archived]

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "title": self.title,
            "tasks": [t.to_dict() for t in self.tasks],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=str(data.get("id") or make_id("col")),
            title=str(data.get("title", "")),
            tasks=[Task.from_dict(t) for t in _records(data.get("tasks"))],
            extra=_extra(data, cls._KEYS),
        )


@dataclass
class Board:
    """A named collection of ordered columns."""

    id: str
    title: str
    columns: List[Column] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    _KEYS = ("id", "title", "columns")

    def get_column(self, col_id: str) -> Optional[Column]:
        for col in self.columns:
            if col.id == col_id:
                return col
        return None

    def column_by_title(self, title: str) -> Optional[Column]:
        for col in self.columns:
            if col.title == title:
                return col
        return None

    def task_ids(self) -> List[str]:
        return [t.id for col in self.columns for t in col.tasks]

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "title": self.title,
            "columns": [c.to_dict() for c in self.columns],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Board":
        return cls(
            id=str(data.get("id") or make_id("board")),
            title=str(data.get("title", "")),
            columns=[Column.from_dict(c) for c in _records(data.get("columns"))],
            extra=_extra(data, cls._KEYS),
        )


@dataclass
class UIState:
    """View pointer persisted with the document."""
    open_board_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["openBoardId"] = self.open_board_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UIState":
        return cls(
            open_board_id=data.get("openBoardId"),
            extra=_extra(data, ("openBoardId",)),
        )


@dataclass
class Document:
    """The entire persisted application state."""

    boards: List[Board] = field(default_factory=list)
    ui: UIState = field(default_factory=UIState)
    meta: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    _KEYS = ("boards", "ui", "meta")

    def get_board(self, board_id: str) -> Optional[Board]:
        for board in self.boards:
            if board.id == board_id:
                return board
        return None

    @property
    def open_board(self) -> Optional[Board]:
        if self.ui.open_board_id is None:
            return None
        return self.get_board(self.ui.open_board_id)

    def heal(self) -> None:
        """Point ui.openBoardId at an existing board (first one) or None."""
        if self.open_board is None:
            self.ui.open_board_id = self.boards[0].id if self.boards else None

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "meta": dict(self.meta),
            "boards": [b.to_dict() for b in self.boards],
            "ui": self.ui.to_dict(),
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Deserialize, repairing a missing or dangling openBoardId."""
        data = _mapping(data)
        doc = cls(
            boards=[Board.from_dict(b) for b in _records(data.get("boards"))],
            ui=UIState.from_dict(_mapping(data.get("ui"))),
            meta=dict(_mapping(data.get("meta"))),
            extra=_extra(data, cls._KEYS),
        )
        doc.heal()
        return doc


# ── Factories ────────────────────────────────────────────────────────────────

def default_columns() -> List[Column]:
    """One fresh column per workflow stage."""
    return [Column(id=make_id("col"), title=stage) for stage in STAGE_ORDER]


def empty_document() -> Dict[str, Any]:
    """Persisted form of a document with no boards."""
    return {"boards": [], "ui": {"openBoardId": None}, "meta": {}}


def seed_document() -> Dict[str, Any]:
    """First-run document: one board, the canonical stages, one example task."""
    example = Task(
        id="t-1",
        title="Create layout",
        description="Build the home page",
        labels=["frontend"],
    )
    columns = [
        Column(id=f"col-{stage.lower().replace(' ', '-')}", title=stage)
        for stage in STAGE_ORDER
    ]
    columns[0].tasks.append(example)
    doc = Document(
        boards=[Board(id="board-1", title="Main project", columns=columns)],
        ui=UIState(open_board_id="board-1"),
        meta={"title": DEFAULT_DOCUMENT_TITLE, "updatedAt": utc_now()},
    )
    return doc.to_dict()
