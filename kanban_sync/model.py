"""
Board Model: in-memory board/column/task tree and its mutations.

Every mutation is synchronous and, when it changes state, calls the
`on_mutated` hook (normally AutosaveScheduler.notify_mutated). Calls that
address unknown ids, or that would not change anything, are no-ops and
do not notify.
"""
import threading
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .schema import (
    Board,
    Column,
    Comment,
    Document,
    Task,
    default_columns,
    make_id,
    next_stage,
    parse_labels,
    utc_now,
)

# Form fields update_task understands (persisted key names)
TASK_FIELDS = {"title", "description", "dueDate", "labels", "archived"}


def mutation(f):
    """Decorator: run under the model lock, notify if something changed."""
    @wraps(f)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            result = f(self, *args, **kwargs)
        if result is not None and result is not False:
            self._notify()
        return result
    return wrapper


class BoardModel:
    """Owns a Document and exposes the editing operations on it."""

    def __init__(self, document: Optional[Document] = None,
                 on_mutated: Optional[Callable[[], None]] = None):
        self.document = document or Document()
        self.on_mutated = on_mutated
        # Autosave serializes from a timer thread
        self._lock = threading.RLock()

    def _notify(self) -> None:
        if self.on_mutated:
            self.on_mutated()

    # ──────────────────────────────────────────
    # Lookups
    # ──────────────────────────────────────────

    def get_board(self, board_id: str) -> Optional[Board]:
        return self.document.get_board(board_id)

    def get_column(self, board_id: str, col_id: str) -> Optional[Column]:
        board = self.get_board(board_id)
        return board.get_column(col_id) if board else None

    def find_task(self, board_id: str, col_id: str, task_id: str) -> Optional[Task]:
        col = self.get_column(board_id, col_id)
        return col.get_task(task_id) if col else None

    def snapshot(self) -> Dict[str, Any]:
        """Persisted form of the current document, taken atomically."""
        with self._lock:
            return self.document.to_dict()

    def replace_document(self, document: Document) -> None:
        """Swap in a whole new document (load / import). Does not notify."""
        with self._lock:
            document.heal()
            self.document = document

    def stamp(self, updated_at: str) -> None:
        """Record the time of the last successful persist. Does not notify."""
        with self._lock:
            self.document.meta["updatedAt"] = updated_at

    def open_board(self, board_id: str) -> bool:
        """Point the UI at a board. View state only, no autosave."""
        with self._lock:
            if self.get_board(board_id) is None:
                return False
            self.document.ui.open_board_id = board_id
            return True

    # ──────────────────────────────────────────
    # Boards
    # ──────────────────────────────────────────

    @mutation
    def create_board(self, title: str) -> Optional[Board]:
        """Append a board with the default stage columns and open it."""
        title = (title or "").strip()
        if not title:
            return None
        board = Board(id=make_id("board"), title=title, columns=default_columns())
        self.document.boards.append(board)
        self.document.ui.open_board_id = board.id
        return board

    @mutation
    def rename_board(self, board_id: str, title: str) -> bool:
        title = (title or "").strip()
        board = self.get_board(board_id)
        if board is None or not title or title == board.title:
            return False
        board.title = title
        return True

    @mutation
    def delete_board(self, board_id: str) -> bool:
        """Remove a board; the UI falls back to the first remaining one."""
        board = self.get_board(board_id)
        if board is None:
            return False
        self.document.boards.remove(board)
        boards = self.document.boards
        self.document.ui.open_board_id = boards[0].id if boards else None
        return True

    # ──────────────────────────────────────────
    # Tasks
    # ──────────────────────────────────────────

    @mutation
    def create_task(self, board_id: str, col_id: str) -> Optional[Task]:
        """New tasks go to the head of the column."""
        col = self.get_column(board_id, col_id)
        if col is None:
            return None
        task = Task(id=make_id("t"))
        col.tasks.insert(0, task)
        return task

    @mutation
    def update_task(self, board_id: str, col_id: str, task_id: str,
                    fields: Dict[str, Any]) -> bool:
        """
        Update a task in place from form fields.

        Recognized keys: title, description, dueDate, labels, archived.
        A blank title keeps the previous one. Labels may be a list or a
        comma-separated string.
        Fields with no recognized key are a no-op.
        """
        task = self.find_task(board_id, col_id, task_id)
        if task is None:
            return False
        if not fields.keys() & TASK_FIELDS:
            return False
        if "title" in fields:
            task.title = (fields["title"] or "").strip() or task.title
        if "description" in fields:
            task.description = fields["description"] or ""
        if "dueDate" in fields:
            task.due_date = fields["dueDate"] or None
        if "labels" in fields:
            task.labels = parse_labels(fields["labels"])
        if "archived" in fields:
            task.archived = bool(fields["archived"])
        return True

    @mutation
    def delete_task(self, board_id: str, col_id: str, task_id: str) -> bool:
        col = self.get_column(board_id, col_id)
        if col is None:
            return False
        idx = col.index_of(task_id)
        if idx == -1:
            return False
        del col.tasks[idx]
        return True

    @mutation
    def move_task(self, board_id: str, from_col_id: str, task_id: str,
                  to_col_id: str, target_index: int) -> bool:
        """
        Remove a task from its column and insert it at `target_index`
        in the destination. The index is clamped to the destination
        length measured after removal.
        """
        src = self.get_column(board_id, from_col_id)
        dst = self.get_column(board_id, to_col_id)
        if src is None or dst is None:
            return False
        idx = src.index_of(task_id)
        if idx == -1:
            return False
        task = src.tasks.pop(idx)
        target_index = max(0, min(int(target_index), len(dst.tasks)))
        dst.tasks.insert(target_index, task)
        return True

    @mutation
    def advance_task(self, board_id: str, col_id: str, task_id: str) -> bool:
        """
        Move a task to the head of the next workflow stage column.

        The next column is found by title (see STAGE_ORDER). Tasks in the
        last stage, in a column with a non-stage title, or on a board that
        lacks the next stage stay where they are.
        """
        board = self.get_board(board_id)
        col = board.get_column(col_id) if board else None
        if col is None:
            return False
        idx = col.index_of(task_id)
        if idx == -1:
            return False
        stage = next_stage(col.title)
        if stage is None:
            return False
        target = board.column_by_title(stage)
        if target is None:
            return False
        task = col.tasks.pop(idx)
        target.tasks.insert(0, task)
        return True

    @mutation
    def add_comment(self, board_id: str, col_id: str, task_id: str,
                    text: str) -> Optional[Comment]:
        text = (text or "").strip()
        if not text:
            return None
        task = self.find_task(board_id, col_id, task_id)
        if task is None:
            return None
        comment = Comment(text=text, timestamp=utc_now())
        task.comments.append(comment)
        return comment


# ── Derived reads ────────────────────────────────────────────────────────────

def labels_in_use(document: Document) -> Set[str]:
    """All labels on non-archived tasks, across every board."""
    return {
        label
        for board in document.boards
        for col in board.columns
        for task in col.tasks
        if not task.archived
        for label in task.labels
    }


def search_tasks(board: Board, query: str) -> List[Tuple[Column, Task]]:
    """Visible tasks whose title, description or labels contain `query`."""
    q = (query or "").strip().lower()
    if not q:
        return []
    hits = []
    for col in board.columns:
        for task in col.visible_tasks():
            haystack = f"{task.title} {task.description} {' '.join(task.labels)}".lower()
            if q in haystack:
                hits.append((col, task))
    return hits


def tasks_with_label(board: Board, label: str) -> List[Tuple[Column, Task]]:
    """Visible tasks carrying `label`, in board order."""
    return [
        (col, task)
        for col in board.columns
        for task in col.visible_tasks()
        if label in task.labels
    ]
