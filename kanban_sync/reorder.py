"""
Reorder Engine: same-column drag-and-drop.

Gesture lifecycle:
  IDLE → DRAGGING (start) → IDLE (drop / cancel)

While dragging, pointer-over events against task cards place an insertion
marker before (upper half) or after (lower half) the hovered card. On drop
the marker is resolved to an index in the column and the model moves the
dragged task there. Dropping into another column is rejected.
"""
from enum import Enum
from typing import NamedTuple, Optional

from .model import BoardModel


class DragState(Enum):
    """Gesture states."""
    IDLE = "idle"
    DRAGGING = "dragging"


class MarkerSide(Enum):
    BEFORE = "before"
    AFTER = "after"


class Rect(NamedTuple):
    """Vertical extent of a rendered task card."""
    top: float
    height: float


class Marker(NamedTuple):
    """Insertion point relative to a rendered task (None = empty column)."""
    task_id: Optional[str]
    side: MarkerSide


def marker_side(pointer_y: float, rect: Rect) -> MarkerSide:
    """Upper half of the card → before it, lower half → after it."""
    if (pointer_y - rect.top) < rect.height / 2:
        return MarkerSide.BEFORE
    return MarkerSide.AFTER


class ReorderEngine:
    """Tracks one drag gesture at a time and applies the drop to the model."""

    def __init__(self, model: BoardModel):
        self.model = model
        self._reset()

    def _reset(self) -> None:
        self.state = DragState.IDLE
        self.board_id: Optional[str] = None
        self.col_id: Optional[str] = None
        self.task_id: Optional[str] = None
        self.marker: Optional[Marker] = None

    @property
    def dragging(self) -> bool:
        return self.state == DragState.DRAGGING

    def start(self, board_id: str, col_id: str, task_id: str) -> bool:
        """Begin dragging `task_id` out of `col_id`."""
        if self.model.find_task(board_id, col_id, task_id) is None:
            return False
        self._reset()
        self.state = DragState.DRAGGING
        self.board_id = board_id
        self.col_id = col_id
        self.task_id = task_id
        return True

    def over(self, candidate_task_id: str, pointer_y: float, rect: Rect) -> Optional[Marker]:
        """
        Pointer moved over a task card. Cards outside the origin column
        and archived (unrendered) cards are ignored.
        """
        if not self.dragging:
            return None
        col = self.model.get_column(self.board_id, self.col_id)
        if col is None or candidate_task_id not in [t.id for t in col.visible_tasks()]:
            return None
        self.marker = Marker(candidate_task_id, marker_side(pointer_y, rect))
        return self.marker

    def over_empty(self, col_id: str) -> Optional[Marker]:
        """Pointer over the column body with no rendered cards: sole position."""
        if not self.dragging or col_id != self.col_id:
            return None
        col = self.model.get_column(self.board_id, col_id)
        if col is None or col.visible_tasks():
            return None
        self.marker = Marker(None, MarkerSide.AFTER)
        return self.marker

    def cancel(self) -> None:
        """Drag ended without a valid drop. Nothing is mutated."""
        self._reset()

    def resolve_index(self) -> Optional[int]:
        """
        Target index for the current marker, counted in the column with
        the dragged task already removed.
        """
        if not self.dragging or self.marker is None:
            return None
        col = self.model.get_column(self.board_id, self.col_id)
        if col is None:
            return None

        rendered = [t.id for t in col.visible_tasks()]
        if self.marker.task_id is None:
            following = []
        else:
            if self.marker.task_id not in rendered:
                return None
            pos = rendered.index(self.marker.task_id)
            if self.marker.side == MarkerSide.AFTER:
                pos += 1
            following = [tid for tid in rendered[pos:] if tid != self.task_id]

        remaining = [t.id for t in col.tasks if t.id != self.task_id]
        if not following:
            return len(remaining)
        return remaining.index(following[0])

    def drop(self, col_id: str) -> Optional[int]:
        """
        Drop onto `col_id`. Returns the index the task landed at, or None
        when the drop was rejected (idle, no marker, different column).
        The gesture ends either way.
        """
        try:
            if not self.dragging or col_id != self.col_id:
                return None
            index = self.resolve_index()
            if index is None:
                return None
            moved = self.model.move_task(self.board_id, self.col_id, self.task_id,
                                         self.col_id, index)
            return index if moved else None
        finally:
            self._reset()
