"""
State Cache: local mirror of the last document the user produced.

Updated before every save attempt so it reflects the latest intent even
when the Document Store is down. Read back only when loading from the
store fails.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .schema import empty_document
from .store import write_json_atomic

logger = logging.getLogger(__name__)


class StateCache:
    """Best-effort JSON mirror of the document on local disk."""

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def mirror(self, doc: Dict[str, Any]) -> None:
        """Persist `doc` locally. Never raises."""
        try:
            write_json_atomic(self.path, doc)
        except Exception as e:
            logger.warning(f"State cache write error ({self.path}): {e}")

    def recall(self) -> Dict[str, Any]:
        """Last mirrored document, or an empty document if there is none."""
        if not self.path.exists():
            return empty_document()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            logger.warning(f"State cache unreadable ({self.path}): {e}")
            return empty_document()
        if not isinstance(data, dict):
            return empty_document()
        return data

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
