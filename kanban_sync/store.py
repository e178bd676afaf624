"""
Document Store (JSON file).

Holds the single state document. Seeds it on first access and overwrites
it whole on every save; there is no partial merge.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from .errors import PersistFailure
from .schema import empty_document, seed_document, utc_now

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """Write JSON to a temp file beside `path`, then rename over it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_file = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        tmp_file.replace(path)
    except BaseException:
        tmp_file.unlink(missing_ok=True)
        raise


class DocumentStore:
    """File-backed store for the whole kanban document."""

    def __init__(self, path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Dict[str, Any]:
        """
        Return the persisted document.

        First access writes and returns a seed document. Read or parse
        failures degrade to an empty document instead of raising.
        """
        try:
            if not self.path.exists():
                seed = seed_document()
                write_json_atomic(self.path, seed)
                logger.info(f"Seeded new state document at {self.path}")
                return seed
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw or "{}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read state document {self.path}: {e}")
            return empty_document()

        if not isinstance(data, dict):
            logger.error(f"State document {self.path} is not an object, ignoring it")
            return empty_document()
        return data

    def save(self, doc: Dict[str, Any]) -> str:
        """
        Overwrite the stored document with `doc`.

        Stamps meta.updatedAt on the written copy and returns that timestamp.
        Raises PersistFailure if the write fails; the previous file is left intact.
        """
        now = utc_now()
        data = dict(doc)
        meta = data.get("meta")
        data["meta"] = dict(meta) if isinstance(meta, dict) else {}
        data["meta"]["updatedAt"] = now
        try:
            write_json_atomic(self.path, data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write state document {self.path}: {e}")
            raise PersistFailure(f"Save failed: {e}") from e
        return now
