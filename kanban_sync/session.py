"""
Editor session: the client-side control flow.

    user action → BoardModel mutation → AutosaveScheduler.notify_mutated()
        → (quiet period) → save(): mirror into StateCache, then store.save()

Loading asks the store first and falls back to the cache when the store
is unreachable. Export and import work on the whole document.
"""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .autosave import DEFAULT_QUIET_PERIOD_MS, AutosaveScheduler, SaveStatus
from .cache import StateCache
from .client import RemoteStore
from .config import Config
from .errors import MalformedInput, StoreUnavailable
from .model import BoardModel
from .schema import Document
from .store import DocumentStore

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "kanban-export.json"


def parse_import(source: Union[str, bytes, Path]) -> Dict[str, Any]:
    """
    Parse and validate an import file.

    `source` is JSON text, raw bytes, or a Path to a file. Raises
    MalformedInput unless the content is an object with a `boards` list
    of objects.
    """
    try:
        if isinstance(source, Path):
            raw = source.read_text(encoding="utf-8")
        elif isinstance(source, bytes):
            raw = source.decode("utf-8")
        else:
            raw = source
        data = json.loads(raw)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise MalformedInput(f"Unable to read import: {e}") from e

    if not isinstance(data, dict) or "boards" not in data:
        raise MalformedInput("Invalid JSON file: missing 'boards'")
    if not isinstance(data["boards"], list):
        raise MalformedInput("Invalid JSON file: 'boards' must be a list")
    if not all(isinstance(b, dict) for b in data["boards"]):
        raise MalformedInput("Invalid JSON file: every board must be an object")
    return data


class EditorSession:
    """Owns the model and drives persistence for one editing session."""

    def __init__(self, store, cache: StateCache,
                 quiet_period_ms: int = DEFAULT_QUIET_PERIOD_MS,
                 timer_factory=None,
                 export_filename: str = EXPORT_FILENAME):
        self.store = store
        self.cache = cache
        self.export_filename = export_filename
        self.scheduler = AutosaveScheduler(
            self.save, quiet_period_ms=quiet_period_ms, timer_factory=timer_factory
        )
        self.model = BoardModel(on_mutated=self.scheduler.notify_mutated)
        self.offline = False

    @classmethod
    def from_config(cls, cfg: Config, timer_factory=None) -> "EditorSession":
        """Remote store when server_url is set, otherwise the state file directly."""
        if cfg.server_url:
            store = RemoteStore(cfg.server_url, timeout=cfg.request_timeout)
        else:
            store = DocumentStore(cfg.state_file)
        return cls(
            store,
            StateCache(cfg.cache_path),
            quiet_period_ms=cfg.quiet_period_ms,
            timer_factory=timer_factory,
            export_filename=cfg.export_filename,
        )

    @property
    def document(self) -> Document:
        return self.model.document

    @property
    def status(self) -> SaveStatus:
        return self.scheduler.status

    # ──────────────────────────────────────────
    # Load / save
    # ──────────────────────────────────────────

    def load(self) -> Document:
        """Load from the store, or from the local cache if it is unreachable."""
        try:
            data = self.store.load()
            self.offline = False
        except StoreUnavailable as e:
            logger.warning(f"Store unavailable, falling back to local cache: {e}")
            self.offline = True
            data = self.cache.recall()
        self.model.replace_document(Document.from_dict(data))
        return self.model.document

    def save(self) -> str:
        """
        Persist the current document. The cache is updated first so it
        holds the latest edits even if the store write fails.
        """
        snapshot = self.model.snapshot()
        self.cache.mirror(snapshot)
        try:
            saved_at = self.store.save(snapshot)
        except StoreUnavailable:
            self.offline = True
            raise
        self.offline = False
        if saved_at:
            self.model.stamp(saved_at)
        logger.info(f"State saved at {saved_at}")
        return saved_at

    def flush(self) -> SaveStatus:
        """Save now (manual save, shortcut, before leaving)."""
        return self.scheduler.flush()

    def close(self) -> None:
        """Flush a pending save and stop the timer."""
        if self.scheduler.pending:
            self.scheduler.flush()
        self.scheduler.cancel()

    # ──────────────────────────────────────────
    # Export / import
    # ──────────────────────────────────────────

    def export_json(self) -> str:
        return json.dumps(self.model.snapshot(), indent=2, ensure_ascii=False)

    def export_to(self, directory: Union[str, Path]) -> Path:
        """Write the pretty-printed document to `directory`/kanban-export.json."""
        path = Path(directory) / self.export_filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_json(), encoding="utf-8")
        return path

    def import_document(self, source: Union[str, bytes, Path],
                        confirm: Optional[Callable[[], bool]] = None) -> bool:
        """
        Replace the whole document with an imported one.

        Raises MalformedInput (state untouched) if the file is invalid.
        Returns False if `confirm` declines, True once the document has
        been replaced and a save scheduled.
        """
        document = Document.from_dict(parse_import(source))

        if confirm is not None and not confirm():
            return False
        self.model.replace_document(document)
        self.scheduler.notify_mutated()
        return True
