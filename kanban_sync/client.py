"""
HTTP Document Store.

Same load()/save() contract as DocumentStore, but talks to the
/api/state endpoints served by kanban_server.py.
"""
import logging
from typing import Any, Dict

import requests

from .errors import PersistFailure, StoreUnavailable

logger = logging.getLogger(__name__)


class RemoteStore:
    """Client for a kanban_server instance."""

    def __init__(self, base_url: str, timeout: float = 2.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    @property
    def state_url(self) -> str:
        return f"{self.base_url}/api/state"

    def load(self) -> Dict[str, Any]:
        """Fetch the full document. Raises StoreUnavailable on any failure."""
        try:
            r = self.session.get(self.state_url, timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreUnavailable(f"GET {self.state_url} failed: {e}") from e
        if not r.ok:
            raise StoreUnavailable(f"GET {self.state_url} returned {r.status_code}")
        try:
            data = r.json()
        except ValueError as e:
            raise StoreUnavailable(f"GET {self.state_url} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise StoreUnavailable(f"GET {self.state_url} returned a non-object body")
        return data

    def save(self, doc: Dict[str, Any]) -> str:
        """
        POST the full document.

        Returns the server's savedAt timestamp. Transport errors raise
        StoreUnavailable, a rejected write raises PersistFailure.
        """
        try:
            r = self.session.post(self.state_url, json=doc, timeout=self.timeout)
        except requests.RequestException as e:
            raise StoreUnavailable(f"POST {self.state_url} failed: {e}") from e
        if not r.ok:
            detail = ""
            try:
                detail = r.json().get("error", "")
            except (ValueError, AttributeError):
                pass
            raise PersistFailure(f"Save rejected ({r.status_code}) {detail}".strip())
        try:
            return r.json().get("savedAt", "")
        except (ValueError, AttributeError):
            logger.warning("Save acknowledged without a JSON body")
            return ""

    def health(self) -> Dict[str, Any]:
        """Liveness probe against /api/health."""
        url = f"{self.base_url}/api/health"
        try:
            r = self.session.get(url, timeout=self.timeout)
            r.raise_for_status()
            return r.json()
        except (requests.RequestException, ValueError) as e:
            raise StoreUnavailable(f"GET {url} failed: {e}") from e
