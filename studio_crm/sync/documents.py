"""Remote per-user document stores used as the optional mirror target."""
from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Listener = Callable[[Document], None]
Unsubscribe = Callable[[], None]


class DocumentStore(Protocol):
    """Capability interface for a remote document keyed by user id."""

    def read(self, user_id: str) -> Optional[Document]:
        ...

    def subscribe(self, user_id: str, callback: Listener) -> Unsubscribe:
        ...

    def merge_write(self, user_id: str, payload: Document) -> None:
        ...


class InMemoryDocumentStore:
    """Process-local document store with change notifications."""

    def __init__(self) -> None:
        self._documents: Dict[str, Document] = {}
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()
        self.write_count = 0

    def read(self, user_id: str) -> Optional[Document]:
        with self._lock:
            document = self._documents.get(user_id)
            return copy.deepcopy(document) if document is not None else None

    def subscribe(self, user_id: str, callback: Listener) -> Unsubscribe:
        with self._lock:
            self._listeners.setdefault(user_id, []).append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(user_id, [])
                if callback in listeners:
                    listeners.remove(callback)

        return _unsubscribe

    def merge_write(self, user_id: str, payload: Document) -> None:
        """Shallow-merge ``payload`` into the user's document and notify listeners."""

        with self._lock:
            document = self._documents.setdefault(user_id, {})
            document.update(copy.deepcopy(payload))
            self.write_count += 1
            snapshot = copy.deepcopy(document)
            listeners = list(self._listeners.get(user_id, []))
        for listener in listeners:
            listener(copy.deepcopy(snapshot))


class HttpDocumentStore:
    """REST-backed document store (``GET``/``PATCH`` on ``{base_url}/users/{id}``).

    Subscriptions poll the document and invoke the callback whenever the
    returned body changes.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 15,
        poll_interval: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.poll_interval = poll_interval

    def _url(self, user_id: str) -> str:
        return f"{self.base_url}/users/{quote(user_id, safe='')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def read(self, user_id: str) -> Optional[Document]:
        response = self.session.get(self._url(user_id), headers=self._headers(), timeout=self.timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        body = response.json()
        return body if isinstance(body, dict) else None

    def merge_write(self, user_id: str, payload: Document) -> None:
        response = self.session.patch(
            self._url(user_id),
            headers=self._headers(),
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()

    def subscribe(self, user_id: str, callback: Listener) -> Unsubscribe:
        stop = threading.Event()

        def _poll() -> None:
            last_seen: Optional[Document] = None
            while not stop.is_set():
                try:
                    current = self.read(user_id)
                except requests.RequestException as exc:
                    logger.warning("Polling remote document for %s failed: %s", user_id, exc)
                else:
                    if current is not None and current != last_seen:
                        last_seen = current
                        try:
                            callback(current)
                        except Exception as exc:
                            logger.warning("Applying remote document for %s failed: %s", user_id, exc)
                stop.wait(self.poll_interval)

        thread = threading.Thread(target=_poll, name=f"crm-poll-{user_id}", daemon=True)
        thread.start()
        return stop.set
