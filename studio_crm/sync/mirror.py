"""Best-effort mirror of the aggregate into a remote per-user document."""
from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional, Tuple

from studio_crm.core.models import CRMData
from studio_crm.sync.documents import Document, DocumentStore, Unsubscribe

logger = logging.getLogger(__name__)

_STOP = object()


class RemoteMirror:
    """Push snapshots through an outbound queue consumed by a sync worker.

    Local mutations only enqueue; the worker (or an explicit ``flush``)
    writes the newest queued snapshot and drops older ones, so the remote
    document always converges on the last local write. Failed writes are
    logged and discarded.
    """

    def __init__(self, documents: DocumentStore, user_id: str) -> None:
        self.documents = documents
        self.user_id = user_id
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._last_written: Optional[Document] = None
        self.failures = 0

    def publish(self, snapshot: CRMData) -> None:
        """Enqueue a snapshot; never blocks on the remote store."""

        self._queue.put(snapshot.to_dict())

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _drain(self) -> Tuple[Optional[Document], bool]:
        latest: Optional[Document] = None
        stopped = False
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return latest, stopped
            if item is _STOP:
                stopped = True
            else:
                latest = item  # type: ignore[assignment]

    def _write(self, document: Document) -> bool:
        previous, self._last_written = self._last_written, document
        try:
            self.documents.merge_write(self.user_id, document)
        except Exception as exc:
            self._last_written = previous
            self.failures += 1
            logger.warning("Remote mirror write for %s failed: %s", self.user_id, exc)
            return False
        logger.debug("Mirrored CRM snapshot for %s", self.user_id)
        return True

    def flush(self) -> bool:
        """Write the newest pending snapshot now; ``False`` if nothing was written."""

        latest, _ = self._drain()
        if latest is None:
            return False
        return self._write(latest)

    def _run(self) -> None:
        while True:
            first = self._queue.get()
            latest, stopped = self._drain()
            if first is _STOP:
                stopped = True
            elif latest is None:
                latest = first  # type: ignore[assignment]
            if latest is not None:
                self._write(latest)
            if stopped:
                return

    def start(self) -> None:
        """Start the background sync worker if it is not already running."""

        if self._worker and self._worker.is_alive():
            return
        self._worker = threading.Thread(target=self._run, name=f"crm-mirror-{self.user_id}", daemon=True)
        self._worker.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Ask the worker to write what is queued and exit."""

        if not self._worker:
            return
        self._queue.put(_STOP)
        self._worker.join(timeout)
        self._worker = None

    def fetch(self) -> Optional[CRMData]:
        """Read the remote aggregate, or ``None`` when absent or unreadable."""

        try:
            document = self.documents.read(self.user_id)
        except Exception as exc:
            logger.warning("Reading remote CRM data for %s failed: %s", self.user_id, exc)
            return None
        return _parse_document(document)

    def listen(self, callback: Callable[[CRMData], None]) -> None:
        """Deliver every remote change to ``callback`` as a parsed aggregate."""

        def _on_change(document: Document) -> None:
            # our own write coming back
            if document == self._last_written:
                return
            data = _parse_document(document)
            if data is not None:
                callback(data)

        self.unlisten()
        self._unsubscribe = self.documents.subscribe(self.user_id, _on_change)

    def unlisten(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def close(self) -> None:
        self.unlisten()
        if self._worker:
            self.stop()
        else:
            self.flush()


def _parse_document(document: Optional[Document]) -> Optional[CRMData]:
    if not document:
        return None
    try:
        return CRMData.from_dict(document)
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring malformed remote CRM document: %s", exc)
        return None
