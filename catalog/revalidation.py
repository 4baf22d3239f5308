"""Fire-and-forget notifications that public paths may be stale."""

import logging
import threading
from typing import Iterable, Optional, Protocol, runtime_checkable

import httpx

from config.logging_config import REVALIDATION_LOGGER
from config.settings import Settings

logger = logging.getLogger(REVALIDATION_LOGGER)

CATALOG_PATH = "/"


# ---- Path builders ----

def author_paths(slug: Optional[str]) -> list[str]:
    paths = [CATALOG_PATH, "/admin/authors"]
    if slug:
        paths.append(f"/tac-gia/{slug}")
    return paths


def genre_paths(slug: Optional[str]) -> list[str]:
    paths = [CATALOG_PATH, "/admin/genres"]
    if slug:
        paths.append(f"/the-loai/{slug}")
    return paths


def novel_paths(novel_id: str, slug: Optional[str]) -> list[str]:
    paths = [CATALOG_PATH, "/admin/novels", f"/admin/novels/{novel_id}"]
    if slug:
        paths.append(f"/truyen/{slug}")
    return paths


def chapter_paths(novel_id: str, novel_slug: Optional[str], chapter_number: Optional[int]) -> list[str]:
    paths = novel_paths(novel_id, novel_slug) + [f"/admin/novels/{novel_id}/chapters"]
    if novel_slug and chapter_number:
        paths.append(f"/truyen/{novel_slug}/chuong-{chapter_number}")
    return paths


def _dedupe(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(p for p in paths if p))


# ---- Notifiers ----

@runtime_checkable
class Notifier(Protocol):
    """Anything that can be told which paths are stale."""

    def notify(self, paths: Iterable[str]) -> None:
        ...


class RevalidationNotifier:
    """Logs stale paths and, when configured, POSTs them to a webhook.

    Delivery runs on a daemon thread so the mutation returns without waiting;
    delivery failures are logged and dropped.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings or Settings()
        self._transport = transport
        self._pending: list[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.settings.revalidate_enabled and self.settings.revalidate_url)

    def notify(self, paths: Iterable[str]) -> None:
        paths = _dedupe(paths)
        if not paths:
            return
        logger.info("Stale paths: %s", ", ".join(paths))
        if not self.webhook_enabled:
            return

        thread = threading.Thread(target=self._deliver, args=(paths,), daemon=True, name="revalidate")
        # Started under the lock: an unstarted thread would look finished to the pruning
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            thread.start()
            self._pending.append(thread)

    def _deliver(self, paths: list[str]) -> None:
        headers = {}
        if self.settings.revalidate_token:
            headers["Authorization"] = f"Bearer {self.settings.revalidate_token}"
        timeout = httpx.Timeout(float(self.settings.revalidate_timeout_seconds))
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.post(self.settings.revalidate_url, json={"paths": paths}, headers=headers)
                response.raise_for_status()
            logger.debug("Revalidation delivered (%d paths)", len(paths))
        except httpx.HTTPError as e:
            logger.warning("Revalidation delivery failed for %s: %s", paths, e)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for outstanding deliveries to finish."""
        with self._lock:
            pending = list(self._pending)
        for thread in pending:
            thread.join(timeout)
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]


class RecordingNotifier:
    """In-memory notifier that keeps every batch of stale paths."""

    def __init__(self):
        self.calls: list[list[str]] = []

    def notify(self, paths: Iterable[str]) -> None:
        paths = _dedupe(paths)
        if paths:
            self.calls.append(paths)

    @property
    def paths(self) -> list[str]:
        return [p for call in self.calls for p in call]

    def flush(self, timeout: Optional[float] = None) -> None:
        pass
