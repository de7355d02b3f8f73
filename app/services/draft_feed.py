# app/services/draft_feed.py
# In-process change feed: writers notify, subscribers get full newest-first snapshots.
import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Snapshot = List[Dict[str, Any]]
Callback = Callable[[Snapshot], None]


class Subscription:
    def __init__(self, feed: "DraftFeed", user_id: str, callback: Callback):
        self._feed = feed
        self.user_id = user_id
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._feed._remove(self)


class DraftFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subs: Dict[str, List[Subscription]] = {}

    def subscribe(self, user_id: str, callback: Callback) -> Subscription:
        sub = Subscription(self, user_id, callback)
        with self._lock:
            self._subs.setdefault(user_id, []).append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.user_id, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subs.pop(sub.user_id, None)

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subs.get(user_id, []))

    def notify(self, user_id: str, snapshot: Snapshot) -> None:
        with self._lock:
            targets = list(self._subs.get(user_id, []))
        for sub in targets:
            if not sub.active:
                continue
            try:
                sub.callback(snapshot)
            except Exception:
                # one broken listener must not fail the write that triggered it
                logger.exception("Draft subscriber for user=%s failed", user_id)
