import threading


class DedupGuard:
    """Per-run record of handled scrub units and deleted object paths.

    Shared by every worker of one orchestrator run. All membership changes
    happen under a single lock so check-and-mark is atomic.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seen: set[str] = set()

    @staticmethod
    def unit_key(source_id: int, document_id: str, content_hash: str) -> str:
        return f"unit:{source_id}-{document_id}-{content_hash}"

    @staticmethod
    def path_key(path: str) -> str:
        return f"path:{path}"

    def seen(self, key: str) -> bool:
        """Plain membership test; the orchestrator uses claim() to check and mark at once."""
        with self._lock:
            return key in self._seen

    def mark_seen(self, key: str) -> None:
        """Unconditional mark; see claim() for the atomic check-and-mark."""
        with self._lock:
            self._seen.add(key)

    def claim(self, key: str) -> bool:
        """Mark key as seen. Returns False if another caller already holds it."""
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def release(self, key: str) -> None:
        with self._lock:
            self._seen.discard(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
