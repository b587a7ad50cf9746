"""Recent query history, persisted per identity."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

import structlog

from ..errors import HistoryCorruptError, StorageError
from ..models.search import RecentQuery
from .storage import KeyValueStorage

logger = structlog.get_logger(__name__)

ANONYMOUS = "anonymous"
DEFAULT_HISTORY_CAP = 4
DEFAULT_RETENTION_DAYS = 30
DEFAULT_KEY_PREFIX = "recent_searches_"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStore:
    """
    Capped, deduplicated, expiring list of recent queries.

    History is best-effort: unreadable, full or unavailable storage degrades
    to an empty history and is logged, never raised to callers.

    Values are stored as a JSON array of ``{"query": str, "timestamp": int}``
    objects, timestamps in epoch milliseconds, most recent first.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        cap: int = DEFAULT_HISTORY_CAP,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        clock: Optional[Callable[[], datetime]] = None
    ) -> None:
        """
        Initialize the history store.

        Args:
            storage: Persistence medium
            cap: Maximum number of entries kept per identity
            retention_days: Entries older than this are pruned
            key_prefix: Prefix of the storage key of every identity
            clock: Source of the current time (timezone-aware)
        """
        if cap < 1:
            raise ValueError(f"cap must be positive, got {cap}")
        self.storage = storage
        self.cap = cap
        self.retention = timedelta(days=retention_days)
        self.key_prefix = key_prefix
        self._clock = clock or _utcnow

    def key_for(self, identity: Optional[str]) -> str:
        """Storage key of an identity's history."""
        identity = (identity or "").strip() or ANONYMOUS
        return f"{self.key_prefix}{identity}"

    async def record(self, identity: Optional[str], query_text: str) -> None:
        """
        Record an explicitly submitted query.

        Blank queries are ignored. An existing entry with the same text
        (ignoring case and surrounding whitespace) is replaced, so the new
        casing and timestamp win.

        Args:
            identity: User identity, None for anonymous
            query_text: Submitted query
        """
        text = (query_text or "").strip()
        if not text:
            return

        key = self.key_for(identity)
        now = self._clock()
        entry = RecentQuery(query_text=text, timestamp=now)

        entries = [e for e in await self._load(key) if e.dedup_key != entry.dedup_key]
        entries.insert(0, entry)
        entries = self._prune(entries[:self.cap], now)

        await self._persist(key, entries)
        logger.debug("Recent query recorded", key=key, total_entries=len(entries))

    async def list(self, identity: Optional[str]) -> List[RecentQuery]:
        """
        Recent queries of an identity, most recent first.

        Expired entries are dropped and the pruned list written back.

        Args:
            identity: User identity, None for anonymous

        Returns:
            List of RecentQuery
        """
        key = self.key_for(identity)
        entries = await self._load(key)
        kept = self._prune(entries, self._clock())[:self.cap]

        if len(kept) != len(entries):
            await self._persist(key, kept)

        return kept

    async def clear(self, identity: Optional[str]) -> None:
        """Forget every recent query of an identity."""
        await self._discard(self.key_for(identity))

    async def _load(self, key: str) -> List[RecentQuery]:
        try:
            raw = await self.storage.get(key)
        except StorageError as exc:
            logger.warning("History storage unavailable", key=key, error=str(exc))
            return []

        if raw is None:
            return []

        try:
            return self.decode(raw)
        except HistoryCorruptError as exc:
            logger.warning("Discarding corrupt history", key=key, error=str(exc))
            await self._discard(key)
            return []

    async def _persist(self, key: str, entries: List[RecentQuery]) -> bool:
        try:
            await self._write(key, entries)
            return True
        except StorageError as exc:
            logger.warning("History write failed, cleaning up before retry", key=key, error=str(exc))

        await self._cleanup(exclude=key)

        try:
            await self._write(key, entries)
            return True
        except StorageError as exc:
            logger.warning("History write dropped", key=key, error=str(exc))
            return False

    async def _write(self, key: str, entries: List[RecentQuery]) -> None:
        if entries:
            await self.storage.set(key, self.encode(entries))
        else:
            await self.storage.remove(key)

    async def _cleanup(self, exclude: str) -> None:
        """Prune expired entries of every other identity to free space."""
        now = self._clock()

        try:
            keys = await self.storage.keys()
        except StorageError as exc:
            logger.debug("History cleanup skipped", error=str(exc))
            return

        for key in keys:
            if key == exclude or not key.startswith(self.key_prefix):
                continue
            try:
                raw = await self.storage.get(key)
                entries = self.decode(raw) if raw is not None else []
                kept = self._prune(entries, now)[:self.cap]
                if len(kept) != len(entries) or not kept:
                    await self._write(key, kept)
            except HistoryCorruptError:
                await self._discard(key)
            except StorageError as exc:
                logger.debug("History cleanup failed for key", key=key, error=str(exc))

    async def _discard(self, key: str) -> None:
        try:
            await self.storage.remove(key)
        except StorageError as exc:
            logger.debug("Could not remove history", key=key, error=str(exc))

    def _prune(self, entries: List[RecentQuery], now: datetime) -> List[RecentQuery]:
        cutoff = now - self.retention
        return [e for e in entries if e.timestamp >= cutoff]

    @staticmethod
    def encode(entries: List[RecentQuery]) -> str:
        """Serialize entries to the persisted JSON format."""
        return json.dumps([
            {"query": e.query_text, "timestamp": int(e.timestamp.timestamp() * 1000)}
            for e in entries
        ])

    @classmethod
    def decode(cls, raw: str) -> List[RecentQuery]:
        """
        Parse the persisted JSON format.

        Malformed entries are skipped; a value that is not a JSON array is corrupt.

        Raises:
            HistoryCorruptError: If the value cannot be decoded at all
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise HistoryCorruptError(f"History is not valid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise HistoryCorruptError(f"History must be a JSON array, got {type(data).__name__}")

        entries = []
        for item in data:
            entry = cls._decode_entry(item)
            if entry is None:
                logger.debug("Skipping malformed history entry")
                continue
            entries.append(entry)

        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries

    @staticmethod
    def _decode_entry(item: Any) -> Optional[RecentQuery]:
        if not isinstance(item, dict):
            return None

        text = item.get("query")
        millis = item.get("timestamp")

        if not isinstance(text, str) or not text.strip():
            return None
        if isinstance(millis, bool) or not isinstance(millis, (int, float)):
            return None

        try:
            timestamp = datetime.fromtimestamp(millis / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

        return RecentQuery(query_text=text.strip(), timestamp=timestamp)
