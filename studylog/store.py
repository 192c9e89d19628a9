"""Entry Store: durable + cached access to study entries and the start date.

Writes go through an explicit pending-write queue. Local state is updated
by the caller before a write is attempted; a write that fails stays in the
queue as ``failed`` until someone calls ``flush()``/``retry_failed()``.
Nothing is retried automatically and nothing is rolled back.
"""

from __future__ import annotations

import logging
import threading
from datetime import date

from studylog.backends import DurableStore, StoreError
from studylog.cache import START_DATE_KEY, FallbackCache
from studylog.models import EntrySet, PendingWrite, StudyEntry, parse_day

logger = logging.getLogger(__name__)


class EntryStore:
    def __init__(self, durable: DurableStore, cache: FallbackCache) -> None:
        self.durable = durable
        self.cache = cache
        # One queued write per date, oldest first
        self._queue: dict[date, PendingWrite] = {}
        self._queue_lock = threading.Lock()
        # Held for the whole round trip so durable writes land in enqueue order
        self._flush_lock = threading.Lock()

    # ── Reads ──────────────────────────────────────────────────

    def load_entries(self) -> EntrySet:
        """Fetch all entries, oldest first. Read failures yield an empty set."""
        try:
            rows = self.durable.fetch_all()
        except StoreError as e:
            logger.error("Error loading entries: %s", e)
            return EntrySet()

        entries = EntrySet()
        for row in rows:
            try:
                entry = StudyEntry.from_dict(row)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed study_logs row %r: %s", row, e)
                continue
            if entry.hours <= 0:
                logger.warning("Skipping non-positive entry for %s", entry.date.isoformat())
                continue
            entries.put(entry)
        logger.info("Loaded %d study entries", len(entries))
        return entries

    def load_start_date(self, today: date) -> date:
        """Resolve the tracking start date.

        1. earliest durable record (cached on success)
        2. cached value
        3. today (cached)
        """
        try:
            earliest = self.durable.fetch_earliest()
        except StoreError as e:
            logger.error("Error resolving start date from store: %s", e)
            earliest = None

        if earliest:
            try:
                day = parse_day(earliest["date"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Ignoring malformed earliest row %r: %s", earliest, e)
            else:
                self.save_start_date(day)
                return day

        cached = self.cache.get(START_DATE_KEY)
        if cached:
            try:
                return parse_day(cached)
            except ValueError:
                logger.warning("Ignoring malformed cached start date %r", cached)

        self.save_start_date(today)
        return today

    def save_start_date(self, day: date) -> None:
        self.cache.set(START_DATE_KEY, day.isoformat())

    # ── Writes ─────────────────────────────────────────────────

    def upsert(self, day: date, hours: float, flush: bool = True) -> PendingWrite:
        return self._enqueue(PendingWrite(op="upsert", date=day, hours=hours), flush)

    def delete(self, day: date, flush: bool = True) -> PendingWrite:
        return self._enqueue(PendingWrite(op="delete", date=day), flush)

    def _enqueue(self, write: PendingWrite, flush: bool) -> PendingWrite:
        # A newer write for the same day supersedes whatever was queued
        with self._queue_lock:
            self._queue.pop(write.date, None)
            self._queue[write.date] = write
        if flush:
            with self._flush_lock:
                if self._is_queued(write):
                    self._attempt(write)
        return write

    def _is_queued(self, write: PendingWrite) -> bool:
        with self._queue_lock:
            return self._queue.get(write.date) is write

    def _attempt(self, write: PendingWrite) -> bool:
        # Caller holds _flush_lock
        write.attempts += 1
        day = write.date.isoformat()
        try:
            if write.op == "delete":
                self.durable.delete(day)
            else:
                self.durable.upsert({"date": day, "hours": write.hours})
        except StoreError as e:
            write.status = "failed"
            write.error = str(e)
            logger.error("Durable %s for %s failed: %s", write.op, day, e)
            return False

        with self._queue_lock:
            if self._queue.get(write.date) is write:
                del self._queue[write.date]
        logger.debug("Durable %s for %s done", write.op, day)
        return True

    # ── Queue ──────────────────────────────────────────────────

    @property
    def pending(self) -> list[PendingWrite]:
        with self._queue_lock:
            return list(self._queue.values())

    @property
    def is_consistent(self) -> bool:
        """True when every local change is known to be in the durable store."""
        return not self._queue

    def flush(self) -> list[PendingWrite]:
        """Attempt every queued write in order. Returns the ones that failed.

        Flushes from different threads run one at a time. Writes queued while
        a flush is in flight wait for the next one.
        """
        with self._flush_lock:
            for write in self.pending:
                # Superseded while an earlier write was in flight
                if self._is_queued(write):
                    self._attempt(write)
            failed = [w for w in self.pending if w.status == "failed"]
        if failed:
            logger.warning("%d durable write(s) still failing", len(failed))
        return failed

    def retry_failed(self) -> list[PendingWrite]:
        """User-driven retry of writes that failed earlier."""
        return self.flush()
