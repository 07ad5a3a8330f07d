"""In-process store for diffs awaiting human approval.

Entries are keyed by generated UUIDs and expire after a TTL. ``get`` checks
expiry against the injected clock on every call, so an expired entry is
never returned even if the background sweep has not removed it yet.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
import threading
from typing import TYPE_CHECKING
import uuid

from ...application.models import PreviewEntry
from ...constants import Defaults
from ..logging.null_logger import NullLogger

if TYPE_CHECKING:
    from collections.abc import Callable

    from ...application.ports.services import LoggerPort
    from ...domain.entities.diff import DiffResult, ImportMode, PatientReassignment
    from ...domain.entities.records import TransformedRow, ValidationResult

def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CacheStats:
    total_entries: int
    active_entries: int
    expired_entries: int
    oldest_entry: datetime | None
    newest_entry: datetime | None


@dataclass(frozen=True, slots=True)
class PreviewSummary:
    id: str
    system_id: str
    mode: ImportMode
    file_name: str | None
    total_changes: int
    inserts: int
    updates: int
    skips: int
    duplicates: int
    deletes: int
    created_at: datetime
    expires_at: datetime


class PreviewCache:
    pass

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utc_now,
        default_ttl: timedelta = timedelta(seconds=Defaults.PREVIEW_TTL_SECONDS),
        sweep_interval: timedelta = timedelta(
            seconds=Defaults.SWEEP_INTERVAL_SECONDS
        ),
        logger: LoggerPort | None = None,
    ) -> None:
        super().__init__()
        self._clock = clock
        self._logger = logger or NullLogger()
        self._default_ttl = default_ttl
        self._sweep_interval = sweep_interval
        self._entries: dict[str, PreviewEntry] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: threading.Thread | None = None

    def store(
        self,
        *,
        system_id: str,
        mode: ImportMode,
        diff: DiffResult,
        rows: list[TransformedRow],
        validation: ValidationResult,
        warnings: list[str] | None = None,
        file_name: str | None = None,
        reassignments: list[PatientReassignment] | None = None,
        target_owner_id: int | None = None,
        ttl: timedelta | None = None,
    ) -> str:
        now = self._clock()
        entry = PreviewEntry(
            id=str(uuid.uuid4()),
            system_id=system_id,
            mode=mode,
            diff=diff,
            rows=list(rows),
            validation=validation,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self._default_ttl),
            file_name=file_name,
            warnings=list(warnings or []),
            reassignments=list(reassignments or []),
            target_owner_id=target_owner_id,
        )
        with self._lock:
            self._entries[entry.id] = entry
        return entry.id

    def get(self, preview_id: str) -> PreviewEntry | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(preview_id)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[preview_id]
                return None
            return entry

    def delete(self, preview_id: str) -> bool:
        with self._lock:
            return self._entries.pop(preview_id, None) is not None

    def has_valid_preview(self, preview_id: str) -> bool:
        return self.get(preview_id) is not None

    def extend_ttl(self, preview_id: str, ttl: timedelta | None = None) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(preview_id)
            if entry is None or entry.is_expired(now):
                return False
            entry.expires_at = now + (ttl if ttl is not None else self._default_ttl)
            return True

    def active_previews(self) -> list[PreviewEntry]:
        now = self._clock()
        with self._lock:
            return [e for e in self._entries.values() if not e.is_expired(now)]

    def get_cache_stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        active = sum(1 for e in entries if not e.is_expired(now))
        created = [e.created_at for e in entries]
        return CacheStats(
            total_entries=len(entries),
            active_entries=active,
            expired_entries=len(entries) - active,
            oldest_entry=min(created) if created else None,
            newest_entry=max(created) if created else None,
        )

    def cleanup_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            self._logger.verbose(f"Cleaned up {len(expired)} expired preview(s)")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def preview_summary(self, preview_id: str) -> PreviewSummary | None:
        entry = self.get(preview_id)
        if entry is None:
            return None
        summary = entry.diff.summary
        return PreviewSummary(
            id=entry.id,
            system_id=entry.system_id,
            mode=entry.mode,
            file_name=entry.file_name,
            total_changes=len(entry.diff.changes),
            inserts=summary.inserts,
            updates=summary.updates,
            skips=summary.skips,
            duplicates=summary.duplicates,
            deletes=summary.deletes,
            created_at=entry.created_at,
            expires_at=entry.expires_at,
        )

    @property
    def cleanup_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()

    def start_cleanup(self) -> None:
        if self.cleanup_running:
            return
        self._stop.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, name="preview-cache-sweeper", daemon=True
        )
        self._sweeper.start()

    def stop_cleanup(self) -> None:
        self._stop.set()
        if self._sweeper is not None:
            self._sweeper.join(timeout=self._sweep_interval.total_seconds() + 1)
            self._sweeper = None

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self._sweep_interval.total_seconds()):
            self.cleanup_expired()
