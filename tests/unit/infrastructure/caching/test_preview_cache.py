"""Tests for the TTL preview cache."""

from datetime import timedelta
import time
from unittest.mock import Mock

import pytest

from caregap_importer.domain.entities.diff import ImportMode
from caregap_importer.domain.services.diff_calculator import calculate_diff
from caregap_importer.domain.services.validator import RowValidator
from caregap_importer.infrastructure.caching import PreviewCache


@pytest.fixture
def stage(make_row):
    rows = [make_row()]
    diff = calculate_diff(rows, [], ImportMode.MERGE)
    validation = RowValidator().validate(rows)

    def _stage(cache, **kwargs):
        return cache.store(
            system_id="hill",
            mode=ImportMode.MERGE,
            diff=diff,
            rows=rows,
            validation=validation,
            **kwargs,
        )

    return _stage


class TestPreviewCache:
    def test_store_and_get(self, fake_clock, stage):
        cache = PreviewCache(clock=fake_clock)

        preview_id = stage(cache, file_name="q1.csv")
        entry = cache.get(preview_id)

        assert entry is not None
        assert entry.id == preview_id
        assert entry.file_name == "q1.csv"
        assert entry.expires_at - entry.created_at == timedelta(minutes=30)

    def test_ids_are_unique(self, stage):
        cache = PreviewCache()

        assert stage(cache) != stage(cache)

    def test_get_missing(self):
        assert PreviewCache().get("missing") is None

    def test_expired_entry_is_removed_on_read(self, fake_clock, stage):
        cache = PreviewCache(clock=fake_clock, default_ttl=timedelta(minutes=5))
        preview_id = stage(cache)

        fake_clock.advance(minutes=5)

        assert cache.get(preview_id) is None
        assert cache.get_cache_stats().total_entries == 0

    def test_millisecond_ttl_with_real_clock(self, stage):
        cache = PreviewCache()
        preview_id = stage(cache, ttl=timedelta(milliseconds=1))

        time.sleep(0.01)

        assert cache.get_cache_stats().active_entries == 0
        assert cache.active_previews() == []
        assert cache.get(preview_id) is None

    def test_delete(self, stage):
        cache = PreviewCache()
        preview_id = stage(cache)

        assert cache.delete(preview_id) is True
        assert cache.delete(preview_id) is False
        assert cache.has_valid_preview(preview_id) is False

    def test_extend_ttl(self, fake_clock, stage):
        cache = PreviewCache(clock=fake_clock)
        preview_id = stage(cache)
        fake_clock.advance(minutes=20)

        assert cache.extend_ttl(preview_id) is True
        fake_clock.advance(minutes=20)

        assert cache.has_valid_preview(preview_id)

    def test_extend_ttl_of_expired_entry(self, fake_clock, stage):
        cache = PreviewCache(clock=fake_clock)
        preview_id = stage(cache)
        fake_clock.advance(hours=1)

        assert cache.extend_ttl(preview_id) is False

    def test_cleanup_expired_logs(self, fake_clock, stage):
        logger = Mock()
        cache = PreviewCache(clock=fake_clock, logger=logger)
        stage(cache, ttl=timedelta(minutes=1))
        keep = stage(cache)
        fake_clock.advance(minutes=2)

        removed = cache.cleanup_expired()

        assert removed == 1
        logger.verbose.assert_called_once_with("Cleaned up 1 expired preview(s)")
        assert [e.id for e in cache.active_previews()] == [keep]

    def test_cache_stats(self, fake_clock, stage):
        cache = PreviewCache(clock=fake_clock)
        stage(cache, ttl=timedelta(minutes=1))
        fake_clock.advance(seconds=30)
        stage(cache)
        fake_clock.advance(minutes=1)

        stats = cache.get_cache_stats()

        assert (stats.total_entries, stats.active_entries, stats.expired_entries) == (2, 1, 1)
        assert stats.newest_entry - stats.oldest_entry == timedelta(seconds=30)

    def test_preview_summary(self, stage):
        cache = PreviewCache()
        preview_id = stage(cache, file_name="q1.csv")

        summary = cache.preview_summary(preview_id)

        assert summary.inserts == 1
        assert summary.total_changes == 1
        assert summary.file_name == "q1.csv"
        assert cache.preview_summary("missing") is None

    def test_clear(self, stage):
        cache = PreviewCache()
        stage(cache)

        cache.clear()

        assert cache.get_cache_stats().total_entries == 0

    def test_background_sweep(self, stage):
        cache = PreviewCache(sweep_interval=timedelta(milliseconds=10))
        stage(cache, ttl=timedelta(milliseconds=1))

        cache.start_cleanup()
        assert cache.cleanup_running
        try:
            deadline = time.monotonic() + 2
            while cache.get_cache_stats().total_entries and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            cache.stop_cleanup()

        assert cache.get_cache_stats().total_entries == 0
        assert not cache.cleanup_running

    def test_cleanup_without_expired_entries_is_silent(self, stage):
        logger = Mock()
        cache = PreviewCache(logger=logger)
        stage(cache)

        assert cache.cleanup_expired() == 0
        logger.verbose.assert_not_called()
