"""Tests for keeping the search index in step with the primary store."""
import threading

import pytest

from core.exceptions import SyncFailed
from core.search.interfaces import SearchQuery
from core.search.records import RecordType
from database.uow import recruitment_uow


@pytest.fixture
def synchronizer(app_context):
    return app_context.synchronizer


def _create_job(app_context, ctx, title="Data Engineer"):
    return app_context.jobs.create(ctx, {"title": title, "company": "Acme", "skills": ["Python"]})


class TestRecordType:

    @pytest.mark.parametrize("value,expected", [
        ("candidates", RecordType.CANDIDATE),
        ("job", RecordType.JOB),
        ("competence-files", RecordType.COMPETENCE_FILE),
    ])
    def test_parse_aliases(self, value, expected):
        assert RecordType.parse(value) == expected


class TestUpsert:

    def test_mutation_indexes_candidate(self, saved_candidate, search_index):
        entry = search_index.indices["candidates"][saved_candidate["id"]]

        assert entry["fullName"] == "Jane Doe"
        assert entry["companies"] == ["Acme Analytics"]
        assert "Python" in entry["skills"]

    def test_upsert_reflects_latest_state(self, app_context, ctx, saved_candidate, synchronizer, search_index):
        with recruitment_uow(app_context.session_factory) as repo:
            candidate = repo.candidates.get_by_id(saved_candidate["id"])
            repo.candidates.update(candidate, {"current_title": "Principal Engineer"})

        assert synchronizer.upsert(RecordType.CANDIDATE, saved_candidate["id"]) == "indexed"
        assert search_index.indices["candidates"][saved_candidate["id"]]["currentTitle"] == "Principal Engineer"

    def test_archived_record_is_removed(self, app_context, ctx, saved_candidate, search_index):
        app_context.candidates.archive(ctx, saved_candidate["id"])

        assert saved_candidate["id"] not in search_index.indices["candidates"]

    def test_missing_record_is_removed(self, synchronizer, search_index):
        search_index.indices["jobs"]["ghost"] = {"objectID": "ghost"}

        assert synchronizer.upsert(RecordType.JOB, "ghost") == "removed"
        assert "ghost" not in search_index.indices["jobs"]

    def test_unreachable_index_raises_sync_failed(self, saved_candidate, synchronizer, search_index):
        search_index.reachable = False

        with pytest.raises(SyncFailed):
            synchronizer.upsert(RecordType.CANDIDATE, saved_candidate["id"])

    def test_unreachable_index_does_not_fail_mutation(self, app_context, ctx, jane_profile, synchronizer, search_index):
        search_index.reachable = False

        created = app_context.candidates.create(ctx, jane_profile)

        assert created["fullName"] == "Jane Doe"
        assert app_context.candidates.get(created["id"])["email"] == "jane.doe@example.com"
        failures = synchronizer.recent_failures()
        assert len(failures) == 1
        assert failures[0].operation == "upsert"
        assert failures[0].record_id == created["id"]
        assert failures[0].to_dict()["recordType"] == "candidate"

    def test_per_key_locks_are_released(self, saved_candidate, synchronizer):
        synchronizer.upsert(RecordType.CANDIDATE, saved_candidate["id"])

        assert synchronizer._locks == {}

    def test_concurrent_upserts_of_same_id(self, saved_candidate, synchronizer, search_index):
        errors = []

        def _run():
            try:
                synchronizer.upsert(RecordType.CANDIDATE, saved_candidate["id"])
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=_run) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert list(search_index.indices["candidates"]) == [saved_candidate["id"]]


class TestReindexAll:

    def test_reindex_is_idempotent(self, app_context, ctx, synchronizer, search_index):
        for title in ("Data Engineer", "ML Engineer", "Analyst"):
            _create_job(app_context, ctx, title)
        search_index.indices["jobs"].clear()

        first = synchronizer.reindex_all(RecordType.JOB)
        snapshot = {k: dict(v) for k, v in search_index.indices["jobs"].items()}
        second = synchronizer.reindex_all(RecordType.JOB)

        assert first == second == 3
        assert search_index.indices["jobs"] == snapshot

    def test_reindex_skips_archived(self, app_context, ctx, synchronizer, search_index):
        kept = _create_job(app_context, ctx, "Kept")
        archived = _create_job(app_context, ctx, "Archived")
        app_context.jobs.archive(ctx, archived["id"])
        search_index.indices["jobs"].clear()

        assert synchronizer.reindex_all(RecordType.JOB) == 1
        assert list(search_index.indices["jobs"]) == [kept["id"]]

    def test_reindex_in_batches(self, app_context, ctx, search_index):
        app_context.synchronizer.batch_size = 2
        for i in range(5):
            _create_job(app_context, ctx, f"Job {i}")

        assert app_context.synchronizer.reindex_all(RecordType.JOB) == 5


class TestAdministration:

    def test_initialize_applies_settings(self, synchronizer, search_index):
        synchronizer.initialize()

        assert "fullName" in search_index.settings["candidates"]["searchableAttributes"]
        assert set(search_index.settings) == {"candidates", "jobs", "competence_files"}

    def test_clear_single_index(self, app_context, ctx, saved_candidate, synchronizer, search_index):
        _create_job(app_context, ctx)

        synchronizer.clear(RecordType.JOB)

        assert search_index.indices["jobs"] == {}
        assert saved_candidate["id"] in search_index.indices["candidates"]

    def test_stats_counts_entries(self, saved_candidate, synchronizer):
        stats = synchronizer.stats()

        assert stats["candidate"]["index"] == "candidates"
        assert stats["candidate"]["entries"] == 1
        assert stats["job"]["entries"] == 0

    def test_search_filters_and_facets(self, app_context, ctx, synchronizer):
        _create_job(app_context, ctx, "Data Engineer")
        _create_job(app_context, ctx, "Designer")

        result = synchronizer.search(RecordType.JOB, SearchQuery(q="engineer", facets=["company"]))

        assert result.total == 1
        assert result.hits[0]["title"] == "Data Engineer"
        assert result.facets["company"] == {"Acme": 1}

    def test_failure_log_is_bounded(self, app_context, saved_candidate, search_index):
        synchronizer = app_context.synchronizer
        synchronizer._failures = type(synchronizer._failures)(maxlen=2)
        search_index.reachable = False

        for _ in range(3):
            synchronizer.safe_upsert(RecordType.CANDIDATE, saved_candidate["id"])

        assert len(synchronizer.recent_failures()) == 2
