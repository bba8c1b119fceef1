"""
Unit Tests: SubmissionRepository and schema management

Test cases:
- Unique constraints surface as ConstraintViolation
- Positional ranks for listing pages
- Aggregates and score buckets
- Recent-by-address window
- In-place upgrade of a legacy table
"""

import sqlite3
from datetime import timedelta

import pytest
from sqlalchemy import inspect

from friday.database import Database, SubmissionRepository
from friday.errors import ConstraintViolation
from friday.models import utcnow


def test_duplicate_instance_id_is_rejected(seed, repository, make_fields):
    seed("friday-a", 10)
    with pytest.raises(ConstraintViolation):
        repository.insert(make_fields("friday-a", 20))
    assert repository.count_all() == 1


def test_duplicate_handle_is_rejected(seed, repository, make_fields):
    seed("friday-a", 10, handle="alice")
    with pytest.raises(ConstraintViolation):
        repository.insert(make_fields("friday-b", 20, handle="alice"))


def test_null_handles_do_not_collide(seed, repository):
    seed("friday-a", 10)
    seed("friday-b", 20)
    assert repository.count_all() == 2


def test_update_by_instance_id_reports_rowcount(seed, repository, make_fields):
    seed("friday-a", 10)
    assert repository.update_by_instance_id("friday-a", make_fields("friday-a", 99)) == 1
    assert repository.update_by_instance_id("friday-zz", make_fields("friday-zz", 99)) == 0
    repository.session.commit()
    assert repository.find_by_instance_id("friday-a").score == 99


def test_update_refreshes_updated_at(seed, repository, make_fields):
    seed("friday-a", 10)
    repository.session.expire_all()
    before = repository.find_by_instance_id("friday-a").updated_at

    repository.update_by_instance_id("friday-a", make_fields("friday-a", 11))
    repository.session.commit()
    repository.session.expire_all()

    after = repository.find_by_instance_id("friday-a")
    assert after.score == 11
    assert after.updated_at >= before


def test_listing_ranks_are_positional(seed, repository):
    seed("friday-a", 70)
    seed("friday-b", 90)
    seed("friday-c", 90)
    seed("friday-d", 50)

    page = repository.list_ordered_by_score_desc(limit=10)

    assert [(row.instance_id, rank) for row, rank in page] == [
        ("friday-b", 1),
        ("friday-c", 2),
        ("friday-a", 3),
        ("friday-d", 4),
    ]


def test_listing_rank_counts_from_whole_table(seed, repository):
    for i in range(5):
        seed(f"friday-{i}", 100 - i)

    page = repository.list_ordered_by_score_desc(limit=2, offset=3)

    assert [rank for _, rank in page] == [4, 5]


def test_list_recent_newest_first(seed, repository):
    seed("friday-a", 10)
    seed("friday-b", 20)

    assert [row.instance_id for row in repository.list_recent(limit=10)] == ["friday-b", "friday-a"]


def test_aggregates(seed, repository):
    seed("friday-a", 95, os="linux", arch="x64")
    seed("friday-b", 75, os="darwin", arch="arm64")
    seed("friday-c", 55, os="linux", arch="arm64")
    seed("friday-d", 10, os="linux", arch="x64")

    stats = repository.aggregate_stats()

    assert stats.count == 4
    assert stats.avg == pytest.approx(58.75)
    assert (stats.max, stats.min) == (95, 10)
    assert (stats.distinct_os, stats.distinct_arch) == (2, 2)
    assert repository.score_distribution() == {"excellent": 1, "good": 1, "fair": 1, "poor": 1}


def test_aggregates_empty_table(repository):
    stats = repository.aggregate_stats()
    assert stats.count == 0
    assert stats.avg is None
    assert repository.score_distribution() == {}


@pytest.mark.parametrize(
    "score,bucket",
    [(90, "excellent"), (89, "good"), (70, "good"), (69, "fair"), (50, "fair"), (49, "poor"), (0, "poor")],
)
def test_bucket_boundaries(seed, repository, score, bucket):
    seed("friday-a", score)
    assert repository.score_distribution() == {bucket: 1}


def test_count_recent_by_ip(seed, repository):
    seed("friday-a", 10, ip_address="10.0.0.9")
    seed("friday-b", 10, ip_address="10.0.0.9")
    seed("friday-c", 10, ip_address="10.0.0.8")

    assert repository.count_recent_by_ip("10.0.0.9") == 2
    assert repository.count_recent_by_ip(None) == 0
    later = utcnow() + timedelta(hours=2)
    assert repository.count_recent_by_ip("10.0.0.9", now=later) == 0


LEGACY_DDL = """
CREATE TABLE submissions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    instance_id TEXT UNIQUE NOT NULL,
    score INTEGER NOT NULL,
    os TEXT,
    arch TEXT,
    timestamp TEXT NOT NULL,
    network_score INTEGER DEFAULT 0,
    perm_score INTEGER DEFAULT 0,
    gateway_score INTEGER DEFAULT 0,
    channel_score INTEGER DEFAULT 0,
    ip_address TEXT,
    user_agent TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


def test_legacy_table_is_upgraded(tmp_path):
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(path)
    conn.execute(LEGACY_DDL)
    conn.execute(
        "INSERT INTO submissions (instance_id, score, os, arch, timestamp) "
        "VALUES ('friday-old', 42, 'linux', 'x64', '2024-01-01T00:00:00.000Z')"
    )
    conn.commit()
    conn.close()

    database = Database(path)
    try:
        database.ensure_schema()
        database.ensure_schema()

        inspector = inspect(database.engine)
        columns = {column["name"] for column in inspector.get_columns("submissions")}
        assert {"handle", "skill_score", "updated_at"} <= columns
        indexes = {index["name"] for index in inspector.get_indexes("submissions")}
        assert "uq_submissions_handle" in indexes
        assert "idx_submissions_score" in indexes

        with database.session() as db:
            row = SubmissionRepository(db).find_by_instance_id("friday-old")
            assert row.score == 42
            assert row.skill_score == 0
    finally:
        database.dispose()


def test_wal_mode_enabled(database):
    with database.engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
