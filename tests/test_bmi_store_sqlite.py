import logging
import sqlite3
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

import bmi_store as store
from config import ConfigError


@pytest.fixture
def conn_str(tmp_path):
    c = f"Data Source={tmp_path / 'bmi.db'}"
    store.ensure_database(c)
    return c


def _row_count(conn_str):
    with store.connect(conn_str) as conn:
        return conn.execute('SELECT COUNT(*) FROM BmiRecords').fetchone()[0]


def test_ensure_database_is_idempotent(tmp_path):
    db = tmp_path / 'nested' / 'dir' / 'bmi.db'
    store.ensure_database(str(db))
    store.ensure_database(str(db))
    assert db.exists()
    with sqlite3.connect(str(db)) as conn:
        cols = [r[1] for r in conn.execute('PRAGMA table_info(BmiRecords)')]
    assert cols == ['Id', 'Name', 'HeightCm', 'WeightKg', 'Bmi']


def test_add_record_stores_computed_bmi(conn_str):
    res = store.add_record(conn_str, 170.0, 70.0, 'Alice')
    assert res.ok
    rec = res.value
    assert rec.name == 'Alice'
    assert rec.bmi == pytest.approx(70 / 1.7 ** 2)

    listed = store.list_records(conn_str).value
    assert len(listed) == 1
    assert listed[0].id == rec.id
    assert listed[0].bmi == pytest.approx(24.2214, abs=1e-4)
    assert listed[0].height_cm == 170.0


def test_add_record_defaults_name_to_unknown(conn_str):
    res = store.add_record(conn_str, 170.0, 70.0)
    assert res.ok
    assert store.list_records(conn_str).value[0].name == 'unknown'


def test_add_record_name_is_parameterized(conn_str):
    nasty = "x'); DROP TABLE BmiRecords; --"
    assert store.add_record(conn_str, 180.0, 80.0, nasty).ok
    assert store.list_records(conn_str).value[0].name == nasty
    assert _row_count(conn_str) == 1


def test_ids_increase_monotonically(conn_str):
    ids = [store.add_record(conn_str, 170.0, w).value.id for w in (60.0, 70.0, 80.0)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3
    newest_first = [r.id for r in store.list_records(conn_str, limit=2).value]
    assert newest_first == [ids[2], ids[1]]


def test_zero_height_is_reported_not_raised(conn_str):
    res = store.add_record(conn_str, 0.0, 70.0, 'Zero')
    assert not res.ok
    assert 'division' in res.error
    assert _row_count(conn_str) == 0


def test_overflow_is_reported_not_raised(conn_str):
    res = store.add_record(conn_str, 1e200, 70.0)
    assert not res.ok
    assert _row_count(conn_str) == 0


def test_stats_buckets(conn_str):
    for w in (17.0, 20.0, 30.0):
        assert store.add_record(conn_str, 100.0, w).ok
    stats = store.query_stats(conn_str).value
    assert stats.total_records == 3
    assert stats.underweight == 1
    assert stats.normal == 1
    assert stats.overweight == 1


def test_stats_boundaries_keep_gap_between_24_9_and_25(conn_str):
    for w in (18.5, 24.9, 24.95, 25.0):
        store.add_record(conn_str, 100.0, w)
    stats = store.query_stats(conn_str).value
    assert stats.total_records == 4
    assert stats.underweight == 0
    assert stats.normal == 2
    assert stats.overweight == 1


def test_stats_tallest_and_heaviest(conn_str):
    store.add_record(conn_str, 190.0, 70.0, 'Tall')
    store.add_record(conn_str, 160.0, 95.0, 'Heavy')
    stats = store.query_stats(conn_str).value
    assert stats.tallest_client == 'Tall, 190.0'
    assert stats.heaviest_client == 'Heavy, 95.0'


def test_stats_on_empty_table(conn_str):
    res = store.query_stats(conn_str)
    assert res.ok
    stats = res.value
    assert (stats.total_records, stats.underweight, stats.normal, stats.overweight) == (0, 0, 0, 0)
    assert stats.tallest_client is None
    assert stats.heaviest_client is None


def test_storage_errors_become_results(tmp_path):
    # table was never created
    c = str(tmp_path / 'fresh.db')
    add = store.add_record(c, 170.0, 70.0)
    assert not add.ok
    assert 'no such table' in add.error
    stat = store.query_stats(c)
    assert not stat.ok
    assert 'no such table' in stat.error


def test_storage_errors_are_not_logged_above_debug(tmp_path, caplog):
    # the CLI prints the error itself; stderr stays quiet at the default level
    caplog.set_level(logging.DEBUG, logger='bmi_store')
    res = store.add_record(str(tmp_path / 'fresh.db'), 170.0, 70.0)
    assert not res.ok
    assert [r.levelno for r in caplog.records] == [logging.DEBUG]


def test_connect_rolls_back_and_closes_on_error(conn_str):
    with pytest.raises(RuntimeError):
        with store.connect(conn_str) as conn:
            conn.execute(
                'INSERT INTO BmiRecords (Name, HeightCm, WeightKg, Bmi) VALUES (?, ?, ?, ?)',
                ('Ghost', 170.0, 70.0, 24.2),
            )
            raise RuntimeError('boom')
    assert _row_count(conn_str) == 0
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute('SELECT 1')


@pytest.mark.parametrize('conn, expected', [
    ('bmi.db', 'bmi.db'),
    ('Data Source=bmi.db', 'bmi.db'),
    ('data source = data/bmi.db ; Cache=Shared', 'data/bmi.db'),
    ('Mode=ReadWriteCreate;DataSource=x.sqlite', 'x.sqlite'),
    ('Filename=y.db', 'y.db'),
])
def test_resolve_db_path(conn, expected):
    assert store.resolve_db_path(conn) == expected


@pytest.mark.parametrize('conn', ['', '   ', 'Cache=Shared', 'Data Source=', ':memory:', 'Data Source=:memory:'])
def test_resolve_db_path_rejects_missing_source(conn):
    with pytest.raises(ConfigError):
        store.resolve_db_path(conn)
