"""SQLite storage for BMI records.

Every public operation opens its own connection through `connect()`, which
always closes it. Apart from `ensure_database` (startup, failures are fatal)
the operations never raise for storage problems: they return a StoreResult
and leave it to the caller to report the error.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional

from bmi_calc import (
    DEFAULT_CLIENT_NAME,
    NORMAL_UPPER,
    OVERWEIGHT_FROM,
    UNDERWEIGHT_BELOW,
    compute_bmi,
)
from config import ConfigError

logger = logging.getLogger(__name__)

TABLE = 'BmiRecords'

_DATA_SOURCE_KEYS = ('data source', 'datasource', 'filename')

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS BmiRecords (
    Id INTEGER PRIMARY KEY AUTOINCREMENT,
    Name TEXT,
    HeightCm REAL NOT NULL,
    WeightKg REAL NOT NULL,
    Bmi REAL NOT NULL
)
"""

_INSERT = """
INSERT INTO BmiRecords (Name, HeightCm, WeightKg, Bmi)
VALUES (:name, :height_cm, :weight_kg, :bmi)
"""

_STATS = """
SELECT
    COUNT(*) AS TotalRecords,
    COALESCE(SUM(CASE WHEN Bmi < :underweight_below THEN 1 ELSE 0 END), 0) AS Underweight,
    COALESCE(SUM(CASE WHEN Bmi BETWEEN :underweight_below AND :normal_upper THEN 1 ELSE 0 END), 0) AS Normal,
    COALESCE(SUM(CASE WHEN Bmi >= :overweight_from THEN 1 ELSE 0 END), 0) AS Overweight,
    (SELECT Name || ', ' || HeightCm FROM BmiRecords ORDER BY HeightCm DESC LIMIT 1) AS TallestClient,
    (SELECT Name || ', ' || WeightKg FROM BmiRecords ORDER BY WeightKg DESC LIMIT 1) AS HeaviestClient
FROM BmiRecords
"""

_LIST = """
SELECT Id, Name, HeightCm, WeightKg, Bmi
FROM BmiRecords
ORDER BY Id DESC
LIMIT ?
"""


@dataclass(frozen=True)
class BmiRecord:
    id: Optional[int]
    name: Optional[str]
    height_cm: float
    weight_kg: float
    bmi: float

    def as_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'height_cm': self.height_cm,
            'weight_kg': self.weight_kg,
            'bmi': self.bmi,
        }


@dataclass(frozen=True)
class BmiStats:
    total_records: int
    underweight: int
    normal: int
    overweight: int
    tallest_client: Optional[str]
    heaviest_client: Optional[str]


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a storage operation: `value` on success, `error` text otherwise."""
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any = None) -> 'StoreResult':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: BaseException) -> 'StoreResult':
        return cls(ok=False, error=str(exc))


def resolve_db_path(connection_string: str) -> str:
    """Return the SQLite file path named by a connection string.

    Accepts a bare path or a `Data Source=<path>;...` string. Key matching is
    case-insensitive; unknown keys (Cache, Mode, ...) are ignored. In-memory
    databases are rejected: every operation opens its own connection, so the
    table would be gone by the next one.
    """
    conn = (connection_string or '').strip()
    if not conn:
        raise ConfigError('Connection string is missing or invalid.')
    path = _data_source(conn)
    if path is None:
        raise ConfigError(f'Connection string has no data source: {connection_string!r}')
    if path.lower() == ':memory:':
        raise ConfigError('In-memory databases are not supported; use a file path.')
    return path


def _data_source(conn: str) -> Optional[str]:
    if '=' not in conn:
        return conn
    for part in conn.split(';'):
        if '=' not in part:
            continue
        key, value = part.split('=', 1)
        if key.strip().lower() in _DATA_SOURCE_KEYS and value.strip():
            return value.strip()
    return None


@contextmanager
def connect(connection_string: str) -> Iterator[sqlite3.Connection]:
    """Open a connection, commit on success, roll back on error, always close."""
    path = Path(resolve_db_path(connection_string))
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def ensure_database(connection_string: str) -> None:
    """Create the BmiRecords table if it does not exist yet.

    Errors propagate: a store that cannot be opened aborts startup.
    """
    with connect(connection_string) as conn:
        conn.execute(_CREATE_TABLE)
    logger.debug('Ensured table %s at %s', TABLE, connection_string)


def add_record(
    connection_string: str,
    height_cm: float,
    weight_kg: float,
    name: Optional[str] = None,
) -> StoreResult:
    """Compute the BMI and insert one record. The result value is the stored BmiRecord."""
    if name is None:
        name = DEFAULT_CLIENT_NAME
    try:
        bmi = compute_bmi(height_cm, weight_kg)
        with connect(connection_string) as conn:
            cur = conn.execute(
                _INSERT,
                {'name': name, 'height_cm': height_cm, 'weight_kg': weight_kg, 'bmi': bmi},
            )
            record_id = cur.lastrowid
    except (sqlite3.Error, OSError, ArithmeticError) as e:
        logger.debug('Insert into %s failed: %s', TABLE, e)
        return StoreResult.failure(e)
    logger.debug('Inserted record id=%s bmi=%s', record_id, bmi)
    return StoreResult.success(
        BmiRecord(id=record_id, name=name, height_cm=height_cm, weight_kg=weight_kg, bmi=bmi)
    )


def query_stats(connection_string: str) -> StoreResult:
    """Run the single aggregate query over all records. The result value is a BmiStats."""
    params = {
        'underweight_below': UNDERWEIGHT_BELOW,
        'normal_upper': NORMAL_UPPER,
        'overweight_from': OVERWEIGHT_FROM,
    }
    try:
        with connect(connection_string) as conn:
            row = conn.execute(_STATS, params).fetchone()
    except (sqlite3.Error, OSError) as e:
        logger.debug('Statistics query on %s failed: %s', TABLE, e)
        return StoreResult.failure(e)
    stats = BmiStats(
        total_records=int(row['TotalRecords']),
        underweight=int(row['Underweight']),
        normal=int(row['Normal']),
        overweight=int(row['Overweight']),
        tallest_client=row['TallestClient'],
        heaviest_client=row['HeaviestClient'],
    )
    return StoreResult.success(stats)


def list_records(connection_string: str, limit: int = 50) -> StoreResult:
    """Return up to `limit` records, newest first."""
    try:
        with connect(connection_string) as conn:
            rows = conn.execute(_LIST, (limit,)).fetchall()
    except (sqlite3.Error, OSError) as e:
        logger.debug('Listing %s failed: %s', TABLE, e)
        return StoreResult.failure(e)
    records: List[BmiRecord] = [
        BmiRecord(
            id=r['Id'],
            name=r['Name'],
            height_cm=r['HeightCm'],
            weight_kg=r['WeightKg'],
            bmi=r['Bmi'],
        )
        for r in rows
    ]
    return StoreResult.success(records)
