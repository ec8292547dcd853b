"""
Table access for the layoffs pipeline.

Uses SQLAlchemy 2.0 Core. The layoffs tables have no primary key (a row is
identified only by its full contents), so they are plain ``Table`` objects
rather than mapped classes.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import (
    Column,
    Date,
    Engine,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    func,
    insert,
    inspect,
    select,
)
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from layoffs.config import LAYOFF_COLUMNS, settings
from layoffs.records import LayoffRecord, Snapshot


class TableNotFoundError(LookupError):
    """Raised when a required table does not exist."""

    def __init__(self, name: str):
        super().__init__(f"Table not found: {name}")
        self.name = name


class StagingExistsError(RuntimeError):
    """Raised when a copy would overwrite an existing table."""

    def __init__(self, name: str):
        super().__init__(f"Table {name} already exists; pass replace=True to overwrite it")
        self.name = name


# =============================================================================
# Database Engine and Session
# =============================================================================

def make_engine(url: str | None = None, echo: bool | None = None) -> Engine:
    """Create an engine; SQLite file databases get their directory created."""
    url = url or settings.database.url
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    kwargs = {"pool_pre_ping": True}
    if parsed.get_backend_name() not in ("sqlite",):
        kwargs.update(pool_recycle=1800)

    return create_engine(
        url,
        echo=settings.database.echo if echo is None else echo,
        **kwargs,
    )


engine = make_engine()
SessionLocal = sessionmaker(autoflush=False)


@contextmanager
def get_session(bind: Engine | None = None) -> Iterator[Session]:
    """Context manager for database sessions, committed on success."""
    session = SessionLocal(bind=bind or engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================================
# Table definitions
# =============================================================================

def layoff_table(name: str, metadata: MetaData | None = None, typed_date: bool = False) -> Table:
    """
    Define a layoffs table.

    Args:
        name: Table name
        metadata: MetaData to attach to (a fresh one by default)
        typed_date: Store ``date`` as DATE instead of the raw text
    """
    metadata = metadata if metadata is not None else MetaData()
    return Table(
        name,
        metadata,
        Column("company", Text),
        Column("location", Text),
        Column("industry", Text),
        Column("total_laid_off", Integer, nullable=True),
        Column("percentage_laid_off", Text),
        Column("date", Date if typed_date else Text),
        Column("stage", Text),
        Column("country", Text),
        Column("funds_raised_millions", Integer, nullable=True),
    )


def table_exists(name: str, bind: Engine | None = None) -> bool:
    return inspect(bind or engine).has_table(name)


def reflect_table(name: str, bind: Engine | None = None) -> Table:
    """Load an existing table definition from the database."""
    bind = bind or engine
    if not table_exists(name, bind):
        raise TableNotFoundError(name)
    return Table(name, MetaData(), autoload_with=bind)


def count_rows(name: str, bind: Engine | None = None) -> int:
    table = reflect_table(name, bind)
    with get_session(bind) as session:
        return session.execute(select(func.count()).select_from(table)).scalar_one()


# =============================================================================
# Operations
# =============================================================================

def create_staging_copy(
    source: str,
    target: str,
    replace: bool = False,
    bind: Engine | None = None,
) -> int:
    """
    Clone a table's structure and copy every row into it.

    The source table is only read. Runs in one transaction.

    Returns:
        Number of rows copied
    """
    bind = bind or engine
    source_table = reflect_table(source, bind)

    if table_exists(target, bind) and not replace:
        raise StagingExistsError(target)

    target_table = source_table.to_metadata(MetaData(), name=target)
    columns = [c.name for c in source_table.columns]

    with bind.begin() as conn:
        target_table.drop(conn, checkfirst=True)
        target_table.create(conn)
        conn.execute(insert(target_table).from_select(columns, select(source_table)))
        copied = conn.execute(select(func.count()).select_from(target_table)).scalar_one()

    logger.info(f"Copied {copied} rows from {source} to {target}")
    return copied


def read_records(name: str, bind: Engine | None = None) -> Snapshot:
    """Read every row of a layoffs table, in the table's natural order."""
    bind = bind or engine
    table = reflect_table(name, bind)

    missing = [c for c in LAYOFF_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(f"Table {name} is missing columns: {', '.join(missing)}")

    with get_session(bind) as session:
        rows = session.execute(select(*(table.c[c] for c in LAYOFF_COLUMNS))).mappings().all()

    logger.debug(f"Read {len(rows)} rows from {name}")
    return tuple(LayoffRecord.from_row(row) for row in rows)


def write_records(
    name: str,
    records: Iterable[LayoffRecord],
    typed_date: bool = True,
    replace: bool = True,
    batch_size: int | None = None,
    bind: Engine | None = None,
) -> int:
    """
    Create a layoffs table and insert records into it.

    The table is (re)created and filled in one transaction, so a failed
    write leaves no half-filled table behind.

    Args:
        name: Target table
        records: Records to write
        typed_date: Create the ``date`` column as DATE
        replace: Drop an existing table first; otherwise refuse
        batch_size: Rows per INSERT
        bind: Engine to use

    Returns:
        Number of rows written
    """
    bind = bind or engine
    batch_size = batch_size or settings.pipeline.batch_size

    if table_exists(name, bind) and not replace:
        raise StagingExistsError(name)

    table = layoff_table(name, typed_date=typed_date)
    rows = [record.as_row() for record in records]
    if not typed_date:
        for row in rows:
            if row["date"] is not None and not isinstance(row["date"], str):
                row["date"] = row["date"].isoformat()

    with bind.begin() as conn:
        table.drop(conn, checkfirst=True)
        table.create(conn)
        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            conn.execute(insert(table), batch)
            logger.debug(f"Inserted batch of {len(batch)} rows into {name}")

    logger.info(f"Wrote {len(rows)} rows to {name}")
    return len(rows)
